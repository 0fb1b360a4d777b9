"""Shared enums and constants."""

from .strategies import (
    DEFAULT_PREFIXES,
    RDF_TYPE,
    RESOURCE_LABEL,
    URI_PROPERTY,
    HandleMultivalStrategy,
    HandleVocabUriStrategy,
)

__all__ = [
    "DEFAULT_PREFIXES",
    "RDF_TYPE",
    "RESOURCE_LABEL",
    "URI_PROPERTY",
    "HandleMultivalStrategy",
    "HandleVocabUriStrategy",
]
