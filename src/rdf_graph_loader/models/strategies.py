"""Vocabulary and multivalue handling strategies plus the default prefix table."""

from enum import Enum, IntEnum

RDF_TYPE = "http://www.w3.org/1999/02/22-rdf-syntax-ns#type"

# Identity of every node written by the loader.
RESOURCE_LABEL = "Resource"
URI_PROPERTY = "uri"

DEFAULT_CREATED_AT_FIELD = "_createdAt"
DEFAULT_UPDATED_AT_FIELD = "_updatedAt"

DEFAULT_PREFIXES: dict[str, str] = {
    "skos": "http://www.w3.org/2004/02/skos/core#",
    "sch": "http://schema.org/",
    "sh": "http://www.w3.org/ns/shacl#",
    "rdfs": "http://www.w3.org/2000/01/rdf-schema#",
    "dc": "http://purl.org/dc/elements/1.1/",
    "dct": "http://purl.org/dc/terms/",
    "rdf": "http://www.w3.org/1999/02/22-rdf-syntax-ns#",
    "owl": "http://www.w3.org/2002/07/owl#",
    "xsd": "http://www.w3.org/2001/XMLSchema#",
    "exterms": "http://www.example.org/terms/",
    "ex": "http://www.example.org/indiv/",
}


class HandleVocabUriStrategy(str, Enum):
    """How predicate and type URIs become property names and labels."""

    SHORTEN = "SHORTEN"  # prefix__localPart, unknown namespaces are an error
    MAP = "MAP"  # custom mapping, falls back to IGNORE
    KEEP = "KEEP"  # full URI
    IGNORE = "IGNORE"  # local part only


class HandleMultivalStrategy(IntEnum):
    """How repeated values of the same property are stored.

    With ARRAY and an empty multivalued-predicate list, every property is
    treated as multivalued.
    """

    OVERWRITE = 1
    ARRAY = 2
