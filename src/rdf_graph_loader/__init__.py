"""
RDF graph loader.

Streams RDF triples into a labeled property graph (Neo4j or FalkorDB) with
batched, idempotent Cypher merges.
"""

from .config import StoreConfig
from .exceptions import GraphLoaderError
from .graph import GraphStore
from .models import HandleMultivalStrategy, HandleVocabUriStrategy

__version__ = "0.1.0"

__all__ = [
    "GraphLoaderError",
    "GraphStore",
    "HandleMultivalStrategy",
    "HandleVocabUriStrategy",
    "StoreConfig",
]
