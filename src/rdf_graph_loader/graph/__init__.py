"""
Graph layer for the RDF graph loader.

Turns a subject-grouped triple stream into batched Cypher merges:
- SubjectAccumulator folds the triples of one subject
- NodeQueryComposer / RelationshipQueryComposer render UNWIND merge statements
- GraphStore orchestrates buffering and flushing over a GraphSession
"""

from .client import FalkorDBSession, GraphSession, Neo4jSession
from .composers import NodeQueryComposer, RelationshipQueryComposer
from .store import GraphStore
from .subject import SubjectAccumulator

__all__ = [
    "FalkorDBSession",
    "GraphSession",
    "GraphStore",
    "Neo4jSession",
    "NodeQueryComposer",
    "RelationshipQueryComposer",
    "SubjectAccumulator",
]
