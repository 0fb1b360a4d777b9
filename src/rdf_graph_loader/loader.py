"""
Helpers that feed rdflib graphs and RDF files into a GraphStore.

The store expects triples grouped by subject; these helpers walk a parsed
graph subject by subject so every resource is merged once per import.
"""

import asyncio
import logging
from collections.abc import Iterable
from pathlib import Path
from typing import Any

from rdflib import Dataset, Graph, URIRef
from rdflib.util import guess_format

from .graph.store import GraphStore

logger = logging.getLogger(__name__)

# Serializations that carry named graphs; everything else parses into a Graph.
QUAD_FORMATS = frozenset({"nquads", "trig", "trix"})


async def import_triples(store: GraphStore, triples: Iterable[Any]) -> int:
    """
    Add triples in the given order, then commit.

    The caller is responsible for grouping by subject.

    Returns:
        Number of triples passed to the store
    """
    count = 0
    for triple in triples:
        await store.add(triple)
        count += 1
    await store.commit()
    return count


async def import_graph(store: GraphStore, graph: Graph) -> int:
    """
    Add every named-subject triple of ``graph``, grouped by subject, then commit.

    Returns:
        Number of triples passed to the store
    """
    count = 0
    for subject in graph.subjects(unique=True):
        if not isinstance(subject, URIRef):
            continue
        for predicate, obj in graph.predicate_objects(subject):
            await store.add((subject, predicate, obj))
            count += 1
    await store.commit()
    logger.info(f"Imported {count} triples")
    return count


def parse_rdf(source: str | Path, format: str | None = None) -> Graph:
    """
    Parse an RDF file or URL.

    Args:
        source: Path or URL
        format: rdflib format name; guessed from the extension when omitted

    Raises:
        ValueError: The format cannot be guessed
    """
    rdf_format = format or guess_format(str(source))
    if rdf_format is None:
        raise ValueError(f"Cannot guess the RDF format of {str(source)!r}; pass format explicitly")

    graph = Dataset(default_union=True) if rdf_format in QUAD_FORMATS else Graph()
    graph.parse(str(source), format=rdf_format)
    logger.info(f"Parsed {len(graph)} triples from {source} ({rdf_format})")
    return graph


async def import_file(store: GraphStore, source: str | Path, format: str | None = None) -> int:
    """Parse ``source`` off the event loop and import it with import_graph()."""
    loop = asyncio.get_running_loop()
    graph = await loop.run_in_executor(None, parse_rdf, source, format)
    return await import_graph(store, graph)
