"""
Command-line importer.

Usage:
    # Import a Turtle file into the Neo4j database from RDFGL_NEO4J_*
    RDFGL_NEO4J_URI=neo4j://localhost:7687 RDFGL_NEO4J_PASSWORD=... rdf-graph-loader data.ttl

    # Import into FalkorDB, keeping every rdfs:label value as an array
    rdf-graph-loader data.nt --backend falkordb --multival-strategy ARRAY --multival rdfs:label

    # Register a prefix and map one of its predicates
    rdf-graph-loader data.ttl --vocab-strategy MAP --prefix foaf=http://xmlns.com/foaf/0.1/ \
        --mapping foaf:name=fullName
"""

import argparse
import asyncio
import logging
import sys
import time

from .config import Settings, StoreConfig
from .exceptions import GraphLoaderError
from .graph.factory import create_graph_store
from .loader import import_file
from .models.strategies import HandleMultivalStrategy, HandleVocabUriStrategy

logger = logging.getLogger(__name__)


def _split_pair(value: str, sep: str, what: str) -> tuple[str, str]:
    left, found, right = value.partition(sep)
    if not found or not left or not right:
        raise argparse.ArgumentTypeError(f"Invalid {what} {value!r}")
    return left, right


def parse_prefix(value: str) -> tuple[str, str]:
    """``name=namespace`` -> (name, namespace)"""
    return _split_pair(value, "=", "prefix (expected name=namespace)")


def parse_multival(value: str) -> tuple[str, str]:
    """``prefix:prop`` -> (prefix, prop)"""
    return _split_pair(value, ":", "multivalued property (expected prefix:prop)")


def parse_mapping(value: str) -> tuple[str, str, str]:
    """``prefix:local=new`` -> (prefix, local, new)"""
    source, new_value = _split_pair(value, "=", "mapping (expected prefix:local=new)")
    prefix_name, local = _split_pair(source, ":", "mapping (expected prefix:local=new)")
    return prefix_name, local, new_value


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="rdf-graph-loader",
        description="Import an RDF file into a Neo4j or FalkorDB property graph",
    )
    parser.add_argument("source", help="RDF file path or URL")
    parser.add_argument("--format", help="rdflib format name (guessed from the extension by default)")
    parser.add_argument("--backend", choices=["neo4j", "falkordb"], help="Graph backend (overrides RDFGL_LOADER_BACKEND)")
    parser.add_argument("--batch-size", type=int, help="Rows per flush (overrides RDFGL_LOADER_BATCH_SIZE)")
    parser.add_argument("--no-batching", action="store_true", help="Commit after every triple")
    parser.add_argument(
        "--vocab-strategy",
        choices=[s.value for s in HandleVocabUriStrategy],
        help="Predicate/type URI handling",
    )
    parser.add_argument(
        "--multival-strategy",
        choices=[s.name for s in HandleMultivalStrategy],
        help="Repeated property value handling",
    )
    parser.add_argument(
        "--prefix", action="append", default=[], type=parse_prefix, metavar="NAME=NAMESPACE",
        help="Register a custom prefix (repeatable)",
    )
    parser.add_argument(
        "--multival", action="append", default=[], type=parse_multival, metavar="PREFIX:PROP",
        help="Treat a property as multivalued (repeatable)",
    )
    parser.add_argument(
        "--mapping", action="append", default=[], type=parse_mapping, metavar="PREFIX:LOCAL=NEW",
        help="Custom mapping for the MAP strategy (repeatable)",
    )
    parser.add_argument("--no-constraint", action="store_true", help="Do not create the Resource(uri) constraint")
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    return parser


def build_store_config(args: argparse.Namespace, config: Settings) -> StoreConfig:
    """StoreConfig from environment settings with command-line overrides applied."""
    overrides = {
        "auth_data": None,
        "custom_prefixes": dict(args.prefix),
        "custom_mappings": args.mapping,
        "multival_props_names": args.multival,
    }
    if args.batch_size is not None:
        overrides["batch_size"] = args.batch_size
    if args.no_batching:
        overrides["batching"] = False
    if args.vocab_strategy:
        overrides["handle_vocab_uri_strategy"] = args.vocab_strategy
    if args.multival_strategy:
        overrides["handle_multival_strategy"] = args.multival_strategy
    return StoreConfig.from_settings(config, **overrides)


async def run(args: argparse.Namespace) -> int:
    config = Settings()
    if args.no_constraint:
        config.loader.create_constraint = False

    store_config = build_store_config(args, config)
    store = await create_graph_store(store_config, config=config, backend=args.backend)

    start_time = time.time()
    committed = False
    try:
        count = await import_file(store, args.source, format=args.format)
        committed = True
    finally:
        await store.close(commit_pending_transaction=committed)

    elapsed = time.time() - start_time
    logger.info(f"Imported {count:,} triples from {args.source} in {elapsed:.1f}s")
    return count


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s - %(levelname)s - %(message)s",
    )

    try:
        asyncio.run(run(args))
    except GraphLoaderError as e:
        logger.error(f"Import failed: {e}")
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
