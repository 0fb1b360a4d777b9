"""
Factory for creating graph sessions and stores.

Creates a Neo4jSession or FalkorDBSession from the environment settings
(RDFGL_LOADER_BACKEND selects which one) and wraps it in a GraphStore.
"""

import logging

from ..config import Settings, StoreConfig, check_auth_data, settings
from .client import FalkorDBSession, GraphSession, Neo4jSession
from .store import GraphStore

logger = logging.getLogger(__name__)


def create_session(config: Settings | None = None, backend: str | None = None) -> GraphSession:
    """
    Build an unconnected session for the configured backend.

    Raises:
        MissingAuthenticationError: neo4j backend without RDFGL_NEO4J_URI
        ValueError: Unknown backend
    """
    config = config or settings
    backend = backend or config.loader.backend

    if backend == "falkordb":
        falkordb = config.falkordb
        password = falkordb.password.get_secret_value() if falkordb.password else None
        return FalkorDBSession(
            host=falkordb.host,
            port=falkordb.port,
            password=password,
            graph_name=falkordb.graph_name,
            max_connections=falkordb.max_connections,
        )

    if backend == "neo4j":
        auth = config.neo4j.auth_data()
        check_auth_data(auth)
        return Neo4jSession(
            uri=auth["uri"],
            user=auth["user"],
            password=auth["pwd"],
            database=auth["database"],
        )

    raise ValueError(f"Unknown graph backend: {backend!r}")


async def create_graph_store(
    store_config: StoreConfig | None = None,
    config: Settings | None = None,
    backend: str | None = None,
) -> GraphStore:
    """
    Create and open a GraphStore.

    A StoreConfig carrying its own Neo4j credentials is used as is. Otherwise
    the session comes from create_session() and is closed with the store.

    Returns:
        An open GraphStore
    """
    config = config or settings
    backend = backend or config.loader.backend

    if store_config is not None and store_config.auth_data and backend == "neo4j":
        store = GraphStore(store_config)
    else:
        if store_config is None:
            store_config = StoreConfig.from_settings(config, auth_data=None)
        store = GraphStore(store_config, session=create_session(config, backend), owns_session=True)

    await store.open(create=config.loader.create_constraint)
    logger.info(f"Graph store ready: backend={backend}, batching={store_config.batching}")
    return store
