"""
Graph database sessions.

A GraphSession is the only thing the store talks to: it runs a parameterized
Cypher statement, bootstraps the Resource(uri) uniqueness constraint and owns
(or borrows) the underlying connection.

Two backends are provided:
- Neo4jSession: neo4j async Bolt driver
- FalkorDBSession: FalkorDB over a shared redis.asyncio connection pool

Sessions built from an externally supplied driver or pool never close it.
"""

import logging
from abc import ABC, abstractmethod
from datetime import date, time
from typing import Any

import redis.asyncio as aioredis
from falkordb.asyncio import FalkorDB
from neo4j import AsyncDriver, AsyncGraphDatabase
from redis.asyncio import BlockingConnectionPool

from ..exceptions import CypherMultipleTypesMultiValueError
from ..models.strategies import RESOURCE_LABEL, URI_PROPERTY
from .schema import (
    FALKORDB_CONSTRAINT_CHECK,
    FALKORDB_CREATE_INDEX,
    NEO4J_CONSTRAINT_CHECK,
    NEO4J_CREATE_CONSTRAINT,
    falkordb_create_constraint_command,
)

logger = logging.getLogger(__name__)

NEO4J_DRIVER_USER_AGENT_NAME = "neo4j_labs_n10s_client_lib"

NEO4J_TYPE_ERROR_CODE = "Neo.ClientError.Statement.TypeError"
NEO4J_DRIVER_MULTIPLE_TYPE_ERROR_MESSAGE = (
    "{code: Neo.ClientError.Statement.TypeError} "
    "{message: Neo4j only supports a subset of Cypher types for storage as singleton or array properties. "
    "Please refer to section cypher/syntax/values of the manual for more details.}"
)
_MULTIPLE_TYPE_FRAGMENT = "only supports a subset of Cypher types for storage as singleton or array properties"


def handle_driver_exception(ex: Exception) -> Exception:
    """
    Translate known driver failures into loader errors.

    Returns the translated exception, or ``ex`` itself when it is not a
    known case.
    """
    message = str(ex)
    if message == NEO4J_DRIVER_MULTIPLE_TYPE_ERROR_MESSAGE:
        return CypherMultipleTypesMultiValueError()
    if getattr(ex, "code", None) == NEO4J_TYPE_ERROR_CODE and _MULTIPLE_TYPE_FRAGMENT in message:
        return CypherMultipleTypesMultiValueError()
    return ex


def falkordb_param(value: Any) -> Any:
    """
    Render temporal values as ISO-8601 strings for FalkorDB.

    falkordb serializes parameters into a CYPHER header with ``str()``, so a
    bare ``2025-01-31`` would be read back as integer arithmetic. Lists and
    dicts are converted recursively; other values pass through unchanged.
    """
    if isinstance(value, (date, time)):
        return value.isoformat()
    if isinstance(value, dict):
        return {key: falkordb_param(item) for key, item in value.items()}
    if isinstance(value, list):
        return [falkordb_param(item) for item in value]
    return value


class GraphSession(ABC):
    """Transport used by GraphStore to reach the graph database."""

    # Cypher expression used for relationship timestamps on this backend.
    timestamp_function: str = "datetime()"

    @abstractmethod
    async def connect(self) -> None:
        """Establish the connection (idempotent)."""

    @abstractmethod
    async def execute(self, query: str, params: dict[str, Any] | None = None) -> Any:
        """Run a parameterized write statement."""

    @abstractmethod
    async def ensure_uri_constraint(self, create: bool = True) -> bool:
        """
        Check for the Resource(uri) uniqueness constraint.

        Args:
            create: Create the constraint when it is missing; failures are logged, not raised

        Returns:
            True if the constraint already existed
        """

    @abstractmethod
    async def close(self) -> None:
        """Release the connection if this session created it."""


class Neo4jSession(GraphSession):
    """Session over the neo4j async driver."""

    timestamp_function = "datetime()"

    def __init__(
        self,
        uri: str | None = None,
        user: str | None = None,
        password: str | None = None,
        database: str | None = None,
        driver: AsyncDriver | None = None,
    ):
        """
        Args:
            uri: Bolt/neo4j URI (ignored when ``driver`` is given)
            user: Username
            password: Password
            database: Target database, None for the server default
            driver: Existing driver to borrow; it is never closed by this session
        """
        if driver is None and not uri:
            raise ValueError("Neo4jSession needs either a uri or an existing driver")
        self.uri = uri
        self.user = user
        self.password = password
        self.database = database
        self._driver = driver
        self._owns_driver = driver is None

    @property
    def driver(self) -> AsyncDriver:
        if self._driver is None:
            raise RuntimeError("Neo4jSession not connected. Call connect() first.")
        return self._driver

    async def connect(self) -> None:
        if self._driver is not None:
            return
        self._driver = AsyncGraphDatabase.driver(
            self.uri,
            auth=(self.user, self.password),
            user_agent=NEO4J_DRIVER_USER_AGENT_NAME,
        )
        logger.info(f"Neo4jSession connected: {self.uri} (database={self.database or 'default'})")

    async def execute(self, query: str, params: dict[str, Any] | None = None) -> Any:
        try:
            return await self.driver.execute_query(query, parameters_=params or {}, database_=self.database)
        except Exception as e:
            error = handle_driver_exception(e)
            logger.error(f"Neo4j query failed: {error}")
            if error is e:
                raise
            raise error from e

    async def ensure_uri_constraint(self, create: bool = True) -> bool:
        result = await self.driver.execute_query(NEO4J_CONSTRAINT_CHECK, database_=self.database)
        found = bool(result.records) and result.records[0]["constraint_found"] is True

        if not found and create:
            try:
                await self.driver.execute_query(NEO4J_CREATE_CONSTRAINT, database_=self.database)
                logger.info(f"Created uniqueness constraint on :{RESOURCE_LABEL}({URI_PROPERTY})")
            except Exception as e:
                # Missing privileges must not prevent the import
                logger.warning(f"Could not create uniqueness constraint: {e}")
        return found

    async def close(self) -> None:
        if self._driver is None or not self._owns_driver:
            return
        try:
            await self._driver.close()
            logger.info("Neo4jSession driver closed")
        finally:
            self._driver = None


class FalkorDBSession(GraphSession):
    """
    Session over FalkorDB.

    Manages a Redis connection pool; the same pool is used for graph queries
    and for raw GRAPH.* commands, since FalkorDB is a Redis module.
    """

    timestamp_function = "timestamp()"

    def __init__(
        self,
        host: str = "localhost",
        port: int = 6379,
        password: str | None = None,
        graph_name: str = "rdf_graph",
        max_connections: int = 16,
        pool: BlockingConnectionPool | None = None,
    ):
        self.host = host
        self.port = port
        self.password = password
        self.graph_name = graph_name
        self.max_connections = max_connections

        self._pool = pool
        self._owns_pool = pool is None
        self._db: FalkorDB | None = None
        self._graph = None

    @property
    def pool(self) -> BlockingConnectionPool:
        if self._pool is None:
            raise RuntimeError("FalkorDBSession not connected. Call connect() first.")
        return self._pool

    @property
    def graph(self):
        if self._graph is None:
            raise RuntimeError("FalkorDBSession not connected. Call connect() first.")
        return self._graph

    async def connect(self) -> None:
        if self._graph is not None:
            return

        if self._pool is None:
            self._pool = BlockingConnectionPool(
                host=self.host,
                port=self.port,
                password=self.password,
                max_connections=self.max_connections,
                timeout=None,
                decode_responses=True,
            )

        self._db = FalkorDB(connection_pool=self._pool)
        self._graph = self._db.select_graph(self.graph_name)
        logger.info(f"FalkorDBSession connected: {self.host}:{self.port}/{self.graph_name}")

    async def execute(self, query: str, params: dict[str, Any] | None = None) -> Any:
        try:
            return await self.graph.query(query, params=falkordb_param(params or {}))
        except Exception as e:
            logger.error(f"FalkorDB query failed: {e}")
            raise

    async def ensure_uri_constraint(self, create: bool = True) -> bool:
        result = await self.graph.query(FALKORDB_CONSTRAINT_CHECK)
        found = any(
            str(row[0]).upper() == "UNIQUE"
            and row[1] == RESOURCE_LABEL
            and list(row[2]) == [URI_PROPERTY]
            and str(row[3]).upper() == "NODE"
            for row in result.result_set
        )

        if not found and create:
            try:
                await self.graph.query(FALKORDB_CREATE_INDEX)
            except Exception as e:
                if "already indexed" not in str(e).lower():
                    logger.warning(f"Could not create index on :{RESOURCE_LABEL}({URI_PROPERTY}): {e}")

            conn = aioredis.Redis(connection_pool=self.pool)
            try:
                await conn.execute_command(*falkordb_create_constraint_command(self.graph_name))
                logger.info(f"Created uniqueness constraint on :{RESOURCE_LABEL}({URI_PROPERTY})")
            except Exception as e:
                logger.warning(f"Could not create uniqueness constraint: {e}")
            finally:
                await conn.aclose()
        return found

    async def close(self) -> None:
        if self._pool is not None and self._owns_pool:
            try:
                await self._pool.aclose()
                logger.info("FalkorDBSession connection pool closed")
            except Exception as e:
                logger.warning(f"Error closing FalkorDBSession pool: {e}")
            finally:
                self._pool = None
        self._db = None
        self._graph = None
