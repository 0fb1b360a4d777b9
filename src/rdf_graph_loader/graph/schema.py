"""
Graph schema for imported RDF resources.

Every node written by the loader carries the :Resource label and is merged on
its ``uri`` property, so a uniqueness constraint on Resource(uri) is checked
(and optionally created) when a store opens. Creation may be refused for
lack of privileges; that is not fatal.

Neo4j:
    SHOW CONSTRAINTS introspection, CREATE CONSTRAINT ... IF NOT EXISTS

FalkorDB:
    CALL db.constraints() introspection; a unique constraint needs an
    exact-match index first and is created with GRAPH.CONSTRAINT CREATE.
"""

from ..models.strategies import RESOURCE_LABEL, URI_PROPERTY

CONSTRAINT_NAME = "n10s_unique_uri"

NEO4J_CONSTRAINT_CHECK = (
    "SHOW CONSTRAINTS YIELD * "
    'WHERE type = "UNIQUENESS" '
    'AND entityType = "NODE" '
    f'AND labelsOrTypes = ["{RESOURCE_LABEL}"] '
    f'AND properties = ["{URI_PROPERTY}"] '
    "RETURN COUNT(*) = 1 AS constraint_found"
)

NEO4J_CREATE_CONSTRAINT = (
    f"CREATE CONSTRAINT {CONSTRAINT_NAME} IF NOT EXISTS "
    f"FOR (r:{RESOURCE_LABEL}) REQUIRE r.{URI_PROPERTY} IS UNIQUE"
)

FALKORDB_CONSTRAINT_CHECK = (
    "CALL db.constraints() YIELD type, label, properties, entitytype "
    "RETURN type, label, properties, entitytype"
)

FALKORDB_CREATE_INDEX = f"CREATE INDEX FOR (r:{RESOURCE_LABEL}) ON (r.{URI_PROPERTY})"


def falkordb_create_constraint_command(graph_name: str) -> tuple[str | int, ...]:
    """Arguments for the GRAPH.CONSTRAINT CREATE Redis command."""
    return (
        "GRAPH.CONSTRAINT",
        "CREATE",
        graph_name,
        "UNIQUE",
        "NODE",
        RESOURCE_LABEL,
        "PROPERTIES",
        1,
        URI_PROPERTY,
    )
