"""
Batched Cypher composition for nodes and relationships.

One NodeQueryComposer exists per distinct label set and one
RelationshipQueryComposer per relationship type. Each collects parameter rows
between flushes and renders a single ``UNWIND $params AS param ...`` merge
statement for the whole batch.

Labels, property names and relationship types cannot be parameterized in
Cypher, so they are backtick-quoted into the statement text. Values always
travel as parameters.
"""

from collections.abc import Iterable
from typing import Any

from ..exceptions import UnsupportedOperationError
from ..models.strategies import (
    DEFAULT_CREATED_AT_FIELD,
    DEFAULT_UPDATED_AT_FIELD,
    RESOURCE_LABEL,
    URI_PROPERTY,
    HandleMultivalStrategy,
)

# Cypher expression stamping relationship timestamps (Neo4j temporal value).
DEFAULT_TIMESTAMP_FUNCTION = "datetime()"


def quote_identifier(name: str) -> str:
    """Backtick-quote a label, property or relationship type for Cypher."""
    return "`" + name.replace("`", "``") + "`"


def prop_query_single(prop: str) -> str:
    """Single-valued assignment: never unsets a property the row omits."""
    p = quote_identifier(prop)
    return f"n.{p} = coalesce(param.{p}, n.{p})"


def prop_query_append(prop: str) -> str:
    """Multivalued assignment: set-union of the stored array and the row's values."""
    p = quote_identifier(prop)
    return (
        f"n.{p} = CASE WHEN param.{p} IS NULL THEN n.{p} "
        f"ELSE reduce(acc = coalesce(n.{p}, []), val IN param.{p} | "
        f"CASE WHEN val IN acc THEN acc ELSE acc + val END) END"
    )


class NodeQueryComposer:
    """Accumulates node rows sharing one label set."""

    def __init__(
        self,
        labels: Iterable[str],
        handle_multival_strategy: HandleMultivalStrategy = HandleMultivalStrategy.OVERWRITE,
    ):
        """
        Args:
            labels: Labels set on every node of this group
            handle_multival_strategy: OVERWRITE or ARRAY; names reach add_props
                already classified as single- or multi-valued
        """
        self.labels: list[str] = sorted(set(labels))
        self.handle_multival_strategy = handle_multival_strategy
        # dicts used as insertion-ordered sets; they persist across flushes
        self.props: dict[str, None] = {}
        self.multi_props: dict[str, None] = {}
        self.query_params: list[dict[str, Any]] = []

    def add_props(self, props: Iterable[str], multi: bool = False) -> None:
        target = self.multi_props if multi else self.props
        for prop in props:
            target[prop] = None

    def add_query_param(self, param: dict[str, Any]) -> None:
        self.query_params.append(param)

    def write_prop_query(self) -> str:
        """SET clause for the known properties, or '' when there are none."""
        assignments = [prop_query_single(prop) for prop in self.props]
        if self.handle_multival_strategy == HandleMultivalStrategy.ARRAY:
            assignments.extend(prop_query_append(prop) for prop in self.multi_props)
        if not assignments:
            return ""
        return "SET " + ", ".join(assignments)

    def render(self) -> str:
        """Render the merge statement for every buffered row."""
        query = (
            f"UNWIND $params AS param "
            f"MERGE (n:{quote_identifier(RESOURCE_LABEL)} {{{URI_PROPERTY}: param.{URI_PROPERTY}}})"
        )
        if self.labels:
            query += " SET " + ", ".join(f"n:{quote_identifier(label)}" for label in self.labels)
        prop_query = self.write_prop_query()
        if prop_query:
            query += " " + prop_query
        return query

    def is_redundant(self) -> bool:
        """True when there is nothing to write: no properties, labels or rows."""
        return not self.props and not self.labels and not self.query_params

    def empty_query_params(self) -> None:
        self.query_params = []

    def __len__(self) -> int:
        return len(self.query_params)


class RelationshipQueryComposer:
    """Accumulates (from, to) pairs for one relationship type.

    Relationships carry no user properties; only the creation and update
    timestamps are written.
    """

    def __init__(
        self,
        rel_type: str,
        created_at_field: str = DEFAULT_CREATED_AT_FIELD,
        updated_at_field: str = DEFAULT_UPDATED_AT_FIELD,
        timestamp_function: str = DEFAULT_TIMESTAMP_FUNCTION,
    ):
        self.rel_type = rel_type
        self.created_at_field = created_at_field
        self.updated_at_field = updated_at_field
        self.timestamp_function = timestamp_function
        self._pairs: dict[tuple[str, str], None] = {}

    def add_props(self, props: Iterable[str]) -> None:
        raise UnsupportedOperationError(
            f"Relationship properties are not supported (relationship type {self.rel_type!r})."
        )

    def add_query_param(self, from_node: str, to_node: str) -> bool:
        """Buffer a pair; returns False when the pair is already buffered."""
        key = (from_node, to_node)
        if key in self._pairs:
            return False
        self._pairs[key] = None
        return True

    @property
    def query_params(self) -> list[dict[str, str]]:
        return [{"from": from_node, "to": to_node} for from_node, to_node in self._pairs]

    def render(self) -> str:
        """Render the merge statement; missing endpoints become stub Resource nodes."""
        resource = quote_identifier(RESOURCE_LABEL)
        now = self.timestamp_function
        return (
            f"UNWIND $params AS param "
            f'MERGE (from:{resource} {{{URI_PROPERTY}: param["from"]}}) '
            f'MERGE (to:{resource} {{{URI_PROPERTY}: param["to"]}}) '
            f"MERGE (from)-[r:{quote_identifier(self.rel_type)}]->(to) "
            f"ON CREATE SET r.{quote_identifier(self.created_at_field)} = {now} "
            f"SET r.{quote_identifier(self.updated_at_field)} = {now}"
        )

    def is_redundant(self) -> bool:
        return not self._pairs

    def empty_query_params(self) -> None:
        self._pairs = {}

    def __len__(self) -> int:
        return len(self._pairs)
