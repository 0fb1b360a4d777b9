"""
GraphStore: streams RDF triples into a property graph.

Triples are expected grouped by subject. The store keeps one open
SubjectAccumulator; when a triple for a different subject arrives (or on
commit) the open subject is finalized into the composer buffers:

    node_buffer  {sorted label tuple -> NodeQueryComposer}
    rel_buffer   {relationship type -> RelationshipQueryComposer}

With batching, each side is flushed independently once its row count reaches
``batch_size``. Without batching every triple is committed immediately.
Whenever both sides are flushed together, nodes go first because
relationships may point at nodes merged in the same flush.

A failed write drains every buffer, so a naive retry cannot resubmit the
batch, and the error propagates. Database state already written is not
rolled back. The store is append/merge-only; remove() always fails.

A subject that reappears after another subject has been seen is merged a
second time from a fresh accumulator. Interleaved streams are therefore
written as several merges per subject rather than one.
"""

import logging
from collections.abc import Sequence
from typing import Any

from rdflib import URIRef

from ..config import StoreConfig, check_auth_data
from ..exceptions import ShortenStrictError, StoreClosedError, StoreConfigurationError, UnsupportedOperationError
from ..utils.uri import invert_prefixes
from .client import GraphSession, Neo4jSession
from .composers import NodeQueryComposer, RelationshipQueryComposer
from .subject import SubjectAccumulator

logger = logging.getLogger(__name__)


class GraphStore:
    """
    Async, append-only RDF to property-graph writer.

    Usage::

        store = GraphStore(StoreConfig(auth_data=auth))
        await store.open()
        for triple in graph:
            await store.add(triple)
        await store.close(commit_pending_transaction=True)
    """

    def __init__(
        self,
        config: StoreConfig,
        session: GraphSession | None = None,
        owns_session: bool | None = None,
    ):
        """
        Args:
            config: Vocabulary, batching and credential configuration
            session: Existing session; when omitted a Neo4jSession is built from
                ``config.auth_data``
            owns_session: Close the session on close(). Defaults to True only
                when the store builds the session itself.

        Raises:
            StoreConfigurationError: Both credentials and a session were given
            MissingAuthenticationError, WrongAuthenticationError,
            EmptyAuthenticationValueError: Invalid credentials
        """
        self.config = config

        if session is None:
            check_auth_data(config.auth_data)
            auth = config.auth_data
            session = Neo4jSession(
                uri=auth["uri"],
                user=auth["user"],
                password=auth["pwd"],
                database=auth["database"],
            )
            owns_session = True if owns_session is None else owns_session
        elif config.auth_data:
            raise StoreConfigurationError(
                "Either initialize the store with credentials or a session. You cannot do both."
            )

        self._session = session
        self._owns_session = bool(owns_session)
        self._open = False

        self.total_triples = 0
        self.node_buffer_size = 0
        self.rel_buffer_size = 0
        self.node_buffer: dict[tuple[str, ...], NodeQueryComposer] = {}
        self.rel_buffer: dict[str, RelationshipQueryComposer] = {}
        self.current_subject: SubjectAccumulator | None = None

    # ── Lifecycle ───────────────────────────────────────────────────────

    @property
    def session(self) -> GraphSession:
        return self._session

    def is_open(self) -> bool:
        return self._open

    async def open(self, create: bool = True) -> None:
        """
        Connect and check the Resource(uri) uniqueness constraint.

        Args:
            create: Create the constraint when it is missing
        """
        await self._session.connect()
        await self._session.ensure_uri_constraint(create)
        self._open = True
        logger.info("GraphStore opened")

    async def close(self, commit_pending_transaction: bool = True) -> None:
        """
        Close the store.

        Args:
            commit_pending_transaction: Flush pending nodes, then pending
                relationships, before closing. Otherwise pending data is discarded.
        """
        try:
            if commit_pending_transaction and self._open:
                await self.commit(commit_nodes=True)
                await self.commit(commit_rels=True)
        finally:
            self.current_subject = None
            self._empty_buffers()
            if self._owns_session:
                await self._session.close()
            self._open = False
            logger.info(f"GraphStore closed after {self.total_triples} triples")
            self.total_triples = 0

    async def __aenter__(self) -> "GraphStore":
        await self.open()
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.close(commit_pending_transaction=exc_type is None)

    # ── Writes ──────────────────────────────────────────────────────────

    async def add(self, triple: Sequence[Any]) -> None:
        """
        Add one triple ``(s, p, o)`` or quad ``(s, p, o, g)``.

        Triples with a non-URI subject are ignored. The graph term of a quad
        is ignored.

        Raises:
            StoreClosedError: The store is not open
            ShortenStrictError: SHORTEN strategy and an unregistered namespace;
                the open subject is discarded
        """
        if not self._open:
            raise StoreClosedError()

        subject = triple[0]
        if not isinstance(subject, URIRef):
            return

        self._check_current_subject(subject)
        try:
            self.current_subject.parse_triple(triple, self.config.custom_mappings)
        except ShortenStrictError:
            logger.error(f"Discarding subject {str(subject)!r}: {triple[1]} cannot be shortened")
            self.current_subject = None
            raise
        self.total_triples += 1

        if self.config.batching:
            # Thresholds flush finalized subjects only; the open one keeps accumulating.
            if self.node_buffer_size >= self.config.batch_size:
                await self._flush_buffer(commit_nodes=True, commit_rels=False)
            if self.rel_buffer_size >= self.config.batch_size:
                await self._flush_buffer(commit_nodes=False, commit_rels=True)
        else:
            await self.commit()

    async def commit(self, commit_nodes: bool = False, commit_rels: bool = False) -> None:
        """
        Finalize the open subject and flush buffered writes.

        With neither flag set both sides are flushed, nodes first.
        """
        if self.current_subject is not None:
            self._store_current_subject()
            self.current_subject = None

        if not commit_nodes and not commit_rels:
            commit_nodes = commit_rels = True
        await self._flush_buffer(commit_nodes, commit_rels)

    async def remove(self, triple: Sequence[Any] | None = None, context: Any = None) -> None:
        raise UnsupportedOperationError(
            "This is a streamer so it doesn't preserve the state, there is no removal feature."
        )

    # ── Subject handling ────────────────────────────────────────────────

    def _create_current_subject(self, subject: URIRef) -> SubjectAccumulator:
        return SubjectAccumulator(
            subject,
            self.config.handle_vocab_uri_strategy,
            self.config.handle_multival_strategy,
            self.config.multival_props_names,
            invert_prefixes(self.config.get_prefixes()),
        )

    def _check_current_subject(self, subject: URIRef) -> None:
        """Open an accumulator for ``subject``, finalizing the previous one on change."""
        if self.current_subject is None:
            self.current_subject = self._create_current_subject(subject)
        elif str(self.current_subject.uri) != str(subject):
            self._store_current_subject()
            self.current_subject = self._create_current_subject(subject)

    def _store_current_subject(self) -> None:
        self._store_current_subject_props()
        self._store_current_subject_rels()

    def _store_current_subject_props(self) -> None:
        subject = self.current_subject
        labels = tuple(subject.extract_labels())
        composer = self.node_buffer.get(labels)
        if composer is None:
            composer = NodeQueryComposer(labels, self.config.handle_multival_strategy)
            self.node_buffer[labels] = composer
            logger.debug(f"New node group [{subject.extract_label_key()}]")

        composer.add_props(subject.extract_props_names())
        composer.add_props(subject.extract_props_names(multi=True), multi=True)
        composer.add_query_param(subject.extract_params())
        self.node_buffer_size += 1

    def _store_current_subject_rels(self) -> None:
        subject = self.current_subject
        from_uri = str(subject.uri)
        for rel_type, targets in subject.extract_rels().items():
            composer = self.rel_buffer.get(rel_type)
            if composer is None:
                composer = RelationshipQueryComposer(
                    rel_type,
                    self.config.created_at_field,
                    self.config.updated_at_field,
                    self._session.timestamp_function,
                )
                self.rel_buffer[rel_type] = composer
            for to_uri in targets:
                if composer.add_query_param(from_uri, to_uri):
                    self.rel_buffer_size += 1

    # ── Flushing ────────────────────────────────────────────────────────

    async def _flush_buffer(self, commit_nodes: bool, commit_rels: bool) -> None:
        if not self._open:
            raise StoreClosedError()
        try:
            if commit_nodes:
                await self._flush_node_buffer()
            if commit_rels:
                await self._flush_rel_buffer()
        except Exception:
            self._empty_buffers()
            raise

    async def _flush_node_buffer(self) -> None:
        for labels, composer in self.node_buffer.items():
            if composer.is_redundant() or not composer.query_params:
                continue
            rows = composer.query_params
            logger.debug(f"Merging {len(rows)} nodes with labels {list(labels)}")
            await self._session.execute(composer.render(), {"params": rows})
            composer.empty_query_params()
        self.node_buffer_size = 0

    async def _flush_rel_buffer(self) -> None:
        for rel_type, composer in self.rel_buffer.items():
            if composer.is_redundant():
                continue
            rows = composer.query_params
            logger.debug(f"Merging {len(rows)} relationships of type {rel_type}")
            await self._session.execute(composer.render(), {"params": rows})
            composer.empty_query_params()
        self.rel_buffer_size = 0

    def _empty_buffers(self) -> None:
        """Drop every buffered row; composers and their property names are kept."""
        for composer in self.node_buffer.values():
            composer.empty_query_params()
        for composer in self.rel_buffer.values():
            composer.empty_query_params()
        self.node_buffer_size = 0
        self.rel_buffer_size = 0

    def get_stats(self) -> dict[str, Any]:
        return {
            "open": self._open,
            "total_triples": self.total_triples,
            "node_buffer_size": self.node_buffer_size,
            "rel_buffer_size": self.rel_buffer_size,
            "node_groups": len(self.node_buffer),
            "rel_types": len(self.rel_buffer),
        }
