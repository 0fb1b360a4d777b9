"""
Per-subject accumulation of RDF triples.

A SubjectAccumulator absorbs every triple of the currently open subject and
sorts it into one of three buckets:

    literal object                 -> property (single- or multi-valued)
    rdf:type with a URI object     -> label
    any other URI object           -> outgoing relationship

Once the subject changes, the store reads the accumulated state back with the
extract_* methods and routes it into the query composers.
"""

import logging
from collections.abc import Mapping, Sequence
from typing import Any

from rdflib import Literal, URIRef

from ..models.strategies import (
    RDF_TYPE,
    RESOURCE_LABEL,
    URI_PROPERTY,
    HandleMultivalStrategy,
    HandleVocabUriStrategy,
)
from ..utils.literals import convert_literal
from ..utils.uri import resolve

logger = logging.getLogger(__name__)


def _contains(values: list[Any], value: Any) -> bool:
    # Type-aware membership: 1, 1.0 and True must stay distinct entries.
    return any(type(existing) is type(value) and existing == value for existing in values)


class SubjectAccumulator:
    """Mutable state of one subject until its boundary is crossed."""

    def __init__(
        self,
        uri: URIRef,
        handle_vocab_uri_strategy: HandleVocabUriStrategy,
        handle_multival_strategy: HandleMultivalStrategy,
        multival_props_names: Sequence[str],
        prefixes: Mapping[str, str],
    ):
        """
        Args:
            uri: Subject URI
            handle_vocab_uri_strategy: Strategy for predicate/type URIs
            handle_multival_strategy: OVERWRITE or ARRAY
            multival_props_names: Full predicate URIs treated as multivalued
            prefixes: Namespace -> prefix table (inverse of the configured prefixes)
        """
        self.uri = uri
        self.handle_vocab_uri_strategy = handle_vocab_uri_strategy
        self.handle_multival_strategy = handle_multival_strategy
        self.multival_props_names = list(multival_props_names)
        self.prefixes = prefixes

        # dicts used as insertion-ordered sets
        self.labels: dict[str, None] = {}
        self.props: dict[str, Any] = {}
        self.multi_props: dict[str, list[Any]] = {}
        self.relationships: dict[str, dict[str, None]] = {}

    # ── Mutation ────────────────────────────────────────────────────────

    def add_label(self, label: str) -> None:
        self.labels[label] = None

    def add_prop(self, prop_name: str, value: Any, multi: bool = False) -> None:
        """Store a property value; multivalued properties keep set semantics."""
        if not multi:
            self.props[prop_name] = value
            return
        values = self.multi_props.setdefault(prop_name, [])
        if not _contains(values, value):
            values.append(value)

    def add_rel(self, rel_type: str, to_resource: str) -> None:
        self.relationships.setdefault(rel_type, {})[to_resource] = None

    def is_multival(self, predicate: str) -> bool:
        """Whether values of ``predicate`` accumulate into an array."""
        if self.handle_multival_strategy != HandleMultivalStrategy.ARRAY:
            return False
        # An empty allow-list makes every property multivalued.
        return not self.multival_props_names or predicate in self.multival_props_names

    def handle_vocab_uri(self, mappings: Mapping[str, str], uri: str) -> str:
        return resolve(uri, mappings, self.prefixes, self.handle_vocab_uri_strategy)

    def parse_triple(self, triple: Sequence[Any], mappings: Mapping[str, str]) -> None:
        """
        Classify one triple (or quad) and fold it into this subject.

        Triples whose subject or predicate is not a URI are skipped, as are
        blank-node objects. The vocabulary strategy is applied before any
        state changes, so a ShortenStrictError leaves the accumulator intact.

        Raises:
            ShortenStrictError: SHORTEN strategy and an unregistered namespace
        """
        subject, predicate, obj = triple[0], triple[1], triple[2]
        if not isinstance(subject, URIRef) or not isinstance(predicate, URIRef):
            logger.debug(f"Skipping triple with non-URI subject or predicate: {subject!r} {predicate!r}")
            return

        if isinstance(obj, Literal):
            prop_name = self.handle_vocab_uri(mappings, predicate)
            self.add_prop(prop_name, convert_literal(obj), multi=self.is_multival(str(predicate)))
        elif str(predicate) == RDF_TYPE:
            if isinstance(obj, URIRef):
                self.add_label(self.handle_vocab_uri(mappings, obj))
        elif isinstance(obj, URIRef):
            self.add_rel(self.handle_vocab_uri(mappings, predicate), str(obj))

    # ── Extraction ──────────────────────────────────────────────────────

    def extract_label_key(self) -> str:
        """Display form of the label set: sorted labels joined by commas, or the untyped sentinel."""
        if not self.labels:
            return RESOURCE_LABEL
        return ",".join(sorted(self.labels))

    def extract_labels(self) -> list[str]:
        return sorted(self.labels)

    def extract_params(self) -> dict[str, Any]:
        """One parameter row: properties, multivalued arrays and the subject URI."""
        row: dict[str, Any] = dict(self.props)
        row[URI_PROPERTY] = str(self.uri)
        for name, values in self.multi_props.items():
            row[name] = list(values)
        return row

    def extract_props_names(self, multi: bool = False) -> list[str]:
        if multi:
            return list(self.multi_props)
        return list(self.props)

    def extract_rels(self) -> dict[str, list[str]]:
        return {rel_type: list(targets) for rel_type, targets in self.relationships.items()}

    def __repr__(self) -> str:
        return (
            f"SubjectAccumulator(uri={str(self.uri)!r}, labels={len(self.labels)}, "
            f"props={len(self.props)}, multi_props={len(self.multi_props)}, rels={len(self.relationships)})"
        )
