"""
Unit tests for the node and relationship query composers.
"""

import pytest

from rdf_graph_loader.exceptions import UnsupportedOperationError
from rdf_graph_loader.graph.composers import (
    NodeQueryComposer,
    RelationshipQueryComposer,
    prop_query_append,
    prop_query_single,
    quote_identifier,
)
from rdf_graph_loader.models.strategies import HandleMultivalStrategy


class TestQuoting:
    def test_plain(self):
        assert quote_identifier("ex__name") == "`ex__name`"

    def test_backtick_escaped(self):
        assert quote_identifier("we`ird") == "`we``ird`"

    def test_full_uri_property(self):
        assert prop_query_single("http://ex.org/p") == "n.`http://ex.org/p` = coalesce(param.`http://ex.org/p`, n.`http://ex.org/p`)"


class TestNodeQueryComposer:
    """Test node merge rendering."""

    def test_render_labels_and_props(self):
        composer = NodeQueryComposer(["ex__Person", "ex__Agent"])
        composer.add_props(["ex__name", "ex__age"])
        query = composer.render()

        assert query.startswith("UNWIND $params AS param MERGE (n:`Resource` {uri: param.uri})")
        assert "SET n:`ex__Agent`, n:`ex__Person`" in query
        assert prop_query_single("ex__name") in query
        assert prop_query_single("ex__age") in query

    def test_render_without_labels_or_props(self):
        composer = NodeQueryComposer([])
        assert composer.render() == "UNWIND $params AS param MERGE (n:`Resource` {uri: param.uri})"

    def test_multi_props_only_rendered_with_array_strategy(self):
        overwrite = NodeQueryComposer([], HandleMultivalStrategy.OVERWRITE)
        overwrite.add_props(["rdfs__label"], multi=True)
        assert "reduce" not in overwrite.render()

        array = NodeQueryComposer([], HandleMultivalStrategy.ARRAY)
        array.add_props(["rdfs__label"], multi=True)
        assert prop_query_append("rdfs__label") in array.render()

    def test_single_and_multi_in_one_set_clause(self):
        composer = NodeQueryComposer([], HandleMultivalStrategy.ARRAY)
        composer.add_props(["ex__age"])
        composer.add_props(["rdfs__label"], multi=True)
        prop_query = composer.write_prop_query()
        assert prop_query.count("SET ") == 1
        assert prop_query == f"SET {prop_query_single('ex__age')}, {prop_query_append('rdfs__label')}"

    def test_props_are_a_set(self):
        composer = NodeQueryComposer(["L"])
        composer.add_props(["a", "b"])
        composer.add_props(["b", "a"])
        assert list(composer.props) == ["a", "b"]

    def test_query_params_and_empty(self):
        composer = NodeQueryComposer([])
        composer.add_query_param({"uri": "http://ex.org/a"})
        composer.add_query_param({"uri": "http://ex.org/b"})
        assert len(composer) == 2

        composer.add_props(["p"])
        composer.empty_query_params()
        assert len(composer) == 0
        assert composer.query_params == []
        # property names survive a flush
        assert list(composer.props) == ["p"]

    def test_is_redundant(self):
        composer = NodeQueryComposer([])
        assert composer.is_redundant()
        composer.add_query_param({"uri": "http://ex.org/a"})
        assert not composer.is_redundant()
        assert not NodeQueryComposer(["L"]).is_redundant()


class TestRelationshipQueryComposer:
    """Test relationship merge rendering."""

    def test_render(self):
        composer = RelationshipQueryComposer("ex__knows")
        query = composer.render()
        assert 'MERGE (from:`Resource` {uri: param["from"]})' in query
        assert 'MERGE (to:`Resource` {uri: param["to"]})' in query
        assert "MERGE (from)-[r:`ex__knows`]->(to)" in query
        assert "ON CREATE SET r.`_createdAt` = datetime()" in query
        assert query.endswith("SET r.`_updatedAt` = datetime()")

    def test_custom_timestamp_fields_and_function(self):
        composer = RelationshipQueryComposer("T", "created", "updated", "timestamp()")
        query = composer.render()
        assert "ON CREATE SET r.`created` = timestamp()" in query
        assert "SET r.`updated` = timestamp()" in query

    def test_duplicate_pairs_collapsed(self):
        composer = RelationshipQueryComposer("T")
        assert composer.add_query_param("a", "b") is True
        assert composer.add_query_param("a", "b") is False
        assert composer.add_query_param("a", "c") is True
        assert composer.query_params == [{"from": "a", "to": "b"}, {"from": "a", "to": "c"}]
        assert len(composer) == 2

    def test_empty_and_redundant(self):
        composer = RelationshipQueryComposer("T")
        assert composer.is_redundant()
        composer.add_query_param("a", "b")
        assert not composer.is_redundant()
        composer.empty_query_params()
        assert composer.is_redundant()
        assert composer.query_params == []

    def test_add_props_unsupported(self):
        composer = RelationshipQueryComposer("T")
        with pytest.raises(UnsupportedOperationError):
            composer.add_props(["weight"])
        with pytest.raises(NotImplementedError):
            composer.add_props(["weight"])
