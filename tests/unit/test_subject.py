"""
Unit tests for SubjectAccumulator.

Validates triple classification (property / label / relationship), multivalue
handling and the extracted parameter rows.
"""

import pytest
from rdflib import BNode, Literal, URIRef
from rdflib.namespace import RDF, RDFS, XSD

from rdf_graph_loader.exceptions import ShortenStrictError
from rdf_graph_loader.graph.subject import SubjectAccumulator
from rdf_graph_loader.models.strategies import HandleMultivalStrategy, HandleVocabUriStrategy

EX = "http://ex.org/"
NAMESPACES = {EX: "ex", str(RDFS): "rdfs"}
S = URIRef(EX + "s")


def make_subject(
    vocab=HandleVocabUriStrategy.SHORTEN,
    multival=HandleMultivalStrategy.OVERWRITE,
    multival_props=(),
):
    return SubjectAccumulator(S, vocab, multival, multival_props, NAMESPACES)


class TestParseTriple:
    """Test triple classification."""

    def test_literal_becomes_property(self):
        subject = make_subject()
        subject.parse_triple((S, URIRef(EX + "age"), Literal("30")), {})
        assert subject.props == {"ex__age": 30}

    def test_rdf_type_becomes_label(self):
        subject = make_subject()
        subject.parse_triple((S, RDF.type, URIRef(EX + "Person")), {})
        assert subject.extract_labels() == ["ex__Person"]
        assert not subject.relationships

    def test_uri_object_becomes_relationship(self):
        subject = make_subject()
        subject.parse_triple((S, URIRef(EX + "knows"), URIRef(EX + "o")), {})
        assert subject.extract_rels() == {"ex__knows": [EX + "o"]}

    def test_blank_node_object_skipped(self):
        subject = make_subject()
        subject.parse_triple((S, URIRef(EX + "knows"), BNode()), {})
        assert not subject.relationships
        assert not subject.props

    def test_blank_node_subject_skipped(self):
        subject = make_subject()
        subject.parse_triple((BNode(), URIRef(EX + "p"), Literal("x")), {})
        assert not subject.props

    def test_quad_graph_term_ignored(self):
        subject = make_subject()
        subject.parse_triple((S, URIRef(EX + "p"), Literal("x"), URIRef(EX + "g")), {})
        assert subject.props == {"ex__p": "x"}

    def test_rdf_type_with_literal_object_is_property(self):
        subject = make_subject(vocab=HandleVocabUriStrategy.IGNORE)
        subject.parse_triple((S, RDF.type, Literal("Person")), {})
        assert subject.props == {"type": "Person"}
        assert not subject.labels

    def test_shorten_unknown_namespace_leaves_state_untouched(self):
        subject = make_subject()
        subject.parse_triple((S, URIRef(EX + "p"), Literal("x")), {})
        with pytest.raises(ShortenStrictError):
            subject.parse_triple((S, URIRef("http://other.org/q"), Literal("y")), {})
        assert subject.props == {"ex__p": "x"}

    def test_map_strategy_uses_mappings(self):
        subject = make_subject(vocab=HandleVocabUriStrategy.MAP)
        subject.parse_triple((S, URIRef(EX + "p"), Literal("x")), {EX + "p": "mapped"})
        subject.parse_triple((S, URIRef(EX + "q"), Literal("y")), {})
        assert subject.props == {"mapped": "x", "q": "y"}

    def test_duplicate_type_single_label(self):
        subject = make_subject()
        subject.parse_triple((S, RDF.type, URIRef(EX + "Person")), {})
        subject.parse_triple((S, RDF.type, URIRef(EX + "Person")), {})
        assert subject.extract_labels() == ["ex__Person"]


class TestMultival:
    """Test OVERWRITE and ARRAY handling."""

    def test_overwrite_keeps_last_value(self):
        subject = make_subject()
        subject.parse_triple((S, RDFS.label, Literal("a")), {})
        subject.parse_triple((S, RDFS.label, Literal("b")), {})
        assert subject.props == {"rdfs__label": "b"}

    def test_array_with_empty_allow_list_applies_to_all(self):
        subject = make_subject(multival=HandleMultivalStrategy.ARRAY)
        subject.parse_triple((S, RDFS.label, Literal("a")), {})
        subject.parse_triple((S, RDFS.label, Literal("b")), {})
        subject.parse_triple((S, RDFS.label, Literal("a")), {})
        assert subject.multi_props == {"rdfs__label": ["a", "b"]}
        assert not subject.props

    def test_array_only_for_listed_predicates(self):
        subject = make_subject(multival=HandleMultivalStrategy.ARRAY, multival_props=[str(RDFS.label)])
        subject.parse_triple((S, RDFS.label, Literal("a")), {})
        subject.parse_triple((S, URIRef(EX + "age"), Literal("1")), {})
        subject.parse_triple((S, URIRef(EX + "age"), Literal("2")), {})
        assert subject.multi_props == {"rdfs__label": ["a"]}
        assert subject.props == {"ex__age": 2}

    def test_array_dedup_is_type_aware(self):
        subject = make_subject(multival=HandleMultivalStrategy.ARRAY)
        subject.parse_triple((S, URIRef(EX + "v"), Literal("1", datatype=XSD.integer)), {})
        subject.parse_triple((S, URIRef(EX + "v"), Literal("true", datatype=XSD.boolean)), {})
        subject.parse_triple((S, URIRef(EX + "v"), Literal("1", datatype=XSD.integer)), {})
        assert subject.multi_props["ex__v"] == [1, True]


class TestExtraction:
    """Test the extract_* accessors used by the store."""

    def test_label_key_sorted(self):
        subject = make_subject()
        subject.parse_triple((S, RDF.type, URIRef(EX + "Zeta")), {})
        subject.parse_triple((S, RDF.type, URIRef(EX + "Alpha")), {})
        assert subject.extract_label_key() == "ex__Alpha,ex__Zeta"

    def test_label_key_untyped(self):
        assert make_subject().extract_label_key() == "Resource"

    def test_params_row(self):
        subject = make_subject(multival=HandleMultivalStrategy.ARRAY, multival_props=[str(RDFS.label)])
        subject.parse_triple((S, URIRef(EX + "age"), Literal("30")), {})
        subject.parse_triple((S, RDFS.label, Literal("a")), {})
        assert subject.extract_params() == {"ex__age": 30, "uri": str(S), "rdfs__label": ["a"]}
        assert subject.extract_props_names() == ["ex__age"]
        assert subject.extract_props_names(multi=True) == ["rdfs__label"]

    def test_relationship_targets_deduplicated(self):
        subject = make_subject()
        for _ in range(2):
            subject.parse_triple((S, URIRef(EX + "knows"), URIRef(EX + "o")), {})
        subject.parse_triple((S, URIRef(EX + "knows"), URIRef(EX + "p")), {})
        assert subject.extract_rels() == {"ex__knows": [EX + "o", EX + "p"]}
