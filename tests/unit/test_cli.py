"""
Unit tests for the command-line importer.
"""

import argparse
from unittest.mock import AsyncMock, patch

import pytest
from fakes import RecordingSession

TURTLE = """
@prefix ex: <http://www.example.org/indiv/> .
@prefix foaf: <http://xmlns.com/foaf/0.1/> .

ex:alice foaf:name "Alice" ;
    foaf:nick "Al", "Ali" .
"""


class TestArgumentParsing:
    """Test argument types and the derived StoreConfig."""

    def test_parse_helpers(self):
        from rdf_graph_loader.cli import parse_mapping, parse_multival, parse_prefix

        assert parse_prefix("foaf=http://xmlns.com/foaf/0.1/") == ("foaf", "http://xmlns.com/foaf/0.1/")
        assert parse_multival("rdfs:label") == ("rdfs", "label")
        assert parse_mapping("foaf:name=fullName") == ("foaf", "name", "fullName")

    @pytest.mark.parametrize("value", ["foaf", "=http://x/", "foaf="])
    def test_bad_prefix(self, value):
        from rdf_graph_loader.cli import parse_prefix

        with pytest.raises(argparse.ArgumentTypeError):
            parse_prefix(value)

    def test_bad_mapping(self):
        from rdf_graph_loader.cli import parse_mapping

        with pytest.raises(argparse.ArgumentTypeError):
            parse_mapping("name=fullName")

    def test_build_store_config(self):
        from rdf_graph_loader.cli import build_parser, build_store_config
        from rdf_graph_loader.config import Settings
        from rdf_graph_loader.models.strategies import HandleMultivalStrategy, HandleVocabUriStrategy

        args = build_parser().parse_args(
            [
                "data.ttl",
                "--no-batching",
                "--batch-size", "10",
                "--vocab-strategy", "MAP",
                "--multival-strategy", "ARRAY",
                "--prefix", "foaf=http://xmlns.com/foaf/0.1/",
                "--multival", "foaf:nick",
                "--mapping", "foaf:name=fullName",
            ]
        )
        config = build_store_config(args, Settings())

        assert config.batching is False
        assert config.batch_size == 10
        assert config.auth_data is None
        assert config.handle_vocab_uri_strategy is HandleVocabUriStrategy.MAP
        assert config.handle_multival_strategy is HandleMultivalStrategy.ARRAY
        assert config.custom_mappings == {"http://xmlns.com/foaf/0.1/name": "fullName"}
        assert config.multival_props_names == ["http://xmlns.com/foaf/0.1/nick"]


class TestMain:
    """Test the end-to-end CLI run over a recording session."""

    def test_imports_file(self, tmp_path):
        from rdf_graph_loader.cli import main
        from rdf_graph_loader.graph.store import GraphStore

        path = tmp_path / "people.ttl"
        path.write_text(TURTLE)
        session = RecordingSession()

        async def fake_create_graph_store(store_config, config=None, backend=None):
            store = GraphStore(store_config, session=session, owns_session=True)
            await store.open()
            return store

        with patch("rdf_graph_loader.cli.create_graph_store", side_effect=fake_create_graph_store):
            code = main(
                [
                    str(path),
                    "--vocab-strategy", "MAP",
                    "--multival-strategy", "ARRAY",
                    "--prefix", "foaf=http://xmlns.com/foaf/0.1/",
                    "--multival", "foaf:nick",
                    "--mapping", "foaf:name=fullName",
                ]
            )

        assert code == 0
        assert session.closed is True
        props = session.nodes["http://www.example.org/indiv/alice"]["props"]
        assert props["fullName"] == "Alice"
        assert sorted(props["nick"]) == ["Al", "Ali"]

    def test_loader_error_returns_nonzero(self, tmp_path):
        from rdf_graph_loader.cli import main
        from rdf_graph_loader.exceptions import MissingAuthenticationError

        path = tmp_path / "people.ttl"
        path.write_text(TURTLE)

        with patch(
            "rdf_graph_loader.cli.create_graph_store",
            AsyncMock(side_effect=MissingAuthenticationError()),
        ):
            assert main([str(path)]) == 1
