"""
Shared fixtures for loader unit tests.
"""

import pytest
from fakes import RecordingSession


@pytest.fixture
def recording_session():
    return RecordingSession()


@pytest.fixture
def make_store():
    """Build an open GraphStore over a fresh RecordingSession."""
    from rdf_graph_loader.config import StoreConfig
    from rdf_graph_loader.graph.store import GraphStore

    async def _make(session=None, **config_kwargs):
        session = session or RecordingSession()
        store = GraphStore(StoreConfig(**config_kwargs), session=session)
        await store.open()
        return store, session

    return _make
