"""Vocabulary URI handling.

Maps predicate and type URIs to graph property names and labels under one of
the HandleVocabUriStrategy values. All functions are pure.

The prefix table passed to the resolver is keyed by namespace
(``{"http://ex.org/": "ex"}``); ``invert_prefixes`` builds it from the
user-facing ``{"ex": "http://ex.org/"}`` form.
"""

from collections.abc import Mapping

from ..exceptions import ShortenStrictError
from ..models.strategies import HandleVocabUriStrategy


def _split_position(uri: str) -> int:
    """Index of the separator between namespace and local part, or -1."""
    pos = uri.rfind("#")
    if pos < 0:
        pos = uri.rfind("/")
    if pos < 0:
        pos = uri.rfind(":")
    return pos


def get_local_part(uri: str) -> str:
    """Return the part of ``uri`` after the last ``#``, ``/`` or ``:``."""
    return uri[_split_position(uri) + 1 :]


def get_namespace_part(uri: str) -> str:
    """Return ``uri`` up to and including the last ``#``, ``/`` or ``:``."""
    return uri[: _split_position(uri) + 1]


def invert_prefixes(prefixes: Mapping[str, str]) -> dict[str, str]:
    """Turn ``{prefix: namespace}`` into ``{namespace: prefix}``."""
    return {namespace: prefix for prefix, namespace in prefixes.items()}


def create_shortened_predicate(prefix: str, local_part: str) -> str:
    return f"{prefix}__{local_part}"


def handle_vocab_uri_ignore(uri: str) -> str:
    return get_local_part(uri)


def handle_vocab_uri_shorten(uri: str, namespaces: Mapping[str, str]) -> str:
    """
    Shorten ``uri`` to ``prefix__localPart``.

    Raises:
        ShortenStrictError: If the namespace has no registered prefix.
    """
    namespace = get_namespace_part(uri)
    if namespace in namespaces:
        return create_shortened_predicate(namespaces[namespace], get_local_part(uri))
    raise ShortenStrictError(namespace)


def handle_vocab_uri_map(mappings: Mapping[str, str], uri: str) -> str:
    """Return the custom mapping for ``uri``, or its local part when unmapped."""
    if uri in mappings:
        return mappings[uri]
    return handle_vocab_uri_ignore(uri)


def resolve(
    uri: str,
    mappings: Mapping[str, str],
    namespaces: Mapping[str, str],
    strategy: HandleVocabUriStrategy,
) -> str:
    """
    Resolve a predicate or type URI to a property name or label.

    Args:
        uri: Full URI of the predicate or rdf:type object
        mappings: Custom mappings keyed by full URI (used by MAP)
        namespaces: Namespace -> prefix table (used by SHORTEN)
        strategy: Vocabulary handling strategy

    Returns:
        The graph-side name for ``uri``
    """
    uri = str(uri)
    strategy = HandleVocabUriStrategy(strategy)
    if strategy is HandleVocabUriStrategy.SHORTEN:
        return handle_vocab_uri_shorten(uri, namespaces)
    if strategy is HandleVocabUriStrategy.MAP:
        return handle_vocab_uri_map(mappings, uri)
    if strategy is HandleVocabUriStrategy.KEEP:
        return uri
    if strategy is HandleVocabUriStrategy.IGNORE:
        return handle_vocab_uri_ignore(uri)
    raise ValueError(f"Strategy {strategy} not defined.")
