"""Exceptions raised by the RDF graph loader.

Every error derives from GraphLoaderError so callers can catch the whole
family. Configuration errors fail fast at configuration time, strategy errors
fail while a triple is processed, and unsupported-operation errors mark known
functional gaps rather than bad input.
"""

NEO4J_AUTH_REQUIRED_FIELDS: tuple[str, ...] = ("uri", "database", "user", "pwd")


class GraphLoaderError(Exception):
    """Base class for all loader errors."""


# ── Configuration ───────────────────────────────────────────────────────


class PrefixNotFoundError(GraphLoaderError):
    """Raised when a mapping or multivalued property references an unknown prefix."""

    def __init__(self, prefix_name: str):
        self.prefix_name = prefix_name
        super().__init__(
            f"Prefix {prefix_name!r} not found inside the configuration. "
            "Please add it before adding any related custom mapping."
        )


class DuplicatePrefixError(GraphLoaderError):
    """Raised when a namespace is registered under a second prefix."""

    def __init__(self, namespace: str):
        self.namespace = namespace
        super().__init__(f"Namespace {namespace} already defined for another prefix.")


class MissingAuthenticationError(GraphLoaderError):
    """Raised when neither credentials nor a session were supplied."""

    def __init__(self):
        super().__init__(
            "Please define the authentication dict. These are the required keys: "
            + ", ".join(NEO4J_AUTH_REQUIRED_FIELDS)
        )


class WrongAuthenticationError(GraphLoaderError):
    """Raised when a required key is missing from the authentication data."""

    def __init__(self, param_name: str):
        self.param_name = param_name
        super().__init__(
            f"Missing {param_name} key inside the authentication definition. "
            "Remember that it should contain the following keys: "
            f"[{', '.join(NEO4J_AUTH_REQUIRED_FIELDS)}]"
        )


class EmptyAuthenticationValueError(GraphLoaderError):
    """Raised when a required authentication key is present but empty."""

    def __init__(self, param_name: str):
        self.param_name = param_name
        super().__init__(f"The key {param_name} is defined in the authentication dict but the value is empty.")


class StoreConfigurationError(GraphLoaderError):
    """Raised for contradictory store construction arguments."""


# ── Triple processing ───────────────────────────────────────────────────


class ShortenStrictError(GraphLoaderError):
    """Raised by the SHORTEN strategy when a namespace has no registered prefix."""

    def __init__(self, namespace: str):
        self.namespace = namespace
        super().__init__(
            f"Namespace {namespace!r} not found inside the configuration. "
            "Please add it if you want to use the SHORTEN mode."
        )


class UnsupportedOperationError(GraphLoaderError, NotImplementedError):
    """Raised for operations the loader deliberately does not provide."""


# ── Store lifecycle / transport ─────────────────────────────────────────


class StoreClosedError(GraphLoaderError, RuntimeError):
    """Raised when the store is used before open() or after close()."""

    def __init__(self):
        super().__init__("The Store must be open.")


class CypherMultipleTypesMultiValueError(GraphLoaderError):
    """Raised when a multivalued property mixes value types."""

    def __init__(self):
        super().__init__("Values of a multivalued property must have the same datatype.")
