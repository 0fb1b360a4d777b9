"""
Configuration for the RDF graph loader.

Two layers:

- Environment-driven settings (pydantic-settings): connection parameters for
  each backend and the default import behaviour. Loaded once into the
  module-level ``settings`` object.
- StoreConfig: the per-store vocabulary configuration (prefixes, custom
  mappings, multivalued predicates, batching, strategies, credentials).
  Validation happens as values are registered, so mistakes surface before
  any triple is processed.
"""

from collections.abc import Iterable, Mapping
from typing import Any, Literal

from pydantic import Field, SecretStr, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from .exceptions import (
    NEO4J_AUTH_REQUIRED_FIELDS,
    DuplicatePrefixError,
    EmptyAuthenticationValueError,
    MissingAuthenticationError,
    PrefixNotFoundError,
    WrongAuthenticationError,
)
from .models.strategies import (
    DEFAULT_CREATED_AT_FIELD,
    DEFAULT_PREFIXES,
    DEFAULT_UPDATED_AT_FIELD,
    HandleMultivalStrategy,
    HandleVocabUriStrategy,
)

DEFAULT_BATCH_SIZE = 5000


def _coerce_multival_strategy(v: Any) -> Any:
    """Accept ``"ARRAY"`` / ``"overwrite"`` / ``"2"`` as well as the enum values."""
    if not isinstance(v, str):
        return v
    v = v.strip()
    if v.isdigit():
        return int(v)
    try:
        return HandleMultivalStrategy[v.upper()]
    except KeyError:
        raise ValueError(f"Unknown multivalue strategy: {v!r}") from None


def _coerce_vocab_strategy(v: Any) -> Any:
    if isinstance(v, str):
        return v.strip().upper()
    return v


# ---------------------------------------------------------------------------
# Environment settings
# ---------------------------------------------------------------------------


class Neo4jSettings(BaseSettings):
    """Neo4j connection settings (``RDFGL_NEO4J_*``)."""

    model_config = SettingsConfigDict(env_prefix="RDFGL_NEO4J_", extra="ignore")

    uri: str | None = None
    database: str = "neo4j"
    user: str = "neo4j"
    password: SecretStr | None = None

    def auth_data(self) -> dict[str, str] | None:
        """Credentials in the StoreConfig auth dict format, or None without a URI."""
        if not self.uri:
            return None
        return {
            "uri": self.uri,
            "database": self.database,
            "user": self.user,
            "pwd": self.password.get_secret_value() if self.password else "",
        }


class FalkorDBSettings(BaseSettings):
    """FalkorDB connection settings (``RDFGL_FALKORDB_*``)."""

    model_config = SettingsConfigDict(env_prefix="RDFGL_FALKORDB_", extra="ignore")

    host: str = "localhost"
    port: int = Field(default=6379, ge=1, le=65535)
    password: SecretStr | None = None
    graph_name: str = "rdf_graph"
    max_connections: int = Field(default=16, ge=1, le=512)


class LoaderSettings(BaseSettings):
    """Default import behaviour (``RDFGL_LOADER_*``)."""

    model_config = SettingsConfigDict(env_prefix="RDFGL_LOADER_", extra="ignore")

    backend: Literal["neo4j", "falkordb"] = "neo4j"
    batching: bool = True
    batch_size: int = Field(default=DEFAULT_BATCH_SIZE, ge=1)
    handle_vocab_uri_strategy: HandleVocabUriStrategy = HandleVocabUriStrategy.SHORTEN
    handle_multival_strategy: HandleMultivalStrategy = HandleMultivalStrategy.OVERWRITE
    created_at_field: str = Field(default=DEFAULT_CREATED_AT_FIELD, min_length=1)
    updated_at_field: str = Field(default=DEFAULT_UPDATED_AT_FIELD, min_length=1)
    create_constraint: bool = True

    @field_validator("handle_multival_strategy", mode="before")
    @classmethod
    def _multival_by_name(cls, v: Any) -> Any:
        return _coerce_multival_strategy(v)

    @field_validator("handle_vocab_uri_strategy", mode="before")
    @classmethod
    def _vocab_upper(cls, v: Any) -> Any:
        return _coerce_vocab_strategy(v)


class Settings(BaseSettings):
    """All loader settings."""

    model_config = SettingsConfigDict(extra="ignore")

    neo4j: Neo4jSettings = Field(default_factory=Neo4jSettings)
    falkordb: FalkorDBSettings = Field(default_factory=FalkorDBSettings)
    loader: LoaderSettings = Field(default_factory=LoaderSettings)


settings = Settings()


# ---------------------------------------------------------------------------
# Store configuration
# ---------------------------------------------------------------------------


def check_auth_data(auth: Mapping[str, Any] | None) -> None:
    """
    Validate Neo4j credentials.

    Raises:
        MissingAuthenticationError: ``auth`` is None
        WrongAuthenticationError: A required key is missing
        EmptyAuthenticationValueError: A required key has an empty value
    """
    if auth is None:
        raise MissingAuthenticationError()
    for param_name in NEO4J_AUTH_REQUIRED_FIELDS:
        if param_name not in auth:
            raise WrongAuthenticationError(param_name)
        if not auth[param_name]:
            raise EmptyAuthenticationValueError(param_name)


class StoreConfig:
    """
    Vocabulary and batching configuration for a GraphStore.

    Custom mappings are given as ``(prefix_name, to_replace, new_value)`` and
    stored keyed by the full URI ``namespace + to_replace``. Multivalued
    properties are given as ``(prefix_name, prop_name)`` and stored as full
    predicate URIs.
    """

    def __init__(
        self,
        auth_data: Mapping[str, str] | None = None,
        custom_mappings: Iterable[tuple[str, str, str]] = (),
        custom_prefixes: Mapping[str, str] | None = None,
        batching: bool = True,
        batch_size: int = DEFAULT_BATCH_SIZE,
        handle_vocab_uri_strategy: HandleVocabUriStrategy = HandleVocabUriStrategy.SHORTEN,
        handle_multival_strategy: HandleMultivalStrategy = HandleMultivalStrategy.OVERWRITE,
        multival_props_names: Iterable[tuple[str, str]] = (),
        created_at_field: str = DEFAULT_CREATED_AT_FIELD,
        updated_at_field: str = DEFAULT_UPDATED_AT_FIELD,
    ):
        self.default_prefixes: dict[str, str] = dict(DEFAULT_PREFIXES)
        self.auth_data = dict(auth_data) if auth_data is not None else None
        self.custom_prefixes: dict[str, str] = {}
        for name, namespace in (custom_prefixes or {}).items():
            self.set_custom_prefix(name, namespace)
        self.custom_mappings: dict[str, str] = {}
        for prefix_name, to_replace, new_value in custom_mappings:
            self.set_custom_mapping(prefix_name, to_replace, new_value)
        self.batching = batching
        self.set_batch_size(batch_size)
        self.handle_vocab_uri_strategy = HandleVocabUriStrategy(_coerce_vocab_strategy(handle_vocab_uri_strategy))
        self.handle_multival_strategy = HandleMultivalStrategy(_coerce_multival_strategy(handle_multival_strategy))
        self.multival_props_names: list[str] = []
        for prefix_name, prop_name in multival_props_names:
            self.set_multival_prop_name(prefix_name, prop_name)
        self.created_at_field = created_at_field
        self.updated_at_field = updated_at_field

    @classmethod
    def from_settings(cls, config: Settings | None = None, **overrides: Any) -> "StoreConfig":
        """Build a StoreConfig from environment settings; keyword arguments win."""
        config = config or settings
        loader = config.loader
        kwargs: dict[str, Any] = {
            "batching": loader.batching,
            "batch_size": loader.batch_size,
            "handle_vocab_uri_strategy": loader.handle_vocab_uri_strategy,
            "handle_multival_strategy": loader.handle_multival_strategy,
            "created_at_field": loader.created_at_field,
            "updated_at_field": loader.updated_at_field,
        }
        if loader.backend == "neo4j":
            kwargs["auth_data"] = config.neo4j.auth_data()
        kwargs.update(overrides)
        return cls(**kwargs)

    # ── Strategies / batching ───────────────────────────────────────────

    def set_handle_vocab_uri_strategy(self, val: HandleVocabUriStrategy) -> None:
        self.handle_vocab_uri_strategy = HandleVocabUriStrategy(_coerce_vocab_strategy(val))

    def set_handle_multival_strategy(self, val: HandleMultivalStrategy) -> None:
        self.handle_multival_strategy = HandleMultivalStrategy(_coerce_multival_strategy(val))

    def set_batching(self, val: bool) -> None:
        self.batching = val

    def set_batch_size(self, val: int) -> None:
        if val < 1:
            raise ValueError(f"batch_size must be >= 1, got {val}")
        self.batch_size = val

    def set_auth_data(self, auth: Mapping[str, str]) -> None:
        self.auth_data = dict(auth)

    # ── Prefixes ────────────────────────────────────────────────────────

    def set_default_prefix(self, name: str, value: str) -> None:
        self.default_prefixes[name] = value

    def get_prefixes(self) -> dict[str, str]:
        """All prefixes; custom ones override defaults with the same name."""
        return {**self.default_prefixes, **self.custom_prefixes}

    def set_custom_prefix(self, name: str, value: str) -> None:
        """
        Register a custom prefix.

        Raises:
            DuplicatePrefixError: The namespace is already bound to another custom prefix
        """
        for existing_name, namespace in self.custom_prefixes.items():
            if namespace == value and existing_name != name:
                raise DuplicatePrefixError(value)
        self.custom_prefixes[name] = value

    def delete_custom_prefix(self, name: str) -> None:
        self.custom_prefixes.pop(name, None)

    # ── Custom mappings ─────────────────────────────────────────────────

    def _namespace_for(self, prefix_name: str) -> str:
        prefixes = self.get_prefixes()
        if prefix_name not in prefixes:
            raise PrefixNotFoundError(prefix_name)
        return prefixes[prefix_name]

    def set_custom_mapping(self, prefix_name: str, to_replace: str, new_value: str) -> None:
        """
        Map ``namespace(prefix_name) + to_replace`` to ``new_value`` (MAP strategy).

        Raises:
            PrefixNotFoundError: Unknown prefix
        """
        self.custom_mappings[self._namespace_for(prefix_name) + to_replace] = new_value

    def delete_custom_mapping(self, prefix_name: str, to_replace: str) -> None:
        """
        Raises:
            PrefixNotFoundError: Unknown prefix
        """
        self.custom_mappings.pop(self._namespace_for(prefix_name) + to_replace, None)

    # ── Multivalued properties ──────────────────────────────────────────

    def set_multival_prop_name(self, prefix_name: str, prop_name: str) -> None:
        """
        Treat ``namespace(prefix_name) + prop_name`` as multivalued.

        Raises:
            PrefixNotFoundError: Unknown prefix
        """
        predicate = self._namespace_for(prefix_name) + prop_name
        if predicate not in self.multival_props_names:
            self.multival_props_names.append(predicate)

    def get_config_dict(self) -> dict[str, Any]:
        """Snapshot of the configuration; the password is masked."""
        auth = None
        if self.auth_data is not None:
            auth = {**self.auth_data, "pwd": "***"} if "pwd" in self.auth_data else dict(self.auth_data)
        return {
            "auth_data": auth,
            "default_prefixes": dict(self.default_prefixes),
            "custom_prefixes": dict(self.custom_prefixes),
            "custom_mappings": dict(self.custom_mappings),
            "batching": self.batching,
            "batch_size": self.batch_size,
            "handle_vocab_uri_strategy": self.handle_vocab_uri_strategy,
            "handle_multival_strategy": self.handle_multival_strategy,
            "multival_props_names": list(self.multival_props_names),
            "created_at_field": self.created_at_field,
            "updated_at_field": self.updated_at_field,
        }

    def __repr__(self) -> str:
        return f"StoreConfig({self.get_config_dict()!r})"
