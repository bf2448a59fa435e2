"""Backend registry: identifier → factory that builds a configured backend.

The process-wide ``default_registry`` holds the built-in backends under a
canonical dotted name and a short alias::

    encoded_columns.digest   Digest
    encoded_columns.bcrypt   Bcrypt
    encoded_columns.fernet   Fernet
    encoded_columns.rsa      RSA

Third-party backends register during start-up, before the models that use
them are imported.  ``freeze()`` closes registration; after that the registry
is read-only and shared across threads without locking.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable, Iterable, Mapping
from typing import Any

from encoded_columns.backends import BcryptBackend, DigestBackend, FernetBackend, RSABackend
from encoded_columns.backends.base import EncoderBackend
from encoded_columns.errors import (
    ConfigurationError,
    DuplicateBackendError,
    RegistryFrozenError,
    UnknownBackendError,
)

logger = logging.getLogger(__name__)

BackendFactory = Callable[[Mapping[str, Any]], EncoderBackend]


class BackendRegistry:
    """Maps canonical identifiers and aliases to backend factories."""

    def __init__(self) -> None:
        self._factories: dict[str, BackendFactory] = {}
        self._aliases: dict[str, str] = {}
        self._lock = threading.Lock()
        self._frozen = False

    @property
    def frozen(self) -> bool:
        return self._frozen

    def freeze(self) -> None:
        """Stop accepting registrations.  Calling it again is a no-op."""
        with self._lock:
            if not self._frozen:
                self._frozen = True
                logger.debug("Backend registry frozen with %d backend(s)", len(self._factories))

    def _check_writable(self, identifier: str) -> None:
        if self._frozen:
            raise RegistryFrozenError(f"Cannot register {identifier!r}: backend registry is frozen")
        if identifier in self._factories or identifier in self._aliases:
            raise DuplicateBackendError(identifier)

    def register(
        self,
        identifier: str,
        factory: BackendFactory,
        *,
        aliases: Iterable[str] = (),
    ) -> None:
        """Add a backend.  Existing names are never overwritten."""
        if not identifier or not isinstance(identifier, str):
            raise ConfigurationError(f"Backend identifier must be a non-empty string, got {identifier!r}")
        if not callable(factory):
            raise ConfigurationError(f"Factory for {identifier!r} is not callable")
        aliases = list(aliases)

        with self._lock:
            self._check_writable(identifier)
            for alias in aliases:
                self._check_writable(alias)
            if len(set(aliases)) != len(aliases) or identifier in aliases:
                raise DuplicateBackendError(identifier)

            self._factories[identifier] = factory
            for alias in aliases:
                self._aliases[alias] = identifier

        logger.debug("Registered encoder backend %s", identifier, extra={"backend": identifier})

    def alias(self, alias: str, identifier: str) -> None:
        """Make ``alias`` resolve to the already registered ``identifier``."""
        with self._lock:
            self._check_writable(alias)
            canonical = self._aliases.get(identifier, identifier)
            if canonical not in self._factories:
                raise UnknownBackendError(identifier, list(self._factories))
            self._aliases[alias] = canonical

    def canonical(self, identifier: str) -> str:
        """Return the canonical name for ``identifier`` or its alias."""
        canonical = self._aliases.get(identifier, identifier)
        if canonical not in self._factories:
            raise UnknownBackendError(identifier, list(self._factories))
        return canonical

    def resolve(self, identifier: str, raw_config: Mapping[str, Any] | None = None) -> EncoderBackend:
        """Build a backend bound to ``raw_config``.

        ``ConfigurationError`` from the factory propagates unchanged.
        """
        factory = self._factories[self.canonical(identifier)]
        if raw_config is None:
            raw_config = {}
        if not isinstance(raw_config, Mapping):
            raise ConfigurationError(
                f"encode_args for {identifier!r} must be a mapping, got {type(raw_config).__name__}"
            )
        return factory(dict(raw_config))

    def identifiers(self) -> list[str]:
        return sorted(self._factories)

    def __contains__(self, identifier: object) -> bool:
        return identifier in self._factories or identifier in self._aliases


def build_default_registry() -> BackendRegistry:
    """A registry holding the built-in backends, still open for registration."""
    registry = BackendRegistry()
    registry.register(DigestBackend.name, DigestBackend.from_config, aliases=("Digest",))
    registry.register(BcryptBackend.name, BcryptBackend.from_config, aliases=("Bcrypt",))
    registry.register(FernetBackend.name, FernetBackend.from_config, aliases=("Fernet",))
    registry.register(RSABackend.name, RSABackend.from_config, aliases=("RSA",))
    return registry


default_registry = build_default_registry()


def register_backend(identifier: str, factory: BackendFactory, *, aliases: Iterable[str] = ()) -> None:
    """Register a third-party backend on the process-wide registry."""
    default_registry.register(identifier, factory, aliases=aliases)
