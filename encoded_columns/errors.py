"""Error taxonomy for encoded columns.

Configuration problems are raised while a model class is being defined so a
misconfigured column can never silently persist plaintext.  Call-time errors
(``MissingValueError``) surface from the generated check methods.
"""

from __future__ import annotations


class EncodedColumnError(Exception):
    """Base class for every error raised by this package."""


class ConfigurationError(EncodedColumnError):
    """Invalid or incomplete encoding options for a column or backend."""


class UnknownBackendError(ConfigurationError):
    """``encode_class`` names a backend that is not registered."""

    def __init__(self, identifier: str, known: list[str] | None = None):
        self.identifier = identifier
        self.known = sorted(known or [])
        message = f"Unknown encoder backend {identifier!r}"
        if self.known:
            message += f" (registered: {', '.join(self.known)})"
        super().__init__(message)


class DuplicateBackendError(ConfigurationError):
    """A backend identifier or alias is already registered."""

    def __init__(self, identifier: str):
        self.identifier = identifier
        super().__init__(f"Encoder backend {identifier!r} is already registered")


class RegistryFrozenError(ConfigurationError):
    """The backend registry no longer accepts registrations."""


class UnsupportedOperationError(EncodedColumnError):
    """The backend cannot perform the requested operation (e.g. verify)."""


class MissingValueError(EncodedColumnError):
    """A check method was called while the column holds no value."""

    def __init__(self, model: str, key: str):
        self.model = model
        self.key = key
        super().__init__(f"{model}.{key} has no stored value to check against")
