"""Transparent hashing and encryption of SQLAlchemy model columns."""

from encoded_columns.backends import (
    BcryptBackend,
    DigestBackend,
    EncoderBackend,
    FernetBackend,
    RSABackend,
    VerifyingBackend,
)
from encoded_columns.db import (
    EncodedColumnsMixin,
    EncodedSession,
    EncodedSessionMixin,
    check_encoded,
    encoded_column,
    encoding_info,
    encodings_for,
    load_encoded,
    register_encoded_columns,
)
from encoded_columns.descriptor import ColumnEncoding
from encoded_columns.errors import (
    ConfigurationError,
    DuplicateBackendError,
    EncodedColumnError,
    MissingValueError,
    RegistryFrozenError,
    UnknownBackendError,
    UnsupportedOperationError,
)
from encoded_columns.registry import BackendRegistry, default_registry, register_backend

__version__ = "0.1.0"

__all__ = [
    "BackendRegistry",
    "BcryptBackend",
    "ColumnEncoding",
    "ConfigurationError",
    "DigestBackend",
    "DuplicateBackendError",
    "EncodedColumnError",
    "EncodedColumnsMixin",
    "EncodedSession",
    "EncodedSessionMixin",
    "EncoderBackend",
    "FernetBackend",
    "MissingValueError",
    "RSABackend",
    "RegistryFrozenError",
    "UnknownBackendError",
    "UnsupportedOperationError",
    "VerifyingBackend",
    "check_encoded",
    "default_registry",
    "encoded_column",
    "encoding_info",
    "encodings_for",
    "load_encoded",
    "register_backend",
    "register_encoded_columns",
]
