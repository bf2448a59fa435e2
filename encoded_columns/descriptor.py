"""Per-column encoding descriptor built once when a model class is mapped."""

from __future__ import annotations

from dataclasses import dataclass

from encoded_columns.backends.base import EncoderBackend, supports_verify
from encoded_columns.errors import UnsupportedOperationError


@dataclass(frozen=True, slots=True)
class ColumnEncoding:
    """Bound encoder for one mapped attribute of one model class."""
    key: str
    backend: EncoderBackend
    check_method: str | None = None

    def __post_init__(self) -> None:
        if self.check_method and not supports_verify(self.backend):
            raise UnsupportedOperationError(
                f"Column {self.key!r} requests check method {self.check_method!r} "
                f"but backend {self.backend_name} cannot verify values"
            )

    @property
    def backend_name(self) -> str:
        return getattr(self.backend, "name", type(self.backend).__name__)

    @property
    def can_verify(self) -> bool:
        return supports_verify(self.backend)

    def encode(self, value: str | bytes) -> str:
        return self.backend.encode(value)

    def verify(self, candidate: str | bytes, stored: str) -> bool:
        if not self.can_verify:
            raise UnsupportedOperationError(f"Backend {self.backend_name} cannot verify values")
        return self.backend.verify(candidate, stored)
