"""Encoder backend contract shared by every built-in and third-party backend."""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from typing import Any, Protocol, runtime_checkable

from encoded_columns.errors import ConfigurationError


@runtime_checkable
class EncoderBackend(Protocol):
    """Turns plaintext into its stored form using construction-time settings.

    Backends usually also carry a ``name`` class attribute used in messages.
    """

    def encode(self, plaintext: str | bytes) -> str:
        ...


@runtime_checkable
class VerifyingBackend(EncoderBackend, Protocol):
    """A backend that can check a candidate against a stored value."""

    def verify(self, candidate: str | bytes, stored: str) -> bool:
        ...


def supports_verify(backend: EncoderBackend) -> bool:
    return isinstance(backend, VerifyingBackend)


def to_bytes(value: str | bytes) -> bytes:
    """UTF-8 encode ``str`` input; reject anything that is not text or bytes."""
    if isinstance(value, bytes):
        return value
    if isinstance(value, str):
        return value.encode("utf-8")
    raise TypeError(f"Expected str or bytes to encode, got {type(value).__name__}")


def check_config(
    backend: str,
    config: Mapping[str, Any],
    *,
    allowed: Iterable[str],
    required: Iterable[str] = (),
) -> None:
    """Reject unknown and missing ``encode_args`` keys for ``backend``."""
    allowed = set(allowed)
    # encode_args come from user code, so keys may be of any hashable type
    unknown = sorted(set(config) - allowed, key=repr)
    if unknown:
        raise ConfigurationError(
            f"{backend}: unknown encode_args {', '.join(map(repr, unknown))} "
            f"(accepted: {', '.join(sorted(allowed))})"
        )
    missing = [key for key in required if config.get(key) in (None, "")]
    if missing:
        raise ConfigurationError(
            f"{backend}: missing required encode_args {', '.join(map(repr, missing))}"
        )


def require_int(backend: str, key: str, value: Any, *, minimum: int, maximum: int | None = None) -> int:
    # bool is an int subclass but never a sensible length or cost
    if isinstance(value, bool) or not isinstance(value, int):
        raise ConfigurationError(f"{backend}: {key} must be an integer, got {value!r}")
    if value < minimum or (maximum is not None and value > maximum):
        bounds = f">= {minimum}" if maximum is None else f"between {minimum} and {maximum}"
        raise ConfigurationError(f"{backend}: {key} must be {bounds}, got {value}")
    return value
