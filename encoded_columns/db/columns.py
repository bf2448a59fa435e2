"""Column options that switch encoding on for a mapped column.

Options live in SQLAlchemy's ``info`` dictionary so any ``Column`` or
``mapped_column`` can carry them::

    password = mapped_column(
        String(60),
        info={
            "encode_column": True,
            "encode_class": "Bcrypt",
            "encode_args": {"cost": 12},
            "encode_check_method": "check_password",
        },
    )

``encoded_column()`` builds the same thing with keyword arguments.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

from sqlalchemy.orm import mapped_column

from encoded_columns.errors import ConfigurationError

ENCODE_COLUMN = "encode_column"
ENCODE_CLASS = "encode_class"
ENCODE_ARGS = "encode_args"
ENCODE_CHECK_METHOD = "encode_check_method"
OPTION_KEYS = (ENCODE_COLUMN, ENCODE_CLASS, ENCODE_ARGS, ENCODE_CHECK_METHOD)


@dataclass(frozen=True, slots=True)
class EncodingOptions:
    """Validated encoding options read from a column's ``info``."""
    encode_class: str
    encode_args: Mapping[str, Any] = field(default_factory=dict)
    check_method: str | None = None


def read_options(info: Mapping[str, Any], *, column: str = "?") -> EncodingOptions | None:
    """Return the column's encoding options, or None when encoding is off."""
    if not info.get(ENCODE_COLUMN):
        return None

    unknown = sorted(k for k in info if isinstance(k, str) and k.startswith("encode_") and k not in OPTION_KEYS)
    if unknown:
        raise ConfigurationError(f"Column {column!r}: unknown encoding options {', '.join(unknown)}")

    encode_class = info.get(ENCODE_CLASS)
    if not encode_class or not isinstance(encode_class, str):
        raise ConfigurationError(f"Column {column!r}: encode_class must be a backend identifier string")

    encode_args = info.get(ENCODE_ARGS)
    if encode_args is None:
        encode_args = {}
    if not isinstance(encode_args, Mapping):
        raise ConfigurationError(f"Column {column!r}: encode_args must be a mapping")

    check_method = info.get(ENCODE_CHECK_METHOD) or None
    if check_method is not None and (not isinstance(check_method, str) or not check_method.isidentifier()):
        raise ConfigurationError(
            f"Column {column!r}: encode_check_method must be a valid method name, got {check_method!r}"
        )

    return EncodingOptions(encode_class, dict(encode_args), check_method)


def encoding_info(
    encode_class: str,
    encode_args: Mapping[str, Any] | None = None,
    check_method: str | None = None,
) -> dict[str, Any]:
    info: dict[str, Any] = {
        ENCODE_COLUMN: True,
        ENCODE_CLASS: encode_class,
        ENCODE_ARGS: dict(encode_args or {}),
    }
    if check_method:
        info[ENCODE_CHECK_METHOD] = check_method
    return info


def encoded_column(
    *args: Any,
    encode_class: str,
    encode_args: Mapping[str, Any] | None = None,
    encode_check_method: str | None = None,
    info: Mapping[str, Any] | None = None,
    **kwargs: Any,
):
    """``mapped_column`` with encoding options merged into ``info``."""
    merged = dict(info or {})
    merged.update(encoding_info(encode_class, encode_args, encode_check_method))
    return mapped_column(*args, info=merged, **kwargs)
