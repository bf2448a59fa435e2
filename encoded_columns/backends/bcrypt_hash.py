"""Adaptive-cost password hashing with bcrypt.

The output is bcrypt's own self-describing string (``$2b$<cost>$<salt><hash>``,
60 characters), so the cost and salt used for a value travel with it and
``verify`` needs no configuration beyond the null-byte policy.
"""

from __future__ import annotations

import base64
import hashlib
from collections.abc import Mapping
from typing import Any

import bcrypt

from encoded_columns.backends.base import check_config, require_int, to_bytes
from encoded_columns.config import get_settings
from encoded_columns.errors import ConfigurationError

ENCODED_LENGTH = 60

# "reject": plaintext goes to bcrypt as-is, which refuses NUL bytes; input
#           past 72 bytes is truncated or refused depending on the release.
# "prehash": plaintext is reduced to base64(sha256(plaintext)) first.
NULL_BYTE_POLICIES = ("reject", "prehash")


class BcryptBackend:
    name = "encoded_columns.bcrypt"
    encoded_length = ENCODED_LENGTH

    def __init__(self, cost: int | None = None, null_bytes: str = "reject"):
        if cost is None:
            cost = get_settings().default_bcrypt_cost
        self.cost = require_int("Bcrypt", "cost", cost, minimum=4, maximum=31)
        if null_bytes not in NULL_BYTE_POLICIES:
            raise ConfigurationError(
                f"Bcrypt: null_bytes must be one of {NULL_BYTE_POLICIES}, got {null_bytes!r}"
            )
        self.null_bytes = null_bytes

    @classmethod
    def from_config(cls, config: Mapping[str, Any]) -> BcryptBackend:
        check_config("Bcrypt", config, allowed=("cost", "null_bytes"))
        return cls(**config)

    def _key(self, plaintext: str | bytes) -> bytes:
        key = to_bytes(plaintext)
        if self.null_bytes == "prehash":
            return base64.b64encode(hashlib.sha256(key).digest())
        return key

    def encode(self, plaintext: str | bytes) -> str:
        salt = bcrypt.gensalt(rounds=self.cost)
        return bcrypt.hashpw(self._key(plaintext), salt).decode("ascii")

    def verify(self, candidate: str | bytes, stored: str) -> bool:
        if isinstance(stored, str):
            stored = stored.encode("utf-8")
        try:
            return bcrypt.checkpw(self._key(candidate), stored)
        except ValueError:
            # Malformed stored hash, or a candidate bcrypt could never have hashed
            return False

    def __repr__(self) -> str:
        return f"BcryptBackend(cost={self.cost}, null_bytes={self.null_bytes!r})"
