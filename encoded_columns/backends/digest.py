"""Plain and salted message digests (SHA family, MD5, BLAKE2, ...).

Encoded form::

    <digest of plaintext + salt, as hex or unpadded base64><salt>

With ``salt_length=0`` the output is the bare digest and encoding is
deterministic.  Otherwise ``salt_length`` random characters are drawn per
call and appended, so the stored value carries everything ``verify`` needs.
"""

from __future__ import annotations

import base64
import hashlib
import hmac
import secrets
import string
from collections.abc import Mapping
from typing import Any

from encoded_columns.backends.base import check_config, require_int, to_bytes
from encoded_columns.config import get_settings
from encoded_columns.errors import ConfigurationError

SALT_ALPHABET = string.ascii_letters + string.digits + "+/"
FORMATS = ("hex", "base64")


def normalize_algorithm(algorithm: str) -> str:
    """Map display names like ``SHA-256`` or ``SHA3-512`` to hashlib names."""
    name = algorithm.strip().lower().replace("/", "_")
    if name.startswith("sha3-"):
        return name.replace("-", "_")
    return name.replace("-", "")


class DigestBackend:
    name = "encoded_columns.digest"

    def __init__(self, algorithm: str | None = None, format: str | None = None, salt_length: int = 0):
        settings = get_settings()
        algorithm = algorithm or settings.default_digest_algorithm
        format = format or settings.default_digest_format

        if not isinstance(algorithm, str):
            raise ConfigurationError(f"Digest: algorithm must be a string, got {algorithm!r}")
        if not isinstance(format, str) or format.lower() not in FORMATS:
            raise ConfigurationError(f"Digest: format must be one of {FORMATS}, got {format!r}")

        self.algorithm = normalize_algorithm(algorithm)
        self.format = format.lower()
        self.salt_length = require_int("Digest", "salt_length", salt_length, minimum=0)

        try:
            probe = hashlib.new(self.algorithm)
        except (ValueError, TypeError) as exc:
            raise ConfigurationError(f"Digest: algorithm {algorithm!r} is not available: {exc}") from exc
        if probe.digest_size == 0:
            # shake_* need an output length per call
            raise ConfigurationError(f"Digest: variable-length algorithm {algorithm!r} is not supported")
        self.digest_size = probe.digest_size

    @classmethod
    def from_config(cls, config: Mapping[str, Any]) -> DigestBackend:
        check_config("Digest", config, allowed=("algorithm", "format", "salt_length"))
        return cls(**config)

    @property
    def digest_length(self) -> int:
        """Characters of formatted digest text, excluding any salt."""
        if self.format == "hex":
            return self.digest_size * 2
        return (self.digest_size * 4 + 2) // 3

    @property
    def encoded_length(self) -> int:
        """Length of every value ``encode`` returns; size the column with this."""
        return self.digest_length + self.salt_length

    def _digest(self, plaintext: bytes, salt: str) -> str:
        raw = hashlib.new(self.algorithm, plaintext + salt.encode("utf-8")).digest()
        if self.format == "hex":
            return raw.hex()
        return base64.b64encode(raw).decode("ascii").rstrip("=")

    def _new_salt(self) -> str:
        return "".join(secrets.choice(SALT_ALPHABET) for _ in range(self.salt_length))

    def encode(self, plaintext: str | bytes) -> str:
        salt = self._new_salt()
        return self._digest(to_bytes(plaintext), salt) + salt

    def verify(self, candidate: str | bytes, stored: str) -> bool:
        if isinstance(stored, bytes):
            stored = stored.decode("utf-8", "replace")
        if not isinstance(stored, str) or len(stored) != self.encoded_length:
            return False
        salt = stored[self.digest_length:]
        expected = self._digest(to_bytes(candidate), salt) + salt
        return hmac.compare_digest(expected.encode("utf-8"), stored.encode("utf-8"))

    def __repr__(self) -> str:
        return (
            f"DigestBackend(algorithm={self.algorithm!r}, format={self.format!r}, "
            f"salt_length={self.salt_length})"
        )
