"""Encrypting backends: Fernet (symmetric) and RSA-OAEP (asymmetric).

Unlike digests these produce reversible ciphertext, so they offer
``decrypt`` for application reads but no ``verify``.  Declaring a check
method on a column that uses one of them fails when the model is defined.

Generate a Fernet key with:

    python -c "from cryptography.fernet import Fernet; print(Fernet.generate_key().decode())"
"""

from __future__ import annotations

import base64
import logging
from collections.abc import Mapping
from typing import Any

from cryptography.fernet import Fernet
from cryptography.hazmat.primitives import hashes, serialization
from cryptography.hazmat.primitives.asymmetric import padding, rsa

from encoded_columns.backends.base import check_config, to_bytes
from encoded_columns.config import get_settings
from encoded_columns.errors import ConfigurationError, UnsupportedOperationError

logger = logging.getLogger(__name__)


# ─── Fernet ───────────────────────────────────────────────────────────────────


class FernetBackend:
    """AES-128-CBC with HMAC-SHA256; ciphertext is urlsafe base64 text."""

    name = "encoded_columns.fernet"

    def __init__(self, key: str | bytes | None = None):
        if not key:
            key = get_settings().field_encryption_key
        if not key:
            raise ConfigurationError(
                "Fernet: no key in encode_args and ENCODED_COLUMNS_FIELD_ENCRYPTION_KEY is not set"
            )
        try:
            self._fernet = Fernet(key.encode() if isinstance(key, str) else key)
        except (ValueError, TypeError) as exc:
            raise ConfigurationError(f"Fernet: invalid key: {exc}") from exc

    @classmethod
    def from_config(cls, config: Mapping[str, Any]) -> FernetBackend:
        check_config("Fernet", config, allowed=("key",))
        return cls(**config)

    def encode(self, plaintext: str | bytes) -> str:
        return self._fernet.encrypt(to_bytes(plaintext)).decode("utf-8")

    def decrypt(self, stored: str) -> str:
        """Return the plaintext; ``cryptography.fernet.InvalidToken`` propagates."""
        return self._fernet.decrypt(stored.encode("utf-8")).decode("utf-8")

    def __repr__(self) -> str:
        return "FernetBackend(key=***)"


# ─── RSA ──────────────────────────────────────────────────────────────────────


def _oaep() -> padding.OAEP:
    return padding.OAEP(
        mgf=padding.MGF1(algorithm=hashes.SHA256()),
        algorithm=hashes.SHA256(),
        label=None,
    )


class RSABackend:
    """RSA-OAEP(SHA-256) encryption to a public key; base64 ciphertext.

    Plaintext is limited to ``key_size / 8 - 66`` bytes; longer input raises
    ``ValueError`` from ``cryptography``.
    """

    name = "encoded_columns.rsa"

    def __init__(
        self,
        public_key: str | bytes,
        private_key: str | bytes | None = None,
        private_key_password: str | bytes | None = None,
    ):
        if private_key_password is not None and private_key is None:
            raise ConfigurationError("RSA: private_key_password given without private_key")

        try:
            loaded = serialization.load_pem_public_key(to_bytes(public_key))
        except (ValueError, TypeError) as exc:
            raise ConfigurationError(f"RSA: could not load public_key: {exc}") from exc
        if not isinstance(loaded, rsa.RSAPublicKey):
            raise ConfigurationError(f"RSA: public_key is not an RSA key ({type(loaded).__name__})")
        self._public_key = loaded

        self._private_key = None
        if private_key is not None:
            password = to_bytes(private_key_password) if private_key_password is not None else None
            try:
                secret = serialization.load_pem_private_key(to_bytes(private_key), password=password)
            except (ValueError, TypeError) as exc:
                raise ConfigurationError(f"RSA: could not load private_key: {exc}") from exc
            if not isinstance(secret, rsa.RSAPrivateKey):
                raise ConfigurationError("RSA: private_key is not an RSA key")
            if secret.public_key().public_numbers() != loaded.public_numbers():
                raise ConfigurationError("RSA: private_key does not match public_key")
            self._private_key = secret

        logger.debug(
            "RSA backend ready (%d-bit, decrypt %s)",
            loaded.key_size,
            "enabled" if self._private_key else "disabled",
        )

    @classmethod
    def from_config(cls, config: Mapping[str, Any]) -> RSABackend:
        check_config(
            "RSA",
            config,
            allowed=("public_key", "private_key", "private_key_password"),
            required=("public_key",),
        )
        return cls(**config)

    @property
    def key_size(self) -> int:
        return self._public_key.key_size

    def encode(self, plaintext: str | bytes) -> str:
        ciphertext = self._public_key.encrypt(to_bytes(plaintext), _oaep())
        return base64.b64encode(ciphertext).decode("ascii")

    def decrypt(self, stored: str) -> str:
        if self._private_key is None:
            raise UnsupportedOperationError("RSA: decrypt requires private_key in encode_args")
        plaintext = self._private_key.decrypt(base64.b64decode(stored), _oaep())
        return plaintext.decode("utf-8")

    def __repr__(self) -> str:
        return f"RSABackend(key_size={self.key_size}, decrypt={self._private_key is not None})"
