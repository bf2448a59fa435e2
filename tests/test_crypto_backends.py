"""Tests for the encrypting backends (backends/crypto.py).

Covers:
- Fernet encode/decrypt round trip, key from encode_args or settings
- Missing and invalid Fernet keys fail at construction
- RSA-OAEP encode/decrypt with and without a private key
- RSA key validation (bad PEM, non-RSA key, mismatched pair, password rules)
- Neither backend offers verify()
"""

import pytest
from cryptography.fernet import Fernet, InvalidToken
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import ec, rsa

from encoded_columns.backends import supports_verify
from encoded_columns.backends.crypto import FernetBackend, RSABackend
from encoded_columns.errors import ConfigurationError, UnsupportedOperationError


@pytest.fixture()
def fernet_key():
    return Fernet.generate_key().decode()


# ─── Fernet ───────────────────────────────────────────────────────────────────


class TestFernetBackend:
    def test_round_trip(self, fernet_key):
        backend = FernetBackend(key=fernet_key)
        encoded = backend.encode("Jane Doe")
        assert encoded != "Jane Doe"
        assert backend.decrypt(encoded) == "Jane Doe"

    def test_encryptions_differ(self, fernet_key):
        backend = FernetBackend(key=fernet_key)
        assert backend.encode("same") != backend.encode("same")

    def test_key_from_settings(self, monkeypatch, fernet_key):
        monkeypatch.setenv("ENCODED_COLUMNS_FIELD_ENCRYPTION_KEY", fernet_key)
        backend = FernetBackend.from_config({})
        assert Fernet(fernet_key).decrypt(backend.encode("x").encode()) == b"x"

    def test_missing_key(self, monkeypatch):
        monkeypatch.delenv("ENCODED_COLUMNS_FIELD_ENCRYPTION_KEY", raising=False)
        with pytest.raises(ConfigurationError, match="no key"):
            FernetBackend()

    def test_invalid_key(self):
        with pytest.raises(ConfigurationError, match="invalid key"):
            FernetBackend(key="not-a-valid-fernet-key")

    def test_decrypt_with_other_key_raises(self, fernet_key):
        encoded = FernetBackend(key=fernet_key).encode("x")
        other = FernetBackend(key=Fernet.generate_key())
        with pytest.raises(InvalidToken):
            other.decrypt(encoded)

    def test_cannot_verify(self, fernet_key):
        assert supports_verify(FernetBackend(key=fernet_key)) is False

    def test_repr_hides_key(self, fernet_key):
        assert fernet_key not in repr(FernetBackend(key=fernet_key))


# ─── RSA ──────────────────────────────────────────────────────────────────────


class TestRSABackend:
    def test_round_trip_with_private_key(self, rsa_keypair):
        public_pem, private_pem = rsa_keypair
        backend = RSABackend.from_config({"public_key": public_pem, "private_key": private_pem})
        encoded = backend.encode("4111 1111 1111 1111")
        assert backend.decrypt(encoded) == "4111 1111 1111 1111"
        assert backend.key_size == 2048

    def test_encryption_is_randomized(self, rsa_keypair):
        backend = RSABackend(public_key=rsa_keypair[0])
        assert backend.encode("same") != backend.encode("same")

    def test_public_only_cannot_decrypt(self, rsa_keypair):
        backend = RSABackend(public_key=rsa_keypair[0])
        with pytest.raises(UnsupportedOperationError):
            backend.decrypt(backend.encode("x"))

    def test_cannot_verify(self, rsa_keypair):
        assert supports_verify(RSABackend(public_key=rsa_keypair[0])) is False

    def test_public_key_required(self):
        with pytest.raises(ConfigurationError, match="public_key"):
            RSABackend.from_config({})

    def test_bad_pem(self):
        with pytest.raises(ConfigurationError, match="could not load public_key"):
            RSABackend(public_key="-----BEGIN PUBLIC KEY-----\nnope\n-----END PUBLIC KEY-----\n")

    def test_non_rsa_key(self):
        ec_public = ec.generate_private_key(ec.SECP256R1()).public_key().public_bytes(
            serialization.Encoding.PEM,
            serialization.PublicFormat.SubjectPublicKeyInfo,
        )
        with pytest.raises(ConfigurationError, match="not an RSA key"):
            RSABackend(public_key=ec_public)

    def test_mismatched_private_key(self, rsa_keypair):
        other = rsa.generate_private_key(public_exponent=65537, key_size=2048)
        other_pem = other.private_bytes(
            serialization.Encoding.PEM,
            serialization.PrivateFormat.PKCS8,
            serialization.NoEncryption(),
        )
        with pytest.raises(ConfigurationError, match="does not match"):
            RSABackend(public_key=rsa_keypair[0], private_key=other_pem)

    def test_password_without_private_key(self, rsa_keypair):
        with pytest.raises(ConfigurationError, match="private_key_password"):
            RSABackend(public_key=rsa_keypair[0], private_key_password="pw")

    def test_encrypted_private_key(self):
        key = rsa.generate_private_key(public_exponent=65537, key_size=2048)
        private_pem = key.private_bytes(
            serialization.Encoding.PEM,
            serialization.PrivateFormat.PKCS8,
            serialization.BestAvailableEncryption(b"pw"),
        )
        public_pem = key.public_key().public_bytes(
            serialization.Encoding.PEM,
            serialization.PublicFormat.SubjectPublicKeyInfo,
        )
        backend = RSABackend(public_key=public_pem, private_key=private_pem, private_key_password="pw")
        assert backend.decrypt(backend.encode("secret")) == "secret"
