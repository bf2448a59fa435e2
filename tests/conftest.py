import pytest
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import rsa
from sqlalchemy import create_engine
from sqlalchemy.orm import DeclarativeBase

from encoded_columns import EncodedColumnsMixin, EncodedSession
from encoded_columns.config import get_settings


@pytest.fixture(autouse=True)
def _reset_settings_cache():
    """Settings are cached process-wide; start every test from the environment."""
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture()
def Base():
    """A fresh declarative base so models never leak between tests."""

    class Base(EncodedColumnsMixin, DeclarativeBase):
        pass

    return Base


@pytest.fixture()
def make_session():
    """Create the tables of a base on in-memory SQLite and open a session."""
    engines = []
    sessions = []

    def _make(base) -> EncodedSession:
        engine = create_engine("sqlite://")
        base.metadata.create_all(engine)
        session = EncodedSession(engine)
        engines.append(engine)
        sessions.append(session)
        return session

    yield _make

    for session in sessions:
        session.close()
    for engine in engines:
        engine.dispose()


@pytest.fixture(scope="session")
def rsa_keypair():
    """(public_pem, private_pem) for a 2048-bit RSA key."""
    key = rsa.generate_private_key(public_exponent=65537, key_size=2048)
    private_pem = key.private_bytes(
        serialization.Encoding.PEM,
        serialization.PrivateFormat.PKCS8,
        serialization.NoEncryption(),
    ).decode()
    public_pem = key.public_key().public_bytes(
        serialization.Encoding.PEM,
        serialization.PublicFormat.SubjectPublicKeyInfo,
    ).decode()
    return public_pem, private_pem
