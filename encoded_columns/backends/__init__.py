from encoded_columns.backends.base import EncoderBackend, VerifyingBackend, supports_verify
from encoded_columns.backends.bcrypt_hash import BcryptBackend
from encoded_columns.backends.crypto import FernetBackend, RSABackend
from encoded_columns.backends.digest import DigestBackend

__all__ = [
    "BcryptBackend",
    "DigestBackend",
    "EncoderBackend",
    "FernetBackend",
    "RSABackend",
    "VerifyingBackend",
    "supports_verify",
]
