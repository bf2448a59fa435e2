"""Tests for ColumnEncoding (descriptor.py)."""

import dataclasses

import pytest

from encoded_columns import ColumnEncoding, DigestBackend, UnsupportedOperationError
from encoded_columns.backends import supports_verify


class EncodeOnly:
    def encode(self, plaintext):
        return "x" + plaintext


class WithVerify(EncodeOnly):
    def verify(self, candidate, stored):
        return self.encode(candidate) == stored


def test_encode_and_verify_delegate():
    encoding = ColumnEncoding("password", DigestBackend(algorithm="SHA-1", format="hex"))
    stored = encoding.encode("hunter2")
    assert encoding.verify("hunter2", stored)
    assert not encoding.verify("hunter3", stored)
    assert encoding.can_verify


def test_check_method_requires_verify():
    with pytest.raises(UnsupportedOperationError, match="EncodeOnly cannot verify"):
        ColumnEncoding("code", EncodeOnly(), check_method="check_code")


def test_encode_only_backend_without_check_method():
    encoding = ColumnEncoding("code", EncodeOnly())
    assert encoding.encode("a") == "xa"
    assert not encoding.can_verify
    with pytest.raises(UnsupportedOperationError):
        encoding.verify("a", "xa")


def test_third_party_backend_without_name():
    assert supports_verify(WithVerify())
    encoding = ColumnEncoding("code", WithVerify(), check_method="check_code")
    assert encoding.verify("a", "xa")
    assert encoding.backend_name == "WithVerify"


def test_is_immutable():
    encoding = ColumnEncoding("code", EncodeOnly())
    with pytest.raises(dataclasses.FrozenInstanceError):
        encoding.key = "other"
