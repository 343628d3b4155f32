"""Tests for payload signature verification."""

import hashlib
import hmac

import pytest

from hookfire.errors import SignatureError
from hookfire.signature import check_payload_signature, compute_payload_signature


@pytest.fixture
def expected():
    return hmac.new(b"s", b"hello", hashlib.sha1).hexdigest()


class TestCheckPayloadSignature:
    """Test HMAC-SHA1 verification."""

    def test_valid_with_prefix(self, expected):
        assert check_payload_signature(b"hello", "s", "sha1=" + expected) == expected

    def test_valid_without_prefix(self, expected):
        assert check_payload_signature(b"hello", "s", expected) == expected

    def test_invalid_carries_computed_signature(self, expected):
        with pytest.raises(SignatureError) as exc_info:
            check_payload_signature(b"hello", "s", "sha1=deadbeef")
        assert exc_info.value.signature == expected
        assert expected in str(exc_info.value)

    def test_wrong_secret(self, expected):
        with pytest.raises(SignatureError):
            check_payload_signature(b"hello", "other", "sha1=" + expected)

    def test_tampered_payload(self, expected):
        with pytest.raises(SignatureError):
            check_payload_signature(b"hello!", "s", expected)

    def test_empty_signature(self):
        with pytest.raises(SignatureError):
            check_payload_signature(b"hello", "s", "")

    def test_uppercase_hex_rejected(self, expected):
        """Comparison is exact on the hex digest."""
        with pytest.raises(SignatureError):
            check_payload_signature(b"hello", "s", expected.upper())

    def test_non_ascii_signature(self):
        with pytest.raises(SignatureError):
            check_payload_signature(b"hello", "s", "sha1=ünicode")

    def test_uses_constant_time_compare(self, expected, monkeypatch):
        calls = []
        real = hmac.compare_digest

        def spy(a, b):
            calls.append((a, b))
            return real(a, b)

        monkeypatch.setattr(hmac, "compare_digest", spy)
        check_payload_signature(b"hello", "s", expected)
        assert len(calls) == 1


def test_compute_payload_signature(expected):
    assert compute_payload_signature(b"hello", "s") == expected
