"""HMAC-SHA1 payload signature verification."""

from __future__ import annotations

import hashlib
import hmac

from hookfire.errors import SignatureError

SIGNATURE_PREFIX = "sha1="


def compute_payload_signature(payload: bytes, secret: str) -> str:
    """Return the hex HMAC-SHA1 of ``payload`` keyed with ``secret``."""
    return hmac.new(secret.encode("utf-8"), payload, hashlib.sha1).hexdigest()


def check_payload_signature(payload: bytes, secret: str, signature: str) -> str:
    """Verify ``signature`` against the HMAC-SHA1 of ``payload``.

    An optional ``sha1=`` prefix on the provided signature is ignored, so the
    raw value of a GitHub style ``X-Hub-Signature`` header can be passed in.

    Args:
        payload: Raw request body
        secret: Shared secret
        signature: Signature supplied with the request

    Returns:
        The computed hex signature

    Raises:
        SignatureError: If the signatures differ; carries the computed value
    """
    if signature.startswith(SIGNATURE_PREFIX):
        signature = signature[len(SIGNATURE_PREFIX) :]

    expected = compute_payload_signature(payload, secret)

    if not hmac.compare_digest(signature.encode("utf-8"), expected.encode("ascii")):
        raise SignatureError(expected)
    return expected
