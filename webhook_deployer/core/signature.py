"""GitHub-style webhook signature verification (X-Hub-Signature-256)."""

import hashlib
import hmac

from pydantic import SecretStr

SIGNATURE_PREFIX = "sha256="


def _secret_bytes(secret: str | bytes | SecretStr) -> bytes:
    if isinstance(secret, SecretStr):
        secret = secret.get_secret_value()
    if isinstance(secret, str):
        secret = secret.encode("utf-8")
    return secret


def compute_signature(secret: str | bytes | SecretStr, body: bytes) -> str:
    """Return ``sha256=<hex HMAC-SHA256(secret, body)>``."""
    digest = hmac.new(_secret_bytes(secret), body, hashlib.sha256).hexdigest()
    return SIGNATURE_PREFIX + digest


def verify_signature(
    body: bytes,
    signature: object,
    secret: str | bytes | SecretStr,
) -> bool:
    """Check a presented token against the body in constant time.

    ``body`` must be the raw request bytes exactly as received. Every failure
    collapses to ``False``; this never raises.
    """
    if not isinstance(signature, str) or not signature:
        return False
    try:
        key = _secret_bytes(secret)
        if not isinstance(body, (bytes, bytearray)):
            return False
        expected = compute_signature(key, bytes(body)).encode("ascii")
        presented = signature.encode("ascii")
    except (TypeError, UnicodeEncodeError):
        return False
    if len(presented) != len(expected):
        return False
    return hmac.compare_digest(presented, expected)
