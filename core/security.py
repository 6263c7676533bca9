"""
Request Signatures
==================

X-SIG = base64(HMAC-SHA256(secret, raw_body))

The signature always covers the untouched transport bytes. The body is never
parsed or re-serialized before verification.
"""
import base64
import hashlib
import hmac


SIGNATURE_HEADER = "X-SIG"


def compute_signature(secret: bytes, body: bytes) -> str:
    """
    Compute request signature

    Args:
        secret: Key secret
        body: Raw request body (may be empty)

    Returns:
        Base64-encoded HMAC-SHA256 digest
    """
    digest = hmac.new(secret, body, hashlib.sha256).digest()
    return base64.b64encode(digest).decode("ascii")


def verify_signature(secret: bytes, body: bytes, signature: str) -> bool:
    """
    Check a request signature in constant time

    Args:
        secret: Key secret
        body: Raw request body exactly as received
        signature: Value of the X-SIG header

    Returns:
        True if signature matches
    """
    expected = compute_signature(secret, body).encode("ascii")
    return hmac.compare_digest(expected, signature.encode("utf-8"))
