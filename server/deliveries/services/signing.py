"""
Payload serialization and HMAC signing for outbound deliveries.
"""
import hashlib
import hmac
import json
from typing import Any


def serialize_payload(payload: Any) -> bytes:
    """
    Serialize a payload to the exact bytes sent to destinations.

    Compact JSON, keys kept in stored order, non-ASCII left unescaped.
    The signature is always computed over these same bytes.
    """
    return json.dumps(payload, separators=(',', ':'), ensure_ascii=False).encode('utf-8')


def sign(secret: str, payload: Any) -> str:
    """
    Compute the hex HMAC-SHA256 of the serialized payload under a route secret.

    Args:
        secret: Route secret shared with destinations
        payload: Event payload (anything JSON-serializable)

    Returns:
        Hex-encoded signature
    """
    return sign_bytes(secret, serialize_payload(payload))


def sign_bytes(secret: str, body: bytes) -> str:
    return hmac.new(secret.encode('utf-8'), body, hashlib.sha256).hexdigest()


def verify(secret: str, body: bytes, signature: str) -> bool:
    """Check a received body against its signature in constant time."""
    return hmac.compare_digest(sign_bytes(secret, body), signature or '')
