import base64
import hashlib
import hmac

from core.config import settings


def _b64u_encode(data: bytes) -> str:
    """Base64-URL encode without padding."""
    return base64.urlsafe_b64encode(data).rstrip(b"=").decode()


def sign_request(body: bytes) -> str:
    """
    Sign a raw request body for a trusted client.

    Args:
        body: Raw request body bytes (empty for GET requests)

    Returns:
        Base64-URL encoded HMAC-SHA256 signature
    """
    mac = hmac.new(settings.secret_key.encode(), body, hashlib.sha256).digest()
    return _b64u_encode(mac)


def verify_request_signature(body: bytes, signature: str | None) -> bool:
    """Verify HMAC-SHA256 signature of request body."""
    return hmac.compare_digest(sign_request(body), signature or "")
