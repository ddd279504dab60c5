"""Authentication and authorization utilities for API."""

import hmac

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPBasic, HTTPBasicCredentials

from core.config import settings
from core.security import verify_request_signature

# HTTPBasic security for admin endpoints
_security = HTTPBasic()

MAX_USER_ID_LENGTH = 64


async def admin_basic_auth(credentials: HTTPBasicCredentials = Depends(_security)) -> str:
    """
    Validate HTTP Basic Auth credentials for admin endpoints.

    Args:
        credentials: HTTP Basic credentials from request

    Returns:
        Username if authentication successful

    Raises:
        HTTPException: If credentials are invalid
    """
    user_ok = hmac.compare_digest(credentials.username, settings.admin_user)
    pass_ok = hmac.compare_digest(credentials.password, settings.admin_pass)
    if not (user_ok and pass_ok):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid credentials",
            headers={"WWW-Authenticate": "Basic"},
        )
    return str(credentials.username)


async def user_auth(request: Request) -> str:
    """
    Authenticate requests forwarded by the marketplace front end using HMAC signature.

    Expects headers:
    - X-User-Id: id of the user making the request
    - X-Signature: HMAC-SHA256 signature of request body

    Args:
        request: FastAPI request object

    Returns:
        Caller user id

    Raises:
        HTTPException: If authentication fails
    """
    user_id = (request.headers.get("X-User-Id") or "").strip()
    signature = request.headers.get("X-Signature")

    if not user_id or not signature:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED, detail="Missing auth headers (X-User-Id, X-Signature)"
        )

    if len(user_id) > MAX_USER_ID_LENGTH:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Invalid X-User-Id format")

    body = await request.body()

    if not verify_request_signature(body, signature):
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid signature")

    return user_id
