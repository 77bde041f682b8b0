"""
Caller identity for the student routes.

Tokens are issued elsewhere; this module only verifies the access token
(cookie `accessToken`, or an `Authorization: Bearer` header) and exposes
the caller as a FastAPI dependency. The caller's id becomes the reporter
of new students and the reviewer of status changes.
"""

from typing import NamedTuple, Optional

import jwt
from fastapi import Depends, HTTPException, Request, status

from app.config import Settings, get_settings
from app.logging_config import get_logger, log_with_context

logger = get_logger("auth")


class CurrentUser(NamedTuple):
    id: int
    role: Optional[str] = None


def _token_from_request(request: Request) -> Optional[str]:
    token = request.cookies.get("accessToken")
    if token:
        return token
    header = request.headers.get("authorization", "")
    scheme, _, credentials = header.partition(" ")
    if scheme.lower() == "bearer" and credentials:
        return credentials.strip()
    return None


def _unauthorized(message: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=message,
        headers={"WWW-Authenticate": "Bearer"},
    )


def get_current_user(request: Request, settings: Settings = Depends(get_settings)) -> CurrentUser:
    """
    Resolve the authenticated caller from the access token.

    The user id is read from the `id` claim, falling back to `sub`.
    """
    token = _token_from_request(request)
    if not token:
        raise _unauthorized("Unauthorized. Please provide a valid access token.")

    try:
        claims = jwt.decode(token, settings.jwt_access_token_secret,
                            algorithms=[settings.jwt_algorithm])
    except jwt.PyJWTError as e:
        log_with_context(logger, "WARNING", "Access token rejected", exc_info=e)
        raise _unauthorized("Unauthorized. Please provide a valid access token.")

    raw_id = claims.get("id", claims.get("sub"))
    try:
        user_id = int(raw_id)
    except (TypeError, ValueError):
        raise _unauthorized("Unauthorized. Token carries no user id.")

    return CurrentUser(id=user_id, role=claims.get("role"))
