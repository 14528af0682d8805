"""
Caller identity for the API routes.

The auth layer in front of this service forwards the signed-in user's id in
X-Finance-* headers, signed with a shared secret. Routes take the verified id
with ``user_id: str = Depends(get_user_id)``; the services below them trust it.
"""
import hashlib
import hmac
import time
from functools import lru_cache
from typing import Optional

from fastapi import Header, HTTPException, Request, status
from pydantic import Field
from pydantic_settings import BaseSettings


class AuthSettings(BaseSettings):
    # Never generated: an unset secret rejects every authenticated request.
    internal_auth_secret: str = ""
    internal_auth_max_age_seconds: int = Field(60, gt=0)

    class Config:
        env_file = ".env"
        extra = "ignore"


@lru_cache
def get_auth_settings() -> AuthSettings:
    return AuthSettings()


def sign_request(secret: str, method: str, path_with_query: str, user_id: str, timestamp: str) -> str:
    """HMAC-SHA256 over method, path with query, user id and timestamp, one per line."""
    payload = "\n".join([method.upper(), path_with_query, user_id, timestamp])
    return hmac.new(secret.encode("utf-8"), payload.encode("utf-8"), hashlib.sha256).hexdigest()


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail=detail)


def get_user_id(
    request: Request,
    x_finance_user_id: Optional[str] = Header(None),
    x_finance_timestamp: Optional[str] = Header(None),
    x_finance_signature: Optional[str] = Header(None),
) -> str:
    user_id = (x_finance_user_id or "").strip()
    timestamp = (x_finance_timestamp or "").strip()
    signature = (x_finance_signature or "").strip()
    if not user_id or not timestamp or not signature:
        raise _unauthorized("Missing internal authentication headers.")

    try:
        signed_at = int(timestamp)
    except ValueError:
        raise _unauthorized("Invalid internal authentication timestamp.") from None

    settings = get_auth_settings()
    if abs(int(time.time()) - signed_at) > settings.internal_auth_max_age_seconds:
        raise _unauthorized("Expired internal authentication signature.")

    if not settings.internal_auth_secret:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Internal authentication secret is not configured.",
        )

    path_with_query = request.url.path
    if request.url.query:
        path_with_query = f"{path_with_query}?{request.url.query}"
    expected = sign_request(
        settings.internal_auth_secret, request.method, path_with_query, user_id, timestamp
    )
    if not hmac.compare_digest(expected, signature):
        raise _unauthorized("Invalid internal authentication signature.")

    return user_id
