from __future__ import annotations

from datetime import datetime, timedelta
from typing import Any

import jwt

from app.core.clock import utc_now
from app.core.config import get_settings
from app.core.errors import SigningFailure

ALGORITHM = "HS256"


def create_access_token(
    *,
    subject: str,
    jti: str,
    claims: dict[str, Any] | None = None,
    now: datetime | None = None,
) -> tuple[str, datetime]:
    settings = get_settings()
    if not settings.jwt_secret:
        raise SigningFailure("JWT signing secret is not configured")
    issued_at = now or utc_now()
    expires_at = issued_at + timedelta(minutes=settings.access_token_expire_minutes)
    payload: dict[str, Any] = {
        **(claims or {}),
        "sub": subject,
        "jti": jti,
        "type": "access",
        "iss": settings.jwt_issuer,
        "aud": settings.jwt_audience,
        "iat": int(issued_at.timestamp()),
        "exp": int(expires_at.timestamp()),
    }
    try:
        token = jwt.encode(payload, settings.jwt_secret, algorithm=ALGORITHM)
    except (jwt.PyJWTError, TypeError, ValueError) as exc:
        raise SigningFailure(f"Unable to sign access token: {exc}") from exc
    return token, expires_at


def decode_token(token: str) -> dict[str, Any]:
    settings = get_settings()
    return jwt.decode(
        token,
        settings.jwt_secret,
        algorithms=[ALGORITHM],
        audience=settings.jwt_audience,
        issuer=settings.jwt_issuer,
        options={"require": ["exp", "sub"]},
    )
