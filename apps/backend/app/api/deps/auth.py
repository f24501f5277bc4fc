from __future__ import annotations

from dataclasses import dataclass

import jwt
from fastapi import Header, HTTPException, Request, status

from app.core.jwt import decode_token


@dataclass(frozen=True)
class CurrentUser:
    user_id: str
    jti: str | None


def get_current_user(
    request: Request,
    authorization: str | None = Header(default=None),
) -> CurrentUser:
    if not authorization or not authorization.lower().startswith("bearer "):
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Missing bearer token")
    token = authorization.split(" ", 1)[1].strip()
    try:
        payload = decode_token(token)
    except jwt.PyJWTError as exc:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid token") from exc
    if payload.get("type") != "access":
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid token")
    current = CurrentUser(user_id=str(payload["sub"]), jti=payload.get("jti"))
    request.state.current_user = current
    return current
