from __future__ import annotations

import secrets
import uuid

REFRESH_TOKEN_BYTES = 64


def generate_opaque_token(length_bytes: int = REFRESH_TOKEN_BYTES) -> str:
    return secrets.token_urlsafe(length_bytes)


def generate_jti() -> str:
    return uuid.uuid4().hex


def mask_secret(secret: str | None) -> str:
    if not secret:
        return ""
    if len(secret) <= 8:
        return "*" * len(secret)
    return f"{secret[:4]}...{secret[-4:]}"
