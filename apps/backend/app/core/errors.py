from __future__ import annotations


class TokenError(Exception):
    """Client-facing refresh-token failure, rendered as a 400-class response."""

    code = "token_error"
    status_code = 400
    default_message = "Refresh token rejected"

    def __init__(self, message: str | None = None) -> None:
        super().__init__(message or self.default_message)
        self.message = message or self.default_message


class InvalidToken(TokenError):
    code = "invalid_token"
    default_message = "Invalid refresh token"


class TokenExpired(TokenError):
    code = "token_expired"
    default_message = "Refresh token expired"


class TokenReused(TokenError):
    code = "token_reused"
    default_message = "Refresh token was already used; all sessions have been revoked"


class MissingCurrentSession(TokenError):
    code = "missing_current_session"
    default_message = "Unable to identify current session"


class SigningFailure(RuntimeError):
    code = "signing_failure"
    status_code = 500
