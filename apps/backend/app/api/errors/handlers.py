from __future__ import annotations

from fastapi import FastAPI, HTTPException, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic import ValidationError

from app.core.errors import SigningFailure, TokenError
from app.core.logging import get_logger
from app.schemas.common import ErrorResponse

logger = get_logger(__name__)


def _error_response(status_code: int, code: str, message: str, details=None) -> JSONResponse:  # noqa: ANN001
    return JSONResponse(
        status_code=status_code,
        content=ErrorResponse(code=code, message=message, details=details).model_dump(mode="json"),
    )


def token_error_response(exc: TokenError) -> JSONResponse:
    return _error_response(exc.status_code, exc.code, exc.message, None)


def register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(TokenError)
    async def token_error_handler(_: Request, exc: TokenError) -> JSONResponse:
        return token_error_response(exc)

    @app.exception_handler(SigningFailure)
    async def signing_failure_handler(_: Request, exc: SigningFailure) -> JSONResponse:
        logger.error("Access token signing failed", extra={"event": "token.signing_failed"}, exc_info=exc)
        return _error_response(500, exc.code, "Unable to issue credentials", None)

    @app.exception_handler(HTTPException)
    async def http_exception_handler(_: Request, exc: HTTPException) -> JSONResponse:
        return _error_response(exc.status_code, "http_error", str(exc.detail), None)

    @app.exception_handler(ValidationError)
    async def validation_exception_handler(_: Request, exc: ValidationError) -> JSONResponse:
        return _error_response(422, "validation_error", "Validation failed", exc.errors())

    @app.exception_handler(RequestValidationError)
    async def request_validation_exception_handler(_: Request, exc: RequestValidationError) -> JSONResponse:
        return _error_response(422, "request_validation_error", "Request validation failed", exc.errors())

    @app.exception_handler(Exception)
    async def unhandled_exception_handler(_: Request, exc: Exception) -> JSONResponse:
        logger.error("Unhandled error", extra={"event": "request.unhandled_error"}, exc_info=exc)
        return _error_response(500, "internal_error", "Internal server error", None)
