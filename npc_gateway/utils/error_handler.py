"""Error handling utilities and custom exceptions."""

from __future__ import annotations

from typing import Any

from fastapi import Request, status
from fastapi.responses import JSONResponse
from loguru import logger
from starlette.exceptions import HTTPException as StarletteHTTPException

from ..models.chat_response import ErrorResponse


class GatewayError(Exception):
    """Base class for failures reported to the caller as a JSON error body."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    error: str = "Server error"

    def __init__(self, error: str | None = None, detail: str | None = None) -> None:
        self.error = error or self.error
        self.detail = detail
        super().__init__(self.error if detail is None else f"{self.error}: {detail}")

    def to_response(self) -> ErrorResponse:
        return ErrorResponse(error=self.error, detail=self.detail)


class MethodNotAllowed(GatewayError):
    status_code = status.HTTP_405_METHOD_NOT_ALLOWED
    error = "Use POST"


class Unauthorized(GatewayError):
    status_code = status.HTTP_401_UNAUTHORIZED
    error = "Unauthorized"


class BadRequest(GatewayError):
    status_code = status.HTTP_400_BAD_REQUEST
    error = "Missing message or npc"


class ConfigurationError(GatewayError):
    """Raised when the operator has not configured a required credential."""

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    error = "OPENAI_API_KEY missing"


class UpstreamError(GatewayError):
    """Raised when the model provider fails or cannot be reached."""

    status_code = status.HTTP_502_BAD_GATEWAY
    error = "LLM upstream error"


class InternalError(GatewayError):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    error = "Server error"


class UpstreamContentError(ValueError):
    """Raised when the model's message content is not a JSON object.

    Never reaches the caller: the reply normaliser recovers from it by
    wrapping the raw text.
    """


def error_response(status_code: int, body: ErrorResponse) -> JSONResponse:
    """Render an error body, leaving out ``detail`` when empty."""
    return JSONResponse(status_code=status_code, content=body.model_dump(exclude_none=True))


async def gateway_exception_handler(request: Request, exc: GatewayError) -> JSONResponse:
    """Convert a GatewayError into its JSON error response."""
    if exc.status_code >= 500:
        logger.error("{} {} failed: {}", request.method, request.url.path, exc)
    else:
        logger.info("{} {} rejected: {}", request.method, request.url.path, exc)
    return error_response(exc.status_code, exc.to_response())


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    """Render routing errors (unknown path, wrong method) in the same shape."""
    headers: dict[str, Any] | None = getattr(exc, "headers", None)
    response = error_response(exc.status_code, ErrorResponse(error=str(exc.detail)))
    if headers:
        response.headers.update(headers)
    return response


async def internal_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Render any unhandled exception as the generic internal error."""
    logger.opt(exception=exc).error("{} {} crashed", request.method, request.url.path)
    return error_response(InternalError.status_code, InternalError().to_response())
