"""Cross-origin handling for browser-based game clients.

Games exported to HTML are often opened from ``file://`` or an itch.io
iframe, so every response carries CORS headers and any ``OPTIONS``
request is answered immediately with an empty 200.
"""

from __future__ import annotations

from typing import Sequence

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response
from starlette.types import ASGIApp

from .error_handler import internal_exception_handler

API_KEY_HEADER = "X-API-Key"
ALLOW_METHODS = "GET, POST, OPTIONS"
ALLOW_HEADERS = f"Content-Type, {API_KEY_HEADER}"


def resolve_allow_origin(allowed_origins: Sequence[str], origin: str | None) -> str:
    """Pick the ``Access-Control-Allow-Origin`` value for a request.

    A wildcard in the allow-list wins; otherwise a listed origin is echoed
    back, and anything else gets the first configured origin.
    """
    if "*" in allowed_origins:
        return "*"
    if origin and origin in allowed_origins:
        return origin
    return allowed_origins[0] if allowed_origins else "*"


class GameCorsMiddleware(BaseHTTPMiddleware):
    def __init__(self, app: ASGIApp, allowed_origins: Sequence[str]) -> None:
        super().__init__(app)
        self.allowed_origins = list(allowed_origins)

    def cors_headers(self, request: Request) -> dict[str, str]:
        return {
            "Access-Control-Allow-Origin": resolve_allow_origin(
                self.allowed_origins, request.headers.get("origin")
            ),
            "Access-Control-Allow-Methods": ALLOW_METHODS,
            "Access-Control-Allow-Headers": ALLOW_HEADERS,
        }

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        headers = self.cors_headers(request)
        if request.method == "OPTIONS":
            return Response(status_code=200, headers=headers)

        try:
            response = await call_next(request)
        except Exception as exc:
            # Errors escaping the app would otherwise be answered outside this middleware.
            response = await internal_exception_handler(request, exc)
        response.headers.update(headers)
        if headers["Access-Control-Allow-Origin"] != "*":
            response.headers.append("Vary", "Origin")
        return response
