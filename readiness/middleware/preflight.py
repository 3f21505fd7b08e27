"""
readiness/middleware/preflight.py: CORS preflight and wildcard origin header.
The UI and the API live on different origins. Every OPTIONS request is
answered here with 200 and an empty body, and with a wildcard origin
configured every response carries Access-Control-Allow-Origin, even when the
caller sent no Origin header.
"""
from typing import Callable, Dict, List
from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware
from readiness.config import get_settings

ALLOW_METHODS = "GET, POST, OPTIONS"
ALLOW_HEADERS = "Content-Type"


def _allow_origin(request: Request, origins: List[str]) -> str:
    if "*" in origins:
        return "*"
    origin = request.headers.get("Origin", "")
    return origin if origin in origins else ""


def _preflight_headers(allow_origin: str) -> Dict[str, str]:
    headers = {
        "Access-Control-Allow-Methods": ALLOW_METHODS,
        "Access-Control-Allow-Headers": ALLOW_HEADERS,
    }
    if allow_origin:
        headers["Access-Control-Allow-Origin"] = allow_origin
    return headers


class PreflightMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        allow_origin = _allow_origin(request, get_settings().cors_origins)
        if request.method == "OPTIONS":
            return Response(status_code=200, headers=_preflight_headers(allow_origin))
        response = await call_next(request)
        if allow_origin == "*":
            response.headers.setdefault("Access-Control-Allow-Origin", "*")
        return response
