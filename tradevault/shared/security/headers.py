"""
Secure HTTP headers middleware.

Every response gets the browser hardening headers below. API responses
carry balances and personal data, so they are also marked uncacheable,
and requests that arrived over HTTPS get a Strict-Transport-Security
header. A header a route already set is left alone.
"""

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response
from starlette.types import ASGIApp

SECURE_HEADERS = {
    "X-Content-Type-Options": "nosniff",
    "X-Frame-Options": "DENY",
    "Referrer-Policy": "strict-origin-when-cross-origin",
    "Content-Security-Policy": "default-src 'self'; frame-ancestors 'none'",
    "X-XSS-Protection": "1; mode=block",
}
NO_STORE = "no-store"
HSTS = "max-age=31536000; includeSubDomains"


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    """Adds restrictive default headers to all outgoing responses.

    Args:
        app: The wrapped ASGI application.
        api_prefix: Paths under this prefix are sent with Cache-Control: no-store.
    """

    def __init__(self, app: ASGIApp, api_prefix: str = "/api/") -> None:
        super().__init__(app)
        self._api_prefix = api_prefix

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        response = await call_next(request)
        for header_name, header_value in SECURE_HEADERS.items():
            response.headers.setdefault(header_name, header_value)
        if request.url.path.startswith(self._api_prefix):
            response.headers.setdefault("Cache-Control", NO_STORE)
        if request.url.scheme == "https":
            response.headers.setdefault("Strict-Transport-Security", HSTS)
        return response
