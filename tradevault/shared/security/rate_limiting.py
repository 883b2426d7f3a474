"""
Request throttling with slowapi.

Requests carrying a valid bearer token are counted per user, so
customers behind one NAT address do not share a budget. Everything
else, including requests with a forged or expired token, is counted
per client address. Every route gets `settings.rate_limit_default`;
register and login also carry `settings.rate_limit_auth`, keyed on the
address alone so that rotating made-up tokens cannot reset the count.
"""

import jwt
from slowapi import Limiter
from slowapi.errors import RateLimitExceeded
from slowapi.util import get_remote_address
from starlette.requests import Request
from starlette.responses import JSONResponse

from tradevault.core.config import settings

_BEARER_PREFIX = "bearer "


def _verified_subject(token: str) -> str | None:
    try:
        payload = jwt.decode(
            token, settings.jwt_secret, algorithms=[settings.jwt_algorithm]
        )
    except jwt.InvalidTokenError:
        return None
    subject = payload.get("sub")
    return str(subject) if subject else None


def client_key(request: Request) -> str:
    """Limiter key: the user behind a verified token, else the remote address."""
    authorization = request.headers.get("authorization", "")
    if authorization.lower().startswith(_BEARER_PREFIX):
        subject = _verified_subject(authorization[len(_BEARER_PREFIX):].strip())
        if subject:
            return "user:" + subject
    return "addr:" + get_remote_address(request)


def address_key(request: Request) -> str:
    """Limiter key for credential endpoints: the remote address only."""
    return "addr:" + get_remote_address(request)


limiter = Limiter(key_func=client_key, default_limits=[settings.rate_limit_default])


async def rate_limit_exceeded_handler(
    _request: Request, exc: RateLimitExceeded
) -> JSONResponse:
    """Answer 429 in the shared error body shape."""
    return JSONResponse(
        status_code=429,
        content={"error": "Rate limit exceeded", "detail": str(exc.detail)},
    )
