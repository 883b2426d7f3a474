"""
Adapters: credential hashing and bearer tokens.

BcryptPasswordHasher implements PasswordHasher with bcrypt.
JwtTokenService implements TokenService with PyJWT (HS256 by default).
"""

import logging
from datetime import datetime, timedelta, timezone

import bcrypt
import jwt

from tradevault.domain.accounts.entities import Principal
from tradevault.domain.accounts.ports import PasswordHasher, TokenService
from tradevault.domain.errors import UnauthorizedError

logger = logging.getLogger(__name__)


class BcryptPasswordHasher(PasswordHasher):
    """bcrypt hasher. `rounds` is the log2 work factor."""

    def __init__(self, rounds: int = 12) -> None:
        self._rounds = rounds

    def hash(self, password: str) -> str:
        salt = bcrypt.gensalt(rounds=self._rounds)
        return bcrypt.hashpw(password.encode("utf-8"), salt).decode("utf-8")

    def verify(self, password: str, password_hash: str) -> bool:
        try:
            return bcrypt.checkpw(password.encode("utf-8"), password_hash.encode("utf-8"))
        except ValueError:
            # Malformed stored hash
            logger.warning("Stored password hash could not be parsed")
            return False


class JwtTokenService(TokenService):
    """Signs and verifies `{sub, is_admin, iat, exp}` tokens."""

    def __init__(self, secret: str, algorithm: str = "HS256", expiry_minutes: int = 1440) -> None:
        self._secret = secret
        self._algorithm = algorithm
        self._expiry = timedelta(minutes=expiry_minutes)

    def issue(self, principal: Principal) -> str:
        now = datetime.now(timezone.utc)
        payload = {
            "sub": principal.user_id,
            "is_admin": principal.is_admin,
            "iat": now,
            "exp": now + self._expiry,
        }
        return jwt.encode(payload, self._secret, algorithm=self._algorithm)

    def verify(self, token: str) -> Principal:
        try:
            payload = jwt.decode(token, self._secret, algorithms=[self._algorithm])
        except jwt.ExpiredSignatureError as exc:
            raise UnauthorizedError("Token has expired") from exc
        except jwt.InvalidTokenError as exc:
            raise UnauthorizedError("Invalid token") from exc

        user_id = payload.get("sub")
        if not user_id:
            raise UnauthorizedError("Invalid token")
        return Principal(user_id=str(user_id), is_admin=bool(payload.get("is_admin", False)))
