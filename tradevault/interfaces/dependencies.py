"""
Shared dependency providers.

The composition root for collaborators used by every bounded context:
the database engine and unit of work, outbound notifications, market
data, credentials and the authenticated principal. Context-specific
`dependencies.py` modules build their use cases on top of these.

Tests replace `get_engine`, `get_notification_queue`, `get_market_data`
and `get_image_storage` through `app.dependency_overrides`.
"""

from functools import lru_cache, partial
from typing import Callable, Optional

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.engine import Engine

from tradevault.application.accounts.auth import AuthenticateUseCase
from tradevault.core.config import settings
from tradevault.domain.accounts.entities import Principal
from tradevault.domain.accounts.ports import (
    ImageStoragePort,
    PasswordHasher,
    TokenService,
)
from tradevault.domain.errors import ForbiddenError, UnauthorizedError
from tradevault.domain.ledger.ports import MarketDataPort
from tradevault.domain.notifications.entities import NotificationQueue
from tradevault.domain.unit_of_work import UnitOfWork
from tradevault.infrastructure.accounts.cloudinary_storage import (
    CloudinaryImageStorage,
)
from tradevault.infrastructure.accounts.security_adapters import (
    BcryptPasswordHasher,
    JwtTokenService,
)
from tradevault.infrastructure.db.engine import build_engine
from tradevault.infrastructure.db.unit_of_work import SqlUnitOfWork
from tradevault.infrastructure.ledger.finnhub_adapter import FinnhubMarketDataAdapter
from tradevault.infrastructure.notifications.background_queue import (
    BackgroundNotificationQueue,
)
from tradevault.infrastructure.notifications.dispatcher import NotificationDispatcher
from tradevault.infrastructure.notifications.smtp_sender import SmtpEmailSender

bearer_scheme = HTTPBearer(auto_error=False)


@lru_cache
def get_engine() -> Engine:
    """Build the process-wide SQLAlchemy engine from application settings."""
    return build_engine(settings.get_database_url())


def get_uow_factory(
    engine: Engine = Depends(get_engine),
) -> Callable[[], UnitOfWork]:
    """Return a factory that opens a new unit of work per call."""
    return partial(SqlUnitOfWork, engine, settings.withdrawal_daily_limit)


def build_notification_queue() -> BackgroundNotificationQueue:
    """Build the email worker from the mail settings. The caller starts it."""
    sender = SmtpEmailSender(
        host=settings.mail_host,
        port=settings.mail_port,
        sender=settings.mail_from,
        user=settings.mail_user,
        password=settings.mail_password,
        use_ssl=settings.mail_use_ssl,
    )
    dispatcher = NotificationDispatcher(
        email_sender=sender,
        webhook_url=settings.notification_webhook_url,
    )
    return BackgroundNotificationQueue(
        dispatcher, enabled=settings.notifications_enabled
    )


def get_notification_queue(request: Request) -> NotificationQueue:
    """Return the queue started by the application lifespan."""
    return request.app.state.notifications


@lru_cache
def get_market_data() -> MarketDataPort:
    """Shared Finnhub client so its quote cache spans requests."""
    return FinnhubMarketDataAdapter(
        api_key=settings.finnhub_api_key,
        base_url=settings.finnhub_base_url,
        cache_seconds=settings.quote_cache_seconds,
        timeout=settings.http_timeout_seconds,
    )


def get_image_storage() -> ImageStoragePort:
    return CloudinaryImageStorage(
        cloud_name=settings.cloudinary_cloud_name,
        api_key=settings.cloudinary_api_key,
        api_secret=settings.cloudinary_api_secret,
    )


def get_token_service() -> TokenService:
    return JwtTokenService(
        secret=settings.jwt_secret,
        algorithm=settings.jwt_algorithm,
        expiry_minutes=settings.jwt_expiry_minutes,
    )


def get_password_hasher() -> PasswordHasher:
    return BcryptPasswordHasher(rounds=settings.bcrypt_rounds)


def get_current_principal(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    uow_factory: Callable[[], UnitOfWork] = Depends(get_uow_factory),
    tokens: TokenService = Depends(get_token_service),
) -> Principal:
    """Resolve the bearer token on the request to a Principal.

    Raises:
        UnauthorizedError: If the header is missing or the token is invalid.
    """
    if credentials is None or not credentials.credentials:
        raise UnauthorizedError("Authentication required")
    return AuthenticateUseCase(uow_factory, tokens).execute(credentials.credentials)


def require_admin(principal: Principal = Depends(get_current_principal)) -> Principal:
    """Like get_current_principal, but only admins pass."""
    if not principal.is_admin:
        raise ForbiddenError("Admin access required")
    return principal
