"""
Use cases: Registration, login and bearer-token authentication.

Input: credentials / bearer token
Output: AuthResult / Principal
Side effects: Register inserts a user and queues a welcome email.
Failure cases:
    - ValidationError for a malformed email or a short password
    - DuplicateError if the email is already registered
    - UnauthorizedError for bad credentials or an invalid token
    - ForbiddenError for a suspended account
"""

import logging
import re
from datetime import datetime
from typing import Callable

from tradevault.application.accounts.dtos import AuthResult, RegisterCommand, UserView
from tradevault.application.notifications.emails import welcome_email
from tradevault.domain.accounts.entities import Principal, User, UserStatus
from tradevault.domain.accounts.ports import PasswordHasher, TokenService
from tradevault.domain.errors import (
    DuplicateError,
    ForbiddenError,
    UnauthorizedError,
    ValidationError,
)
from tradevault.domain.ledger.entities import utc_now
from tradevault.domain.notifications.entities import NotificationQueue
from tradevault.domain.unit_of_work import UnitOfWork

logger = logging.getLogger(__name__)

EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
MIN_PASSWORD_LENGTH = 8


def normalize_email(email: str) -> str:
    """Lower-case and trim an email, rejecting malformed addresses."""
    normalized = email.strip().lower()
    if not EMAIL_PATTERN.match(normalized):
        raise ValidationError("A valid email address is required", "email")
    return normalized


class RegisterUseCase:
    def __init__(
        self,
        uow_factory: Callable[[], UnitOfWork],
        hasher: PasswordHasher,
        tokens: TokenService,
        notifications: NotificationQueue,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self._uow_factory = uow_factory
        self._hasher = hasher
        self._tokens = tokens
        self._notifications = notifications
        self._clock = clock

    def execute(self, command: RegisterCommand) -> AuthResult:
        email = normalize_email(command.email)
        if len(command.password) < MIN_PASSWORD_LENGTH:
            raise ValidationError(
                f"Password must be at least {MIN_PASSWORD_LENGTH} characters", "password"
            )
        full_name = command.full_name.strip()
        if not full_name:
            raise ValidationError("Full name is required", "full_name")

        now = self._clock()
        user = User(
            full_name=full_name,
            email=email,
            password_hash=self._hasher.hash(command.password),
            country=command.country.strip(),
            phone=command.phone.strip(),
            created_at=now,
            updated_at=now,
        )
        with self._uow_factory() as uow:
            if uow.users.get_by_email(email) is not None:
                raise DuplicateError("User", "email")
            uow.users.add(user)
            uow.wallets.get_or_create(user.id, now)

        logger.info("User registered: id=%s", user.id)
        self._notifications.enqueue(welcome_email(user.email, user.full_name))
        token = self._tokens.issue(Principal(user_id=user.id, is_admin=user.is_admin))
        return AuthResult(access_token=token, user=UserView.from_entity(user))


class LoginUseCase:
    def __init__(
        self,
        uow_factory: Callable[[], UnitOfWork],
        hasher: PasswordHasher,
        tokens: TokenService,
    ) -> None:
        self._uow_factory = uow_factory
        self._hasher = hasher
        self._tokens = tokens

    def execute(self, email: str, password: str) -> AuthResult:
        with self._uow_factory() as uow:
            user = uow.users.get_by_email(email.strip().lower())

        if user is None or not self._hasher.verify(password, user.password_hash):
            logger.info("Failed login attempt")
            raise UnauthorizedError("Invalid email or password")
        if user.status != UserStatus.ACTIVE:
            raise ForbiddenError("Account is suspended")

        logger.info("User logged in: id=%s", user.id)
        token = self._tokens.issue(Principal(user_id=user.id, is_admin=user.is_admin))
        return AuthResult(access_token=token, user=UserView.from_entity(user))


class AuthenticateUseCase:
    """Resolves a bearer token to the current Principal.

    The admin flag is read from the stored user rather than the token,
    so demoting an admin takes effect immediately.
    """

    def __init__(
        self, uow_factory: Callable[[], UnitOfWork], tokens: TokenService
    ) -> None:
        self._uow_factory = uow_factory
        self._tokens = tokens

    def execute(self, token: str) -> Principal:
        claimed = self._tokens.verify(token)
        with self._uow_factory() as uow:
            user = uow.users.get(claimed.user_id)
        if user is None:
            raise UnauthorizedError("User no longer exists")
        if user.status != UserStatus.ACTIVE:
            raise ForbiddenError("Account is suspended")
        return Principal(user_id=user.id, is_admin=user.is_admin)
