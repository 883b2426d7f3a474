"""
Use cases: User profiles and admin user management.
"""

import dataclasses
import logging
from datetime import datetime
from typing import Callable

from tradevault.application.accounts.dtos import (
    AdminUserChanges,
    ProfileChanges,
    UserView,
)
from tradevault.domain.accounts.entities import Principal, User, UserStatus
from tradevault.domain.errors import (
    ConflictError,
    ForbiddenError,
    NotFoundError,
    ValidationError,
)
from tradevault.domain.ledger.entities import utc_now
from tradevault.domain.unit_of_work import UnitOfWork

logger = logging.getLogger(__name__)


def _load(uow: UnitOfWork, user_id: str) -> User:
    user = uow.users.get(user_id)
    if user is None:
        raise NotFoundError("User", user_id)
    return user


class GetUserUseCase:
    """Returns a user to themselves or to an admin."""

    def __init__(self, uow_factory: Callable[[], UnitOfWork]) -> None:
        self._uow_factory = uow_factory

    def execute(self, principal: Principal, user_id: str) -> UserView:
        if not principal.can_access(user_id):
            raise ForbiddenError("You may only view your own profile")
        with self._uow_factory() as uow:
            return UserView.from_entity(_load(uow, user_id))


class UpdateProfileUseCase:
    def __init__(
        self,
        uow_factory: Callable[[], UnitOfWork],
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self._uow_factory = uow_factory
        self._clock = clock

    def execute(self, user_id: str, changes: ProfileChanges) -> UserView:
        values = {
            k: v.strip()
            for k, v in dataclasses.asdict(changes).items()
            if v is not None
        }
        if "full_name" in values and not values["full_name"]:
            raise ValidationError("Full name cannot be empty", "full_name")

        with self._uow_factory() as uow:
            user = _load(uow, user_id)
            updated = dataclasses.replace(user, **values, updated_at=self._clock())
            uow.users.update(updated)

        logger.info("Profile updated: id=%s, fields=%s", user_id, sorted(values))
        return UserView.from_entity(updated)


class ListUsersUseCase:
    def __init__(self, uow_factory: Callable[[], UnitOfWork]) -> None:
        self._uow_factory = uow_factory

    def execute(self, limit: int = 50, offset: int = 0) -> tuple[list[UserView], int]:
        """Return one page of users and the total user count."""
        with self._uow_factory() as uow:
            users = uow.users.list(limit=limit, offset=offset)
            total = uow.users.count()
        return [UserView.from_entity(u) for u in users], total


class AdminUpdateUserUseCase:
    """Grants or revokes admin rights and suspends or reactivates users."""

    def __init__(
        self,
        uow_factory: Callable[[], UnitOfWork],
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self._uow_factory = uow_factory
        self._clock = clock

    def execute(
        self, admin: Principal, user_id: str, changes: AdminUserChanges
    ) -> UserView:
        values: dict = {}
        if changes.is_admin is not None:
            values["is_admin"] = changes.is_admin
        if changes.status is not None:
            try:
                values["status"] = UserStatus(changes.status.strip().lower())
            except ValueError:
                raise ValidationError(
                    f"Invalid user status: {changes.status}", "status"
                ) from None
        if admin.user_id == user_id and (
            values.get("is_admin") is False
            or values.get("status") == UserStatus.SUSPENDED
        ):
            raise ConflictError("Admins cannot demote or suspend themselves")

        with self._uow_factory() as uow:
            user = _load(uow, user_id)
            updated = dataclasses.replace(user, **values, updated_at=self._clock())
            uow.users.update(updated)

        logger.info(
            "User %s updated by admin %s: %s",
            user_id,
            admin.user_id,
            {k: getattr(v, "value", v) for k, v in values.items()},
        )
        return UserView.from_entity(updated)


class DeleteUserUseCase:
    def __init__(self, uow_factory: Callable[[], UnitOfWork]) -> None:
        self._uow_factory = uow_factory

    def execute(self, admin: Principal, user_id: str) -> None:
        if admin.user_id == user_id:
            raise ConflictError("Admins cannot delete their own account")
        with self._uow_factory() as uow:
            _load(uow, user_id)
            kyc = uow.kyc.get_for_user(user_id)
            if kyc is not None:
                uow.kyc.delete(kyc.id)
            uow.users.delete(user_id)
        logger.info("User %s deleted by admin %s", user_id, admin.user_id)
