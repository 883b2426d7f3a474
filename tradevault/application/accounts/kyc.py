"""
Use cases: KYC submission and review.

A user holds at most one KYC record. A new submission is accepted only
when there is none or the previous one was rejected, in which case the
rejected record is replaced. Images are uploaded before the record is
written, outside the database transaction.

Failure cases:
    - ValidationError for missing fields or non data-URI images
    - ConflictError when a pending or approved record already exists
    - DuplicateError when the id number belongs to another submission
    - ExternalServiceError when image storage fails
"""

import logging
from datetime import datetime
from typing import Callable, Optional

from tradevault.application.accounts.dtos import SubmitKycCommand
from tradevault.application.funding.status import parse_status
from tradevault.application.notifications.emails import kyc_status_email
from tradevault.domain.accounts.entities import (
    KYC_TRANSITIONS,
    KycRecord,
    KycStatus,
)
from tradevault.domain.accounts.ports import ImageStoragePort
from tradevault.domain.errors import (
    ConflictError,
    DuplicateError,
    InvalidStatusTransitionError,
    NotFoundError,
    ValidationError,
)
from tradevault.domain.funding.entities import check_transition
from tradevault.domain.ledger.entities import utc_now
from tradevault.domain.notifications.entities import NotificationQueue
from tradevault.domain.unit_of_work import UnitOfWork

logger = logging.getLogger(__name__)

KYC_FOLDER = "kyc"


def _ensure_can_submit(uow: UnitOfWork, user_id: str, id_number: str) -> Optional[KycRecord]:
    """Return the rejected record to replace, if any."""
    existing = uow.kyc.get_for_user(user_id)
    if existing is not None and existing.status != KycStatus.REJECTED:
        raise ConflictError(
            f"KYC already submitted and {existing.status.value}"
        )
    holder = uow.kyc.get_by_id_number(id_number)
    if holder is not None and holder.user_id != user_id:
        raise DuplicateError("KYC record", "id_number")
    return existing


class SubmitKycUseCase:
    def __init__(
        self,
        uow_factory: Callable[[], UnitOfWork],
        storage: ImageStoragePort,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self._uow_factory = uow_factory
        self._storage = storage
        self._clock = clock

    def execute(self, command: SubmitKycCommand) -> KycRecord:
        for name in ("name", "email", "id_type", "id_number"):
            if not getattr(command, name).strip():
                raise ValidationError(f"{name} is required", name)
        id_number = command.id_number.strip()

        with self._uow_factory() as uow:
            _ensure_can_submit(uow, command.user_id, id_number)

        front = self._storage.upload(command.front_image, KYC_FOLDER)
        back = self._storage.upload(command.back_image, KYC_FOLDER)

        record = KycRecord(
            user_id=command.user_id,
            name=command.name.strip(),
            email=command.email.strip().lower(),
            id_type=command.id_type.strip(),
            id_number=id_number,
            front_image=front,
            back_image=back,
            created_at=self._clock(),
        )
        with self._uow_factory() as uow:
            previous = _ensure_can_submit(uow, command.user_id, id_number)
            if previous is not None:
                uow.kyc.delete(previous.id)
            uow.kyc.add(record)

        logger.info("KYC submitted: id=%s, user=%s", record.id, record.user_id)
        return record


class GetMyKycUseCase:
    def __init__(self, uow_factory: Callable[[], UnitOfWork]) -> None:
        self._uow_factory = uow_factory

    def execute(self, user_id: str) -> KycRecord:
        with self._uow_factory() as uow:
            record = uow.kyc.get_for_user(user_id)
        if record is None:
            raise NotFoundError("KYC record", user_id)
        return record


class ListKycUseCase:
    def __init__(self, uow_factory: Callable[[], UnitOfWork]) -> None:
        self._uow_factory = uow_factory

    def execute(self, status: Optional[str] = None) -> list[KycRecord]:
        wanted = parse_status(KycStatus, status) if status else None
        with self._uow_factory() as uow:
            return uow.kyc.list(status=wanted)


class ReviewKycUseCase:
    """Admin approval or rejection. Repeating the current status is a no-op."""

    def __init__(
        self,
        uow_factory: Callable[[], UnitOfWork],
        notifications: NotificationQueue,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self._uow_factory = uow_factory
        self._notifications = notifications
        self._clock = clock

    def execute(self, kyc_id: str, status: str) -> KycRecord:
        requested = parse_status(KycStatus, status)
        with self._uow_factory() as uow:
            record = uow.kyc.get(kyc_id)
            if record is None:
                raise NotFoundError("KYC record", kyc_id)
            if not check_transition("KYC", KYC_TRANSITIONS, record.status, requested):
                return record
            if not uow.kyc.transition(kyc_id, record.status, requested, self._clock()):
                current = uow.kyc.get(kyc_id)
                if current is None or current.status != requested:
                    raise InvalidStatusTransitionError(
                        "KYC", record.status.value, requested.value
                    )
                return current
            updated = uow.kyc.get(kyc_id)
            owner = uow.users.get(record.user_id)

        logger.info("KYC %s reviewed: %s", kyc_id, requested.value)
        if owner is not None:
            self._notifications.enqueue(
                kyc_status_email(owner.email, owner.full_name, updated.id_type, requested.value)
            )
        return updated
