"""
Use cases: Deposits.

A deposit is declared by the user and stays pending until an admin
approves or rejects it. Approval credits the wallet exactly once: the
status flip is a compare-and-set, and only the caller that flipped the
row writes the DEPOSIT entry.

Failure cases:
    - ValidationError for a non-positive amount or unknown status
    - NotFoundError for an unknown deposit
    - InvalidStatusTransitionError for a change the status machine forbids
    - ConflictError when deleting an approved deposit
"""

import logging
from datetime import datetime
from typing import Callable, Optional

from tradevault.application.funding.dtos import CreateDepositCommand, UserDeposits
from tradevault.application.funding.status import (
    check_amount,
    notify_owner,
    parse_status,
)
from tradevault.application.ledger.wallet_ops import credit_wallet
from tradevault.domain.errors import (
    ConflictError,
    InvalidStatusTransitionError,
    NotFoundError,
    ValidationError,
)
from tradevault.domain.funding.entities import (
    DEPOSIT_TRANSITIONS,
    Deposit,
    DepositStatus,
    check_transition,
)
from tradevault.domain.ledger.entities import (
    ZERO,
    WalletEntryType,
    generate_reference,
    utc_now,
)
from tradevault.domain.notifications.entities import NotificationQueue
from tradevault.domain.unit_of_work import UnitOfWork

logger = logging.getLogger(__name__)


class CreateDepositUseCase:
    def __init__(
        self,
        uow_factory: Callable[[], UnitOfWork],
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self._uow_factory = uow_factory
        self._clock = clock

    def execute(self, command: CreateDepositCommand) -> Deposit:
        check_amount("Deposit", command.amount)
        if not command.method.strip():
            raise ValidationError("Deposit method is required", "method")

        now = self._clock()
        deposit = Deposit(
            user_id=command.user_id,
            amount=command.amount,
            method=command.method.strip(),
            transaction_hash=command.transaction_hash.strip(),
            proof_url=command.proof_url,
            created_at=now,
            updated_at=now,
            reference=generate_reference("DEP", now),
        )
        with self._uow_factory() as uow:
            uow.deposits.add(deposit)

        logger.info(
            "Deposit created: id=%s, user=%s, amount=%s",
            deposit.id,
            deposit.user_id,
            deposit.amount,
        )
        return deposit


class UpdateDepositStatusUseCase:
    """Admin approval or rejection of a pending deposit."""

    def __init__(
        self,
        uow_factory: Callable[[], UnitOfWork],
        notifications: NotificationQueue,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self._uow_factory = uow_factory
        self._notifications = notifications
        self._clock = clock

    def execute(self, deposit_id: str, status: str) -> Deposit:
        requested = parse_status(DepositStatus, status)
        now = self._clock()

        with self._uow_factory() as uow:
            deposit = uow.deposits.get(deposit_id)
            if deposit is None:
                raise NotFoundError("Deposit", deposit_id)
            if not check_transition(
                "Deposit", DEPOSIT_TRANSITIONS, deposit.status, requested
            ):
                return deposit

            flipped = uow.deposits.transition(deposit_id, deposit.status, requested, now)
            if not flipped:
                # Another request moved the row first.
                return self._current(uow, deposit_id, requested)

            if requested == DepositStatus.APPROVED:
                credit_wallet(
                    uow,
                    deposit.user_id,
                    deposit.amount,
                    WalletEntryType.DEPOSIT,
                    f"Deposit {deposit.reference} approved",
                    now,
                    source_id=deposit.id,
                    deposited=deposit.amount,
                )
            updated = uow.deposits.get(deposit_id)
            owner = uow.users.get(deposit.user_id)

        logger.info(
            "Deposit %s: %s -> %s", deposit_id, deposit.status.value, requested.value
        )
        notify_owner(
            self._notifications,
            owner,
            "deposit",
            updated.reference,
            updated.status.value,
            amount=updated.amount,
        )
        return updated

    @staticmethod
    def _current(
        uow: UnitOfWork, deposit_id: str, requested: DepositStatus
    ) -> Deposit:
        current = uow.deposits.get(deposit_id)
        if current is None:
            raise NotFoundError("Deposit", deposit_id)
        if current.status != requested:
            raise InvalidStatusTransitionError(
                "Deposit", current.status.value, requested.value
            )
        return current


class DeleteDepositUseCase:
    def __init__(self, uow_factory: Callable[[], UnitOfWork]) -> None:
        self._uow_factory = uow_factory

    def execute(self, deposit_id: str) -> None:
        with self._uow_factory() as uow:
            deposit = uow.deposits.get(deposit_id)
            if deposit is None:
                raise NotFoundError("Deposit", deposit_id)
            if deposit.status == DepositStatus.APPROVED:
                raise ConflictError("Approved deposits cannot be deleted")
            uow.deposits.delete(deposit_id)
        logger.info("Deposit deleted: id=%s", deposit_id)


class GetUserDepositsUseCase:
    """Returns the user's deposits and their approved total."""

    def __init__(self, uow_factory: Callable[[], UnitOfWork]) -> None:
        self._uow_factory = uow_factory

    def execute(self, user_id: str) -> UserDeposits:
        with self._uow_factory() as uow:
            deposits = uow.deposits.list_for_user(user_id)
        total = sum(
            (d.amount for d in deposits if d.status == DepositStatus.APPROVED), ZERO
        )
        return UserDeposits(deposits=deposits, total_approved=total)


class ListDepositsUseCase:
    def __init__(self, uow_factory: Callable[[], UnitOfWork]) -> None:
        self._uow_factory = uow_factory

    def execute(
        self, status: Optional[str] = None, limit: int = 100, offset: int = 0
    ) -> list[Deposit]:
        wanted = parse_status(DepositStatus, status) if status else None
        with self._uow_factory() as uow:
            return uow.deposits.list_all(status=wanted, limit=limit, offset=offset)
