"""
Use cases: Loans.

An approved loan credits its principal to the wallet once (LOAN entry).
Repayment schedules are not modelled.
"""

import logging
from datetime import datetime
from typing import Callable, Optional

from tradevault.application.funding.dtos import CreateLoanCommand
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
    LOAN_TRANSITIONS,
    Loan,
    LoanStatus,
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


class CreateLoanUseCase:
    def __init__(
        self,
        uow_factory: Callable[[], UnitOfWork],
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self._uow_factory = uow_factory
        self._clock = clock

    def execute(self, command: CreateLoanCommand) -> Loan:
        check_amount("Loan", command.amount)
        if command.term_months <= 0:
            raise ValidationError("Loan term must be at least one month", "term_months")
        if command.income < ZERO:
            raise ValidationError("Income cannot be negative", "income")
        if not command.loan_type.strip():
            raise ValidationError("Loan type is required", "loan_type")

        now = self._clock()
        loan = Loan(
            user_id=command.user_id,
            loan_type=command.loan_type.strip(),
            amount=command.amount,
            term_months=command.term_months,
            income=command.income,
            employment_status=command.employment_status.strip(),
            purpose=command.purpose.strip(),
            created_at=now,
            updated_at=now,
            reference=generate_reference("LN", now),
        )
        with self._uow_factory() as uow:
            uow.loans.add(loan)

        logger.info(
            "Loan application: id=%s, user=%s, amount=%s, term=%d",
            loan.id,
            loan.user_id,
            loan.amount,
            loan.term_months,
        )
        return loan


class UpdateLoanStatusUseCase:
    def __init__(
        self,
        uow_factory: Callable[[], UnitOfWork],
        notifications: NotificationQueue,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self._uow_factory = uow_factory
        self._notifications = notifications
        self._clock = clock

    def execute(self, loan_id: str, status: str) -> Loan:
        requested = parse_status(LoanStatus, status)
        now = self._clock()

        with self._uow_factory() as uow:
            loan = uow.loans.get(loan_id)
            if loan is None:
                raise NotFoundError("Loan", loan_id)
            if not check_transition("Loan", LOAN_TRANSITIONS, loan.status, requested):
                return loan

            if not uow.loans.transition(loan_id, loan.status, requested, now):
                current = uow.loans.get(loan_id)
                if current.status != requested:
                    raise InvalidStatusTransitionError(
                        "Loan", current.status.value, requested.value
                    )
                return current

            if requested == LoanStatus.APPROVED:
                credit_wallet(
                    uow,
                    loan.user_id,
                    loan.amount,
                    WalletEntryType.LOAN,
                    f"Loan {loan.reference} disbursed",
                    now,
                    source_id=loan.id,
                )
            updated = uow.loans.get(loan_id)
            owner = uow.users.get(loan.user_id)

        logger.info("Loan %s: %s -> %s", loan_id, loan.status.value, requested.value)
        notify_owner(
            self._notifications,
            owner,
            "loan",
            updated.reference,
            updated.status.value,
            amount=updated.amount,
        )
        return updated


class DeleteLoanUseCase:
    def __init__(self, uow_factory: Callable[[], UnitOfWork]) -> None:
        self._uow_factory = uow_factory

    def execute(self, loan_id: str) -> None:
        with self._uow_factory() as uow:
            loan = uow.loans.get(loan_id)
            if loan is None:
                raise NotFoundError("Loan", loan_id)
            if loan.status == LoanStatus.APPROVED:
                raise ConflictError("Approved loans cannot be deleted")
            uow.loans.delete(loan_id)
        logger.info("Loan deleted: id=%s", loan_id)


class GetUserLoansUseCase:
    def __init__(self, uow_factory: Callable[[], UnitOfWork]) -> None:
        self._uow_factory = uow_factory

    def execute(self, user_id: str) -> list[Loan]:
        with self._uow_factory() as uow:
            return uow.loans.list_for_user(user_id)


class ListLoansUseCase:
    def __init__(self, uow_factory: Callable[[], UnitOfWork]) -> None:
        self._uow_factory = uow_factory

    def execute(
        self, status: Optional[str] = None, limit: int = 100, offset: int = 0
    ) -> list[Loan]:
        wanted = parse_status(LoanStatus, status) if status else None
        with self._uow_factory() as uow:
            return uow.loans.list_all(status=wanted, limit=limit, offset=offset)
