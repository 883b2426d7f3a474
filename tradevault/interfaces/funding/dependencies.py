"""
Dependency injection for the funding bounded context.
"""

from typing import Callable

from fastapi import Depends

from tradevault.application.funding.deposits import (
    CreateDepositUseCase,
    DeleteDepositUseCase,
    GetUserDepositsUseCase,
    ListDepositsUseCase,
    UpdateDepositStatusUseCase,
)
from tradevault.application.funding.funding_requests import (
    ListFundingRequestsUseCase,
    ReviewFundingRequestUseCase,
    SubmitFundingRequestUseCase,
)
from tradevault.application.funding.loans import (
    CreateLoanUseCase,
    DeleteLoanUseCase,
    GetUserLoansUseCase,
    ListLoansUseCase,
    UpdateLoanStatusUseCase,
)
from tradevault.application.funding.withdrawals import (
    CreateWithdrawalUseCase,
    GetUserWithdrawalsUseCase,
    ListWithdrawalsUseCase,
    UpdateWithdrawalStatusUseCase,
)
from tradevault.domain.notifications.entities import NotificationQueue
from tradevault.domain.unit_of_work import UnitOfWork
from tradevault.interfaces.dependencies import get_notification_queue, get_uow_factory

UowFactory = Callable[[], UnitOfWork]


# ── Deposits ─────────────────────────────────────────────────────


def get_create_deposit_use_case(
    uow_factory: UowFactory = Depends(get_uow_factory),
) -> CreateDepositUseCase:
    return CreateDepositUseCase(uow_factory)


def get_update_deposit_status_use_case(
    uow_factory: UowFactory = Depends(get_uow_factory),
    notifications: NotificationQueue = Depends(get_notification_queue),
) -> UpdateDepositStatusUseCase:
    """Approval credits the wallet, so this one needs the email queue too."""
    return UpdateDepositStatusUseCase(uow_factory, notifications)


def get_delete_deposit_use_case(
    uow_factory: UowFactory = Depends(get_uow_factory),
) -> DeleteDepositUseCase:
    return DeleteDepositUseCase(uow_factory)


def get_user_deposits_use_case(
    uow_factory: UowFactory = Depends(get_uow_factory),
) -> GetUserDepositsUseCase:
    return GetUserDepositsUseCase(uow_factory)


def get_list_deposits_use_case(
    uow_factory: UowFactory = Depends(get_uow_factory),
) -> ListDepositsUseCase:
    return ListDepositsUseCase(uow_factory)


# ── Withdrawals ──────────────────────────────────────────────────


def get_create_withdrawal_use_case(
    uow_factory: UowFactory = Depends(get_uow_factory),
) -> CreateWithdrawalUseCase:
    return CreateWithdrawalUseCase(uow_factory)


def get_update_withdrawal_status_use_case(
    uow_factory: UowFactory = Depends(get_uow_factory),
    notifications: NotificationQueue = Depends(get_notification_queue),
) -> UpdateWithdrawalStatusUseCase:
    return UpdateWithdrawalStatusUseCase(uow_factory, notifications)


def get_user_withdrawals_use_case(
    uow_factory: UowFactory = Depends(get_uow_factory),
) -> GetUserWithdrawalsUseCase:
    return GetUserWithdrawalsUseCase(uow_factory)


def get_list_withdrawals_use_case(
    uow_factory: UowFactory = Depends(get_uow_factory),
) -> ListWithdrawalsUseCase:
    return ListWithdrawalsUseCase(uow_factory)


# ── Loans ────────────────────────────────────────────────────────


def get_create_loan_use_case(
    uow_factory: UowFactory = Depends(get_uow_factory),
) -> CreateLoanUseCase:
    return CreateLoanUseCase(uow_factory)


def get_update_loan_status_use_case(
    uow_factory: UowFactory = Depends(get_uow_factory),
    notifications: NotificationQueue = Depends(get_notification_queue),
) -> UpdateLoanStatusUseCase:
    return UpdateLoanStatusUseCase(uow_factory, notifications)


def get_delete_loan_use_case(
    uow_factory: UowFactory = Depends(get_uow_factory),
) -> DeleteLoanUseCase:
    return DeleteLoanUseCase(uow_factory)


def get_user_loans_use_case(
    uow_factory: UowFactory = Depends(get_uow_factory),
) -> GetUserLoansUseCase:
    return GetUserLoansUseCase(uow_factory)


def get_list_loans_use_case(
    uow_factory: UowFactory = Depends(get_uow_factory),
) -> ListLoansUseCase:
    return ListLoansUseCase(uow_factory)


# ── Fiat funding requests ────────────────────────────────────────


def get_submit_funding_request_use_case(
    uow_factory: UowFactory = Depends(get_uow_factory),
) -> SubmitFundingRequestUseCase:
    return SubmitFundingRequestUseCase(uow_factory)


def get_review_funding_request_use_case(
    uow_factory: UowFactory = Depends(get_uow_factory),
    notifications: NotificationQueue = Depends(get_notification_queue),
) -> ReviewFundingRequestUseCase:
    return ReviewFundingRequestUseCase(uow_factory, notifications)


def get_list_funding_requests_use_case(
    uow_factory: UowFactory = Depends(get_uow_factory),
) -> ListFundingRequestsUseCase:
    return ListFundingRequestsUseCase(uow_factory)
