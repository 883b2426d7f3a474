"""
Use cases: Withdrawals.

Funds are reserved when the request is created: the wallet is debited
with a WITHDRAWAL entry, bounded by the balance and the daily limit.
If an admin later marks the withdrawal failed, the reserved amount is
refunded once with a REFUND entry.

Failure cases:
    - ValidationError for a bad amount, method or missing destination
    - WithdrawalLimitExceededError when the daily limit would be exceeded
    - InsufficientFundsError when the balance does not cover the amount
    - InvalidStatusTransitionError for a change the status machine forbids
"""

import logging
from datetime import datetime
from decimal import Decimal
from typing import Callable, Optional

from tradevault.application.funding.dtos import CreateWithdrawalCommand
from tradevault.application.funding.status import (
    check_amount,
    notify_owner,
    parse_status,
)
from tradevault.application.ledger.wallet_ops import credit_wallet, debit_wallet
from tradevault.domain.errors import (
    InvalidStatusTransitionError,
    NotFoundError,
    ValidationError,
)
from tradevault.domain.funding.entities import (
    WITHDRAWAL_TRANSITIONS,
    Withdrawal,
    WithdrawalMethod,
    WithdrawalStatus,
    check_transition,
)
from tradevault.domain.ledger.entities import (
    ZERO,
    Wallet,
    WalletEntryType,
    generate_reference,
    utc_now,
)
from tradevault.domain.ledger.errors import WithdrawalLimitExceededError
from tradevault.domain.notifications.entities import NotificationQueue
from tradevault.domain.unit_of_work import UnitOfWork

logger = logging.getLogger(__name__)

_REQUIRED_DESTINATION = {
    WithdrawalMethod.CRYPTO: ("wallet_address",),
    WithdrawalMethod.BANK: ("bank_name", "account_number", "account_holder"),
    WithdrawalMethod.CASHAPP: ("cashtag",),
}


def withdrawn_today(wallet: Wallet, now: datetime) -> Decimal:
    """Daily total, reset when the UTC calendar day has changed."""
    reset = wallet.last_withdrawal_reset
    if reset is None or reset.date() != now.date():
        return ZERO
    return wallet.daily_withdrawn


class CreateWithdrawalUseCase:
    def __init__(
        self,
        uow_factory: Callable[[], UnitOfWork],
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self._uow_factory = uow_factory
        self._clock = clock

    def execute(self, command: CreateWithdrawalCommand) -> Withdrawal:
        check_amount("Withdrawal", command.amount)
        try:
            method = WithdrawalMethod(command.method.strip().lower())
        except ValueError:
            raise ValidationError(
                f"Unsupported withdrawal method: {command.method}", "method"
            ) from None
        for name in _REQUIRED_DESTINATION[method]:
            if not (getattr(command, name) or "").strip():
                raise ValidationError(
                    f"{name} is required for {method.value} withdrawals", name
                )

        now = self._clock()
        withdrawal = Withdrawal(
            user_id=command.user_id,
            amount=command.amount,
            method=method,
            created_at=now,
            updated_at=now,
            wallet_address=command.wallet_address,
            network=command.network,
            bank_name=command.bank_name,
            account_number=command.account_number,
            routing_number=command.routing_number,
            account_holder=command.account_holder,
            cashtag=command.cashtag,
            reference=generate_reference("WDR", now),
        )

        with self._uow_factory() as uow:
            uow.wallets.get_or_create(command.user_id, now)
            if not uow.wallets.reserve_daily_withdrawal(
                command.user_id, command.amount, now
            ):
                wallet = uow.wallets.get(command.user_id)
                remaining = wallet.withdrawal_limit - withdrawn_today(wallet, now)
                raise WithdrawalLimitExceededError(max(remaining, ZERO))

            uow.withdrawals.add(withdrawal)
            debit_wallet(
                uow,
                command.user_id,
                command.amount,
                WalletEntryType.WITHDRAWAL,
                f"Withdrawal {withdrawal.reference} via {method.value}",
                now,
                source_id=withdrawal.id,
                withdrawn=command.amount,
            )

        logger.info(
            "Withdrawal created: id=%s, user=%s, amount=%s, method=%s",
            withdrawal.id,
            withdrawal.user_id,
            withdrawal.amount,
            method.value,
        )
        return withdrawal


class UpdateWithdrawalStatusUseCase:
    """Admin processing of a withdrawal. `failed` refunds the reservation."""

    def __init__(
        self,
        uow_factory: Callable[[], UnitOfWork],
        notifications: NotificationQueue,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self._uow_factory = uow_factory
        self._notifications = notifications
        self._clock = clock

    def execute(
        self, withdrawal_id: str, status: str, tx_hash: Optional[str] = None
    ) -> Withdrawal:
        requested = parse_status(WithdrawalStatus, status)
        now = self._clock()

        with self._uow_factory() as uow:
            withdrawal = uow.withdrawals.get(withdrawal_id)
            if withdrawal is None:
                raise NotFoundError("Withdrawal", withdrawal_id)
            if not check_transition(
                "Withdrawal", WITHDRAWAL_TRANSITIONS, withdrawal.status, requested
            ):
                return withdrawal

            if not uow.withdrawals.transition(
                withdrawal_id, withdrawal.status, requested, now, tx_hash=tx_hash
            ):
                current = uow.withdrawals.get(withdrawal_id)
                if current.status != requested:
                    raise InvalidStatusTransitionError(
                        "Withdrawal", current.status.value, requested.value
                    )
                return current

            if requested == WithdrawalStatus.FAILED:
                credit_wallet(
                    uow,
                    withdrawal.user_id,
                    withdrawal.amount,
                    WalletEntryType.REFUND,
                    f"Refund of failed withdrawal {withdrawal.reference}",
                    now,
                    source_id=withdrawal.id,
                    withdrawn=-withdrawal.amount,
                )
            updated = uow.withdrawals.get(withdrawal_id)
            owner = uow.users.get(withdrawal.user_id)

        logger.info(
            "Withdrawal %s: %s -> %s",
            withdrawal_id,
            withdrawal.status.value,
            requested.value,
        )
        notify_owner(
            self._notifications,
            owner,
            "withdrawal",
            updated.reference,
            updated.status.value,
            amount=updated.amount,
        )
        return updated


class GetUserWithdrawalsUseCase:
    def __init__(self, uow_factory: Callable[[], UnitOfWork]) -> None:
        self._uow_factory = uow_factory

    def execute(self, user_id: str) -> list[Withdrawal]:
        with self._uow_factory() as uow:
            return uow.withdrawals.list_for_user(user_id)


class ListWithdrawalsUseCase:
    def __init__(self, uow_factory: Callable[[], UnitOfWork]) -> None:
        self._uow_factory = uow_factory

    def execute(
        self, status: Optional[str] = None, limit: int = 100, offset: int = 0
    ) -> list[Withdrawal]:
        wanted = parse_status(WithdrawalStatus, status) if status else None
        with self._uow_factory() as uow:
            return uow.withdrawals.list_all(status=wanted, limit=limit, offset=offset)
