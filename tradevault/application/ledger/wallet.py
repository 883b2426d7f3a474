"""
Use cases: Wallet balance, wallet ledger and admin adjustments.

Input: user id (and a signed amount for adjustments)
Output: Wallet / WalletEntry
Side effects: The wallet is created lazily on first read.
Failure cases:
    - ValidationError for a zero adjustment or missing reason
    - InsufficientFundsError if a negative adjustment exceeds the balance
"""

import logging
from datetime import datetime
from decimal import Decimal
from typing import Callable

from tradevault.application.ledger.wallet_ops import credit_wallet, debit_wallet
from tradevault.domain.errors import NotFoundError, ValidationError
from tradevault.domain.ledger.entities import (
    ZERO,
    Wallet,
    WalletEntry,
    WalletEntryType,
    utc_now,
)
from tradevault.domain.unit_of_work import UnitOfWork

logger = logging.getLogger(__name__)


class GetWalletUseCase:
    """Returns the user's wallet, creating an empty one if needed."""

    def __init__(
        self,
        uow_factory: Callable[[], UnitOfWork],
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self._uow_factory = uow_factory
        self._clock = clock

    def execute(self, user_id: str) -> Wallet:
        with self._uow_factory() as uow:
            wallet = uow.wallets.get_or_create(user_id, self._clock())
        wallet.balance_usd = max(wallet.balance_usd, ZERO)
        return wallet


class GetWalletEntriesUseCase:
    def __init__(self, uow_factory: Callable[[], UnitOfWork]) -> None:
        self._uow_factory = uow_factory

    def execute(self, user_id: str, limit: int = 50, offset: int = 0) -> list[WalletEntry]:
        with self._uow_factory() as uow:
            return uow.wallet_entries.list_for_user(user_id, limit=limit, offset=offset)


class AdjustWalletUseCase:
    """Admin credit (positive amount) or debit (negative amount) with a reason."""

    def __init__(
        self,
        uow_factory: Callable[[], UnitOfWork],
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self._uow_factory = uow_factory
        self._clock = clock

    def execute(
        self, user_id: str, amount: Decimal, reason: str, admin_id: str
    ) -> WalletEntry:
        if amount == ZERO:
            raise ValidationError("Adjustment amount cannot be zero", "amount")
        if not reason.strip():
            raise ValidationError("A reason is required", "reason")

        now = self._clock()
        description = f"Admin adjustment: {reason.strip()}"
        with self._uow_factory() as uow:
            if uow.users.get(user_id) is None:
                raise NotFoundError("User", user_id)
            if amount > ZERO:
                entry = credit_wallet(
                    uow, user_id, amount, WalletEntryType.ADJUSTMENT, description, now,
                    source_id=admin_id,
                )
            else:
                entry = debit_wallet(
                    uow, user_id, -amount, WalletEntryType.ADJUSTMENT, description, now,
                    source_id=admin_id,
                )

        logger.info(
            "Wallet adjusted: user=%s, amount=%s, by=%s", user_id, amount, admin_id
        )
        return entry
