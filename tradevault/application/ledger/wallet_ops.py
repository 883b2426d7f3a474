"""
Wallet movements shared by every use case that touches a balance.

Each helper performs the conditional balance update and writes the
matching WalletEntry inside the caller's unit of work.
"""

import logging
from datetime import datetime
from decimal import Decimal
from typing import Optional

from tradevault.domain.errors import ValidationError
from tradevault.domain.ledger.entities import (
    ZERO,
    WalletEntry,
    WalletEntryType,
    fits_money_column,
    generate_reference,
)
from tradevault.domain.unit_of_work import UnitOfWork

logger = logging.getLogger(__name__)


def _check_amount(amount: Decimal) -> None:
    if not fits_money_column(amount):
        raise ValidationError(
            "Amount must have at most 8 decimal places and fit the wallet", "amount"
        )


def credit_wallet(
    uow: UnitOfWork,
    user_id: str,
    amount: Decimal,
    entry_type: WalletEntryType,
    description: str,
    at: datetime,
    source_id: Optional[str] = None,
    deposited: Decimal = ZERO,
    withdrawn: Decimal = ZERO,
    invested: Decimal = ZERO,
) -> WalletEntry:
    """Add `amount` to the user's wallet and record the entry."""
    _check_amount(amount)
    new_balance = uow.wallets.credit(
        user_id, amount, at, deposited=deposited, withdrawn=withdrawn, invested=invested
    )
    entry = WalletEntry(
        user_id=user_id,
        type=entry_type,
        amount=amount,
        previous_balance=new_balance - amount,
        new_balance=new_balance,
        description=description,
        created_at=at,
        source_id=source_id,
        reference=generate_reference("WTX", at),
    )
    uow.wallet_entries.add(entry)
    logger.info(
        "Wallet credit: user=%s, type=%s, amount=%s", user_id, entry_type.value, amount
    )
    return entry


def debit_wallet(
    uow: UnitOfWork,
    user_id: str,
    amount: Decimal,
    entry_type: WalletEntryType,
    description: str,
    at: datetime,
    source_id: Optional[str] = None,
    withdrawn: Decimal = ZERO,
    invested: Decimal = ZERO,
) -> WalletEntry:
    """Subtract `amount` from the user's wallet and record the entry.

    Raises:
        InsufficientFundsError: If the balance does not cover the amount.
    """
    _check_amount(amount)
    new_balance = uow.wallets.debit(
        user_id, amount, at, withdrawn=withdrawn, invested=invested
    )
    entry = WalletEntry(
        user_id=user_id,
        type=entry_type,
        amount=amount,
        previous_balance=new_balance + amount,
        new_balance=new_balance,
        description=description,
        created_at=at,
        source_id=source_id,
        reference=generate_reference("WTX", at),
    )
    uow.wallet_entries.add(entry)
    logger.info(
        "Wallet debit: user=%s, type=%s, amount=%s", user_id, entry_type.value, amount
    )
    return entry
