"""
Adapter: Wallet and wallet entry repositories.

Balance changes are single UPDATE statements evaluated by the database:
a debit only matches when `balance_usd >= :amount`, so concurrent
debits cannot overdraw the wallet regardless of what was read earlier.
The daily withdrawal total is guarded the same way against the limit.
"""

from datetime import datetime, timedelta, timezone
from decimal import Decimal
from typing import Optional

from sqlalchemy import insert, or_, select, update
from sqlalchemy.engine import Connection, RowMapping
from sqlalchemy.exc import IntegrityError

from tradevault.domain.ledger.entities import (
    ZERO,
    Wallet,
    WalletEntry,
    WalletEntryType,
)
from tradevault.domain.ledger.errors import InsufficientFundsError
from tradevault.domain.ledger.ports import WalletEntryRepository, WalletRepository
from tradevault.infrastructure.db.tables import wallet_entries, wallets


def _to_wallet(row: RowMapping) -> Wallet:
    return Wallet(
        user_id=row["user_id"],
        balance_usd=Decimal(str(row["balance_usd"])),
        total_deposited=Decimal(str(row["total_deposited"])),
        total_withdrawn=Decimal(str(row["total_withdrawn"])),
        total_invested=Decimal(str(row["total_invested"])),
        withdrawal_limit=Decimal(str(row["withdrawal_limit"])),
        daily_withdrawn=Decimal(str(row["daily_withdrawn"])),
        last_withdrawal_reset=row["last_withdrawal_reset"],
        currency=row["currency"],
        version=row["version"],
        created_at=row["created_at"],
        updated_at=row["updated_at"],
    )


def _to_entry(row: RowMapping) -> WalletEntry:
    return WalletEntry(
        id=row["id"],
        reference=row["reference"],
        user_id=row["user_id"],
        type=WalletEntryType(row["type"]),
        amount=Decimal(str(row["amount"])),
        previous_balance=Decimal(str(row["previous_balance"])),
        new_balance=Decimal(str(row["new_balance"])),
        source_id=row["source_id"],
        description=row["description"],
        created_at=row["created_at"],
    )


class SqlWalletRepository(WalletRepository):
    """SQL implementation of wallet balances."""

    def __init__(self, conn: Connection, withdrawal_limit: Decimal) -> None:
        self._conn = conn
        self._withdrawal_limit = withdrawal_limit

    def get(self, user_id: str) -> Optional[Wallet]:
        row = self._conn.execute(
            select(wallets).where(wallets.c.user_id == user_id)
        ).mappings().first()
        return _to_wallet(row) if row else None

    def get_or_create(self, user_id: str, at: datetime) -> Wallet:
        wallet = self.get(user_id)
        if wallet is not None:
            return wallet
        wallet = Wallet(
            user_id=user_id,
            withdrawal_limit=self._withdrawal_limit,
            last_withdrawal_reset=at,
            created_at=at,
            updated_at=at,
        )
        try:
            with self._conn.begin_nested():
                self._conn.execute(
                    insert(wallets).values(
                        user_id=user_id,
                        balance_usd=ZERO,
                        total_deposited=ZERO,
                        total_withdrawn=ZERO,
                        total_invested=ZERO,
                        withdrawal_limit=wallet.withdrawal_limit,
                        daily_withdrawn=ZERO,
                        last_withdrawal_reset=at,
                        currency=wallet.currency,
                        version=0,
                        created_at=at,
                        updated_at=at,
                    )
                )
        except IntegrityError:
            # Created by a concurrent request since the read above.
            return self.get(user_id)
        return wallet

    def _balance(self, user_id: str) -> Decimal:
        value = self._conn.execute(
            select(wallets.c.balance_usd).where(wallets.c.user_id == user_id)
        ).scalar_one()
        return Decimal(str(value))

    def credit(
        self,
        user_id: str,
        amount: Decimal,
        at: datetime,
        deposited: Decimal = ZERO,
        withdrawn: Decimal = ZERO,
        invested: Decimal = ZERO,
    ) -> Decimal:
        self.get_or_create(user_id, at)
        self._conn.execute(
            update(wallets)
            .where(wallets.c.user_id == user_id)
            .values(
                balance_usd=wallets.c.balance_usd + amount,
                total_deposited=wallets.c.total_deposited + deposited,
                total_withdrawn=wallets.c.total_withdrawn + withdrawn,
                total_invested=wallets.c.total_invested + invested,
                version=wallets.c.version + 1,
                updated_at=at,
            )
        )
        return self._balance(user_id)

    def debit(
        self,
        user_id: str,
        amount: Decimal,
        at: datetime,
        withdrawn: Decimal = ZERO,
        invested: Decimal = ZERO,
    ) -> Decimal:
        self.get_or_create(user_id, at)
        result = self._conn.execute(
            update(wallets)
            .where(wallets.c.user_id == user_id, wallets.c.balance_usd >= amount)
            .values(
                balance_usd=wallets.c.balance_usd - amount,
                total_withdrawn=wallets.c.total_withdrawn + withdrawn,
                total_invested=wallets.c.total_invested + invested,
                version=wallets.c.version + 1,
                updated_at=at,
            )
        )
        if result.rowcount != 1:
            raise InsufficientFundsError(amount, self._balance(user_id))
        return self._balance(user_id)

    def reserve_daily_withdrawal(
        self, user_id: str, amount: Decimal, at: datetime
    ) -> bool:
        day_start = at.astimezone(timezone.utc).replace(
            hour=0, minute=0, second=0, microsecond=0
        )
        stamp = wallets.c.last_withdrawal_reset
        self._conn.execute(
            update(wallets)
            .where(
                wallets.c.user_id == user_id,
                or_(
                    stamp.is_(None),
                    stamp < day_start,
                    stamp >= day_start + timedelta(days=1),
                ),
            )
            .values(daily_withdrawn=ZERO, last_withdrawal_reset=at)
        )
        result = self._conn.execute(
            update(wallets)
            .where(
                wallets.c.user_id == user_id,
                wallets.c.daily_withdrawn + amount <= wallets.c.withdrawal_limit,
            )
            .values(
                daily_withdrawn=wallets.c.daily_withdrawn + amount,
                last_withdrawal_reset=at,
            )
        )
        return result.rowcount == 1


class SqlWalletEntryRepository(WalletEntryRepository):
    """SQL implementation of the wallet ledger."""

    def __init__(self, conn: Connection) -> None:
        self._conn = conn

    def add(self, entry: WalletEntry) -> None:
        self._conn.execute(
            insert(wallet_entries).values(
                id=entry.id,
                reference=entry.reference,
                user_id=entry.user_id,
                type=entry.type.value,
                amount=entry.amount,
                previous_balance=entry.previous_balance,
                new_balance=entry.new_balance,
                source_id=entry.source_id,
                description=entry.description,
                created_at=entry.created_at,
            )
        )

    def list_for_user(
        self, user_id: str, limit: int = 50, offset: int = 0
    ) -> list[WalletEntry]:
        query = (
            select(wallet_entries)
            .where(wallet_entries.c.user_id == user_id)
            .order_by(wallet_entries.c.created_at.desc(), wallet_entries.c.id)
            .limit(limit)
            .offset(offset)
        )
        return [_to_entry(r) for r in self._conn.execute(query).mappings()]
