"""
Adapter: Withdrawal repository.
"""

from datetime import datetime
from decimal import Decimal
from typing import Optional

from sqlalchemy import insert, select, update
from sqlalchemy.engine import Connection, RowMapping

from tradevault.domain.funding.entities import (
    Withdrawal,
    WithdrawalMethod,
    WithdrawalStatus,
)
from tradevault.domain.funding.ports import WithdrawalRepository
from tradevault.infrastructure.db.tables import withdrawals

_DESTINATION_FIELDS = (
    "wallet_address",
    "network",
    "bank_name",
    "account_number",
    "routing_number",
    "account_holder",
    "cashtag",
)


def _to_entity(row: RowMapping) -> Withdrawal:
    return Withdrawal(
        id=row["id"],
        reference=row["reference"],
        user_id=row["user_id"],
        amount=Decimal(str(row["amount"])),
        method=WithdrawalMethod(row["method"]),
        status=WithdrawalStatus(row["status"]),
        tx_hash=row["tx_hash"],
        created_at=row["created_at"],
        updated_at=row["updated_at"],
        **{name: row[name] for name in _DESTINATION_FIELDS},
    )


class SqlWithdrawalRepository(WithdrawalRepository):
    """SQL implementation of withdrawal persistence."""

    def __init__(self, conn: Connection) -> None:
        self._conn = conn

    def get(self, withdrawal_id: str) -> Optional[Withdrawal]:
        row = self._conn.execute(
            select(withdrawals).where(withdrawals.c.id == withdrawal_id)
        ).mappings().first()
        return _to_entity(row) if row else None

    def add(self, withdrawal: Withdrawal) -> None:
        self._conn.execute(
            insert(withdrawals).values(
                id=withdrawal.id,
                reference=withdrawal.reference,
                user_id=withdrawal.user_id,
                amount=withdrawal.amount,
                method=withdrawal.method.value,
                status=withdrawal.status.value,
                tx_hash=withdrawal.tx_hash,
                created_at=withdrawal.created_at,
                updated_at=withdrawal.created_at,
                **{name: getattr(withdrawal, name) for name in _DESTINATION_FIELDS},
            )
        )

    def list_for_user(self, user_id: str) -> list[Withdrawal]:
        query = (
            select(withdrawals)
            .where(withdrawals.c.user_id == user_id)
            .order_by(withdrawals.c.created_at.desc())
        )
        return [_to_entity(r) for r in self._conn.execute(query).mappings()]

    def list_all(
        self,
        status: Optional[WithdrawalStatus] = None,
        limit: int = 100,
        offset: int = 0,
    ) -> list[Withdrawal]:
        query = select(withdrawals)
        if status is not None:
            query = query.where(withdrawals.c.status == status.value)
        query = query.order_by(withdrawals.c.created_at.desc()).limit(limit).offset(offset)
        return [_to_entity(r) for r in self._conn.execute(query).mappings()]

    def transition(
        self,
        withdrawal_id: str,
        current: WithdrawalStatus,
        new: WithdrawalStatus,
        at: datetime,
        tx_hash: Optional[str] = None,
    ) -> bool:
        values = {"status": new.value, "updated_at": at}
        if tx_hash:
            values["tx_hash"] = tx_hash
        result = self._conn.execute(
            update(withdrawals)
            .where(
                withdrawals.c.id == withdrawal_id,
                withdrawals.c.status == current.value,
            )
            .values(**values)
        )
        return result.rowcount == 1
