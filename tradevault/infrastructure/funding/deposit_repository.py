"""
Adapter: Deposit repository.

Status changes are compare-and-set updates on the status column.
"""

from datetime import datetime
from decimal import Decimal
from typing import Optional

from sqlalchemy import delete, insert, select, update
from sqlalchemy.engine import Connection, RowMapping

from tradevault.domain.funding.entities import Deposit, DepositStatus
from tradevault.domain.funding.ports import DepositRepository
from tradevault.infrastructure.db.tables import deposits


def _to_entity(row: RowMapping) -> Deposit:
    return Deposit(
        id=row["id"],
        reference=row["reference"],
        user_id=row["user_id"],
        amount=Decimal(str(row["amount"])),
        method=row["method"],
        transaction_hash=row["transaction_hash"],
        proof_url=row["proof_url"],
        status=DepositStatus(row["status"]),
        credited_at=row["credited_at"],
        created_at=row["created_at"],
        updated_at=row["updated_at"],
    )


class SqlDepositRepository(DepositRepository):
    """SQL implementation of deposit persistence."""

    def __init__(self, conn: Connection) -> None:
        self._conn = conn

    def get(self, deposit_id: str) -> Optional[Deposit]:
        row = self._conn.execute(
            select(deposits).where(deposits.c.id == deposit_id)
        ).mappings().first()
        return _to_entity(row) if row else None

    def add(self, deposit: Deposit) -> None:
        self._conn.execute(
            insert(deposits).values(
                id=deposit.id,
                reference=deposit.reference,
                user_id=deposit.user_id,
                amount=deposit.amount,
                method=deposit.method,
                transaction_hash=deposit.transaction_hash,
                proof_url=deposit.proof_url,
                status=deposit.status.value,
                credited_at=deposit.credited_at,
                created_at=deposit.created_at,
                updated_at=deposit.created_at,
            )
        )

    def list_for_user(self, user_id: str) -> list[Deposit]:
        query = (
            select(deposits)
            .where(deposits.c.user_id == user_id)
            .order_by(deposits.c.created_at.desc())
        )
        return [_to_entity(r) for r in self._conn.execute(query).mappings()]

    def list_all(
        self, status: Optional[DepositStatus] = None, limit: int = 100, offset: int = 0
    ) -> list[Deposit]:
        query = select(deposits)
        if status is not None:
            query = query.where(deposits.c.status == status.value)
        query = query.order_by(deposits.c.created_at.desc()).limit(limit).offset(offset)
        return [_to_entity(r) for r in self._conn.execute(query).mappings()]

    def transition(
        self,
        deposit_id: str,
        current: DepositStatus,
        new: DepositStatus,
        at: datetime,
    ) -> bool:
        values = {"status": new.value, "updated_at": at}
        if new == DepositStatus.APPROVED:
            values["credited_at"] = at
        result = self._conn.execute(
            update(deposits)
            .where(deposits.c.id == deposit_id, deposits.c.status == current.value)
            .values(**values)
        )
        return result.rowcount == 1

    def delete(self, deposit_id: str) -> None:
        self._conn.execute(delete(deposits).where(deposits.c.id == deposit_id))
