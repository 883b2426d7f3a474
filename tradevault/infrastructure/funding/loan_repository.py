"""
Adapter: Loan repository.
"""

from datetime import datetime
from decimal import Decimal
from typing import Optional

from sqlalchemy import delete, insert, select, update
from sqlalchemy.engine import Connection, RowMapping

from tradevault.domain.funding.entities import Loan, LoanStatus
from tradevault.domain.funding.ports import LoanRepository
from tradevault.infrastructure.db.tables import loans


def _to_entity(row: RowMapping) -> Loan:
    return Loan(
        id=row["id"],
        reference=row["reference"],
        user_id=row["user_id"],
        loan_type=row["loan_type"],
        amount=Decimal(str(row["amount"])),
        term_months=row["term_months"],
        income=Decimal(str(row["income"])),
        employment_status=row["employment_status"],
        purpose=row["purpose"],
        status=LoanStatus(row["status"]),
        created_at=row["created_at"],
        updated_at=row["updated_at"],
    )


class SqlLoanRepository(LoanRepository):
    """SQL implementation of loan persistence."""

    def __init__(self, conn: Connection) -> None:
        self._conn = conn

    def get(self, loan_id: str) -> Optional[Loan]:
        row = self._conn.execute(
            select(loans).where(loans.c.id == loan_id)
        ).mappings().first()
        return _to_entity(row) if row else None

    def add(self, loan: Loan) -> None:
        self._conn.execute(
            insert(loans).values(
                id=loan.id,
                reference=loan.reference,
                user_id=loan.user_id,
                loan_type=loan.loan_type,
                amount=loan.amount,
                term_months=loan.term_months,
                income=loan.income,
                employment_status=loan.employment_status,
                purpose=loan.purpose,
                status=loan.status.value,
                created_at=loan.created_at,
                updated_at=loan.created_at,
            )
        )

    def list_for_user(self, user_id: str) -> list[Loan]:
        query = (
            select(loans)
            .where(loans.c.user_id == user_id)
            .order_by(loans.c.created_at.desc())
        )
        return [_to_entity(r) for r in self._conn.execute(query).mappings()]

    def list_all(
        self, status: Optional[LoanStatus] = None, limit: int = 100, offset: int = 0
    ) -> list[Loan]:
        query = select(loans)
        if status is not None:
            query = query.where(loans.c.status == status.value)
        query = query.order_by(loans.c.created_at.desc()).limit(limit).offset(offset)
        return [_to_entity(r) for r in self._conn.execute(query).mappings()]

    def transition(
        self, loan_id: str, current: LoanStatus, new: LoanStatus, at: datetime
    ) -> bool:
        result = self._conn.execute(
            update(loans)
            .where(loans.c.id == loan_id, loans.c.status == current.value)
            .values(status=new.value, updated_at=at)
        )
        return result.rowcount == 1

    def delete(self, loan_id: str) -> None:
        self._conn.execute(delete(loans).where(loans.c.id == loan_id))
