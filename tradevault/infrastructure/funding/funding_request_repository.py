"""
Adapter: Fiat funding request repository.
"""

from datetime import datetime
from decimal import Decimal
from typing import Optional

from sqlalchemy import insert, select, update
from sqlalchemy.engine import Connection, RowMapping

from tradevault.domain.funding.entities import FundingRequest, FundingRequestStatus
from tradevault.domain.funding.ports import FundingRequestRepository
from tradevault.infrastructure.db.tables import funding_requests


def _to_entity(row: RowMapping) -> FundingRequest:
    return FundingRequest(
        id=row["id"],
        reference=row["reference"],
        user_id=row["user_id"],
        currency=row["currency"],
        amount=Decimal(str(row["amount"])),
        transaction_type=row["transaction_type"],
        name=row["name"],
        email=row["email"],
        image_urls=list(row["image_urls"] or []),
        status=FundingRequestStatus(row["status"]),
        credited_at=row["credited_at"],
        created_at=row["created_at"],
        updated_at=row["updated_at"],
    )


class SqlFundingRequestRepository(FundingRequestRepository):
    def __init__(self, conn: Connection) -> None:
        self._conn = conn

    def get(self, request_id: str) -> Optional[FundingRequest]:
        row = self._conn.execute(
            select(funding_requests).where(funding_requests.c.id == request_id)
        ).mappings().first()
        return _to_entity(row) if row else None

    def add(self, request: FundingRequest) -> None:
        self._conn.execute(
            insert(funding_requests).values(
                id=request.id,
                reference=request.reference,
                user_id=request.user_id,
                currency=request.currency,
                amount=request.amount,
                transaction_type=request.transaction_type,
                name=request.name,
                email=request.email,
                image_urls=list(request.image_urls),
                status=request.status.value,
                credited_at=request.credited_at,
                created_at=request.created_at,
                updated_at=request.created_at,
            )
        )

    def list_for_user(self, user_id: str) -> list[FundingRequest]:
        query = (
            select(funding_requests)
            .where(funding_requests.c.user_id == user_id)
            .order_by(funding_requests.c.created_at.desc())
        )
        return [_to_entity(r) for r in self._conn.execute(query).mappings()]

    def list_all(
        self,
        status: Optional[FundingRequestStatus] = None,
        limit: int = 100,
        offset: int = 0,
    ) -> list[FundingRequest]:
        query = select(funding_requests)
        if status is not None:
            query = query.where(funding_requests.c.status == status.value)
        query = (
            query.order_by(funding_requests.c.created_at.desc()).limit(limit).offset(offset)
        )
        return [_to_entity(r) for r in self._conn.execute(query).mappings()]

    def transition(
        self,
        request_id: str,
        current: FundingRequestStatus,
        new: FundingRequestStatus,
        at: datetime,
    ) -> bool:
        values = {"status": new.value, "updated_at": at}
        if new == FundingRequestStatus.APPROVED:
            values["credited_at"] = at
        result = self._conn.execute(
            update(funding_requests)
            .where(
                funding_requests.c.id == request_id,
                funding_requests.c.status == current.value,
            )
            .values(**values)
        )
        return result.rowcount == 1
