"""
Adapter: Holding repository.

Implements HoldingRepository port on a SQLAlchemy connection.
Updates and deletes carry `WHERE version = :read_version`; a write
that matches no row means another request changed the holding first.
"""

from datetime import datetime
from decimal import Decimal
from typing import Optional

from sqlalchemy import delete, func, insert, select, update
from sqlalchemy.engine import Connection, RowMapping
from sqlalchemy.exc import IntegrityError

from tradevault.domain.ledger.entities import AssetType, Holding, PurchaseLot
from tradevault.domain.ledger.errors import ConcurrentUpdateError
from tradevault.domain.ledger.ports import HoldingRepository
from tradevault.infrastructure.db.tables import holdings


def _lot_to_json(lot: PurchaseLot) -> dict:
    return {
        "date": lot.date.isoformat(),
        "quantity": str(lot.quantity),
        "price": str(lot.price),
        "fees": str(lot.fees),
    }


def _lot_from_json(data: dict) -> PurchaseLot:
    return PurchaseLot(
        date=datetime.fromisoformat(data["date"]),
        quantity=Decimal(data["quantity"]),
        price=Decimal(data["price"]),
        fees=Decimal(data.get("fees", "0")),
    )


def _to_entity(row: RowMapping) -> Holding:
    return Holding(
        id=row["id"],
        user_id=row["user_id"],
        symbol=row["symbol"],
        asset_type=AssetType(row["asset_type"]),
        name=row["name"],
        quantity=Decimal(str(row["quantity"])),
        avg_purchase_price=Decimal(str(row["avg_purchase_price"])),
        total_invested=Decimal(str(row["total_invested"])),
        purchase_history=[_lot_from_json(lot) for lot in row["purchase_history"]],
        currency=row["currency"],
        version=row["version"],
        created_at=row["created_at"],
        updated_at=row["updated_at"],
    )


def _values(holding: Holding) -> dict:
    return {
        "name": holding.name,
        "quantity": holding.quantity,
        "avg_purchase_price": holding.avg_purchase_price,
        "total_invested": holding.total_invested,
        "purchase_history": [_lot_to_json(lot) for lot in holding.purchase_history],
        "currency": holding.currency,
        "updated_at": holding.updated_at,
    }


class SqlHoldingRepository(HoldingRepository):
    """SQL implementation of the holding repository."""

    def __init__(self, conn: Connection) -> None:
        self._conn = conn

    def get(
        self, user_id: str, asset_type: AssetType, symbol: str
    ) -> Optional[Holding]:
        row = self._conn.execute(
            select(holdings).where(
                holdings.c.user_id == user_id,
                holdings.c.asset_type == asset_type.value,
                holdings.c.symbol == symbol,
            )
        ).mappings().first()
        return _to_entity(row) if row else None

    def list_for_user(
        self, user_id: str, asset_type: Optional[AssetType] = None
    ) -> list[Holding]:
        query = select(holdings).where(holdings.c.user_id == user_id)
        if asset_type is not None:
            query = query.where(holdings.c.asset_type == asset_type.value)
        query = query.order_by(holdings.c.created_at.desc())
        return [_to_entity(r) for r in self._conn.execute(query).mappings()]

    def list_all(self, limit: int = 100, offset: int = 0) -> list[Holding]:
        query = (
            select(holdings)
            .order_by(holdings.c.updated_at.desc())
            .limit(limit)
            .offset(offset)
        )
        return [_to_entity(r) for r in self._conn.execute(query).mappings()]

    def count_for_symbol(self, asset_type: AssetType, symbol: str) -> int:
        return self._conn.execute(
            select(func.count())
            .select_from(holdings)
            .where(
                holdings.c.asset_type == asset_type.value,
                holdings.c.symbol == symbol,
            )
        ).scalar_one()

    def add(self, holding: Holding) -> Holding:
        try:
            self._conn.execute(
                insert(holdings).values(
                    id=holding.id,
                    user_id=holding.user_id,
                    symbol=holding.symbol,
                    asset_type=holding.asset_type.value,
                    version=0,
                    created_at=holding.created_at,
                    **_values(holding),
                )
            )
        except IntegrityError as exc:
            # Another request opened the same position first.
            raise ConcurrentUpdateError("Holding", holding.symbol) from exc
        holding.version = 0
        return holding

    def update(self, holding: Holding) -> Holding:
        result = self._conn.execute(
            update(holdings)
            .where(holdings.c.id == holding.id, holdings.c.version == holding.version)
            .values(version=holding.version + 1, **_values(holding))
        )
        if result.rowcount != 1:
            raise ConcurrentUpdateError("Holding", holding.symbol)
        holding.version += 1
        return holding

    def delete(self, holding: Holding) -> None:
        result = self._conn.execute(
            delete(holdings).where(
                holdings.c.id == holding.id, holdings.c.version == holding.version
            )
        )
        if result.rowcount != 1:
            raise ConcurrentUpdateError("Holding", holding.symbol)
