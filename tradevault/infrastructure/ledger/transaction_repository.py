"""
Adapter: Transaction repository.

Append-only store of buy/sell records. There is no update path.
"""

from decimal import Decimal
from typing import Optional

from sqlalchemy import insert, select
from sqlalchemy.engine import Connection, RowMapping

from tradevault.domain.ledger.entities import (
    AssetType,
    Transaction,
    TransactionStatus,
    TransactionType,
)
from tradevault.domain.ledger.ports import TransactionRepository
from tradevault.infrastructure.db.tables import transactions


def _optional_decimal(value) -> Optional[Decimal]:
    return Decimal(str(value)) if value is not None else None


def _to_entity(row: RowMapping) -> Transaction:
    return Transaction(
        id=row["id"],
        reference=row["reference"],
        user_id=row["user_id"],
        type=TransactionType(row["type"]),
        asset_type=AssetType(row["asset_type"]),
        symbol=row["symbol"],
        asset_name=row["asset_name"],
        quantity=Decimal(str(row["quantity"])),
        price=Decimal(str(row["price"])),
        total_amount=Decimal(str(row["total_amount"])),
        fees=Decimal(str(row["fees"])),
        net_amount=Decimal(str(row["net_amount"])),
        cost_basis=_optional_decimal(row["cost_basis"]),
        realized_gain=_optional_decimal(row["realized_gain"]),
        status=TransactionStatus(row["status"]),
        currency=row["currency"],
        created_at=row["created_at"],
    )


class SqlTransactionRepository(TransactionRepository):
    """SQL implementation of the transaction history."""

    def __init__(self, conn: Connection) -> None:
        self._conn = conn

    def add(self, transaction: Transaction) -> None:
        self._conn.execute(
            insert(transactions).values(
                id=transaction.id,
                reference=transaction.reference,
                user_id=transaction.user_id,
                type=transaction.type.value,
                asset_type=transaction.asset_type.value,
                symbol=transaction.symbol,
                asset_name=transaction.asset_name,
                quantity=transaction.quantity,
                price=transaction.price,
                total_amount=transaction.total_amount,
                fees=transaction.fees,
                net_amount=transaction.net_amount,
                cost_basis=transaction.cost_basis,
                realized_gain=transaction.realized_gain,
                status=transaction.status.value,
                currency=transaction.currency,
                created_at=transaction.created_at,
            )
        )

    def list_for_user(
        self,
        user_id: str,
        type: Optional[TransactionType] = None,
        asset_type: Optional[AssetType] = None,
        symbol: Optional[str] = None,
        limit: int = 50,
        offset: int = 0,
    ) -> list[Transaction]:
        query = select(transactions).where(transactions.c.user_id == user_id)
        if type is not None:
            query = query.where(transactions.c.type == type.value)
        if asset_type is not None:
            query = query.where(transactions.c.asset_type == asset_type.value)
        if symbol:
            query = query.where(transactions.c.symbol == symbol)
        query = (
            query.order_by(transactions.c.created_at.desc(), transactions.c.id)
            .limit(limit)
            .offset(offset)
        )
        return [_to_entity(r) for r in self._conn.execute(query).mappings()]
