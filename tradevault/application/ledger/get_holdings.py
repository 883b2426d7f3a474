"""
Use cases: Read-only holding and transaction queries.

Input: user id plus optional filters
Output: Holding / Transaction entities
Side effects: None (read-only queries).
Failure cases: HoldingNotFoundError for a missing single holding.
"""

import logging
from typing import Callable, Optional

from tradevault.application.ledger.dtos import TransactionsQuery
from tradevault.domain.ledger.entities import AssetType, Holding, Transaction
from tradevault.domain.ledger.errors import HoldingNotFoundError
from tradevault.domain.unit_of_work import UnitOfWork

logger = logging.getLogger(__name__)


class GetHoldingsUseCase:
    """Lists a user's holdings, optionally of one asset type."""

    def __init__(self, uow_factory: Callable[[], UnitOfWork]) -> None:
        self._uow_factory = uow_factory

    def execute(self, user_id: str, asset_type: Optional[AssetType] = None) -> list[Holding]:
        with self._uow_factory() as uow:
            return uow.holdings.list_for_user(user_id, asset_type)


class GetHoldingUseCase:
    def __init__(self, uow_factory: Callable[[], UnitOfWork]) -> None:
        self._uow_factory = uow_factory

    def execute(self, user_id: str, asset_type: AssetType, symbol: str) -> Holding:
        if asset_type == AssetType.STOCK:
            symbol = symbol.upper()
        with self._uow_factory() as uow:
            holding = uow.holdings.get(user_id, asset_type, symbol)
        if holding is None:
            raise HoldingNotFoundError(symbol)
        return holding


class GetAllHoldingsUseCase:
    """Admin view across every user."""

    def __init__(self, uow_factory: Callable[[], UnitOfWork]) -> None:
        self._uow_factory = uow_factory

    def execute(self, limit: int = 100, offset: int = 0) -> list[Holding]:
        with self._uow_factory() as uow:
            return uow.holdings.list_all(limit=limit, offset=offset)


class GetTransactionsUseCase:
    """Lists a user's transactions, newest first."""

    def __init__(self, uow_factory: Callable[[], UnitOfWork]) -> None:
        self._uow_factory = uow_factory

    def execute(self, query: TransactionsQuery) -> list[Transaction]:
        logger.info(
            "Retrieving transactions: user=%s, type=%s, symbol=%s, limit=%d",
            query.user_id,
            query.type.value if query.type else None,
            query.symbol,
            query.limit,
        )
        with self._uow_factory() as uow:
            return uow.transactions.list_for_user(
                query.user_id,
                type=query.type,
                asset_type=query.asset_type,
                symbol=query.symbol.upper() if query.symbol else None,
                limit=query.limit,
                offset=query.offset,
            )


class GetRecentTransactionsUseCase:
    def __init__(self, uow_factory: Callable[[], UnitOfWork]) -> None:
        self._uow_factory = uow_factory

    def execute(self, user_id: str, limit: int = 10) -> list[Transaction]:
        with self._uow_factory() as uow:
            return uow.transactions.list_for_user(user_id, limit=limit)
