"""
Use cases: Market quotes and admin price overrides.
"""

import logging
from datetime import datetime
from decimal import Decimal
from typing import Callable

from tradevault.domain.errors import ValidationError
from tradevault.domain.ledger.entities import ZERO, AdminPrice, Quote, utc_now
from tradevault.domain.ledger.ports import MarketDataPort
from tradevault.domain.unit_of_work import UnitOfWork

logger = logging.getLogger(__name__)


class GetQuoteUseCase:
    """Returns the latest quote for a symbol.

    Failure cases: ExternalServiceError when the provider is unavailable.
    """

    def __init__(self, market_data: MarketDataPort) -> None:
        self._market_data = market_data

    def execute(self, symbol: str) -> Quote:
        symbol = symbol.strip().upper()
        if not symbol:
            raise ValidationError("Symbol is required", "symbol")
        return self._market_data.get_quote(symbol)


class SetAdminPriceUseCase:
    """Replaces the active price override for a symbol."""

    def __init__(
        self,
        uow_factory: Callable[[], UnitOfWork],
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self._uow_factory = uow_factory
        self._clock = clock

    def execute(self, symbol: str, price: Decimal, reason: str, admin_id: str) -> AdminPrice:
        symbol = symbol.strip().upper()
        if not symbol:
            raise ValidationError("Symbol is required", "symbol")
        if price <= ZERO:
            raise ValidationError("Price must be greater than zero", "price")

        override = AdminPrice(
            symbol=symbol,
            price=price,
            created_by=admin_id,
            created_at=self._clock(),
            reason=reason,
        )
        with self._uow_factory() as uow:
            uow.admin_prices.set_active(override)

        logger.info("Admin price set: symbol=%s, price=%s, by=%s", symbol, price, admin_id)
        return override


class ListAdminPricesUseCase:
    def __init__(self, uow_factory: Callable[[], UnitOfWork]) -> None:
        self._uow_factory = uow_factory

    def execute(self, active_only: bool = True) -> list[AdminPrice]:
        with self._uow_factory() as uow:
            return uow.admin_prices.list(active_only=active_only)
