"""
Use case: Value a user's portfolio.

Input: user id
Output: PortfolioSummary
Side effects: Market data requests (cached by the adapter).
Failure cases: None. An unavailable quote falls back to average cost.

Price resolution per holding:
    STOCK: active admin override, else market quote, else avg_purchase_price
    PLAN:  plan NAV, else avg_purchase_price if the plan is gone
"""

import logging
from decimal import ROUND_HALF_UP, Decimal
from typing import Callable

from tradevault.application.ledger.dtos import PortfolioSummary, PositionValuation
from tradevault.domain.errors import ExternalServiceError
from tradevault.domain.ledger.entities import ZERO, AssetType, Holding
from tradevault.domain.ledger.ports import MarketDataPort
from tradevault.domain.unit_of_work import UnitOfWork

logger = logging.getLogger(__name__)

CENTS = Decimal("0.01")
HUNDRED = Decimal("100")


def _cents(value: Decimal) -> Decimal:
    return value.quantize(CENTS, rounding=ROUND_HALF_UP)


def _percentage(gain: Decimal, invested: Decimal) -> Decimal:
    if invested <= ZERO:
        return ZERO
    return _cents(gain / invested * HUNDRED)


class GetPortfolioSummaryUseCase:
    """Values every holding and totals the portfolio."""

    def __init__(
        self,
        uow_factory: Callable[[], UnitOfWork],
        market_data: MarketDataPort,
    ) -> None:
        self._uow_factory = uow_factory
        self._market_data = market_data

    def execute(self, user_id: str) -> PortfolioSummary:
        with self._uow_factory() as uow:
            holdings = uow.holdings.list_for_user(user_id)
            overrides = {
                h.symbol: uow.admin_prices.get_active(h.symbol)
                for h in holdings
                if h.asset_type == AssetType.STOCK
            }
            navs = {}
            for h in holdings:
                if h.asset_type != AssetType.PLAN:
                    continue
                plan = uow.plans.get(h.symbol)
                if plan is not None:
                    navs[h.symbol] = plan.nav

        positions = []
        for holding in holdings:
            if holding.asset_type == AssetType.PLAN:
                price, source = navs.get(holding.symbol), "nav"
                if price is None:
                    price, source = holding.avg_purchase_price, "cost"
            elif overrides[holding.symbol] is not None:
                price, source = overrides[holding.symbol].price, "admin"
            else:
                price, source = self._market_price(holding)
            positions.append(self._value(holding, price, source))

        total_value = sum((p.current_value for p in positions), ZERO)
        total_invested = sum((p.holding.total_invested for p in positions), ZERO)
        total_return = total_value - total_invested

        logger.info(
            "Portfolio summary: user=%s, positions=%d", user_id, len(positions)
        )
        return PortfolioSummary(
            total_value=_cents(total_value),
            total_invested=_cents(total_invested),
            total_return=_cents(total_return),
            return_percentage=_percentage(total_return, total_invested),
            positions=positions,
        )

    def _market_price(self, holding: Holding) -> tuple[Decimal, str]:
        try:
            return self._market_data.get_quote(holding.symbol).current, "market"
        except ExternalServiceError as exc:
            logger.warning(
                "No market price for %s, valuing at cost: %s", holding.symbol, exc.reason
            )
            return holding.avg_purchase_price, "cost"

    @staticmethod
    def _value(holding: Holding, price: Decimal, source: str) -> PositionValuation:
        current_value = holding.quantity * price
        gain = current_value - holding.total_invested
        return PositionValuation(
            holding=holding,
            current_price=price,
            price_source=source,
            current_value=_cents(current_value),
            gain_loss=_cents(gain),
            gain_loss_pct=_percentage(gain, holding.total_invested),
        )
