"""
Use case: Redeem units of an investment plan.

Input: SellPlanCommand (user, plan, units, price, fees)
Output: TradeResult
Side effects: Same as a stock sale, on the PLAN holding.
Failure cases:
    - InvestmentPlanNotFoundError if the plan does not exist
    - ValidationError if price deviates from NAV by more than the tolerance
    - HoldingNotFoundError / InsufficientSharesError as for stocks
"""

import logging
from datetime import datetime
from decimal import Decimal
from typing import Callable

from tradevault.application.ledger.dtos import SellPlanCommand, TradeResult
from tradevault.application.ledger.trading import execute_sell
from tradevault.application.notifications.emails import sale_confirmation_email
from tradevault.domain.ledger.cost_basis import check_price_tolerance, validate_trade
from tradevault.domain.ledger.entities import AssetType, utc_now
from tradevault.domain.ledger.errors import InvestmentPlanNotFoundError
from tradevault.domain.notifications.entities import NotificationQueue
from tradevault.domain.unit_of_work import UnitOfWork

logger = logging.getLogger(__name__)


class SellPlanUseCase:
    """Orchestrates an investment plan redemption."""

    def __init__(
        self,
        uow_factory: Callable[[], UnitOfWork],
        notifications: NotificationQueue,
        price_tolerance: Decimal = Decimal("0.10"),
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self._uow_factory = uow_factory
        self._notifications = notifications
        self._price_tolerance = price_tolerance
        self._clock = clock

    def execute(self, command: SellPlanCommand) -> TradeResult:
        validate_trade(command.units, command.price, command.fees)
        logger.info(
            "Selling plan units: user=%s, plan=%s, units=%s, price=%s",
            command.user_id,
            command.plan_id,
            command.units,
            command.price,
        )

        with self._uow_factory() as uow:
            plan = uow.plans.get(command.plan_id)
            if plan is None:
                raise InvestmentPlanNotFoundError(command.plan_id)
            check_price_tolerance(command.price, plan.nav, self._price_tolerance)

            result = execute_sell(
                uow,
                user_id=command.user_id,
                asset_type=AssetType.PLAN,
                symbol=plan.id,
                quantity=command.units,
                price=command.price,
                fees=command.fees,
                at=self._clock(),
            )
            user = uow.users.get(command.user_id)

        if user is not None:
            tx = result.transaction
            self._notifications.enqueue(
                sale_confirmation_email(
                    user.email,
                    user.full_name,
                    tx.asset_name,
                    tx.asset_name,
                    tx.quantity,
                    tx.price,
                    tx.fees,
                    tx.net_amount,
                    tx.realized_gain,
                    tx.reference,
                )
            )
        return result
