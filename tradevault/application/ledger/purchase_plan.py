"""
Use case: Invest in an investment plan.

Input: PurchasePlanCommand (user, plan, investment_amount, units, processing_fee)
Output: TradeResult
Side effects:
    - Debits investment_amount + processing_fee from the wallet
    - Creates or merges the PLAN holding at price = investment_amount / units,
      the price rounded to 8 places and the invested amount kept exact
    - Records one BUY transaction
    - Queues a purchase confirmation email
Failure cases:
    - InvestmentPlanNotFoundError if the plan does not exist
    - PlanUnavailableError if the plan is not active
    - ValidationError if the amount is below the plan minimum or inputs are invalid
    - InsufficientFundsError if the wallet cannot cover the total
"""

import logging
from datetime import datetime
from typing import Callable

from tradevault.application.ledger.dtos import PurchasePlanCommand, TradeResult
from tradevault.application.ledger.trading import execute_buy
from tradevault.application.notifications.emails import purchase_confirmation_email
from tradevault.domain.errors import ValidationError
from tradevault.domain.ledger.entities import (
    MONEY_LIMIT,
    ZERO,
    AssetType,
    PlanStatus,
    fits_money_column,
    quantize_money,
    utc_now,
)
from tradevault.domain.ledger.errors import (
    InvestmentPlanNotFoundError,
    PlanUnavailableError,
)
from tradevault.domain.notifications.entities import NotificationQueue
from tradevault.domain.unit_of_work import UnitOfWork

logger = logging.getLogger(__name__)


class PurchasePlanUseCase:
    """Orchestrates an investment plan purchase through the holding ledger."""

    def __init__(
        self,
        uow_factory: Callable[[], UnitOfWork],
        notifications: NotificationQueue,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self._uow_factory = uow_factory
        self._notifications = notifications
        self._clock = clock

    def execute(self, command: PurchasePlanCommand) -> TradeResult:
        if command.units <= ZERO:
            raise ValidationError("Units must be greater than zero", "units")
        if command.investment_amount <= ZERO:
            raise ValidationError(
                "Investment amount must be greater than zero", "investment_amount"
            )
        for name in ("units", "investment_amount"):
            if not fits_money_column(getattr(command, name)):
                raise ValidationError(
                    f"{name} must have at most 8 decimal places", name
                )
        unit_price = command.investment_amount / command.units
        if unit_price >= MONEY_LIMIT:
            raise ValidationError("Unit price is too large", "units")

        logger.info(
            "Purchasing plan: user=%s, plan=%s, amount=%s, units=%s",
            command.user_id,
            command.plan_id,
            command.investment_amount,
            command.units,
        )

        with self._uow_factory() as uow:
            plan = uow.plans.get(command.plan_id)
            if plan is None:
                raise InvestmentPlanNotFoundError(command.plan_id)
            if plan.status != PlanStatus.ACTIVE:
                raise PlanUnavailableError(plan.id, plan.status.value)
            if command.investment_amount < plan.min_investment:
                raise ValidationError(
                    f"Minimum investment for {plan.name} is {plan.min_investment}",
                    "investment_amount",
                )

            result = execute_buy(
                uow,
                user_id=command.user_id,
                asset_type=AssetType.PLAN,
                symbol=plan.id,
                name=plan.name,
                quantity=command.units,
                price=quantize_money(unit_price),
                fees=command.processing_fee,
                at=self._clock(),
                gross=command.investment_amount,
            )
            user = uow.users.get(command.user_id)

        if user is not None:
            tx = result.transaction
            self._notifications.enqueue(
                purchase_confirmation_email(
                    user.email,
                    user.full_name,
                    tx.asset_name,
                    tx.asset_name,
                    tx.quantity,
                    tx.price,
                    tx.fees,
                    tx.net_amount,
                    tx.reference,
                )
            )
        return result
