"""
Use case: Sell shares of a stock holding.

Input: SellStockCommand (user, symbol, quantity, price, fees)
Output: TradeResult (holding is None when the position closed)
Side effects:
    - Reduces the holding at average cost, or deletes it when fully sold
    - Records one SELL transaction with cost basis and realized gain
    - Credits quantity * price - fees to the wallet (INVESTMENT_SELL entry)
    - Queues a sale confirmation email
Failure cases:
    - HoldingNotFoundError if the user has no such holding
    - InsufficientSharesError if quantity exceeds the holding
    - ValidationError on invalid inputs or fees above proceeds
    - ConcurrentUpdateError if the holding changed concurrently
"""

import logging
from datetime import datetime
from typing import Callable

from tradevault.application.ledger.dtos import SellStockCommand, TradeResult
from tradevault.application.ledger.trading import execute_sell
from tradevault.application.notifications.emails import sale_confirmation_email
from tradevault.domain.ledger.entities import AssetType, utc_now
from tradevault.domain.notifications.entities import NotificationQueue
from tradevault.domain.unit_of_work import UnitOfWork

logger = logging.getLogger(__name__)


class SellStockUseCase:
    """Orchestrates a stock sale."""

    def __init__(
        self,
        uow_factory: Callable[[], UnitOfWork],
        notifications: NotificationQueue,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self._uow_factory = uow_factory
        self._notifications = notifications
        self._clock = clock

    def execute(self, command: SellStockCommand) -> TradeResult:
        symbol = command.symbol.strip().upper()
        logger.info(
            "Selling stock: user=%s, symbol=%s, quantity=%s, price=%s",
            command.user_id,
            symbol,
            command.quantity,
            command.price,
        )

        with self._uow_factory() as uow:
            result = execute_sell(
                uow,
                user_id=command.user_id,
                asset_type=AssetType.STOCK,
                symbol=symbol,
                quantity=command.quantity,
                price=command.price,
                fees=command.fees,
                at=self._clock(),
            )
            user = uow.users.get(command.user_id)

        if result.holding is None:
            logger.info("Position closed: user=%s, symbol=%s", command.user_id, symbol)

        if user is not None:
            tx = result.transaction
            self._notifications.enqueue(
                sale_confirmation_email(
                    user.email,
                    user.full_name,
                    tx.asset_name,
                    tx.symbol,
                    tx.quantity,
                    tx.price,
                    tx.fees,
                    tx.net_amount,
                    tx.realized_gain,
                    tx.reference,
                )
            )
        return result
