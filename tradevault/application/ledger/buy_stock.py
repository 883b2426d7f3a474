"""
Use case: Buy shares of a stock.

Input: BuyStockCommand (user, symbol, name, quantity, price, fees)
Output: TradeResult
Side effects:
    - Debits quantity * price + fees from the wallet (INVESTMENT_BUY entry)
    - Creates or merges the holding at weighted-average cost
    - Records one BUY transaction
    - Queues a purchase confirmation email
Failure cases:
    - ValidationError on non-positive quantity/price or negative fees
    - InsufficientFundsError if the wallet cannot cover the cost
    - ConcurrentUpdateError if the holding changed concurrently
"""

import logging
from datetime import datetime
from typing import Callable

from tradevault.application.ledger.dtos import BuyStockCommand, TradeResult
from tradevault.application.ledger.trading import execute_buy
from tradevault.application.notifications.emails import purchase_confirmation_email
from tradevault.domain.errors import ValidationError
from tradevault.domain.ledger.entities import AssetType, utc_now
from tradevault.domain.notifications.entities import NotificationQueue
from tradevault.domain.unit_of_work import UnitOfWork

logger = logging.getLogger(__name__)


class BuyStockUseCase:
    """Orchestrates a stock purchase."""

    def __init__(
        self,
        uow_factory: Callable[[], UnitOfWork],
        notifications: NotificationQueue,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self._uow_factory = uow_factory
        self._notifications = notifications
        self._clock = clock

    def execute(self, command: BuyStockCommand) -> TradeResult:
        symbol = command.symbol.strip().upper()
        if not symbol:
            raise ValidationError("Symbol is required", "symbol")

        logger.info(
            "Buying stock: user=%s, symbol=%s, quantity=%s, price=%s",
            command.user_id,
            symbol,
            command.quantity,
            command.price,
        )

        with self._uow_factory() as uow:
            result = execute_buy(
                uow,
                user_id=command.user_id,
                asset_type=AssetType.STOCK,
                symbol=symbol,
                name=command.name or symbol,
                quantity=command.quantity,
                price=command.price,
                fees=command.fees,
                at=self._clock(),
            )
            user = uow.users.get(command.user_id)

        if user is not None:
            tx = result.transaction
            self._notifications.enqueue(
                purchase_confirmation_email(
                    user.email,
                    user.full_name,
                    tx.asset_name,
                    tx.symbol,
                    tx.quantity,
                    tx.price,
                    tx.fees,
                    tx.net_amount,
                    tx.reference,
                )
            )
        return result
