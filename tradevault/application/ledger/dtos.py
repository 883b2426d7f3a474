"""
Data Transfer Objects for the ledger application layer.

DTOs carry data between the interface and application layers.
They are plain dataclasses with no behavior.
"""

from dataclasses import dataclass, field
from decimal import Decimal
from typing import Optional

from tradevault.domain.ledger.entities import (
    ZERO,
    AssetType,
    Holding,
    Transaction,
    TransactionType,
    WalletEntry,
)


@dataclass(frozen=True)
class BuyStockCommand:
    """Input DTO for buying a stock.

    Attributes:
        user_id: Buyer.
        symbol: Ticker symbol (upper-cased by the use case).
        name: Display name of the company.
        quantity: Shares to buy (> 0).
        price: Price per share (> 0).
        fees: Fees on top of quantity * price (>= 0).
    """

    user_id: str
    symbol: str
    name: str
    quantity: Decimal
    price: Decimal
    fees: Decimal = ZERO


@dataclass(frozen=True)
class SellStockCommand:
    """Input DTO for selling shares of a stock holding."""

    user_id: str
    symbol: str
    quantity: Decimal
    price: Decimal
    fees: Decimal = ZERO


@dataclass(frozen=True)
class PurchasePlanCommand:
    """Input DTO for buying units of an investment plan.

    Attributes:
        user_id: Buyer.
        plan_id: Investment plan identifier.
        investment_amount: Amount invested, excluding the processing fee.
        units: Units bought; investment_amount / units is the price paid.
        processing_fee: Fee charged on top of the investment.
    """

    user_id: str
    plan_id: str
    investment_amount: Decimal
    units: Decimal
    processing_fee: Decimal = ZERO


@dataclass(frozen=True)
class SellPlanCommand:
    """Input DTO for redeeming units of an investment plan."""

    user_id: str
    plan_id: str
    units: Decimal
    price: Decimal
    fees: Decimal = ZERO


@dataclass(frozen=True)
class TradeResult:
    """Output DTO for a completed buy or sell.

    Attributes:
        transaction: The recorded transaction.
        holding: The position after the trade; None once closed.
        wallet_entry: The wallet movement caused by the trade.
    """

    transaction: Transaction
    holding: Optional[Holding]
    wallet_entry: WalletEntry

    @property
    def wallet_balance(self) -> Decimal:
        return self.wallet_entry.new_balance


@dataclass(frozen=True)
class TransactionsQuery:
    """Input DTO for listing a user's transactions."""

    user_id: str
    type: Optional[TransactionType] = None
    asset_type: Optional[AssetType] = None
    symbol: Optional[str] = None
    limit: int = 50
    offset: int = 0


@dataclass(frozen=True)
class PositionValuation:
    """A holding valued at its current price.

    Attributes:
        holding: The underlying position.
        current_price: Override, market quote, NAV or average cost.
        price_source: "admin", "market", "nav" or "cost".
        current_value: quantity * current_price.
        gain_loss: current_value - total_invested.
        gain_loss_pct: gain_loss / total_invested * 100 (0 when nothing invested).
    """

    holding: Holding
    current_price: Decimal
    price_source: str
    current_value: Decimal
    gain_loss: Decimal
    gain_loss_pct: Decimal


@dataclass(frozen=True)
class PortfolioSummary:
    """Output DTO for a user's portfolio totals, rounded to cents."""

    total_value: Decimal
    total_invested: Decimal
    total_return: Decimal
    return_percentage: Decimal
    positions: list[PositionValuation] = field(default_factory=list)


@dataclass(frozen=True)
class PlanChanges:
    """Partial update of an investment plan; None means unchanged."""

    name: Optional[str] = None
    description: Optional[str] = None
    category: Optional[str] = None
    risk_level: Optional[str] = None
    nav: Optional[Decimal] = None
    one_year_return: Optional[Decimal] = None
    min_investment: Optional[Decimal] = None
    is_featured: Optional[bool] = None
    status: Optional[str] = None
