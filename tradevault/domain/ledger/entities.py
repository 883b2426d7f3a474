"""
Domain entities for the ledger bounded context.

Entities represent core business objects with identity and lifecycle.
They contain no framework imports and no IO operations.
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from decimal import ROUND_HALF_EVEN, Decimal
from enum import Enum
from typing import Optional
from uuid import uuid4

ZERO = Decimal("0")

# Amounts and quantities are stored as NUMERIC(20, 8).
MONEY_PLACES = 8
MONEY_QUANTUM = Decimal(1).scaleb(-MONEY_PLACES)
MONEY_LIMIT = Decimal(10) ** 12


class AssetType(Enum):
    """Kind of instrument a holding tracks."""

    STOCK = "STOCK"
    PLAN = "PLAN"


class TransactionType(Enum):
    """Direction of a recorded trade."""

    BUY = "BUY"
    SELL = "SELL"


class TransactionStatus(Enum):
    """Lifecycle label of a trade record. Only COMPLETED is ever written."""

    PENDING = "PENDING"
    COMPLETED = "COMPLETED"
    FAILED = "FAILED"


class WalletEntryType(Enum):
    """Reason a wallet balance changed."""

    DEPOSIT = "DEPOSIT"
    WITHDRAWAL = "WITHDRAWAL"
    REFUND = "REFUND"
    LOAN = "LOAN"
    INVESTMENT_BUY = "INVESTMENT_BUY"
    INVESTMENT_SELL = "INVESTMENT_SELL"
    ADJUSTMENT = "ADJUSTMENT"


class PlanStatus(Enum):
    """Availability of an investment plan."""

    ACTIVE = "active"
    CLOSED = "closed"
    COMING_SOON = "coming-soon"


class RiskLevel(Enum):
    """Risk classification of an investment plan."""

    LOW = "Low"
    MEDIUM = "Medium"
    HIGH = "High"


def quantize_money(value: Decimal) -> Decimal:
    """Round to the stored scale. Callers keep `value` below MONEY_LIMIT."""
    return value.quantize(MONEY_QUANTUM, rounding=ROUND_HALF_EVEN)


def fits_money_column(value: Decimal) -> bool:
    """True if `value` survives storage unchanged: at most 8 decimal places
    and an integer part that fits the column."""
    if not value.is_finite() or abs(value) >= MONEY_LIMIT:
        return False
    return value.normalize().as_tuple().exponent >= -MONEY_PLACES


def new_id() -> str:
    """Return a fresh string identifier."""
    return str(uuid4())


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def generate_reference(prefix: str, at: datetime) -> str:
    """Return a human-readable reference such as DEP-20240101-1A2B3C4D."""
    return f"{prefix}-{at:%Y%m%d}-{uuid4().hex[:8].upper()}"


@dataclass(frozen=True)
class PurchaseLot:
    """A single purchase folded into a holding."""

    date: datetime
    quantity: Decimal
    price: Decimal
    fees: Decimal = ZERO


@dataclass
class Holding:
    """A user's aggregate position in one instrument.

    Invariant: quantity * avg_purchase_price == total_invested
    (within floating-point tolerance once persisted).
    """

    user_id: str
    symbol: str
    asset_type: AssetType
    name: str
    quantity: Decimal
    avg_purchase_price: Decimal
    total_invested: Decimal
    purchase_history: list[PurchaseLot] = field(default_factory=list)
    currency: str = "USD"
    id: str = field(default_factory=new_id)
    version: int = 0
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


@dataclass(frozen=True)
class Transaction:
    """Immutable record of a buy or sell."""

    user_id: str
    type: TransactionType
    asset_type: AssetType
    symbol: str
    asset_name: str
    quantity: Decimal
    price: Decimal
    total_amount: Decimal
    fees: Decimal
    net_amount: Decimal
    created_at: datetime
    cost_basis: Optional[Decimal] = None
    realized_gain: Optional[Decimal] = None
    status: TransactionStatus = TransactionStatus.COMPLETED
    currency: str = "USD"
    reference: str = ""
    id: str = field(default_factory=new_id)


@dataclass
class Wallet:
    """A user's USD cash balance and running totals."""

    user_id: str
    balance_usd: Decimal = ZERO
    total_deposited: Decimal = ZERO
    total_withdrawn: Decimal = ZERO
    total_invested: Decimal = ZERO
    withdrawal_limit: Decimal = Decimal("10000")
    daily_withdrawn: Decimal = ZERO
    last_withdrawal_reset: Optional[datetime] = None
    currency: str = "USD"
    version: int = 0
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


@dataclass(frozen=True)
class WalletEntry:
    """Immutable record of a single wallet balance change."""

    user_id: str
    type: WalletEntryType
    amount: Decimal
    previous_balance: Decimal
    new_balance: Decimal
    description: str
    created_at: datetime
    source_id: Optional[str] = None
    reference: str = ""
    id: str = field(default_factory=new_id)


@dataclass
class InvestmentPlan:
    """A managed investment product priced by its NAV."""

    name: str
    description: str
    category: str
    risk_level: RiskLevel
    nav: Decimal
    one_year_return: Decimal
    min_investment: Decimal
    is_featured: bool = False
    status: PlanStatus = PlanStatus.ACTIVE
    id: str = field(default_factory=new_id)
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


@dataclass(frozen=True)
class AdminPrice:
    """An administrator-set price overriding market quotes for a symbol."""

    symbol: str
    price: Decimal
    created_by: str
    created_at: datetime
    reason: str = ""
    is_active: bool = True
    id: str = field(default_factory=new_id)


@dataclass(frozen=True)
class Quote:
    """A market quote for a stock symbol."""

    symbol: str
    current: Decimal
    change: Decimal
    percent_change: Decimal
    high: Decimal
    low: Decimal
    open: Decimal
    previous_close: Decimal
    timestamp: int
