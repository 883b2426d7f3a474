"""
Pydantic schemas for the ledger API: holdings, transactions, wallet,
investment plans and market data.

These schemas enforce input validation and define the API contract.
No business logic belongs here.
"""

from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel, Field

from tradevault.domain.ledger.entities import (
    AssetType,
    PlanStatus,
    RiskLevel,
    TransactionStatus,
    TransactionType,
    WalletEntryType,
)
from tradevault.interfaces.schemas import MONEY_DIGITS, ResponseModel

SYMBOL_DESCRIPTION = "Stock ticker symbol, case-insensitive"
SYMBOL_PATTERN = r"^[A-Za-z0-9.\-]+$"
SYMBOL_MAX_LEN = 12


# ── Requests ─────────────────────────────────────────────────────


class BuyStockRequest(BaseModel):
    """Request schema for buying shares.

    Attributes:
        symbol: Ticker, upper-cased server side.
        name: Company name shown on the holding.
        quantity: Shares to buy (> 0, fractional allowed).
        price: Price per share (> 0).
        fees: Fees added to the cost (>= 0).
    """

    symbol: str = Field(
        ...,
        min_length=1,
        max_length=SYMBOL_MAX_LEN,
        pattern=SYMBOL_PATTERN,
        description=SYMBOL_DESCRIPTION,
    )
    name: str = Field(default="", max_length=120)
    quantity: Decimal = Field(..., gt=0, **MONEY_DIGITS)
    price: Decimal = Field(..., gt=0, **MONEY_DIGITS)
    fees: Decimal = Field(default=Decimal("0"), ge=0, **MONEY_DIGITS)


class SellStockRequest(BaseModel):
    symbol: str = Field(
        ...,
        min_length=1,
        max_length=SYMBOL_MAX_LEN,
        pattern=SYMBOL_PATTERN,
        description=SYMBOL_DESCRIPTION,
    )
    quantity: Decimal = Field(..., gt=0, **MONEY_DIGITS)
    price: Decimal = Field(..., gt=0, **MONEY_DIGITS)
    fees: Decimal = Field(default=Decimal("0"), ge=0, **MONEY_DIGITS)


class PurchasePlanRequest(BaseModel):
    plan_id: str = Field(..., min_length=1)
    investment_amount: Decimal = Field(..., gt=0, **MONEY_DIGITS)
    units: Decimal = Field(..., gt=0, **MONEY_DIGITS)
    processing_fee: Decimal = Field(default=Decimal("0"), ge=0, **MONEY_DIGITS)


class SellPlanRequest(BaseModel):
    """Redemption of plan units at a price close to the current NAV."""

    plan_id: str = Field(..., min_length=1)
    units: Decimal = Field(..., gt=0, **MONEY_DIGITS)
    price: Decimal = Field(..., gt=0, **MONEY_DIGITS)
    fees: Decimal = Field(default=Decimal("0"), ge=0, **MONEY_DIGITS)


class CreatePlanRequest(BaseModel):
    name: str = Field(..., min_length=1, max_length=120)
    description: str = Field(default="", max_length=2000)
    category: str = Field(..., min_length=1, max_length=60)
    risk_level: RiskLevel
    nav: Decimal = Field(..., gt=0, **MONEY_DIGITS)
    one_year_return: Decimal = Decimal("0")
    min_investment: Decimal = Field(default=Decimal("0"), ge=0, **MONEY_DIGITS)
    is_featured: bool = False
    status: PlanStatus = PlanStatus.ACTIVE


class UpdatePlanRequest(BaseModel):
    name: str | None = Field(default=None, max_length=120)
    description: str | None = Field(default=None, max_length=2000)
    category: str | None = Field(default=None, max_length=60)
    risk_level: RiskLevel | None = None
    nav: Decimal | None = Field(default=None, gt=0, **MONEY_DIGITS)
    one_year_return: Decimal | None = None
    min_investment: Decimal | None = Field(default=None, ge=0, **MONEY_DIGITS)
    is_featured: bool | None = None
    status: PlanStatus | None = None


class AdjustWalletRequest(BaseModel):
    """Signed admin adjustment: positive credits, negative debits."""

    amount: Decimal = Field(..., **MONEY_DIGITS)
    reason: str = Field(..., min_length=1, max_length=200)


class SetAdminPriceRequest(BaseModel):
    symbol: str = Field(
        ..., min_length=1, max_length=SYMBOL_MAX_LEN, pattern=SYMBOL_PATTERN
    )
    price: Decimal = Field(..., gt=0, **MONEY_DIGITS)
    reason: str = Field(default="", max_length=200)


# ── Responses ────────────────────────────────────────────────────


class PurchaseLotResponse(ResponseModel):
    date: datetime
    quantity: Decimal
    price: Decimal
    fees: Decimal


class HoldingResponse(ResponseModel):
    id: str
    user_id: str
    symbol: str
    asset_type: AssetType
    name: str
    quantity: Decimal
    avg_purchase_price: Decimal
    total_invested: Decimal
    currency: str
    purchase_history: list[PurchaseLotResponse]
    version: int
    created_at: datetime | None
    updated_at: datetime | None


class TransactionResponse(ResponseModel):
    id: str
    reference: str
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
    cost_basis: Decimal | None
    realized_gain: Decimal | None
    status: TransactionStatus
    currency: str
    created_at: datetime


class WalletResponse(ResponseModel):
    user_id: str
    balance_usd: Decimal
    total_deposited: Decimal
    total_withdrawn: Decimal
    total_invested: Decimal
    withdrawal_limit: Decimal
    daily_withdrawn: Decimal
    currency: str
    updated_at: datetime | None


class WalletEntryResponse(ResponseModel):
    id: str
    reference: str
    user_id: str
    type: WalletEntryType
    amount: Decimal
    previous_balance: Decimal
    new_balance: Decimal
    source_id: str | None
    description: str
    created_at: datetime


class TradeResponse(ResponseModel):
    """Outcome of a buy or sell. `holding` is null once a position closes."""

    transaction: TransactionResponse
    holding: HoldingResponse | None
    wallet_entry: WalletEntryResponse
    wallet_balance: Decimal


class PositionResponse(ResponseModel):
    holding: HoldingResponse
    current_price: Decimal
    price_source: str
    current_value: Decimal
    gain_loss: Decimal
    gain_loss_pct: Decimal


class PortfolioSummaryResponse(ResponseModel):
    total_value: Decimal
    total_invested: Decimal
    total_return: Decimal
    return_percentage: Decimal
    positions: list[PositionResponse]


class InvestmentPlanResponse(ResponseModel):
    id: str
    name: str
    description: str
    category: str
    risk_level: RiskLevel
    nav: Decimal
    one_year_return: Decimal
    min_investment: Decimal
    is_featured: bool
    status: PlanStatus
    created_at: datetime | None
    updated_at: datetime | None


class QuoteResponse(ResponseModel):
    symbol: str
    current: Decimal
    change: Decimal
    percent_change: Decimal
    high: Decimal
    low: Decimal
    open: Decimal
    previous_close: Decimal
    timestamp: int


class AdminPriceResponse(ResponseModel):
    id: str
    symbol: str
    price: Decimal
    reason: str
    created_by: str
    is_active: bool
    created_at: datetime
