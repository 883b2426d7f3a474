"""
Weighted-average-cost arithmetic for holdings.

Pure functions only: they take the current position and a trade and
return the new position. Persistence, wallet movements and the audit
record are orchestrated by the application layer.

Lot method: average cost. A buy merges into the position and the average
price is recomputed from the accumulated totals (fees included). A partial
sell leaves the average price untouched and keeps
total_invested = remaining_quantity * avg_purchase_price, which equals
scaling total_invested by remaining / original. No FIFO/LIFO lot
selection is performed.

Inputs must fit the NUMERIC(20, 8) columns exactly, and every derived
amount is rounded to that scale here, so what is stored is what was
computed.
"""

from dataclasses import dataclass, replace
from datetime import datetime
from decimal import Decimal
from typing import Optional

from tradevault.domain.errors import ValidationError
from tradevault.domain.ledger.entities import (
    MONEY_LIMIT,
    MONEY_PLACES,
    ZERO,
    AssetType,
    Holding,
    PurchaseLot,
    fits_money_column,
    quantize_money,
)
from tradevault.domain.ledger.errors import InsufficientSharesError


@dataclass(frozen=True)
class SaleOutcome:
    """Result of applying a sale to a holding.

    Attributes:
        holding: The reduced holding, or None when the position closed.
        total_amount: quantity * price.
        net_amount: total_amount - fees, credited to the seller.
        cost_basis: Average cost of the units sold.
        realized_gain: net_amount - cost_basis.
        remaining_quantity: Units left after the sale (0 when closed).
    """

    holding: Optional[Holding]
    total_amount: Decimal
    net_amount: Decimal
    cost_basis: Decimal
    realized_gain: Decimal
    remaining_quantity: Decimal

    @property
    def closed(self) -> bool:
        return self.holding is None


def validate_trade(quantity: Decimal, price: Decimal, fees: Decimal) -> None:
    """Reject non-positive quantity or price, negative fees, and values the
    ledger columns cannot hold exactly."""
    if quantity <= ZERO:
        raise ValidationError("Quantity must be greater than zero", "quantity")
    if price <= ZERO:
        raise ValidationError("Price must be greater than zero", "price")
    if fees < ZERO:
        raise ValidationError("Fees cannot be negative", "fees")
    for name, value in (("quantity", quantity), ("price", price), ("fees", fees)):
        if not fits_money_column(value):
            raise ValidationError(
                f"{name.capitalize()} must have at most {MONEY_PLACES} decimal places"
                f" and be below {MONEY_LIMIT:,}",
                name,
            )
    if quantity * price + fees >= MONEY_LIMIT:
        raise ValidationError("Trade value is too large", "quantity")


def _average(total: Decimal, quantity: Decimal) -> Decimal:
    average = total / quantity
    if max(total, quantity, average) >= MONEY_LIMIT:
        raise ValidationError("Position is too large to record", "quantity")
    return quantize_money(average)


def apply_buy(
    existing: Optional[Holding],
    *,
    user_id: str,
    symbol: str,
    asset_type: AssetType,
    name: str,
    quantity: Decimal,
    price: Decimal,
    fees: Decimal,
    at: datetime,
    gross: Optional[Decimal] = None,
) -> Holding:
    """Fold a purchase into a position, creating it if needed.

    Args:
        existing: The current holding, or None for a first purchase.
        user_id: Owner of the position.
        symbol: Stock symbol or plan id.
        asset_type: STOCK or PLAN.
        name: Display name of the instrument.
        quantity: Units bought (> 0).
        price: Price per unit (> 0).
        fees: Fees charged on top (>= 0), included in cost basis.
        at: Timestamp of the purchase.
        gross: Amount paid before fees when it is known exactly, as for a
            plan bought by amount. Defaults to quantity * price.

    Returns:
        The new holding state. Identity and version are carried over.
    """
    validate_trade(quantity, price, fees)
    if gross is None:
        gross = quantize_money(quantity * price)
    cost = gross + fees
    lot = PurchaseLot(date=at, quantity=quantity, price=price, fees=fees)

    if existing is None:
        return Holding(
            user_id=user_id,
            symbol=symbol,
            asset_type=asset_type,
            name=name,
            quantity=quantity,
            avg_purchase_price=_average(cost, quantity),
            total_invested=cost,
            purchase_history=[lot],
            created_at=at,
            updated_at=at,
        )

    new_total = existing.total_invested + cost
    new_quantity = existing.quantity + quantity
    return replace(
        existing,
        quantity=new_quantity,
        total_invested=new_total,
        avg_purchase_price=_average(new_total, new_quantity),
        purchase_history=[*existing.purchase_history, lot],
        updated_at=at,
    )


def apply_sell(
    holding: Holding,
    *,
    quantity: Decimal,
    price: Decimal,
    fees: Decimal,
    at: datetime,
) -> SaleOutcome:
    """Remove units from a position at the average cost.

    Raises:
        ValidationError: On invalid inputs or fees above the gross proceeds.
        InsufficientSharesError: If quantity exceeds the holding.
    """
    validate_trade(quantity, price, fees)
    if quantity > holding.quantity:
        raise InsufficientSharesError(holding.symbol, quantity, holding.quantity)

    total_amount = quantize_money(quantity * price)
    if fees > total_amount:
        raise ValidationError("Fees cannot exceed the sale proceeds", "fees")

    net_amount = total_amount - fees
    cost_basis = quantize_money(quantity * holding.avg_purchase_price)
    remaining = holding.quantity - quantity

    if remaining <= ZERO:
        return SaleOutcome(
            holding=None,
            total_amount=total_amount,
            net_amount=net_amount,
            cost_basis=holding.total_invested,
            realized_gain=net_amount - holding.total_invested,
            remaining_quantity=ZERO,
        )

    reduced = replace(
        holding,
        quantity=remaining,
        total_invested=quantize_money(remaining * holding.avg_purchase_price),
        updated_at=at,
    )
    return SaleOutcome(
        holding=reduced,
        total_amount=total_amount,
        net_amount=net_amount,
        cost_basis=cost_basis,
        realized_gain=net_amount - cost_basis,
        remaining_quantity=remaining,
    )


def check_price_tolerance(
    price: Decimal, reference: Decimal, tolerance: Decimal
) -> None:
    """Reject a price further than `tolerance` (a fraction) from `reference`."""
    if abs(price - reference) > reference * tolerance:
        raise ValidationError(
            f"Price {price} is too far from the current NAV {reference}", "price"
        )
