"""
Domain entities and the order state machine for the checkout context.

Order lifecycle:
    pending -> paid        user submits a transaction hash
    pending -> expired     lazily, once expires_at has passed
    pending -> cancelled   owner cancels
    paid    -> cancelled   owner cancels
    paid    -> confirmed   admin confirms

No framework imports and no IO operations.
"""

import re
from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Optional
from urllib.parse import quote

from tradevault.domain.errors import InvalidStatusTransitionError
from tradevault.domain.ledger.entities import new_id

_TX_HASH_PATTERN = re.compile(r"^[0-9a-fA-F]{10,}$")

# USD per unit. Placeholder rates until a pricing feed is wired in.
CRYPTO_REFERENCE_RATES: dict[str, Decimal] = {
    "BTC": Decimal("50000"),
    "ETH": Decimal("3000"),
    "LTC": Decimal("70"),
    "USDT": Decimal("1"),
}


class CarStatus(Enum):
    AVAILABLE = "available"
    SOLD_OUT = "sold-out"
    RESERVED = "reserved"
    COMING_SOON = "coming-soon"


class PaymentMethodType(Enum):
    CRYPTO = "crypto"
    CARD = "card"
    BANK = "bank"
    OTHER = "other"


class OrderStatus(Enum):
    PENDING = "pending"
    PAID = "paid"
    CONFIRMED = "confirmed"
    EXPIRED = "expired"
    CANCELLED = "cancelled"


ORDER_TRANSITIONS: dict[OrderStatus, frozenset[OrderStatus]] = {
    OrderStatus.PENDING: frozenset(
        {OrderStatus.PAID, OrderStatus.EXPIRED, OrderStatus.CANCELLED}
    ),
    OrderStatus.PAID: frozenset({OrderStatus.CONFIRMED, OrderStatus.CANCELLED}),
    OrderStatus.CONFIRMED: frozenset(),
    OrderStatus.EXPIRED: frozenset(),
    OrderStatus.CANCELLED: frozenset(),
}


def crypto_rate(code: str) -> Decimal:
    """Return the USD reference rate for a currency code (1 if unknown)."""
    return CRYPTO_REFERENCE_RATES.get(code.upper(), Decimal("1"))


def is_valid_tx_hash(tx_hash: str) -> bool:
    """Shape check only: at least 10 hexadecimal characters."""
    return bool(tx_hash) and _TX_HASH_PATTERN.match(tx_hash) is not None


def generate_order_id(at: datetime) -> str:
    """Return an id of the form ORD-<epoch-ms>-<8 upper hex>."""
    millis = int(at.timestamp() * 1000)
    return f"ORD-{millis}-{new_id().replace('-', '')[:8].upper()}"


@dataclass
class Car:
    """A vehicle offered for sale."""

    name: str
    full_name: str
    year: str
    price: Decimal
    created_by: str
    description: str = ""
    range: str = ""
    acceleration: str = ""
    top_speed: str = ""
    seating: int = 5
    images: list[dict] = field(default_factory=list)
    features: list[str] = field(default_factory=list)
    status: CarStatus = CarStatus.AVAILABLE
    is_featured: bool = False
    is_available: bool = True
    id: str = field(default_factory=new_id)
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @property
    def purchasable(self) -> bool:
        return self.is_available and self.status == CarStatus.AVAILABLE


@dataclass
class PaymentMethod:
    """A way to pay for an order. Crypto methods carry a receiving address."""

    name: str
    code: str
    type: PaymentMethodType
    description: str = ""
    network_fee: str = ""
    wallet_address: Optional[str] = None
    is_active: bool = True
    id: str = field(default_factory=new_id)
    created_at: Optional[datetime] = None


@dataclass(frozen=True)
class BillingInfo:
    name: str
    email: str
    phone: str
    address: str
    city: str
    state: str
    postal_code: str
    country: str
    company: str = ""
    tax_id: str = ""


@dataclass
class Order:
    """A checkout of one car by one user."""

    order_id: str
    user_id: str
    car_id: str
    car_name: str
    payment_method: str
    payment_currency: str
    amount: Decimal
    billing: BillingInfo
    expires_at: datetime
    created_at: datetime
    crypto_amount: Optional[Decimal] = None
    wallet_address: Optional[str] = None
    transaction_hash: Optional[str] = None
    status: OrderStatus = OrderStatus.PENDING
    paid_at: Optional[datetime] = None
    confirmed_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    def is_expired(self, now: datetime) -> bool:
        return self.status == OrderStatus.PENDING and self.expires_at < now

    def ensure_can_move_to(self, requested: OrderStatus) -> None:
        """Raise InvalidStatusTransitionError unless the table allows it."""
        if requested not in ORDER_TRANSITIONS[self.status]:
            raise InvalidStatusTransitionError(
                "Order", self.status.value, requested.value
            )

    def time_left_seconds(self, now: datetime) -> int:
        return max(0, int((self.expires_at - now).total_seconds()))

    def qr_code_url(self) -> Optional[str]:
        """QR payload for USDT payments; None for every other currency."""
        if self.payment_currency.upper() != "USDT" or not self.wallet_address:
            return None
        payload = quote(f"usdt:{self.wallet_address}?amount={self.crypto_amount}")
        return (
            "https://api.qrserver.com/v1/create-qr-code/"
            f"?size=200x200&format=png&data={payload}"
        )
