"""
Data Transfer Objects for the checkout application layer.
"""

from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from typing import Optional

from tradevault.domain.checkout.entities import Order


@dataclass(frozen=True)
class BillingInput:
    """Billing details as submitted, before validation."""

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
    terms_accepted: bool = False


@dataclass(frozen=True)
class CreateOrderCommand:
    """Input DTO for checking out a car.

    Attributes:
        payment_method: Code of an active payment method, e.g. "USDT".
    """

    user_id: str
    car_id: str
    payment_method: str
    billing: BillingInput


@dataclass(frozen=True)
class PaymentDetails:
    """What the buyer needs to complete a payment."""

    order_id: str
    status: str
    amount: Decimal
    payment_currency: str
    crypto_amount: Optional[Decimal]
    wallet_address: Optional[str]
    time_left_seconds: int
    qr_code_url: Optional[str]


@dataclass(frozen=True)
class OrderTracking:
    """The public view of an order, answered to anyone who knows its id
    and billing email."""

    order_id: str
    status: str
    amount: Decimal
    payment_currency: str
    payment_method: str
    car_id: str
    car_name: str
    billing_name: str
    billing_email: str
    created_at: datetime
    expires_at: datetime


@dataclass(frozen=True)
class OrderPage:
    orders: list[Order]
    total: int
    page: int
    page_size: int

    @property
    def pages(self) -> int:
        return (self.total + self.page_size - 1) // self.page_size


@dataclass(frozen=True)
class NewCar:
    name: str
    full_name: str
    year: str
    price: Decimal
    description: str = ""
    range: str = ""
    acceleration: str = ""
    top_speed: str = ""
    seating: int = 5
    images: list[dict] = field(default_factory=list)
    features: list[str] = field(default_factory=list)
    status: str = "available"
    is_featured: bool = False
    is_available: bool = True


@dataclass(frozen=True)
class CarChanges:
    """Partial car update. None means unchanged."""

    name: Optional[str] = None
    full_name: Optional[str] = None
    year: Optional[str] = None
    price: Optional[Decimal] = None
    description: Optional[str] = None
    range: Optional[str] = None
    acceleration: Optional[str] = None
    top_speed: Optional[str] = None
    seating: Optional[int] = None
    images: Optional[list[dict]] = None
    features: Optional[list[str]] = None
    status: Optional[str] = None
    is_featured: Optional[bool] = None
    is_available: Optional[bool] = None


@dataclass(frozen=True)
class NewPaymentMethod:
    name: str
    code: str
    type: str
    description: str = ""
    network_fee: str = ""
    wallet_address: Optional[str] = None
    is_active: bool = True
