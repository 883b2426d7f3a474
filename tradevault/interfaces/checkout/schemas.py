"""
Pydantic schemas for the car catalog, payment methods and orders.

Billing fields are only checked for length here; the use case applies
the business rules (required fields, email, phone, terms) so that API
and programmatic callers see the same errors.
"""

from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel, Field

from tradevault.domain.checkout.entities import CarStatus, OrderStatus, PaymentMethodType
from tradevault.interfaces.schemas import MONEY_DIGITS, ResponseModel


# ── Requests ─────────────────────────────────────────────────────


class CreateCarRequest(BaseModel):
    name: str = Field(..., min_length=1, max_length=120)
    full_name: str = Field(..., min_length=1, max_length=200)
    year: str = Field(..., min_length=4, max_length=9)
    price: Decimal = Field(..., gt=0, **MONEY_DIGITS)
    description: str = Field(default="", max_length=4000)
    range: str = Field(default="", max_length=40)
    acceleration: str = Field(default="", max_length=40)
    top_speed: str = Field(default="", max_length=40)
    seating: int = Field(default=5, ge=1, le=12)
    images: list[dict] = Field(default_factory=list)
    features: list[str] = Field(default_factory=list)
    status: CarStatus = CarStatus.AVAILABLE
    is_featured: bool = False
    is_available: bool = True


class UpdateCarRequest(BaseModel):
    name: str | None = Field(default=None, max_length=120)
    full_name: str | None = Field(default=None, max_length=200)
    year: str | None = Field(default=None, max_length=9)
    price: Decimal | None = Field(default=None, gt=0, **MONEY_DIGITS)
    description: str | None = Field(default=None, max_length=4000)
    range: str | None = Field(default=None, max_length=40)
    acceleration: str | None = Field(default=None, max_length=40)
    top_speed: str | None = Field(default=None, max_length=40)
    seating: int | None = Field(default=None, ge=1, le=12)
    images: list[dict] | None = None
    features: list[str] | None = None
    status: CarStatus | None = None
    is_featured: bool | None = None
    is_available: bool | None = None


class CreatePaymentMethodRequest(BaseModel):
    name: str = Field(..., min_length=1, max_length=60)
    code: str = Field(..., min_length=1, max_length=12)
    type: PaymentMethodType
    description: str = Field(default="", max_length=500)
    network_fee: str = Field(default="", max_length=60)
    wallet_address: str | None = Field(default=None, max_length=200)
    is_active: bool = True


class BillingRequest(BaseModel):
    name: str = Field(default="", max_length=120)
    email: str = Field(default="", max_length=254)
    phone: str = Field(default="", max_length=40)
    address: str = Field(default="", max_length=200)
    city: str = Field(default="", max_length=80)
    state: str = Field(default="", max_length=80)
    postal_code: str = Field(default="", max_length=20)
    country: str = Field(default="", max_length=80)
    company: str = Field(default="", max_length=120)
    tax_id: str = Field(default="", max_length=40)
    terms_accepted: bool = False


class CreateOrderRequest(BaseModel):
    """Checkout of a single car.

    Attributes:
        car_id: Car to buy.
        payment_method: Code of an active payment method, e.g. "USDT".
        billing: Buyer details; terms_accepted must be true.
    """

    car_id: str = Field(..., min_length=1)
    payment_method: str = Field(..., min_length=1, max_length=12)
    billing: BillingRequest


class SubmitPaymentRequest(BaseModel):
    transaction_hash: str = Field(..., min_length=1, max_length=200)


class TrackOrderRequest(BaseModel):
    order_id: str = Field(..., min_length=1, max_length=64)
    email: str = Field(..., min_length=3, max_length=254)


# ── Responses ────────────────────────────────────────────────────


class CarResponse(ResponseModel):
    id: str
    name: str
    full_name: str
    year: str
    price: Decimal
    description: str
    range: str
    acceleration: str
    top_speed: str
    seating: int
    images: list[dict]
    features: list[str]
    status: CarStatus
    is_featured: bool
    is_available: bool
    created_at: datetime | None
    updated_at: datetime | None


class PaymentMethodResponse(ResponseModel):
    id: str
    name: str
    code: str
    type: PaymentMethodType
    description: str
    network_fee: str
    wallet_address: str | None
    is_active: bool


class BillingResponse(ResponseModel):
    name: str
    email: str
    phone: str
    address: str
    city: str
    state: str
    postal_code: str
    country: str
    company: str
    tax_id: str


class OrderResponse(ResponseModel):
    order_id: str
    user_id: str
    car_id: str
    car_name: str
    payment_method: str
    payment_currency: str
    amount: Decimal
    crypto_amount: Decimal | None
    wallet_address: str | None
    transaction_hash: str | None
    status: OrderStatus
    billing: BillingResponse
    expires_at: datetime
    paid_at: datetime | None
    confirmed_at: datetime | None
    created_at: datetime
    updated_at: datetime | None


class OrderPageResponse(ResponseModel):
    orders: list[OrderResponse]
    total: int
    page: int
    page_size: int
    pages: int


class PaymentDetailsResponse(ResponseModel):
    order_id: str
    status: str
    amount: Decimal
    payment_currency: str
    crypto_amount: Decimal | None
    wallet_address: str | None
    time_left_seconds: int
    qr_code_url: str | None


class OrderTrackingResponse(ResponseModel):
    """Public tracking view; omits payment addresses and hashes."""

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
