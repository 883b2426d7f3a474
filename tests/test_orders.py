"""
Tests for car checkout: order creation, payment, expiry and the
admin confirmation step.
"""

from decimal import Decimal

import pytest

from tradevault.application.checkout.catalog import (
    CreateCarUseCase,
    CreatePaymentMethodUseCase,
)
from tradevault.application.checkout.dtos import (
    BillingInput,
    CreateOrderCommand,
    NewCar,
    NewPaymentMethod,
)
from tradevault.application.checkout.orders import (
    CancelOrderUseCase,
    ConfirmOrderUseCase,
    CreateOrderUseCase,
    GetOrderUseCase,
    GetPaymentDetailsUseCase,
    ListMyOrdersUseCase,
    SubmitPaymentUseCase,
    TrackOrderUseCase,
)
from tradevault.domain.accounts.entities import Principal, User
from tradevault.domain.checkout.entities import OrderStatus
from tradevault.domain.errors import (
    ConflictError,
    DuplicateError,
    ForbiddenError,
    InvalidStatusTransitionError,
    NotFoundError,
    ValidationError,
)

BUYER = Principal(user_id="buyer-1")
STRANGER = Principal(user_id="someone-else")
ADMIN = Principal(user_id="admin-1", is_admin=True)
TX_HASH = "abcdef0123456789"


# ── Helpers ──────────────────────────────────────────────────────────


def _billing(**overrides) -> BillingInput:
    values = dict(
        name="Bea Buyer",
        email="Bea@Example.com",
        phone="+1 (555) 010-2030",
        address="1 Main St",
        city="Springfield",
        state="IL",
        postal_code="62701",
        country="US",
        terms_accepted=True,
    )
    values.update(overrides)
    return BillingInput(**values)


@pytest.fixture
def buyer(uow_factory) -> User:
    user = User(
        id=BUYER.user_id, full_name="Bea Buyer", email="bea@example.com", password_hash="x"
    )
    with uow_factory() as uow:
        uow.users.add(user)
    return user


@pytest.fixture
def car(uow_factory, clock):
    return CreateCarUseCase(uow_factory, clock).execute(
        NewCar(name="Model S", full_name="Model S Plaid", year="2024", price=Decimal("60000")),
        ADMIN.user_id,
    )


@pytest.fixture
def usdt(uow_factory, clock):
    return CreatePaymentMethodUseCase(uow_factory, clock).execute(
        NewPaymentMethod(
            name="Tether",
            code="usdt",
            type="crypto",
            wallet_address="TQn9Y2khEsLJW1ChVWFMSMeRDow5KcbLSE",
        )
    )


@pytest.fixture
def place_order(uow_factory, clock, car, usdt, buyer):
    def _place(**billing):
        return CreateOrderUseCase(uow_factory, clock=clock).execute(
            CreateOrderCommand(
                user_id=BUYER.user_id,
                car_id=car.id,
                payment_method="USDT",
                billing=_billing(**billing),
            )
        )

    return _place


# ══════════════════════════════════════════════════════════════════════
# Catalog
# ══════════════════════════════════════════════════════════════════════


class TestCatalog:
    def test_payment_method_code_is_normalized(self, usdt) -> None:
        """Payment method codes are upper-cased."""
        assert usdt.code == "USDT"

    def test_crypto_method_needs_address(self, uow_factory, clock) -> None:
        """Crypto payment methods require a wallet address."""
        with pytest.raises(ValidationError) as exc_info:
            CreatePaymentMethodUseCase(uow_factory, clock).execute(
                NewPaymentMethod(name="Bitcoin", code="BTC", type="crypto")
            )
        assert exc_info.value.field == "wallet_address"

    def test_duplicate_code_rejected(self, uow_factory, clock, usdt) -> None:
        """A duplicate payment method code raises DuplicateError."""
        with pytest.raises(DuplicateError):
            CreatePaymentMethodUseCase(uow_factory, clock).execute(
                NewPaymentMethod(name="Card", code="usdt", type="card")
            )

    def test_car_price_must_be_positive(self, uow_factory, clock) -> None:
        """A car needs a positive price."""
        with pytest.raises(ValidationError):
            CreateCarUseCase(uow_factory, clock).execute(
                NewCar(name="Free", full_name="Free", year="2024", price=Decimal("0")),
                ADMIN.user_id,
            )


# ══════════════════════════════════════════════════════════════════════
# Order creation
# ══════════════════════════════════════════════════════════════════════


class TestCreateOrder:
    def test_pending_with_expiry_and_crypto_amount(self, place_order, clock) -> None:
        """A new order is pending with a 30 minute window."""
        order = place_order()
        assert order.status == OrderStatus.PENDING
        assert order.order_id.startswith("ORD-")
        assert order.amount == Decimal("60000")
        assert order.crypto_amount == Decimal("60000")
        assert order.car_name == "Model S Plaid"
        assert order.billing.email == "bea@example.com"
        assert (order.expires_at - clock()).total_seconds() == 30 * 60

    def test_terms_must_be_accepted(self, place_order) -> None:
        """Checkout requires accepted terms."""
        with pytest.raises(ValidationError) as exc_info:
            place_order(terms_accepted=False)
        assert exc_info.value.field == "terms_accepted"

    def test_short_phone_rejected(self, place_order) -> None:
        """A phone number with too few digits is rejected."""
        with pytest.raises(ValidationError) as exc_info:
            place_order(phone="555-0102")
        assert exc_info.value.field == "phone"

    def test_unavailable_car_rejected(self, uow_factory, clock, usdt) -> None:
        """An unavailable car cannot be ordered."""
        sold = CreateCarUseCase(uow_factory, clock).execute(
            NewCar(
                name="Roadster",
                full_name="Roadster",
                year="2020",
                price=Decimal("200000"),
                status="sold-out",
            ),
            ADMIN.user_id,
        )
        with pytest.raises(ConflictError):
            CreateOrderUseCase(uow_factory, clock=clock).execute(
                CreateOrderCommand(
                    user_id=BUYER.user_id,
                    car_id=sold.id,
                    payment_method="USDT",
                    billing=_billing(),
                )
            )


# ══════════════════════════════════════════════════════════════════════
# Payment lifecycle
# ══════════════════════════════════════════════════════════════════════


class TestOrderLifecycle:
    def test_payment_marks_order_paid(
        self, uow_factory, notifications, clock, place_order, buyer
    ) -> None:
        """Submitting a hash marks the order paid and emails the buyer."""
        order = place_order()
        paid = SubmitPaymentUseCase(uow_factory, notifications, clock).execute(
            BUYER, order.order_id, TX_HASH
        )
        assert paid.status == OrderStatus.PAID
        assert paid.transaction_hash == TX_HASH
        assert paid.paid_at == clock()
        assert len(notifications.messages) == 1
        assert notifications.messages[0].to == buyer.email

    def test_malformed_hash_rejected(self, uow_factory, notifications, clock, place_order) -> None:
        """A malformed transaction hash is rejected."""
        order = place_order()
        with pytest.raises(ValidationError):
            SubmitPaymentUseCase(uow_factory, notifications, clock).execute(
                BUYER, order.order_id, "not-a-hash"
            )
        current = GetOrderUseCase(uow_factory, clock).execute(BUYER, order.order_id)
        assert current.status == OrderStatus.PENDING

    def test_only_buyer_can_pay(self, uow_factory, notifications, clock, place_order) -> None:
        """Only the buyer can submit a payment."""
        order = place_order()
        with pytest.raises(ForbiddenError):
            SubmitPaymentUseCase(uow_factory, notifications, clock).execute(
                STRANGER, order.order_id, TX_HASH
            )

    def test_order_expires_lazily_on_read(self, uow_factory, clock, place_order) -> None:
        """Reading an overdue order moves it to expired."""
        order = place_order()
        clock.advance(minutes=31)
        current = GetOrderUseCase(uow_factory, clock).execute(BUYER, order.order_id)
        assert current.status == OrderStatus.EXPIRED
        details = GetPaymentDetailsUseCase(uow_factory, clock).execute(BUYER, order.order_id)
        assert details.time_left_seconds == 0

    def test_expired_order_cannot_be_paid(
        self, uow_factory, notifications, clock, place_order
    ) -> None:
        """Paying an expired order fails and keeps the expiry."""
        order = place_order()
        clock.advance(minutes=31)
        with pytest.raises(InvalidStatusTransitionError):
            SubmitPaymentUseCase(uow_factory, notifications, clock).execute(
                BUYER, order.order_id, TX_HASH
            )
        # The expiry is committed even though the payment failed.
        with uow_factory() as uow:
            assert uow.orders.get(order.order_id).status == OrderStatus.EXPIRED
        assert notifications.messages == []

    def test_cancel_is_owner_only(self, uow_factory, clock, place_order) -> None:
        """Only the buyer can cancel an order."""
        order = place_order()
        use_case = CancelOrderUseCase(uow_factory, clock)
        with pytest.raises(ForbiddenError):
            use_case.execute(STRANGER, order.order_id)
        assert use_case.execute(BUYER, order.order_id).status == OrderStatus.CANCELLED

    def test_confirm_requires_admin(
        self, uow_factory, notifications, clock, place_order
    ) -> None:
        """Only admins can confirm a paid order."""
        order = place_order()
        SubmitPaymentUseCase(uow_factory, notifications, clock).execute(
            BUYER, order.order_id, TX_HASH
        )
        use_case = ConfirmOrderUseCase(uow_factory, clock)
        with pytest.raises(ForbiddenError):
            use_case.execute(BUYER, order.order_id)
        confirmed = use_case.execute(ADMIN, order.order_id)
        assert confirmed.status == OrderStatus.CONFIRMED
        assert confirmed.confirmed_at == clock()

    def test_pending_order_cannot_be_confirmed(self, uow_factory, clock, place_order) -> None:
        """A pending order cannot be confirmed."""
        order = place_order()
        with pytest.raises(InvalidStatusTransitionError):
            ConfirmOrderUseCase(uow_factory, clock).execute(ADMIN, order.order_id)

    def test_usdt_payment_details_carry_qr_code(self, uow_factory, clock, place_order) -> None:
        """USDT payment details include a QR code and time left."""
        order = place_order()
        details = GetPaymentDetailsUseCase(uow_factory, clock).execute(BUYER, order.order_id)
        assert details.time_left_seconds == 30 * 60
        assert details.qr_code_url is not None
        assert details.wallet_address == order.wallet_address


class TestListMyOrders:
    def test_pagination(self, uow_factory, clock, place_order) -> None:
        """Order listing pages through the user's orders."""
        for _ in range(3):
            place_order()
        page = ListMyOrdersUseCase(uow_factory, clock).execute(
            BUYER.user_id, page=2, page_size=2
        )
        assert page.total == 3
        assert page.pages == 2
        assert len(page.orders) == 1

    def test_invalid_page_rejected(self, uow_factory, clock) -> None:
        """Page numbers below one are rejected."""
        with pytest.raises(ValidationError):
            ListMyOrdersUseCase(uow_factory, clock).execute(BUYER.user_id, page=0)


class TestTrackOrder:
    def test_matches_id_and_billing_email(self, uow_factory, clock, place_order) -> None:
        """Tracking answers for the billing email in any case and spacing."""
        order = place_order()
        tracking = TrackOrderUseCase(uow_factory, clock).execute(
            order.order_id, "  BEA@example.COM "
        )
        assert tracking.order_id == order.order_id
        assert tracking.status == "pending"
        assert tracking.car_name == "Model S Plaid"
        assert tracking.billing_email == "bea@example.com"
        assert tracking.amount == Decimal("60000")

    def test_wrong_email_looks_like_unknown_order(
        self, uow_factory, clock, place_order
    ) -> None:
        """A mismatched email gets the same not-found as a missing id."""
        order = place_order()
        use_case = TrackOrderUseCase(uow_factory, clock)
        with pytest.raises(NotFoundError):
            use_case.execute(order.order_id, "mallory@example.com")
        with pytest.raises(NotFoundError):
            use_case.execute("ORD-UNKNOWN", "bea@example.com")

    def test_tracking_applies_lazy_expiry(self, uow_factory, clock, place_order) -> None:
        """An overdue pending order is reported and stored as expired."""
        order = place_order()
        clock.advance(minutes=31)
        tracking = TrackOrderUseCase(uow_factory, clock).execute(
            order.order_id, "bea@example.com"
        )
        assert tracking.status == "expired"
        with uow_factory() as uow:
            assert uow.orders.get(order.order_id).status == OrderStatus.EXPIRED

    def test_blank_input_rejected(self, uow_factory, clock) -> None:
        """Both the order id and the email are required."""
        with pytest.raises(ValidationError):
            TrackOrderUseCase(uow_factory, clock).execute(" ", "bea@example.com")
