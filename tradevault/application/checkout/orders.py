"""
Use cases: Car orders and their payment lifecycle.

Expiry is lazy. Every read or action first moves a pending order whose
expires_at has passed to `expired` and persists that, so an action on
an expired order commits the expiry and then fails with
InvalidStatusTransitionError.

Failure cases:
    - ValidationError for bad billing details or a malformed tx hash
    - NotFoundError for an unknown car, payment method or order
    - ConflictError when the car or payment method is unavailable
    - ForbiddenError when a non-owner touches an order
    - InvalidStatusTransitionError for a change the state machine forbids
"""

import dataclasses
import logging
import re
from datetime import datetime, timedelta
from decimal import Decimal
from typing import Callable, Optional

from tradevault.application.checkout.dtos import (
    BillingInput,
    CreateOrderCommand,
    OrderPage,
    OrderTracking,
    PaymentDetails,
)
from tradevault.application.notifications.emails import order_paid_email
from tradevault.domain.accounts.entities import Principal, User
from tradevault.domain.checkout.entities import (
    BillingInfo,
    Order,
    OrderStatus,
    PaymentMethodType,
    crypto_rate,
    generate_order_id,
    is_valid_tx_hash,
)
from tradevault.domain.errors import (
    ConflictError,
    ForbiddenError,
    InvalidStatusTransitionError,
    NotFoundError,
    ValidationError,
)
from tradevault.domain.ledger.entities import utc_now
from tradevault.domain.notifications.entities import NotificationQueue
from tradevault.domain.unit_of_work import UnitOfWork

logger = logging.getLogger(__name__)

CRYPTO_PRECISION = Decimal("0.00000001")
MIN_PHONE_DIGITS = 10
_EMAIL = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
_REQUIRED_BILLING = (
    "name",
    "email",
    "phone",
    "address",
    "city",
    "state",
    "postal_code",
    "country",
)


def validate_billing(billing: BillingInput) -> BillingInfo:
    """Check billing details and return them trimmed.

    Raises:
        ValidationError: On a missing field, bad email or phone, or
            unaccepted terms.
    """
    for name in _REQUIRED_BILLING:
        if not getattr(billing, name).strip():
            raise ValidationError(f"Billing {name} is required", name)
    if not _EMAIL.match(billing.email.strip()):
        raise ValidationError("Billing email is invalid", "email")
    if len(re.sub(r"\D", "", billing.phone)) < MIN_PHONE_DIGITS:
        raise ValidationError(
            f"Phone number must contain at least {MIN_PHONE_DIGITS} digits", "phone"
        )
    if not billing.terms_accepted:
        raise ValidationError("Terms and conditions must be accepted", "terms_accepted")

    values = {
        f.name: getattr(billing, f.name).strip()
        for f in dataclasses.fields(BillingInfo)
    }
    values["email"] = values["email"].lower()
    return BillingInfo(**values)


def expire_if_due(uow: UnitOfWork, order: Order, now: datetime) -> Order:
    """Persist the pending -> expired move once expires_at has passed."""
    if not order.is_expired(now):
        return order
    expired = dataclasses.replace(order, status=OrderStatus.EXPIRED, updated_at=now)
    if uow.orders.save_transition(expired, OrderStatus.PENDING):
        logger.info("Order expired: %s", order.order_id)
        return expired
    return uow.orders.get(order.order_id) or expired


def _load(uow: UnitOfWork, order_id: str, now: datetime) -> Order:
    order = uow.orders.get(order_id)
    if order is None:
        raise NotFoundError("Order", order_id)
    return expire_if_due(uow, order, now)


class CreateOrderUseCase:
    def __init__(
        self,
        uow_factory: Callable[[], UnitOfWork],
        expiry_minutes: int = 30,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self._uow_factory = uow_factory
        self._expiry = timedelta(minutes=expiry_minutes)
        self._clock = clock

    def execute(self, command: CreateOrderCommand) -> Order:
        billing = validate_billing(command.billing)
        now = self._clock()

        with self._uow_factory() as uow:
            car = uow.cars.get(command.car_id)
            if car is None:
                raise NotFoundError("Car", command.car_id)
            if not car.purchasable:
                raise ConflictError(f"{car.name} is not available for purchase")

            method = uow.payment_methods.get_by_code(command.payment_method)
            if method is None:
                raise NotFoundError("Payment method", command.payment_method)
            if not method.is_active:
                raise ConflictError(f"Payment method {method.code} is not active")

            crypto_amount = None
            if method.type == PaymentMethodType.CRYPTO:
                crypto_amount = (car.price / crypto_rate(method.code)).quantize(
                    CRYPTO_PRECISION
                )

            order = Order(
                order_id=generate_order_id(now),
                user_id=command.user_id,
                car_id=car.id,
                car_name=car.full_name or car.name,
                payment_method=method.name,
                payment_currency=method.code,
                amount=car.price,
                billing=billing,
                expires_at=now + self._expiry,
                created_at=now,
                updated_at=now,
                crypto_amount=crypto_amount,
                wallet_address=method.wallet_address,
            )
            uow.orders.add(order)

        logger.info(
            "Order created: id=%s, user=%s, car=%s, amount=%s %s",
            order.order_id,
            order.user_id,
            order.car_id,
            order.amount,
            order.payment_currency,
        )
        return order


class GetOrderUseCase:
    """Returns an order to its owner or an admin, expiring it if due."""

    def __init__(
        self,
        uow_factory: Callable[[], UnitOfWork],
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self._uow_factory = uow_factory
        self._clock = clock

    def execute(self, principal: Principal, order_id: str) -> Order:
        with self._uow_factory() as uow:
            order = _load(uow, order_id, self._clock())
        if not principal.can_access(order.user_id):
            raise ForbiddenError("You may only view your own orders")
        return order


class GetPaymentDetailsUseCase:
    def __init__(
        self,
        uow_factory: Callable[[], UnitOfWork],
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self._uow_factory = uow_factory
        self._clock = clock

    def execute(self, principal: Principal, order_id: str) -> PaymentDetails:
        now = self._clock()
        with self._uow_factory() as uow:
            order = _load(uow, order_id, now)
        if not principal.can_access(order.user_id):
            raise ForbiddenError("You may only view your own orders")
        return PaymentDetails(
            order_id=order.order_id,
            status=order.status.value,
            amount=order.amount,
            payment_currency=order.payment_currency,
            crypto_amount=order.crypto_amount,
            wallet_address=order.wallet_address,
            time_left_seconds=(
                order.time_left_seconds(now)
                if order.status == OrderStatus.PENDING
                else 0
            ),
            qr_code_url=order.qr_code_url(),
        )


class TrackOrderUseCase:
    """Public order lookup by order id and billing email.

    A wrong email answers the same NotFoundError as an unknown id, so the
    endpoint does not reveal which order ids exist.
    """

    def __init__(
        self,
        uow_factory: Callable[[], UnitOfWork],
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self._uow_factory = uow_factory
        self._clock = clock

    def execute(self, order_id: str, email: str) -> OrderTracking:
        order_id = order_id.strip()
        email = email.strip().lower()
        if not order_id or not email:
            raise ValidationError("Order id and email are required", "order_id")

        with self._uow_factory() as uow:
            order = uow.orders.get(order_id)
            if order is None or order.billing.email.lower() != email:
                raise NotFoundError("Order", order_id)
            order = expire_if_due(uow, order, self._clock())

        return OrderTracking(
            order_id=order.order_id,
            status=order.status.value,
            amount=order.amount,
            payment_currency=order.payment_currency,
            payment_method=order.payment_method,
            car_id=order.car_id,
            car_name=order.car_name,
            billing_name=order.billing.name,
            billing_email=order.billing.email,
            created_at=order.created_at,
            expires_at=order.expires_at,
        )


class ListMyOrdersUseCase:
    def __init__(
        self,
        uow_factory: Callable[[], UnitOfWork],
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self._uow_factory = uow_factory
        self._clock = clock

    def execute(self, user_id: str, page: int = 1, page_size: int = 10) -> OrderPage:
        if page < 1 or page_size < 1:
            raise ValidationError("page and page_size must be positive", "page")
        now = self._clock()
        with self._uow_factory() as uow:
            orders = [
                expire_if_due(uow, o, now)
                for o in uow.orders.list_for_user(
                    user_id, limit=page_size, offset=(page - 1) * page_size
                )
            ]
            total = uow.orders.count_for_user(user_id)
        return OrderPage(orders=orders, total=total, page=page, page_size=page_size)


class _OrderTransition:
    """Shared flow for owner and admin actions on an order.

    The expiry check commits before any transition error is raised.
    """

    resource_action = "update"

    def __init__(
        self,
        uow_factory: Callable[[], UnitOfWork],
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self._uow_factory = uow_factory
        self._clock = clock

    def _transition(
        self,
        principal: Principal,
        order_id: str,
        requested: OrderStatus,
        owner_only: bool,
        **changes,
    ) -> tuple[Order, Optional[User]]:
        now = self._clock()
        rejection: Optional[InvalidStatusTransitionError] = None
        with self._uow_factory() as uow:
            order = _load(uow, order_id, now)
            if owner_only and order.user_id != principal.user_id:
                raise ForbiddenError(f"Only the buyer can {self.resource_action} this order")
            try:
                order.ensure_can_move_to(requested)
            except InvalidStatusTransitionError as exc:
                rejection = exc
            else:
                moved = dataclasses.replace(
                    order, status=requested, updated_at=now, **changes
                )
                if not uow.orders.save_transition(moved, order.status):
                    current = uow.orders.get(order_id)
                    raise InvalidStatusTransitionError(
                        "Order", current.status.value, requested.value
                    )
                order = moved
            owner = uow.users.get(order.user_id)
        if rejection is not None:
            raise rejection
        logger.info("Order %s -> %s", order_id, requested.value)
        return order, owner


class SubmitPaymentUseCase(_OrderTransition):
    """Buyer submits a transaction hash; a well-formed hash marks the order paid."""

    resource_action = "pay"

    def __init__(
        self,
        uow_factory: Callable[[], UnitOfWork],
        notifications: NotificationQueue,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        super().__init__(uow_factory, clock)
        self._notifications = notifications

    def execute(self, principal: Principal, order_id: str, tx_hash: str) -> Order:
        tx_hash = tx_hash.strip()
        if not is_valid_tx_hash(tx_hash):
            raise ValidationError(
                "Transaction hash must be at least 10 hexadecimal characters",
                "transaction_hash",
            )
        order, owner = self._transition(
            principal,
            order_id,
            OrderStatus.PAID,
            owner_only=True,
            transaction_hash=tx_hash,
            paid_at=self._clock(),
        )
        if owner is not None:
            self._notifications.enqueue(
                order_paid_email(
                    owner.email,
                    owner.full_name,
                    order.order_id,
                    order.car_name,
                    order.amount,
                    order.payment_currency,
                )
            )
        return order


class CancelOrderUseCase(_OrderTransition):
    resource_action = "cancel"

    def execute(self, principal: Principal, order_id: str) -> Order:
        order, _ = self._transition(
            principal, order_id, OrderStatus.CANCELLED, owner_only=True
        )
        return order


class ConfirmOrderUseCase(_OrderTransition):
    """Admin confirmation of a paid order."""

    resource_action = "confirm"

    def execute(self, principal: Principal, order_id: str) -> Order:
        if not principal.is_admin:
            raise ForbiddenError("Admin access required")
        order, _ = self._transition(
            principal,
            order_id,
            OrderStatus.CONFIRMED,
            owner_only=False,
            confirmed_at=self._clock(),
        )
        return order
