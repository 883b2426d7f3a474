"""
Adapters: Car, payment method and order repositories.

Order status writes are conditional on the status that was read,
mirroring the funding repositories.
"""

from dataclasses import asdict
from decimal import Decimal
from typing import Optional

from sqlalchemy import delete, func, insert, select, update
from sqlalchemy.engine import Connection, RowMapping

from tradevault.domain.checkout.entities import (
    BillingInfo,
    Car,
    CarStatus,
    Order,
    OrderStatus,
    PaymentMethod,
    PaymentMethodType,
)
from tradevault.domain.checkout.ports import (
    CarRepository,
    OrderRepository,
    PaymentMethodRepository,
)
from tradevault.infrastructure.db.tables import cars, orders, payment_methods

_CAR_PLAIN_FIELDS = (
    "name",
    "full_name",
    "year",
    "description",
    "range",
    "acceleration",
    "top_speed",
    "seating",
    "images",
    "features",
    "is_featured",
    "is_available",
    "created_by",
)


def _to_car(row: RowMapping) -> Car:
    return Car(
        id=row["id"],
        price=Decimal(str(row["price"])),
        status=CarStatus(row["status"]),
        created_at=row["created_at"],
        updated_at=row["updated_at"],
        **{name: row[name] for name in _CAR_PLAIN_FIELDS},
    )


def _car_values(car: Car) -> dict:
    return {
        "price": car.price,
        "status": car.status.value,
        "updated_at": car.updated_at,
        **{name: getattr(car, name) for name in _CAR_PLAIN_FIELDS},
    }


class SqlCarRepository(CarRepository):
    """SQL implementation of the car catalog."""

    def __init__(self, conn: Connection) -> None:
        self._conn = conn

    def get(self, car_id: str) -> Optional[Car]:
        row = self._conn.execute(select(cars).where(cars.c.id == car_id)).mappings().first()
        return _to_car(row) if row else None

    def list(self, available_only: bool = False, featured: Optional[bool] = None) -> list[Car]:
        query = select(cars)
        if available_only:
            query = query.where(
                cars.c.is_available.is_(True), cars.c.status == CarStatus.AVAILABLE.value
            )
        if featured is not None:
            query = query.where(cars.c.is_featured == featured)
        query = query.order_by(cars.c.created_at.desc())
        return [_to_car(r) for r in self._conn.execute(query).mappings()]

    def add(self, car: Car) -> None:
        self._conn.execute(
            insert(cars).values(id=car.id, created_at=car.created_at, **_car_values(car))
        )

    def update(self, car: Car) -> None:
        self._conn.execute(update(cars).where(cars.c.id == car.id).values(**_car_values(car)))

    def delete(self, car_id: str) -> None:
        self._conn.execute(delete(cars).where(cars.c.id == car_id))


def _to_method(row: RowMapping) -> PaymentMethod:
    return PaymentMethod(
        id=row["id"],
        name=row["name"],
        code=row["code"],
        type=PaymentMethodType(row["type"]),
        description=row["description"],
        network_fee=row["network_fee"],
        wallet_address=row["wallet_address"],
        is_active=row["is_active"],
        created_at=row["created_at"],
    )


class SqlPaymentMethodRepository(PaymentMethodRepository):
    """SQL implementation of payment methods."""

    def __init__(self, conn: Connection) -> None:
        self._conn = conn

    def get(self, method_id: str) -> Optional[PaymentMethod]:
        row = self._conn.execute(
            select(payment_methods).where(payment_methods.c.id == method_id)
        ).mappings().first()
        return _to_method(row) if row else None

    def get_by_code(self, code: str) -> Optional[PaymentMethod]:
        row = self._conn.execute(
            select(payment_methods).where(payment_methods.c.code == code.upper())
        ).mappings().first()
        return _to_method(row) if row else None

    def list(self, active_only: bool = True) -> list[PaymentMethod]:
        query = select(payment_methods)
        if active_only:
            query = query.where(payment_methods.c.is_active.is_(True))
        query = query.order_by(payment_methods.c.name)
        return [_to_method(r) for r in self._conn.execute(query).mappings()]

    def add(self, method: PaymentMethod) -> None:
        self._conn.execute(
            insert(payment_methods).values(
                id=method.id,
                name=method.name,
                code=method.code.upper(),
                type=method.type.value,
                description=method.description,
                network_fee=method.network_fee,
                wallet_address=method.wallet_address,
                is_active=method.is_active,
                created_at=method.created_at,
            )
        )


def _optional_decimal(value) -> Optional[Decimal]:
    return Decimal(str(value)) if value is not None else None


def _to_order(row: RowMapping) -> Order:
    return Order(
        order_id=row["order_id"],
        user_id=row["user_id"],
        car_id=row["car_id"],
        car_name=row["car_name"],
        payment_method=row["payment_method"],
        payment_currency=row["payment_currency"],
        amount=Decimal(str(row["amount"])),
        crypto_amount=_optional_decimal(row["crypto_amount"]),
        wallet_address=row["wallet_address"],
        transaction_hash=row["transaction_hash"],
        billing=BillingInfo(**row["billing"]),
        status=OrderStatus(row["status"]),
        expires_at=row["expires_at"],
        paid_at=row["paid_at"],
        confirmed_at=row["confirmed_at"],
        created_at=row["created_at"],
        updated_at=row["updated_at"],
    )


class SqlOrderRepository(OrderRepository):
    """SQL implementation of orders."""

    def __init__(self, conn: Connection) -> None:
        self._conn = conn

    def get(self, order_id: str) -> Optional[Order]:
        row = self._conn.execute(
            select(orders).where(orders.c.order_id == order_id)
        ).mappings().first()
        return _to_order(row) if row else None

    def add(self, order: Order) -> None:
        self._conn.execute(
            insert(orders).values(
                order_id=order.order_id,
                user_id=order.user_id,
                car_id=order.car_id,
                car_name=order.car_name,
                payment_method=order.payment_method,
                payment_currency=order.payment_currency,
                amount=order.amount,
                crypto_amount=order.crypto_amount,
                wallet_address=order.wallet_address,
                transaction_hash=order.transaction_hash,
                billing=asdict(order.billing),
                status=order.status.value,
                expires_at=order.expires_at,
                paid_at=order.paid_at,
                confirmed_at=order.confirmed_at,
                created_at=order.created_at,
                updated_at=order.created_at,
            )
        )

    def list_for_user(self, user_id: str, limit: int = 10, offset: int = 0) -> list[Order]:
        query = (
            select(orders)
            .where(orders.c.user_id == user_id)
            .order_by(orders.c.created_at.desc())
            .limit(limit)
            .offset(offset)
        )
        return [_to_order(r) for r in self._conn.execute(query).mappings()]

    def count_for_user(self, user_id: str) -> int:
        return self._conn.execute(
            select(func.count()).select_from(orders).where(orders.c.user_id == user_id)
        ).scalar_one()

    def save_transition(self, order: Order, expected: OrderStatus) -> bool:
        result = self._conn.execute(
            update(orders)
            .where(orders.c.order_id == order.order_id, orders.c.status == expected.value)
            .values(
                status=order.status.value,
                transaction_hash=order.transaction_hash,
                paid_at=order.paid_at,
                confirmed_at=order.confirmed_at,
                updated_at=order.updated_at,
            )
        )
        return result.rowcount == 1
