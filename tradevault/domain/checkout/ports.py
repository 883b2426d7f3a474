"""
Port interfaces (ABCs) for the checkout bounded context.
"""

from abc import ABC, abstractmethod
from typing import Optional

from tradevault.domain.checkout.entities import (
    Car,
    Order,
    OrderStatus,
    PaymentMethod,
)


class CarRepository(ABC):
    """Port for the car catalog."""

    @abstractmethod
    def get(self, car_id: str) -> Optional[Car]:
        raise NotImplementedError

    @abstractmethod
    def list(self, available_only: bool = False, featured: Optional[bool] = None) -> list[Car]:
        raise NotImplementedError

    @abstractmethod
    def add(self, car: Car) -> None:
        raise NotImplementedError

    @abstractmethod
    def update(self, car: Car) -> None:
        raise NotImplementedError

    @abstractmethod
    def delete(self, car_id: str) -> None:
        raise NotImplementedError


class PaymentMethodRepository(ABC):
    """Port for payment methods."""

    @abstractmethod
    def get(self, method_id: str) -> Optional[PaymentMethod]:
        raise NotImplementedError

    @abstractmethod
    def get_by_code(self, code: str) -> Optional[PaymentMethod]:
        raise NotImplementedError

    @abstractmethod
    def list(self, active_only: bool = True) -> list[PaymentMethod]:
        raise NotImplementedError

    @abstractmethod
    def add(self, method: PaymentMethod) -> None:
        raise NotImplementedError


class OrderRepository(ABC):
    """Port for orders.

    `save_transition` writes the order only if its stored status still
    equals `expected`, so two racing transitions cannot both win.
    """

    @abstractmethod
    def get(self, order_id: str) -> Optional[Order]:
        raise NotImplementedError

    @abstractmethod
    def add(self, order: Order) -> None:
        raise NotImplementedError

    @abstractmethod
    def list_for_user(self, user_id: str, limit: int = 10, offset: int = 0) -> list[Order]:
        raise NotImplementedError

    @abstractmethod
    def count_for_user(self, user_id: str) -> int:
        raise NotImplementedError

    @abstractmethod
    def save_transition(self, order: Order, expected: OrderStatus) -> bool:
        """Persist status and timestamps if the stored status is `expected`."""
        raise NotImplementedError
