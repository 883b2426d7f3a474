"""
Use cases: Car catalog and payment methods.
"""

import dataclasses
import logging
from datetime import datetime
from typing import Callable, Optional

from tradevault.application.checkout.dtos import CarChanges, NewCar, NewPaymentMethod
from tradevault.domain.checkout.entities import (
    Car,
    CarStatus,
    PaymentMethod,
    PaymentMethodType,
)
from tradevault.domain.errors import DuplicateError, NotFoundError, ValidationError
from tradevault.domain.ledger.entities import ZERO, utc_now
from tradevault.domain.unit_of_work import UnitOfWork

logger = logging.getLogger(__name__)


def _car_status(value: str) -> CarStatus:
    try:
        return CarStatus(value.strip().lower())
    except ValueError:
        raise ValidationError(f"Invalid car status: {value}", "status") from None


class ListCarsUseCase:
    def __init__(self, uow_factory: Callable[[], UnitOfWork]) -> None:
        self._uow_factory = uow_factory

    def execute(
        self, available_only: bool = False, featured: Optional[bool] = None
    ) -> list[Car]:
        with self._uow_factory() as uow:
            return uow.cars.list(available_only=available_only, featured=featured)


class GetCarUseCase:
    def __init__(self, uow_factory: Callable[[], UnitOfWork]) -> None:
        self._uow_factory = uow_factory

    def execute(self, car_id: str) -> Car:
        with self._uow_factory() as uow:
            car = uow.cars.get(car_id)
        if car is None:
            raise NotFoundError("Car", car_id)
        return car


class CreateCarUseCase:
    def __init__(
        self,
        uow_factory: Callable[[], UnitOfWork],
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self._uow_factory = uow_factory
        self._clock = clock

    def execute(self, new_car: NewCar, admin_id: str) -> Car:
        if new_car.price <= ZERO:
            raise ValidationError("Price must be positive", "price")
        if not new_car.name.strip():
            raise ValidationError("Name is required", "name")

        now = self._clock()
        values = dataclasses.asdict(new_car)
        values["status"] = _car_status(new_car.status)
        car = Car(**values, created_by=admin_id, created_at=now, updated_at=now)
        with self._uow_factory() as uow:
            uow.cars.add(car)
        logger.info("Car created: id=%s, name=%s, price=%s", car.id, car.name, car.price)
        return car


class UpdateCarUseCase:
    def __init__(
        self,
        uow_factory: Callable[[], UnitOfWork],
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self._uow_factory = uow_factory
        self._clock = clock

    def execute(self, car_id: str, changes: CarChanges) -> Car:
        values = {k: v for k, v in dataclasses.asdict(changes).items() if v is not None}
        if "price" in values and values["price"] <= ZERO:
            raise ValidationError("Price must be positive", "price")
        if "status" in values:
            values["status"] = _car_status(values["status"])

        with self._uow_factory() as uow:
            car = uow.cars.get(car_id)
            if car is None:
                raise NotFoundError("Car", car_id)
            updated = dataclasses.replace(car, **values, updated_at=self._clock())
            uow.cars.update(updated)
        logger.info("Car updated: id=%s, fields=%s", car_id, sorted(values))
        return updated


class DeleteCarUseCase:
    def __init__(self, uow_factory: Callable[[], UnitOfWork]) -> None:
        self._uow_factory = uow_factory

    def execute(self, car_id: str) -> None:
        with self._uow_factory() as uow:
            if uow.cars.get(car_id) is None:
                raise NotFoundError("Car", car_id)
            uow.cars.delete(car_id)
        logger.info("Car deleted: id=%s", car_id)


class ListPaymentMethodsUseCase:
    def __init__(self, uow_factory: Callable[[], UnitOfWork]) -> None:
        self._uow_factory = uow_factory

    def execute(self, active_only: bool = True) -> list[PaymentMethod]:
        with self._uow_factory() as uow:
            return uow.payment_methods.list(active_only=active_only)


class CreatePaymentMethodUseCase:
    def __init__(
        self,
        uow_factory: Callable[[], UnitOfWork],
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self._uow_factory = uow_factory
        self._clock = clock

    def execute(self, new_method: NewPaymentMethod) -> PaymentMethod:
        code = new_method.code.strip().upper()
        if not code or not new_method.name.strip():
            raise ValidationError("Name and code are required", "code")
        try:
            method_type = PaymentMethodType(new_method.type.strip().lower())
        except ValueError:
            raise ValidationError(
                f"Invalid payment method type: {new_method.type}", "type"
            ) from None
        if method_type == PaymentMethodType.CRYPTO and not new_method.wallet_address:
            raise ValidationError(
                "Crypto payment methods need a wallet address", "wallet_address"
            )

        method = PaymentMethod(
            name=new_method.name.strip(),
            code=code,
            type=method_type,
            description=new_method.description,
            network_fee=new_method.network_fee,
            wallet_address=new_method.wallet_address,
            is_active=new_method.is_active,
            created_at=self._clock(),
        )
        with self._uow_factory() as uow:
            if uow.payment_methods.get_by_code(code) is not None:
                raise DuplicateError("Payment method", "code")
            uow.payment_methods.add(method)
        logger.info("Payment method created: code=%s, type=%s", code, method_type.value)
        return method
