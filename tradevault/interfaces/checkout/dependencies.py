"""
Dependency injection for the checkout bounded context.
"""

from typing import Callable

from fastapi import Depends

from tradevault.application.checkout.catalog import (
    CreateCarUseCase,
    CreatePaymentMethodUseCase,
    DeleteCarUseCase,
    GetCarUseCase,
    ListCarsUseCase,
    ListPaymentMethodsUseCase,
    UpdateCarUseCase,
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
from tradevault.core.config import settings
from tradevault.domain.notifications.entities import NotificationQueue
from tradevault.domain.unit_of_work import UnitOfWork
from tradevault.interfaces.dependencies import get_notification_queue, get_uow_factory

UowFactory = Callable[[], UnitOfWork]


def get_list_cars_use_case(
    uow_factory: UowFactory = Depends(get_uow_factory),
) -> ListCarsUseCase:
    return ListCarsUseCase(uow_factory)


def get_car_use_case(
    uow_factory: UowFactory = Depends(get_uow_factory),
) -> GetCarUseCase:
    return GetCarUseCase(uow_factory)


def get_create_car_use_case(
    uow_factory: UowFactory = Depends(get_uow_factory),
) -> CreateCarUseCase:
    return CreateCarUseCase(uow_factory)


def get_update_car_use_case(
    uow_factory: UowFactory = Depends(get_uow_factory),
) -> UpdateCarUseCase:
    return UpdateCarUseCase(uow_factory)


def get_delete_car_use_case(
    uow_factory: UowFactory = Depends(get_uow_factory),
) -> DeleteCarUseCase:
    return DeleteCarUseCase(uow_factory)


def get_list_payment_methods_use_case(
    uow_factory: UowFactory = Depends(get_uow_factory),
) -> ListPaymentMethodsUseCase:
    return ListPaymentMethodsUseCase(uow_factory)


def get_create_payment_method_use_case(
    uow_factory: UowFactory = Depends(get_uow_factory),
) -> CreatePaymentMethodUseCase:
    return CreatePaymentMethodUseCase(uow_factory)


def get_create_order_use_case(
    uow_factory: UowFactory = Depends(get_uow_factory),
) -> CreateOrderUseCase:
    """Build CreateOrderUseCase with the configured payment window."""
    return CreateOrderUseCase(uow_factory, expiry_minutes=settings.order_expiry_minutes)


def get_order_use_case(
    uow_factory: UowFactory = Depends(get_uow_factory),
) -> GetOrderUseCase:
    return GetOrderUseCase(uow_factory)


def get_payment_details_use_case(
    uow_factory: UowFactory = Depends(get_uow_factory),
) -> GetPaymentDetailsUseCase:
    return GetPaymentDetailsUseCase(uow_factory)


def get_list_my_orders_use_case(
    uow_factory: UowFactory = Depends(get_uow_factory),
) -> ListMyOrdersUseCase:
    return ListMyOrdersUseCase(uow_factory)


def get_track_order_use_case(
    uow_factory: UowFactory = Depends(get_uow_factory),
) -> TrackOrderUseCase:
    return TrackOrderUseCase(uow_factory)


def get_submit_payment_use_case(
    uow_factory: UowFactory = Depends(get_uow_factory),
    notifications: NotificationQueue = Depends(get_notification_queue),
) -> SubmitPaymentUseCase:
    return SubmitPaymentUseCase(uow_factory, notifications)


def get_cancel_order_use_case(
    uow_factory: UowFactory = Depends(get_uow_factory),
) -> CancelOrderUseCase:
    return CancelOrderUseCase(uow_factory)


def get_confirm_order_use_case(
    uow_factory: UowFactory = Depends(get_uow_factory),
) -> ConfirmOrderUseCase:
    return ConfirmOrderUseCase(uow_factory)
