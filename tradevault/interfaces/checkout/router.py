"""
FastAPI router for the checkout bounded context.

Car catalog, payment methods and the order lifecycle. Reads of an order
expire it when its payment window has passed.
"""

from enum import Enum

from fastapi import APIRouter, Depends, Query, Response, status

from tradevault.application.checkout.catalog import (
    CreateCarUseCase,
    CreatePaymentMethodUseCase,
    DeleteCarUseCase,
    GetCarUseCase,
    ListCarsUseCase,
    ListPaymentMethodsUseCase,
    UpdateCarUseCase,
)
from tradevault.application.checkout.dtos import (
    BillingInput,
    CarChanges,
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
from tradevault.domain.accounts.entities import Principal
from tradevault.interfaces.checkout.dependencies import (
    get_cancel_order_use_case,
    get_car_use_case,
    get_confirm_order_use_case,
    get_create_car_use_case,
    get_create_order_use_case,
    get_create_payment_method_use_case,
    get_delete_car_use_case,
    get_list_cars_use_case,
    get_list_my_orders_use_case,
    get_list_payment_methods_use_case,
    get_order_use_case,
    get_payment_details_use_case,
    get_submit_payment_use_case,
    get_track_order_use_case,
    get_update_car_use_case,
)
from tradevault.interfaces.checkout.schemas import (
    CarResponse,
    CreateCarRequest,
    CreateOrderRequest,
    CreatePaymentMethodRequest,
    OrderPageResponse,
    OrderResponse,
    OrderTrackingResponse,
    PaymentDetailsResponse,
    PaymentMethodResponse,
    SubmitPaymentRequest,
    TrackOrderRequest,
    UpdateCarRequest,
)
from tradevault.interfaces.dependencies import get_current_principal, require_admin
from tradevault.interfaces.schemas import ErrorResponse

router = APIRouter()

ORDER_ERRORS = {
    400: {"model": ErrorResponse},
    403: {"model": ErrorResponse},
    404: {"model": ErrorResponse},
    409: {"model": ErrorResponse},
}


def _plain(values: dict) -> dict:
    """Replace enum members with their values for the application DTOs."""
    return {k: v.value if isinstance(v, Enum) else v for k, v in values.items()}


# ── Cars ─────────────────────────────────────────────────────────


@router.get("/cars", response_model=list[CarResponse], tags=["cars"])
def list_cars(
    available_only: bool = Query(default=False),
    featured: bool | None = Query(default=None),
    use_case: ListCarsUseCase = Depends(get_list_cars_use_case),
) -> list[CarResponse]:
    cars = use_case.execute(available_only=available_only, featured=featured)
    return [CarResponse.model_validate(c) for c in cars]


@router.get(
    "/cars/{car_id}",
    response_model=CarResponse,
    responses={404: {"model": ErrorResponse}},
    tags=["cars"],
)
def get_car(
    car_id: str,
    use_case: GetCarUseCase = Depends(get_car_use_case),
) -> CarResponse:
    return CarResponse.model_validate(use_case.execute(car_id))


@router.post(
    "/cars",
    response_model=CarResponse,
    status_code=status.HTTP_201_CREATED,
    tags=["cars"],
    summary="Add a car to the catalog (admin)",
)
def create_car(
    body: CreateCarRequest,
    admin: Principal = Depends(require_admin),
    use_case: CreateCarUseCase = Depends(get_create_car_use_case),
) -> CarResponse:
    car = use_case.execute(NewCar(**_plain(body.model_dump())), admin.user_id)
    return CarResponse.model_validate(car)


@router.patch(
    "/cars/{car_id}",
    response_model=CarResponse,
    responses={404: {"model": ErrorResponse}},
    tags=["cars"],
    summary="Update a car (admin)",
)
def update_car(
    car_id: str,
    body: UpdateCarRequest,
    _admin: Principal = Depends(require_admin),
    use_case: UpdateCarUseCase = Depends(get_update_car_use_case),
) -> CarResponse:
    changes = CarChanges(**_plain(body.model_dump(exclude_none=True)))
    return CarResponse.model_validate(use_case.execute(car_id, changes))


@router.delete(
    "/cars/{car_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    responses={404: {"model": ErrorResponse}},
    tags=["cars"],
    summary="Remove a car from the catalog (admin)",
)
def delete_car(
    car_id: str,
    _admin: Principal = Depends(require_admin),
    use_case: DeleteCarUseCase = Depends(get_delete_car_use_case),
) -> Response:
    use_case.execute(car_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


# ── Payment methods ──────────────────────────────────────────────


@router.get(
    "/payment-methods",
    response_model=list[PaymentMethodResponse],
    tags=["payment-methods"],
)
def list_payment_methods(
    active_only: bool = Query(default=True),
    use_case: ListPaymentMethodsUseCase = Depends(get_list_payment_methods_use_case),
) -> list[PaymentMethodResponse]:
    return [
        PaymentMethodResponse.model_validate(m)
        for m in use_case.execute(active_only=active_only)
    ]


@router.post(
    "/payment-methods",
    response_model=PaymentMethodResponse,
    status_code=status.HTTP_201_CREATED,
    responses={400: {"model": ErrorResponse}, 409: {"model": ErrorResponse}},
    tags=["payment-methods"],
    summary="Add a payment method (admin)",
)
def create_payment_method(
    body: CreatePaymentMethodRequest,
    _admin: Principal = Depends(require_admin),
    use_case: CreatePaymentMethodUseCase = Depends(get_create_payment_method_use_case),
) -> PaymentMethodResponse:
    method = use_case.execute(NewPaymentMethod(**_plain(body.model_dump())))
    return PaymentMethodResponse.model_validate(method)


# ── Orders ───────────────────────────────────────────────────────


@router.post(
    "/orders",
    response_model=OrderResponse,
    status_code=status.HTTP_201_CREATED,
    responses=ORDER_ERRORS,
    tags=["orders"],
    summary="Check out a car",
    description="Creates a pending order that expires after the payment window.",
)
def create_order(
    body: CreateOrderRequest,
    principal: Principal = Depends(get_current_principal),
    use_case: CreateOrderUseCase = Depends(get_create_order_use_case),
) -> OrderResponse:
    command = CreateOrderCommand(
        user_id=principal.user_id,
        car_id=body.car_id,
        payment_method=body.payment_method,
        billing=BillingInput(**body.billing.model_dump()),
    )
    return OrderResponse.model_validate(use_case.execute(command))


@router.get("/orders/me", response_model=OrderPageResponse, tags=["orders"])
def my_orders(
    page: int = Query(default=1, ge=1),
    page_size: int = Query(default=10, ge=1, le=100),
    principal: Principal = Depends(get_current_principal),
    use_case: ListMyOrdersUseCase = Depends(get_list_my_orders_use_case),
) -> OrderPageResponse:
    result = use_case.execute(principal.user_id, page=page, page_size=page_size)
    return OrderPageResponse.model_validate(result)


@router.post(
    "/orders/track",
    response_model=OrderTrackingResponse,
    responses={404: {"model": ErrorResponse}},
    tags=["orders"],
    summary="Track an order without signing in",
    description="Matches the order id against the billing email.",
)
def track_order(
    body: TrackOrderRequest,
    use_case: TrackOrderUseCase = Depends(get_track_order_use_case),
) -> OrderTrackingResponse:
    return OrderTrackingResponse.model_validate(
        use_case.execute(body.order_id, body.email)
    )


@router.get(
    "/orders/{order_id}",
    response_model=OrderResponse,
    responses=ORDER_ERRORS,
    tags=["orders"],
)
def get_order(
    order_id: str,
    principal: Principal = Depends(get_current_principal),
    use_case: GetOrderUseCase = Depends(get_order_use_case),
) -> OrderResponse:
    return OrderResponse.model_validate(use_case.execute(principal, order_id))


@router.get(
    "/orders/{order_id}/payment",
    response_model=PaymentDetailsResponse,
    responses=ORDER_ERRORS,
    tags=["orders"],
    summary="Payment instructions and remaining time",
)
def get_payment_details(
    order_id: str,
    principal: Principal = Depends(get_current_principal),
    use_case: GetPaymentDetailsUseCase = Depends(get_payment_details_use_case),
) -> PaymentDetailsResponse:
    return PaymentDetailsResponse.model_validate(use_case.execute(principal, order_id))


@router.post(
    "/orders/{order_id}/payment",
    response_model=OrderResponse,
    responses=ORDER_ERRORS,
    tags=["orders"],
    summary="Submit the payment transaction hash",
)
def submit_payment(
    order_id: str,
    body: SubmitPaymentRequest,
    principal: Principal = Depends(get_current_principal),
    use_case: SubmitPaymentUseCase = Depends(get_submit_payment_use_case),
) -> OrderResponse:
    order = use_case.execute(principal, order_id, body.transaction_hash)
    return OrderResponse.model_validate(order)


@router.post(
    "/orders/{order_id}/cancel",
    response_model=OrderResponse,
    responses=ORDER_ERRORS,
    tags=["orders"],
)
def cancel_order(
    order_id: str,
    principal: Principal = Depends(get_current_principal),
    use_case: CancelOrderUseCase = Depends(get_cancel_order_use_case),
) -> OrderResponse:
    return OrderResponse.model_validate(use_case.execute(principal, order_id))


@router.post(
    "/orders/{order_id}/confirm",
    response_model=OrderResponse,
    responses=ORDER_ERRORS,
    tags=["orders"],
    summary="Confirm a paid order (admin)",
)
def confirm_order(
    order_id: str,
    principal: Principal = Depends(get_current_principal),
    use_case: ConfirmOrderUseCase = Depends(get_confirm_order_use_case),
) -> OrderResponse:
    return OrderResponse.model_validate(use_case.execute(principal, order_id))
