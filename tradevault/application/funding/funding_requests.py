"""
Use cases: Fiat funding requests.

A user declares a bank transfer in one of the supported currencies and
attaches proof images. An admin approves or rejects it; approval
credits the declared amount to the wallet once, through the same
compare-and-set as deposits.

Failure cases:
    - ValidationError for a bad amount, currency or missing field
    - NotFoundError for an unknown request
    - InvalidStatusTransitionError once the request is approved or rejected
"""

import logging
from datetime import datetime
from decimal import Decimal
from typing import Callable, Optional

from tradevault.application.funding.dtos import SubmitFundingRequestCommand
from tradevault.application.funding.status import (
    check_amount,
    notify_owner,
    parse_status,
)
from tradevault.application.ledger.wallet_ops import credit_wallet
from tradevault.domain.errors import (
    InvalidStatusTransitionError,
    NotFoundError,
    ValidationError,
)
from tradevault.domain.funding.entities import (
    FUNDING_CURRENCIES,
    FUNDING_REQUEST_TRANSITIONS,
    FundingRequest,
    FundingRequestStatus,
    check_transition,
)
from tradevault.domain.ledger.entities import (
    WalletEntryType,
    generate_reference,
    utc_now,
)
from tradevault.domain.notifications.entities import NotificationQueue
from tradevault.domain.unit_of_work import UnitOfWork

logger = logging.getLogger(__name__)

MIN_FUNDING_AMOUNT = Decimal("1")


class SubmitFundingRequestUseCase:
    def __init__(
        self,
        uow_factory: Callable[[], UnitOfWork],
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self._uow_factory = uow_factory
        self._clock = clock

    def execute(self, command: SubmitFundingRequestCommand) -> FundingRequest:
        check_amount("Funding", command.amount)
        if command.amount < MIN_FUNDING_AMOUNT:
            raise ValidationError(
                f"Funding amount must be at least {MIN_FUNDING_AMOUNT}", "amount"
            )
        currency = command.currency.strip().upper()
        if currency not in FUNDING_CURRENCIES:
            raise ValidationError(
                f"Unsupported currency: {command.currency}. "
                f"Expected one of: {', '.join(FUNDING_CURRENCIES)}",
                "currency",
            )
        for name in ("transaction_type", "name", "email"):
            if not getattr(command, name).strip():
                raise ValidationError(f"{name} is required", name)

        now = self._clock()
        request = FundingRequest(
            user_id=command.user_id,
            currency=currency,
            amount=command.amount,
            transaction_type=command.transaction_type.strip(),
            name=command.name.strip(),
            email=command.email.strip().lower(),
            image_urls=[url for url in command.image_urls if url.strip()],
            created_at=now,
            updated_at=now,
            reference=generate_reference("FND", now),
        )
        with self._uow_factory() as uow:
            uow.funding_requests.add(request)

        logger.info(
            "Funding request submitted: id=%s, user=%s, amount=%s %s",
            request.id,
            request.user_id,
            request.amount,
            request.currency,
        )
        return request


class ReviewFundingRequestUseCase:
    """Admin approval or rejection. Approval credits the wallet once."""

    def __init__(
        self,
        uow_factory: Callable[[], UnitOfWork],
        notifications: NotificationQueue,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self._uow_factory = uow_factory
        self._notifications = notifications
        self._clock = clock

    def approve(self, request_id: str) -> FundingRequest:
        return self._review(request_id, FundingRequestStatus.APPROVED)

    def reject(self, request_id: str) -> FundingRequest:
        return self._review(request_id, FundingRequestStatus.REJECTED)

    def _review(
        self, request_id: str, requested: FundingRequestStatus
    ) -> FundingRequest:
        now = self._clock()
        with self._uow_factory() as uow:
            request = uow.funding_requests.get(request_id)
            if request is None:
                raise NotFoundError("Funding request", request_id)
            if not check_transition(
                "Funding request",
                FUNDING_REQUEST_TRANSITIONS,
                request.status,
                requested,
            ):
                return request

            if not uow.funding_requests.transition(
                request_id, request.status, requested, now
            ):
                current = uow.funding_requests.get(request_id)
                if current.status != requested:
                    raise InvalidStatusTransitionError(
                        "Funding request", current.status.value, requested.value
                    )
                return current

            if requested == FundingRequestStatus.APPROVED:
                credit_wallet(
                    uow,
                    request.user_id,
                    request.amount,
                    WalletEntryType.DEPOSIT,
                    f"Funding request {request.reference} approved"
                    f" ({request.amount} {request.currency})",
                    now,
                    source_id=request.id,
                    deposited=request.amount,
                )
            updated = uow.funding_requests.get(request_id)
            owner = uow.users.get(request.user_id)

        logger.info(
            "Funding request %s: %s -> %s",
            request_id,
            request.status.value,
            requested.value,
        )
        notify_owner(
            self._notifications,
            owner,
            "funding",
            updated.reference,
            updated.status.value,
            amount=updated.amount,
        )
        return updated


class ListFundingRequestsUseCase:
    def __init__(self, uow_factory: Callable[[], UnitOfWork]) -> None:
        self._uow_factory = uow_factory

    def for_user(self, user_id: str) -> list[FundingRequest]:
        with self._uow_factory() as uow:
            return uow.funding_requests.list_for_user(user_id)

    def all(
        self, status: Optional[str] = None, limit: int = 100, offset: int = 0
    ) -> list[FundingRequest]:
        wanted = parse_status(FundingRequestStatus, status) if status else None
        with self._uow_factory() as uow:
            return uow.funding_requests.list_all(status=wanted, limit=limit, offset=offset)
