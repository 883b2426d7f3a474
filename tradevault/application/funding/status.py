"""
Helpers shared by the funding use cases.
"""

import logging
from decimal import Decimal
from enum import Enum
from typing import Optional, TypeVar

from tradevault.application.notifications.emails import status_change_email
from tradevault.domain.accounts.entities import User
from tradevault.domain.errors import ValidationError
from tradevault.domain.ledger.entities import ZERO, fits_money_column
from tradevault.domain.notifications.entities import NotificationQueue

logger = logging.getLogger(__name__)

StatusT = TypeVar("StatusT", bound=Enum)


def parse_status(status_type: type[StatusT], value: str) -> StatusT:
    """Convert a raw status string into the given enum.

    Raises:
        ValidationError: If the value is not a member of the enum.
    """
    try:
        return status_type(value.strip().lower())
    except ValueError:
        allowed = ", ".join(s.value for s in status_type)
        raise ValidationError(
            f"Invalid status '{value}'. Expected one of: {allowed}", "status"
        ) from None


def check_amount(kind: str, amount: Decimal) -> None:
    """Reject a non-positive amount or one the wallet columns cannot hold."""
    if amount <= ZERO:
        raise ValidationError(f"{kind} amount must be positive", "amount")
    if not fits_money_column(amount):
        raise ValidationError(
            f"{kind} amount must have at most 8 decimal places", "amount"
        )


def notify_owner(
    notifications: NotificationQueue,
    owner: Optional[User],
    kind: str,
    reference: str,
    status: str,
    amount: Optional[Decimal] = None,
) -> None:
    """Queue a status change email for the owner of a funding request."""
    if owner is None:
        logger.warning("No owner to notify for %s %s", kind, reference)
        return
    notifications.enqueue(
        status_change_email(
            owner.email, owner.full_name, kind, reference, status, amount=amount
        )
    )
