"""
Domain entities for the accounts bounded context.

No framework imports and no IO operations.
"""

from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Optional

from tradevault.domain.ledger.entities import ZERO, new_id


class UserStatus(Enum):
    ACTIVE = "active"
    SUSPENDED = "suspended"


class KycStatus(Enum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


KYC_TRANSITIONS: dict[KycStatus, frozenset[KycStatus]] = {
    KycStatus.PENDING: frozenset({KycStatus.APPROVED, KycStatus.REJECTED}),
    KycStatus.APPROVED: frozenset(),
    KycStatus.REJECTED: frozenset(),
}


@dataclass(frozen=True)
class Principal:
    """The authenticated caller of an operation.

    Attributes:
        user_id: Identifier of the authenticated user.
        is_admin: Whether the caller may perform admin operations.
    """

    user_id: str
    is_admin: bool = False

    def can_access(self, owner_id: str) -> bool:
        """Return True for the resource owner or an admin."""
        return self.is_admin or self.user_id == owner_id


@dataclass
class User:
    """A registered account. The password hash never leaves this layer."""

    full_name: str
    email: str
    password_hash: str
    country: str = ""
    phone: str = ""
    address: str = ""
    city: str = ""
    state: str = ""
    zip_code: str = ""
    is_admin: bool = False
    status: UserStatus = UserStatus.ACTIVE
    bonus: Decimal = ZERO
    profit: Decimal = ZERO
    id: str = field(default_factory=new_id)
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


@dataclass(frozen=True)
class StoredImage:
    """An uploaded image as returned by the storage provider."""

    url: str
    public_id: str


@dataclass
class KycRecord:
    """Identity documents submitted by a user for review."""

    user_id: str
    name: str
    email: str
    id_type: str
    id_number: str
    front_image: StoredImage
    back_image: StoredImage
    created_at: datetime
    status: KycStatus = KycStatus.PENDING
    reviewed_at: Optional[datetime] = None
    id: str = field(default_factory=new_id)
