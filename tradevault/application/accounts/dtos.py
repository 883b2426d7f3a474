"""
Data Transfer Objects for the accounts application layer.

UserView is the only shape in which a user leaves the application
layer. It whitelists fields so the password hash is never exposed.
"""

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from typing import Optional

from tradevault.domain.accounts.entities import User


@dataclass(frozen=True)
class RegisterCommand:
    full_name: str
    email: str
    password: str
    country: str = ""
    phone: str = ""


@dataclass(frozen=True)
class UserView:
    id: str
    full_name: str
    email: str
    country: str
    phone: str
    address: str
    city: str
    state: str
    zip_code: str
    is_admin: bool
    status: str
    bonus: Decimal
    profit: Decimal
    created_at: Optional[datetime]
    updated_at: Optional[datetime]

    @classmethod
    def from_entity(cls, user: User) -> "UserView":
        return cls(
            id=user.id,
            full_name=user.full_name,
            email=user.email,
            country=user.country,
            phone=user.phone,
            address=user.address,
            city=user.city,
            state=user.state,
            zip_code=user.zip_code,
            is_admin=user.is_admin,
            status=user.status.value,
            bonus=user.bonus,
            profit=user.profit,
            created_at=user.created_at,
            updated_at=user.updated_at,
        )


@dataclass(frozen=True)
class AuthResult:
    """A freshly issued bearer token and the user it belongs to."""

    access_token: str
    user: UserView
    token_type: str = "bearer"


@dataclass(frozen=True)
class ProfileChanges:
    """Fields a user may change on their own profile. None means unchanged."""

    full_name: Optional[str] = None
    country: Optional[str] = None
    phone: Optional[str] = None
    address: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    zip_code: Optional[str] = None


@dataclass(frozen=True)
class AdminUserChanges:
    is_admin: Optional[bool] = None
    status: Optional[str] = None


@dataclass(frozen=True)
class SubmitKycCommand:
    """KYC submission. Images are base64 data URIs."""

    user_id: str
    name: str
    email: str
    id_type: str
    id_number: str
    front_image: str
    back_image: str
