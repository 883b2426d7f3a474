"""
Pydantic schemas for the accounts API.

UserResponse mirrors UserView: the password hash has no field here.
"""

from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel, Field

from tradevault.domain.accounts.entities import KycStatus
from tradevault.interfaces.schemas import ResponseModel

ID_IMAGE_DESCRIPTION = "Base64 data URI, e.g. data:image/png;base64,..."


class RegisterRequest(BaseModel):
    full_name: str = Field(..., min_length=1, max_length=120)
    email: str = Field(..., min_length=3, max_length=254)
    password: str = Field(..., min_length=8, max_length=128)
    country: str = Field(default="", max_length=80)
    phone: str = Field(default="", max_length=32)


class LoginRequest(BaseModel):
    email: str = Field(..., min_length=3, max_length=254)
    password: str = Field(..., min_length=1, max_length=128)


class UserResponse(ResponseModel):
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
    created_at: datetime | None
    updated_at: datetime | None


class AuthResponse(ResponseModel):
    access_token: str
    token_type: str
    user: UserResponse


class UserListResponse(BaseModel):
    users: list[UserResponse]
    total: int
    limit: int
    offset: int


class UpdateProfileRequest(BaseModel):
    """Fields a user may edit on their own profile."""

    full_name: str | None = Field(default=None, max_length=120)
    country: str | None = Field(default=None, max_length=80)
    phone: str | None = Field(default=None, max_length=32)
    address: str | None = Field(default=None, max_length=200)
    city: str | None = Field(default=None, max_length=80)
    state: str | None = Field(default=None, max_length=80)
    zip_code: str | None = Field(default=None, max_length=20)


class AdminUpdateUserRequest(BaseModel):
    is_admin: bool | None = None
    status: str | None = Field(default=None, max_length=20)


class SubmitKycRequest(BaseModel):
    name: str = Field(..., min_length=1, max_length=120)
    email: str = Field(..., min_length=3, max_length=254)
    id_type: str = Field(..., min_length=1, max_length=40)
    id_number: str = Field(..., min_length=1, max_length=64)
    front_image: str = Field(..., description=ID_IMAGE_DESCRIPTION)
    back_image: str = Field(..., description=ID_IMAGE_DESCRIPTION)


class StoredImageResponse(ResponseModel):
    url: str
    public_id: str


class KycResponse(ResponseModel):
    id: str
    user_id: str
    name: str
    email: str
    id_type: str
    id_number: str
    front_image: StoredImageResponse
    back_image: StoredImageResponse
    status: KycStatus
    reviewed_at: datetime | None
    created_at: datetime
