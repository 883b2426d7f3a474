"""
Port interfaces (ABCs) for the accounts bounded context.

Covers user and KYC persistence plus the credential, token and
image storage collaborators.
"""

from abc import ABC, abstractmethod
from datetime import datetime
from typing import Optional

from tradevault.domain.accounts.entities import (
    KycRecord,
    KycStatus,
    Principal,
    StoredImage,
    User,
)


class UserRepository(ABC):
    """Port for user persistence."""

    @abstractmethod
    def get(self, user_id: str) -> Optional[User]:
        raise NotImplementedError

    @abstractmethod
    def get_by_email(self, email: str) -> Optional[User]:
        """Return the user with this (lower-cased) email, or None."""
        raise NotImplementedError

    @abstractmethod
    def add(self, user: User) -> None:
        raise NotImplementedError

    @abstractmethod
    def update(self, user: User) -> None:
        raise NotImplementedError

    @abstractmethod
    def delete(self, user_id: str) -> None:
        raise NotImplementedError

    @abstractmethod
    def list(self, limit: int = 50, offset: int = 0) -> list[User]:
        raise NotImplementedError

    @abstractmethod
    def count(self) -> int:
        raise NotImplementedError


class KycRepository(ABC):
    """Port for KYC record persistence."""

    @abstractmethod
    def get(self, kyc_id: str) -> Optional[KycRecord]:
        raise NotImplementedError

    @abstractmethod
    def get_for_user(self, user_id: str) -> Optional[KycRecord]:
        raise NotImplementedError

    @abstractmethod
    def get_by_id_number(self, id_number: str) -> Optional[KycRecord]:
        raise NotImplementedError

    @abstractmethod
    def add(self, record: KycRecord) -> None:
        raise NotImplementedError

    @abstractmethod
    def delete(self, kyc_id: str) -> None:
        raise NotImplementedError

    @abstractmethod
    def list(self, status: Optional[KycStatus] = None) -> list[KycRecord]:
        raise NotImplementedError

    @abstractmethod
    def transition(
        self, kyc_id: str, current: KycStatus, new: KycStatus, at: datetime
    ) -> bool:
        """Compare-and-set the review status. Returns True if changed."""
        raise NotImplementedError


class PasswordHasher(ABC):
    """Port for one-way password hashing."""

    @abstractmethod
    def hash(self, password: str) -> str:
        raise NotImplementedError

    @abstractmethod
    def verify(self, password: str, password_hash: str) -> bool:
        raise NotImplementedError


class TokenService(ABC):
    """Port for issuing and verifying bearer tokens."""

    @abstractmethod
    def issue(self, principal: Principal) -> str:
        raise NotImplementedError

    @abstractmethod
    def verify(self, token: str) -> Principal:
        """Decode a token.

        Raises:
            UnauthorizedError: If the token is malformed, forged or expired.
        """
        raise NotImplementedError


class ImageStoragePort(ABC):
    """Port for uploading base64-encoded images."""

    @abstractmethod
    def upload(self, data: str, folder: str) -> StoredImage:
        """Store an image and return its public URL and identifier.

        Raises:
            ExternalServiceError: If the provider rejects or fails the upload.
        """
        raise NotImplementedError
