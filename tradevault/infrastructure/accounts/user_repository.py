"""
Adapter: User and KYC repositories.
"""

from datetime import datetime
from decimal import Decimal
from typing import Optional

from sqlalchemy import delete, func, insert, select, update
from sqlalchemy.engine import Connection, RowMapping
from sqlalchemy.exc import IntegrityError

from tradevault.domain.accounts.entities import (
    KycRecord,
    KycStatus,
    StoredImage,
    User,
    UserStatus,
)
from tradevault.domain.accounts.ports import KycRepository, UserRepository
from tradevault.domain.errors import DuplicateError
from tradevault.infrastructure.db.tables import kyc_records, users

_PROFILE_FIELDS = ("full_name", "country", "phone", "address", "city", "state", "zip_code")


def _to_user(row: RowMapping) -> User:
    return User(
        id=row["id"],
        email=row["email"],
        password_hash=row["password_hash"],
        is_admin=row["is_admin"],
        status=UserStatus(row["status"]),
        bonus=Decimal(str(row["bonus"])),
        profit=Decimal(str(row["profit"])),
        created_at=row["created_at"],
        updated_at=row["updated_at"],
        **{name: row[name] for name in _PROFILE_FIELDS},
    )


def _user_values(user: User) -> dict:
    return {
        "email": user.email,
        "password_hash": user.password_hash,
        "is_admin": user.is_admin,
        "status": user.status.value,
        "bonus": user.bonus,
        "profit": user.profit,
        "updated_at": user.updated_at,
        **{name: getattr(user, name) for name in _PROFILE_FIELDS},
    }


class SqlUserRepository(UserRepository):
    """SQL implementation of user persistence."""

    def __init__(self, conn: Connection) -> None:
        self._conn = conn

    def get(self, user_id: str) -> Optional[User]:
        row = self._conn.execute(
            select(users).where(users.c.id == user_id)
        ).mappings().first()
        return _to_user(row) if row else None

    def get_by_email(self, email: str) -> Optional[User]:
        row = self._conn.execute(
            select(users).where(users.c.email == email.lower())
        ).mappings().first()
        return _to_user(row) if row else None

    def add(self, user: User) -> None:
        try:
            self._conn.execute(
                insert(users).values(
                    id=user.id, created_at=user.created_at, **_user_values(user)
                )
            )
        except IntegrityError as exc:
            # Registered by a concurrent request since the email check.
            raise DuplicateError("User", "email") from exc

    def update(self, user: User) -> None:
        self._conn.execute(
            update(users).where(users.c.id == user.id).values(**_user_values(user))
        )

    def delete(self, user_id: str) -> None:
        self._conn.execute(delete(users).where(users.c.id == user_id))

    def list(self, limit: int = 50, offset: int = 0) -> list[User]:
        query = select(users).order_by(users.c.created_at.desc()).limit(limit).offset(offset)
        return [_to_user(r) for r in self._conn.execute(query).mappings()]

    def count(self) -> int:
        return self._conn.execute(select(func.count()).select_from(users)).scalar_one()


def _to_kyc(row: RowMapping) -> KycRecord:
    return KycRecord(
        id=row["id"],
        user_id=row["user_id"],
        name=row["name"],
        email=row["email"],
        id_type=row["id_type"],
        id_number=row["id_number"],
        front_image=StoredImage(url=row["front_image_url"], public_id=row["front_image_id"]),
        back_image=StoredImage(url=row["back_image_url"], public_id=row["back_image_id"]),
        status=KycStatus(row["status"]),
        reviewed_at=row["reviewed_at"],
        created_at=row["created_at"],
    )


class SqlKycRepository(KycRepository):
    """SQL implementation of KYC persistence."""

    def __init__(self, conn: Connection) -> None:
        self._conn = conn

    def _first(self, *criteria) -> Optional[KycRecord]:
        row = self._conn.execute(select(kyc_records).where(*criteria)).mappings().first()
        return _to_kyc(row) if row else None

    def get(self, kyc_id: str) -> Optional[KycRecord]:
        return self._first(kyc_records.c.id == kyc_id)

    def get_for_user(self, user_id: str) -> Optional[KycRecord]:
        return self._first(kyc_records.c.user_id == user_id)

    def get_by_id_number(self, id_number: str) -> Optional[KycRecord]:
        return self._first(kyc_records.c.id_number == id_number)

    def add(self, record: KycRecord) -> None:
        self._conn.execute(
            insert(kyc_records).values(
                id=record.id,
                user_id=record.user_id,
                name=record.name,
                email=record.email,
                id_type=record.id_type,
                id_number=record.id_number,
                front_image_url=record.front_image.url,
                front_image_id=record.front_image.public_id,
                back_image_url=record.back_image.url,
                back_image_id=record.back_image.public_id,
                status=record.status.value,
                reviewed_at=record.reviewed_at,
                created_at=record.created_at,
            )
        )

    def delete(self, kyc_id: str) -> None:
        self._conn.execute(delete(kyc_records).where(kyc_records.c.id == kyc_id))

    def list(self, status: Optional[KycStatus] = None) -> list[KycRecord]:
        query = select(kyc_records)
        if status is not None:
            query = query.where(kyc_records.c.status == status.value)
        query = query.order_by(kyc_records.c.created_at.desc())
        return [_to_kyc(r) for r in self._conn.execute(query).mappings()]

    def transition(
        self, kyc_id: str, current: KycStatus, new: KycStatus, at: datetime
    ) -> bool:
        result = self._conn.execute(
            update(kyc_records)
            .where(kyc_records.c.id == kyc_id, kyc_records.c.status == current.value)
            .values(status=new.value, reviewed_at=at)
        )
        return result.rowcount == 1
