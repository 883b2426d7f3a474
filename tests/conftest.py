"""
Shared fixtures.

Every test gets a fresh in-memory SQLite database. The API client
swaps the outbound collaborators (email queue, market data, image
storage) for recording fakes through `app.dependency_overrides`.
"""

from datetime import datetime, timedelta, timezone
from decimal import Decimal
from functools import partial

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.pool import StaticPool

from tradevault.application.ledger.wallet_ops import credit_wallet
from tradevault.domain.accounts.entities import StoredImage
from tradevault.domain.accounts.ports import ImageStoragePort
from tradevault.domain.errors import ExternalServiceError
from tradevault.domain.ledger.entities import Quote, WalletEntryType
from tradevault.domain.ledger.ports import MarketDataPort
from tradevault.domain.notifications.entities import EmailMessage, NotificationQueue
from tradevault.infrastructure.accounts.security_adapters import BcryptPasswordHasher
from tradevault.infrastructure.db.engine import build_engine, create_schema
from tradevault.infrastructure.db.unit_of_work import SqlUnitOfWork
from tradevault.interfaces.dependencies import (
    get_engine,
    get_image_storage,
    get_market_data,
    get_notification_queue,
    get_password_hasher,
)
from tradevault.main import app
from tradevault.shared.security.rate_limiting import limiter

DAILY_LIMIT = Decimal("10000")


# ── Fakes ────────────────────────────────────────────────────────────


class RecordingQueue(NotificationQueue):
    """Keeps every enqueued message instead of sending it."""

    def __init__(self) -> None:
        self.messages: list[EmailMessage] = []

    def enqueue(self, message: EmailMessage) -> None:
        self.messages.append(message)

    @property
    def subjects(self) -> list[str]:
        return [m.subject for m in self.messages]


class StubMarketData(MarketDataPort):
    """Serves prices from a dict; unknown symbols fail like Finnhub does."""

    def __init__(self) -> None:
        self.prices: dict[str, Decimal] = {}

    def get_quote(self, symbol: str) -> Quote:
        price = self.prices.get(symbol.upper())
        if price is None:
            raise ExternalServiceError("Finnhub", f"no price for {symbol}")
        return Quote(
            symbol=symbol.upper(),
            current=price,
            change=Decimal("0"),
            percent_change=Decimal("0"),
            high=price,
            low=price,
            open=price,
            previous_close=price,
            timestamp=1_700_000_000,
        )


class StubImageStorage(ImageStoragePort):
    def __init__(self) -> None:
        self.uploads: list[str] = []

    def upload(self, data: str, folder: str) -> StoredImage:
        self.uploads.append(folder)
        n = len(self.uploads)
        return StoredImage(url=f"https://img.test/{folder}/{n}.png", public_id=f"{folder}/{n}")


class FixedClock:
    """Callable clock that only moves when told to."""

    def __init__(self, now: datetime) -> None:
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now += timedelta(**kwargs)


# ── Database ─────────────────────────────────────────────────────────


@pytest.fixture
def engine():
    engine = build_engine("sqlite://", poolclass=StaticPool)
    create_schema(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def uow_factory(engine):
    return partial(SqlUnitOfWork, engine, DAILY_LIMIT)


@pytest.fixture
def clock() -> FixedClock:
    return FixedClock(datetime(2024, 3, 1, 12, 0, tzinfo=timezone.utc))


@pytest.fixture
def notifications() -> RecordingQueue:
    return RecordingQueue()


@pytest.fixture
def market_data() -> StubMarketData:
    return StubMarketData()


@pytest.fixture
def image_storage() -> StubImageStorage:
    return StubImageStorage()


@pytest.fixture
def fund(uow_factory):
    """Credit a user's wallet as an approved deposit would."""

    def _fund(user_id: str, amount: str) -> None:
        with uow_factory() as uow:
            credit_wallet(
                uow,
                user_id,
                Decimal(amount),
                WalletEntryType.DEPOSIT,
                "Test funding",
                datetime.now(timezone.utc),
                deposited=Decimal(amount),
            )

    return _fund


# ── API ──────────────────────────────────────────────────────────────


@pytest.fixture
def client(engine, notifications, market_data, image_storage):
    limiter.enabled = False
    app.dependency_overrides[get_engine] = lambda: engine
    app.dependency_overrides[get_notification_queue] = lambda: notifications
    app.dependency_overrides[get_market_data] = lambda: market_data
    app.dependency_overrides[get_image_storage] = lambda: image_storage
    app.dependency_overrides[get_password_hasher] = lambda: BcryptPasswordHasher(rounds=4)
    yield TestClient(app)
    app.dependency_overrides.clear()
    limiter.enabled = True


@pytest.fixture
def register(client):
    """Register a user through the API; returns (user_id, auth headers)."""

    def _register(
        email: str = "alice@example.com",
        password: str = "correct-horse",
        full_name: str = "Alice Doe",
    ) -> tuple[str, dict[str, str]]:
        resp = client.post(
            "/api/v1/auth/register",
            json={"full_name": full_name, "email": email, "password": password},
        )
        assert resp.status_code == 201, resp.text
        body = resp.json()
        return body["user"]["id"], {"Authorization": f"Bearer {body['access_token']}"}

    return _register


@pytest.fixture
def make_admin(uow_factory):
    """Promote a user. The flag is read from the database on each request."""

    def _make_admin(user_id: str) -> None:
        with uow_factory() as uow:
            user = uow.users.get(user_id)
            user.is_admin = True
            uow.users.update(user)

    return _make_admin


@pytest.fixture
def admin(register, make_admin) -> tuple[str, dict[str, str]]:
    user_id, headers = register(email="admin@example.com", full_name="Ada Admin")
    make_admin(user_id)
    return user_id, headers
