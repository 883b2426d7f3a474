"""
Port interfaces (ABCs) for the ledger bounded context.

Ports define the contracts that the domain requires from the outside world.
Infrastructure adapters implement these interfaces.
The domain layer never depends on concrete implementations.
"""

from abc import ABC, abstractmethod
from datetime import datetime
from decimal import Decimal
from typing import Optional

from tradevault.domain.ledger.entities import (
    ZERO,
    AdminPrice,
    AssetType,
    Holding,
    InvestmentPlan,
    Quote,
    Transaction,
    TransactionType,
    Wallet,
    WalletEntry,
)


class HoldingRepository(ABC):
    """Port for holding persistence.

    Writes are conditional on the holding's version. Adapters raise
    ConcurrentUpdateError when the stored version no longer matches.
    """

    @abstractmethod
    def get(
        self, user_id: str, asset_type: AssetType, symbol: str
    ) -> Optional[Holding]:
        """Return the user's holding for an instrument, or None."""
        raise NotImplementedError

    @abstractmethod
    def list_for_user(
        self, user_id: str, asset_type: Optional[AssetType] = None
    ) -> list[Holding]:
        """Return the user's holdings, optionally filtered by asset type."""
        raise NotImplementedError

    @abstractmethod
    def list_all(self, limit: int = 100, offset: int = 0) -> list[Holding]:
        """Return holdings across all users, newest first."""
        raise NotImplementedError

    @abstractmethod
    def count_for_symbol(self, asset_type: AssetType, symbol: str) -> int:
        """Return how many holdings reference an instrument."""
        raise NotImplementedError

    @abstractmethod
    def add(self, holding: Holding) -> Holding:
        """Insert a new holding. Raises ConcurrentUpdateError on a duplicate."""
        raise NotImplementedError

    @abstractmethod
    def update(self, holding: Holding) -> Holding:
        """Write a holding if its version is unchanged; return it with version + 1."""
        raise NotImplementedError

    @abstractmethod
    def delete(self, holding: Holding) -> None:
        """Delete a holding if its version is unchanged."""
        raise NotImplementedError


class TransactionRepository(ABC):
    """Port for the append-only transaction history."""

    @abstractmethod
    def add(self, transaction: Transaction) -> None:
        raise NotImplementedError

    @abstractmethod
    def list_for_user(
        self,
        user_id: str,
        type: Optional[TransactionType] = None,
        asset_type: Optional[AssetType] = None,
        symbol: Optional[str] = None,
        limit: int = 50,
        offset: int = 0,
    ) -> list[Transaction]:
        """Return the user's transactions, newest first."""
        raise NotImplementedError


class WalletRepository(ABC):
    """Port for wallet balances.

    Balance changes are single conditional statements in the store so
    that two concurrent debits can never both succeed past zero.
    """

    @abstractmethod
    def get(self, user_id: str) -> Optional[Wallet]:
        raise NotImplementedError

    @abstractmethod
    def get_or_create(self, user_id: str, at: datetime) -> Wallet:
        """Return the user's wallet, creating an empty one if absent."""
        raise NotImplementedError

    @abstractmethod
    def credit(
        self,
        user_id: str,
        amount: Decimal,
        at: datetime,
        deposited: Decimal = ZERO,
        withdrawn: Decimal = ZERO,
        invested: Decimal = ZERO,
    ) -> Decimal:
        """Add to the balance and the running totals (each a signed delta).

        Returns:
            The new balance.
        """
        raise NotImplementedError

    @abstractmethod
    def debit(
        self,
        user_id: str,
        amount: Decimal,
        at: datetime,
        withdrawn: Decimal = ZERO,
        invested: Decimal = ZERO,
    ) -> Decimal:
        """Subtract from the balance only if it covers the amount.

        Returns:
            The new balance.

        Raises:
            InsufficientFundsError: If the balance is lower than amount.
        """
        raise NotImplementedError

    @abstractmethod
    def reserve_daily_withdrawal(
        self, user_id: str, amount: Decimal, at: datetime
    ) -> bool:
        """Add `amount` to the daily withdrawal total if it stays within the limit.

        The total restarts at zero on the first reservation of a new UTC
        day. Check and increment are one conditional write, so concurrent
        withdrawals cannot both pass on a stale total.

        Returns:
            False (and changes nothing) if the limit would be exceeded.
        """
        raise NotImplementedError


class WalletEntryRepository(ABC):
    """Port for the immutable wallet ledger."""

    @abstractmethod
    def add(self, entry: WalletEntry) -> None:
        raise NotImplementedError

    @abstractmethod
    def list_for_user(
        self, user_id: str, limit: int = 50, offset: int = 0
    ) -> list[WalletEntry]:
        """Return the user's wallet entries, newest first."""
        raise NotImplementedError


class InvestmentPlanRepository(ABC):
    """Port for investment plan persistence."""

    @abstractmethod
    def get(self, plan_id: str) -> Optional[InvestmentPlan]:
        raise NotImplementedError

    @abstractmethod
    def list(
        self,
        category: Optional[str] = None,
        risk_level: Optional[str] = None,
        featured: Optional[bool] = None,
    ) -> list[InvestmentPlan]:
        raise NotImplementedError

    @abstractmethod
    def add(self, plan: InvestmentPlan) -> None:
        raise NotImplementedError

    @abstractmethod
    def update(self, plan: InvestmentPlan) -> None:
        raise NotImplementedError

    @abstractmethod
    def delete(self, plan_id: str) -> None:
        raise NotImplementedError


class AdminPriceRepository(ABC):
    """Port for administrator price overrides."""

    @abstractmethod
    def get_active(self, symbol: str) -> Optional[AdminPrice]:
        """Return the active override for a symbol, or None."""
        raise NotImplementedError

    @abstractmethod
    def list(self, active_only: bool = True) -> list[AdminPrice]:
        raise NotImplementedError

    @abstractmethod
    def set_active(self, price: AdminPrice) -> None:
        """Deactivate the symbol's current override and store the new one."""
        raise NotImplementedError


class MarketDataPort(ABC):
    """Port for live stock quotes."""

    @abstractmethod
    def get_quote(self, symbol: str) -> Quote:
        """Return the latest quote for a symbol.

        Raises:
            ExternalServiceError: If the provider fails or has no price.
        """
        raise NotImplementedError
