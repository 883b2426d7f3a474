"""
Port interfaces (ABCs) for the funding bounded context.

Status changes go through `transition`, a compare-and-set on the
stored status. Only the caller whose write flips the row may apply
the wallet side effect, which makes repeated approvals harmless.
"""

from abc import ABC, abstractmethod
from datetime import datetime
from typing import Optional

from tradevault.domain.funding.entities import (
    Deposit,
    DepositStatus,
    FundingRequest,
    FundingRequestStatus,
    Loan,
    LoanStatus,
    Withdrawal,
    WithdrawalStatus,
)


class DepositRepository(ABC):
    """Port for deposit persistence."""

    @abstractmethod
    def get(self, deposit_id: str) -> Optional[Deposit]:
        raise NotImplementedError

    @abstractmethod
    def add(self, deposit: Deposit) -> None:
        raise NotImplementedError

    @abstractmethod
    def list_for_user(self, user_id: str) -> list[Deposit]:
        raise NotImplementedError

    @abstractmethod
    def list_all(
        self, status: Optional[DepositStatus] = None, limit: int = 100, offset: int = 0
    ) -> list[Deposit]:
        raise NotImplementedError

    @abstractmethod
    def transition(
        self,
        deposit_id: str,
        current: DepositStatus,
        new: DepositStatus,
        at: datetime,
    ) -> bool:
        """Set status to `new` only if it is still `current`.

        Returns:
            True if this call changed the row.
        """
        raise NotImplementedError

    @abstractmethod
    def delete(self, deposit_id: str) -> None:
        raise NotImplementedError


class WithdrawalRepository(ABC):
    """Port for withdrawal persistence."""

    @abstractmethod
    def get(self, withdrawal_id: str) -> Optional[Withdrawal]:
        raise NotImplementedError

    @abstractmethod
    def add(self, withdrawal: Withdrawal) -> None:
        raise NotImplementedError

    @abstractmethod
    def list_for_user(self, user_id: str) -> list[Withdrawal]:
        raise NotImplementedError

    @abstractmethod
    def list_all(
        self,
        status: Optional[WithdrawalStatus] = None,
        limit: int = 100,
        offset: int = 0,
    ) -> list[Withdrawal]:
        raise NotImplementedError

    @abstractmethod
    def transition(
        self,
        withdrawal_id: str,
        current: WithdrawalStatus,
        new: WithdrawalStatus,
        at: datetime,
        tx_hash: Optional[str] = None,
    ) -> bool:
        """Compare-and-set the status; see DepositRepository.transition."""
        raise NotImplementedError


class LoanRepository(ABC):
    """Port for loan persistence."""

    @abstractmethod
    def get(self, loan_id: str) -> Optional[Loan]:
        raise NotImplementedError

    @abstractmethod
    def add(self, loan: Loan) -> None:
        raise NotImplementedError

    @abstractmethod
    def list_for_user(self, user_id: str) -> list[Loan]:
        raise NotImplementedError

    @abstractmethod
    def list_all(
        self, status: Optional[LoanStatus] = None, limit: int = 100, offset: int = 0
    ) -> list[Loan]:
        raise NotImplementedError

    @abstractmethod
    def transition(
        self, loan_id: str, current: LoanStatus, new: LoanStatus, at: datetime
    ) -> bool:
        raise NotImplementedError

    @abstractmethod
    def delete(self, loan_id: str) -> None:
        raise NotImplementedError


class FundingRequestRepository(ABC):
    """Port for fiat funding request persistence."""

    @abstractmethod
    def get(self, request_id: str) -> Optional[FundingRequest]:
        raise NotImplementedError

    @abstractmethod
    def add(self, request: FundingRequest) -> None:
        raise NotImplementedError

    @abstractmethod
    def list_for_user(self, user_id: str) -> list[FundingRequest]:
        raise NotImplementedError

    @abstractmethod
    def list_all(
        self,
        status: Optional[FundingRequestStatus] = None,
        limit: int = 100,
        offset: int = 0,
    ) -> list[FundingRequest]:
        raise NotImplementedError

    @abstractmethod
    def transition(
        self,
        request_id: str,
        current: FundingRequestStatus,
        new: FundingRequestStatus,
        at: datetime,
    ) -> bool:
        """Compare-and-set the status; see DepositRepository.transition."""
        raise NotImplementedError
