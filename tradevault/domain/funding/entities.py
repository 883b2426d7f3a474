"""
Domain entities and status machines for the funding bounded context.

Deposits, fiat funding requests and loans credit the wallet once when
approved. Withdrawals reserve funds on creation and refund them once
if they fail.
No framework imports and no IO operations.
"""

from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Optional

from tradevault.domain.errors import InvalidStatusTransitionError
from tradevault.domain.ledger.entities import new_id


class DepositStatus(Enum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


class WithdrawalStatus(Enum):
    PENDING = "pending"
    PROCESSING = "processing"
    APPROVED = "approved"
    FAILED = "failed"


class WithdrawalMethod(Enum):
    CRYPTO = "crypto"
    BANK = "bank"
    CASHAPP = "cashapp"


class LoanStatus(Enum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


class FundingRequestStatus(Enum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


FUNDING_CURRENCIES = ("USD", "EUR", "GBP", "JPY")


DEPOSIT_TRANSITIONS: dict[DepositStatus, frozenset[DepositStatus]] = {
    DepositStatus.PENDING: frozenset({DepositStatus.APPROVED, DepositStatus.REJECTED}),
    DepositStatus.APPROVED: frozenset(),
    DepositStatus.REJECTED: frozenset(),
}

WITHDRAWAL_TRANSITIONS: dict[WithdrawalStatus, frozenset[WithdrawalStatus]] = {
    WithdrawalStatus.PENDING: frozenset(
        {
            WithdrawalStatus.PROCESSING,
            WithdrawalStatus.APPROVED,
            WithdrawalStatus.FAILED,
        }
    ),
    WithdrawalStatus.PROCESSING: frozenset(
        {WithdrawalStatus.APPROVED, WithdrawalStatus.FAILED}
    ),
    WithdrawalStatus.APPROVED: frozenset(),
    WithdrawalStatus.FAILED: frozenset(),
}

LOAN_TRANSITIONS: dict[LoanStatus, frozenset[LoanStatus]] = {
    LoanStatus.PENDING: frozenset({LoanStatus.APPROVED, LoanStatus.REJECTED}),
    LoanStatus.APPROVED: frozenset(),
    LoanStatus.REJECTED: frozenset(),
}

FUNDING_REQUEST_TRANSITIONS: dict[FundingRequestStatus, frozenset[FundingRequestStatus]] = {
    FundingRequestStatus.PENDING: frozenset(
        {FundingRequestStatus.APPROVED, FundingRequestStatus.REJECTED}
    ),
    FundingRequestStatus.APPROVED: frozenset(),
    FundingRequestStatus.REJECTED: frozenset(),
}


def check_transition(resource: str, table: dict, current: Enum, requested: Enum) -> bool:
    """Validate a status change against a transition table.

    Returns:
        False when requested equals current (a no-op), True otherwise.

    Raises:
        InvalidStatusTransitionError: If the table forbids the change.
    """
    if current == requested:
        return False
    if requested not in table[current]:
        raise InvalidStatusTransitionError(resource, current.value, requested.value)
    return True


@dataclass
class Deposit:
    """A user-declared incoming transfer awaiting admin approval."""

    user_id: str
    amount: Decimal
    method: str
    created_at: datetime
    transaction_hash: str = ""
    proof_url: Optional[str] = None
    status: DepositStatus = DepositStatus.PENDING
    credited_at: Optional[datetime] = None
    reference: str = ""
    id: str = field(default_factory=new_id)
    updated_at: Optional[datetime] = None


@dataclass
class Withdrawal:
    """A payout request. Funds are reserved from the wallet on creation.

    Destination fields depend on the method: crypto uses
    wallet_address and network, bank uses the bank_* fields and
    cashapp uses cashtag.
    """

    user_id: str
    amount: Decimal
    method: WithdrawalMethod
    created_at: datetime
    wallet_address: Optional[str] = None
    network: Optional[str] = None
    bank_name: Optional[str] = None
    account_number: Optional[str] = None
    routing_number: Optional[str] = None
    account_holder: Optional[str] = None
    cashtag: Optional[str] = None
    status: WithdrawalStatus = WithdrawalStatus.PENDING
    tx_hash: Optional[str] = None
    reference: str = ""
    id: str = field(default_factory=new_id)
    updated_at: Optional[datetime] = None


@dataclass
class Loan:
    """A loan application. Approval credits the principal to the wallet."""

    user_id: str
    loan_type: str
    amount: Decimal
    term_months: int
    income: Decimal
    employment_status: str
    created_at: datetime
    purpose: str = ""
    status: LoanStatus = LoanStatus.PENDING
    reference: str = ""
    id: str = field(default_factory=new_id)
    updated_at: Optional[datetime] = None


@dataclass
class FundingRequest:
    """A fiat bank transfer declared with proof images.

    Approval credits `amount` to the USD wallet as declared; the
    currency is recorded for the reviewer and never converted.
    """

    user_id: str
    currency: str
    amount: Decimal
    transaction_type: str
    name: str
    email: str
    created_at: datetime
    image_urls: list[str] = field(default_factory=list)
    status: FundingRequestStatus = FundingRequestStatus.PENDING
    credited_at: Optional[datetime] = None
    reference: str = ""
    id: str = field(default_factory=new_id)
    updated_at: Optional[datetime] = None
