"""
Data Transfer Objects for the funding application layer.
"""

from dataclasses import dataclass
from decimal import Decimal
from typing import Optional

from tradevault.domain.funding.entities import Deposit


@dataclass(frozen=True)
class CreateDepositCommand:
    user_id: str
    amount: Decimal
    method: str
    transaction_hash: str = ""
    proof_url: Optional[str] = None


@dataclass(frozen=True)
class CreateWithdrawalCommand:
    """Input DTO for a withdrawal request.

    Attributes:
        method: "crypto", "bank" or "cashapp".
        wallet_address, network: Required destination for crypto.
        bank_name, account_number, account_holder: Required for bank.
        cashtag: Required for cashapp.
    """

    user_id: str
    amount: Decimal
    method: str
    wallet_address: Optional[str] = None
    network: Optional[str] = None
    bank_name: Optional[str] = None
    account_number: Optional[str] = None
    routing_number: Optional[str] = None
    account_holder: Optional[str] = None
    cashtag: Optional[str] = None


@dataclass(frozen=True)
class CreateLoanCommand:
    user_id: str
    loan_type: str
    amount: Decimal
    term_months: int
    income: Decimal
    employment_status: str
    purpose: str = ""


@dataclass(frozen=True)
class UserDeposits:
    """A user's deposits together with the sum of the approved ones."""

    deposits: list[Deposit]
    total_approved: Decimal


@dataclass(frozen=True)
class SubmitFundingRequestCommand:
    user_id: str
    currency: str
    amount: Decimal
    transaction_type: str
    name: str
    email: str
    image_urls: tuple[str, ...] = ()
