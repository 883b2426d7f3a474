"""
Pydantic schemas for deposits, fiat funding requests, withdrawals and loans.
"""

from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel, Field

from tradevault.domain.funding.entities import (
    DepositStatus,
    FundingRequestStatus,
    LoanStatus,
    WithdrawalMethod,
    WithdrawalStatus,
)
from tradevault.interfaces.schemas import MONEY_DIGITS, ResponseModel


# ── Requests ─────────────────────────────────────────────────────


class CreateDepositRequest(BaseModel):
    """A user's declaration of an incoming transfer.

    Attributes:
        amount: Amount in USD (> 0).
        method: Free-form channel label, e.g. "BTC" or "bank".
        transaction_hash: On-chain hash or bank reference, if any.
        proof_url: Link to an uploaded receipt.
    """

    amount: Decimal = Field(..., gt=0, **MONEY_DIGITS)
    method: str = Field(..., min_length=1, max_length=40)
    transaction_hash: str = Field(default="", max_length=200)
    proof_url: str | None = Field(default=None, max_length=500)


class SubmitFundingRequest(BaseModel):
    """A fiat transfer declaration.

    Attributes:
        currency: USD, EUR, GBP or JPY.
        amount: Declared amount (>= 1), credited as USD on approval.
        transaction_type: Transfer channel, e.g. "wire" or "sepa".
        image_urls: Links to uploaded transfer receipts.
    """

    currency: str = Field(..., min_length=3, max_length=3)
    amount: Decimal = Field(..., ge=1, **MONEY_DIGITS)
    transaction_type: str = Field(..., min_length=1, max_length=40)
    name: str = Field(..., min_length=1, max_length=200)
    email: str = Field(..., min_length=3, max_length=254)
    image_urls: list[str] = Field(default_factory=list, max_length=10)


class CreateWithdrawalRequest(BaseModel):
    amount: Decimal = Field(..., gt=0, **MONEY_DIGITS)
    method: str = Field(..., min_length=1, max_length=20)
    wallet_address: str | None = Field(default=None, max_length=200)
    network: str | None = Field(default=None, max_length=40)
    bank_name: str | None = Field(default=None, max_length=120)
    account_number: str | None = Field(default=None, max_length=60)
    routing_number: str | None = Field(default=None, max_length=60)
    account_holder: str | None = Field(default=None, max_length=120)
    cashtag: str | None = Field(default=None, max_length=60)


class WithdrawalStatusRequest(BaseModel):
    status: str = Field(..., min_length=1, max_length=20)
    tx_hash: str | None = Field(default=None, max_length=200)


class CreateLoanRequest(BaseModel):
    loan_type: str = Field(..., min_length=1, max_length=40)
    amount: Decimal = Field(..., gt=0, **MONEY_DIGITS)
    term_months: int = Field(..., gt=0, le=600)
    income: Decimal = Field(..., ge=0, **MONEY_DIGITS)
    employment_status: str = Field(..., min_length=1, max_length=40)
    purpose: str = Field(default="", max_length=500)


# ── Responses ────────────────────────────────────────────────────


class DepositResponse(ResponseModel):
    id: str
    reference: str
    user_id: str
    amount: Decimal
    method: str
    transaction_hash: str
    proof_url: str | None
    status: DepositStatus
    credited_at: datetime | None
    created_at: datetime
    updated_at: datetime | None


class UserDepositsResponse(ResponseModel):
    deposits: list[DepositResponse]
    total_approved: Decimal


class WithdrawalResponse(ResponseModel):
    id: str
    reference: str
    user_id: str
    amount: Decimal
    method: WithdrawalMethod
    wallet_address: str | None
    network: str | None
    bank_name: str | None
    account_number: str | None
    routing_number: str | None
    account_holder: str | None
    cashtag: str | None
    status: WithdrawalStatus
    tx_hash: str | None
    created_at: datetime
    updated_at: datetime | None


class LoanResponse(ResponseModel):
    id: str
    reference: str
    user_id: str
    loan_type: str
    amount: Decimal
    term_months: int
    income: Decimal
    employment_status: str
    purpose: str
    status: LoanStatus
    created_at: datetime
    updated_at: datetime | None


class FundingRequestResponse(ResponseModel):
    id: str
    reference: str
    user_id: str
    currency: str
    amount: Decimal
    transaction_type: str
    name: str
    email: str
    image_urls: list[str]
    status: FundingRequestStatus
    credited_at: datetime | None
    created_at: datetime
    updated_at: datetime | None
