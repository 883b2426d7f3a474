"""
Unit of work port.

One unit of work is one database transaction. Every repository it
exposes shares that transaction, so a ledger operation either writes
the holding, the transaction record, the wallet and its entry together
or writes nothing.

Usage:
    with uow_factory() as uow:
        holding = uow.holdings.get(...)
        ...
    # committed on normal exit, rolled back on exception
"""

from abc import ABC, abstractmethod

from tradevault.domain.accounts.ports import KycRepository, UserRepository
from tradevault.domain.checkout.ports import (
    CarRepository,
    OrderRepository,
    PaymentMethodRepository,
)
from tradevault.domain.funding.ports import (
    DepositRepository,
    FundingRequestRepository,
    LoanRepository,
    WithdrawalRepository,
)
from tradevault.domain.ledger.ports import (
    AdminPriceRepository,
    HoldingRepository,
    InvestmentPlanRepository,
    TransactionRepository,
    WalletEntryRepository,
    WalletRepository,
)


class UnitOfWork(ABC):
    """Transactional boundary exposing every repository."""

    holdings: HoldingRepository
    transactions: TransactionRepository
    wallets: WalletRepository
    wallet_entries: WalletEntryRepository
    plans: InvestmentPlanRepository
    admin_prices: AdminPriceRepository
    deposits: DepositRepository
    funding_requests: FundingRequestRepository
    withdrawals: WithdrawalRepository
    loans: LoanRepository
    users: UserRepository
    kyc: KycRepository
    cars: CarRepository
    payment_methods: PaymentMethodRepository
    orders: OrderRepository

    @abstractmethod
    def __enter__(self) -> "UnitOfWork":
        raise NotImplementedError

    @abstractmethod
    def __exit__(self, exc_type, exc, tb) -> None:
        raise NotImplementedError
