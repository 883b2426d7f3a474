"""
Adapter: SQL unit of work.

Opens one connection inside `engine.begin()` and builds every
repository on it. Leaving the block commits; an exception rolls back.
"""

from decimal import Decimal

from sqlalchemy.engine import Engine

from tradevault.domain.unit_of_work import UnitOfWork
from tradevault.infrastructure.accounts.user_repository import (
    SqlKycRepository,
    SqlUserRepository,
)
from tradevault.infrastructure.checkout.repositories import (
    SqlCarRepository,
    SqlOrderRepository,
    SqlPaymentMethodRepository,
)
from tradevault.infrastructure.funding.deposit_repository import SqlDepositRepository
from tradevault.infrastructure.funding.funding_request_repository import (
    SqlFundingRequestRepository,
)
from tradevault.infrastructure.funding.loan_repository import SqlLoanRepository
from tradevault.infrastructure.funding.withdrawal_repository import (
    SqlWithdrawalRepository,
)
from tradevault.infrastructure.ledger.holding_repository import SqlHoldingRepository
from tradevault.infrastructure.ledger.investment_plan_repository import (
    SqlAdminPriceRepository,
    SqlInvestmentPlanRepository,
)
from tradevault.infrastructure.ledger.transaction_repository import (
    SqlTransactionRepository,
)
from tradevault.infrastructure.ledger.wallet_repository import (
    SqlWalletEntryRepository,
    SqlWalletRepository,
)


class SqlUnitOfWork(UnitOfWork):
    """One database transaction shared by all repositories."""

    def __init__(self, engine: Engine, withdrawal_limit: Decimal = Decimal("10000")) -> None:
        self._engine = engine
        self._withdrawal_limit = withdrawal_limit
        self._ctx = None

    def __enter__(self) -> "SqlUnitOfWork":
        self._ctx = self._engine.begin()
        conn = self._ctx.__enter__()

        self.holdings = SqlHoldingRepository(conn)
        self.transactions = SqlTransactionRepository(conn)
        self.wallets = SqlWalletRepository(conn, self._withdrawal_limit)
        self.wallet_entries = SqlWalletEntryRepository(conn)
        self.plans = SqlInvestmentPlanRepository(conn)
        self.admin_prices = SqlAdminPriceRepository(conn)
        self.deposits = SqlDepositRepository(conn)
        self.funding_requests = SqlFundingRequestRepository(conn)
        self.withdrawals = SqlWithdrawalRepository(conn)
        self.loans = SqlLoanRepository(conn)
        self.users = SqlUserRepository(conn)
        self.kyc = SqlKycRepository(conn)
        self.cars = SqlCarRepository(conn)
        self.payment_methods = SqlPaymentMethodRepository(conn)
        self.orders = SqlOrderRepository(conn)
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        ctx, self._ctx = self._ctx, None
        ctx.__exit__(exc_type, exc, tb)
