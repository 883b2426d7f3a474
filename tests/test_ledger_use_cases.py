"""
Tests for the ledger use cases against a real (SQLite) unit of work.

Each trade must move the holding, the transaction history and the
wallet together, or leave all three untouched.
"""

from decimal import Decimal

import pytest

from tradevault.application.funding.dtos import CreateWithdrawalCommand
from tradevault.application.funding.withdrawals import CreateWithdrawalUseCase
from tradevault.application.ledger.buy_stock import BuyStockUseCase
from tradevault.application.ledger.dtos import (
    BuyStockCommand,
    PurchasePlanCommand,
    SellPlanCommand,
    SellStockCommand,
    TransactionsQuery,
)
from tradevault.application.ledger.get_holdings import GetTransactionsUseCase
from tradevault.application.ledger.manage_plans import (
    CreatePlanUseCase,
    DeletePlanUseCase,
)
from tradevault.application.ledger.market import SetAdminPriceUseCase
from tradevault.application.ledger.portfolio_summary import GetPortfolioSummaryUseCase
from tradevault.application.ledger.purchase_plan import PurchasePlanUseCase
from tradevault.application.ledger.sell_plan import SellPlanUseCase
from tradevault.application.ledger.sell_stock import SellStockUseCase
from tradevault.application.ledger.wallet import AdjustWalletUseCase
from tradevault.domain.accounts.entities import User
from tradevault.domain.errors import ConflictError, ValidationError
from tradevault.domain.ledger.entities import (
    AssetType,
    InvestmentPlan,
    PlanStatus,
    RiskLevel,
    TransactionType,
    WalletEntryType,
    quantize_money,
)
from tradevault.domain.ledger.errors import (
    ConcurrentUpdateError,
    HoldingNotFoundError,
    InsufficientFundsError,
    InsufficientSharesError,
    PlanUnavailableError,
)

USER = "user-1"


# ── Helpers ──────────────────────────────────────────────────────────


def _buy(uow_factory, notifications, clock, quantity, price, fees="0", symbol="AAPL"):
    return BuyStockUseCase(uow_factory, notifications, clock).execute(
        BuyStockCommand(
            user_id=USER,
            symbol=symbol,
            name="Apple Inc.",
            quantity=Decimal(quantity),
            price=Decimal(price),
            fees=Decimal(fees),
        )
    )


def _sell(uow_factory, notifications, clock, quantity, price, fees="0", symbol="AAPL"):
    return SellStockUseCase(uow_factory, notifications, clock).execute(
        SellStockCommand(
            user_id=USER,
            symbol=symbol,
            quantity=Decimal(quantity),
            price=Decimal(price),
            fees=Decimal(fees),
        )
    )


def _snapshot(uow_factory, symbol="AAPL"):
    with uow_factory() as uow:
        holding = uow.holdings.get(USER, AssetType.STOCK, symbol)
        wallet = uow.wallets.get(USER)
        transactions = uow.transactions.list_for_user(USER)
    return holding, wallet, transactions


def _plan(uow_factory, clock, **overrides) -> InvestmentPlan:
    values = dict(
        name="Global Growth",
        description="Diversified equities",
        category="equity",
        risk_level=RiskLevel.MEDIUM,
        nav=Decimal("50"),
        one_year_return=Decimal("8.5"),
        min_investment=Decimal("100"),
    )
    values.update(overrides)
    return CreatePlanUseCase(uow_factory, clock).execute(InvestmentPlan(**values))


# ══════════════════════════════════════════════════════════════════════
# Stock trades
# ══════════════════════════════════════════════════════════════════════


class TestStockTrades:
    def test_buy_buy_sell_scenario(self, uow_factory, notifications, clock, fund) -> None:
        """Two buys and a full sale keep holding, history and wallet in step."""
        fund(USER, "5000")

        first = _buy(uow_factory, notifications, clock, "10", "100", "5")
        assert first.holding.avg_purchase_price == Decimal("100.5")
        assert first.holding.total_invested == Decimal("1005")
        assert first.wallet_balance == Decimal("3995")

        second = _buy(uow_factory, notifications, clock, "5", "120")
        assert second.holding.quantity == Decimal("15")
        assert second.holding.total_invested == Decimal("1605")
        assert second.holding.avg_purchase_price == Decimal("107")

        sale = _sell(uow_factory, notifications, clock, "15", "110", "10")
        assert sale.holding is None
        assert sale.transaction.net_amount == Decimal("1640")
        assert sale.transaction.realized_gain == Decimal("35")
        assert sale.wallet_entry.type == WalletEntryType.INVESTMENT_SELL
        assert sale.wallet_balance == Decimal("5035")

        holding, wallet, transactions = _snapshot(uow_factory)
        assert holding is None
        assert wallet.balance_usd == Decimal("5035")
        assert [t.type for t in transactions].count(TransactionType.BUY) == 2
        assert [t.type for t in transactions].count(TransactionType.SELL) == 1

    def test_buy_symbol_is_upper_cased(self, uow_factory, notifications, clock, fund) -> None:
        """Symbols are stored upper-cased with a TXN reference."""
        fund(USER, "1000")
        result = _buy(uow_factory, notifications, clock, "1", "10", symbol="msft")
        assert result.holding.symbol == "MSFT"
        assert result.transaction.reference.startswith("TXN")

    def test_buy_without_funds_changes_nothing(self, uow_factory, notifications, clock, fund) -> None:
        """A buy the wallet cannot cover leaves every table untouched."""
        fund(USER, "50")
        with pytest.raises(InsufficientFundsError):
            _buy(uow_factory, notifications, clock, "1", "100")

        holding, wallet, transactions = _snapshot(uow_factory)
        assert holding is None
        assert wallet.balance_usd == Decimal("50")
        assert transactions == []

    def test_insufficient_shares_leaves_state_unchanged(
        self, uow_factory, notifications, clock, fund
    ) -> None:
        """An oversell leaves holding, wallet and history unchanged."""
        fund(USER, "2000")
        _buy(uow_factory, notifications, clock, "10", "100")
        before = _snapshot(uow_factory)

        with pytest.raises(InsufficientSharesError):
            _sell(uow_factory, notifications, clock, "11", "100")

        holding, wallet, transactions = _snapshot(uow_factory)
        assert holding.quantity == before[0].quantity
        assert holding.version == before[0].version
        assert wallet.balance_usd == before[1].balance_usd
        assert len(transactions) == len(before[2])

    def test_selling_unknown_holding(self, uow_factory, notifications, clock) -> None:
        """Selling a symbol that is not held raises HoldingNotFoundError."""
        with pytest.raises(HoldingNotFoundError):
            _sell(uow_factory, notifications, clock, "1", "10")

    def test_partial_sell_keeps_average(self, uow_factory, notifications, clock, fund) -> None:
        """A partial sell keeps the average purchase price."""
        fund(USER, "2000")
        _buy(uow_factory, notifications, clock, "10", "100", "5")
        result = _sell(uow_factory, notifications, clock, "4", "120")
        assert result.holding.quantity == Decimal("6")
        assert result.holding.avg_purchase_price == Decimal("100.5")
        assert result.holding.total_invested == Decimal("603")
        assert result.transaction.cost_basis == Decimal("402")

    def test_stale_version_is_rejected(self, uow_factory, notifications, clock, fund) -> None:
        """Writing a holding with a stale version raises ConcurrentUpdateError."""
        fund(USER, "2000")
        _buy(uow_factory, notifications, clock, "10", "100")
        stale, _, _ = _snapshot(uow_factory)

        _buy(uow_factory, notifications, clock, "1", "100")

        stale.quantity = Decimal("999")
        with pytest.raises(ConcurrentUpdateError):
            with uow_factory() as uow:
                uow.holdings.update(stale)

        holding, _, _ = _snapshot(uow_factory)
        assert holding.quantity == Decimal("11")
        assert holding.version == 1

    def test_quantity_finer_than_storage_changes_nothing(
        self, uow_factory, notifications, clock, fund
    ) -> None:
        """A buy of 0.000000004 shares is refused instead of storing zero."""
        fund(USER, "100")
        with pytest.raises(ValidationError) as exc_info:
            _buy(uow_factory, notifications, clock, "0.000000004", "10")
        assert exc_info.value.field == "quantity"

        holding, wallet, transactions = _snapshot(uow_factory)
        assert holding is None
        assert wallet.balance_usd == Decimal("100")
        assert transactions == []

    @pytest.mark.parametrize(
        "lots",
        [
            [("10", "100", "5"), ("5", "120", "0")],
            [("0.5", "200.25", "1.5"), ("1.25", "199.99", "0.75"), ("3", "210.1", "2")],
            [("1", "33.33", "0"), ("2", "33.34", "0.01"), ("4", "12.5", "0")],
        ],
    )
    def test_buy_sequence_totals_survive_storage(
        self, uow_factory, notifications, clock, fund, lots
    ) -> None:
        """The stored total is the sum of q*p+f and the average is total / quantity."""
        fund(USER, "100000")
        for quantity, price, fees in lots:
            _buy(uow_factory, notifications, clock, quantity, price, fees)

        holding, wallet, _ = _snapshot(uow_factory)
        total = sum(
            (Decimal(q) * Decimal(p) + Decimal(f) for q, p, f in lots), Decimal("0")
        )
        quantity = sum((Decimal(q) for q, _, _ in lots), Decimal("0"))
        assert holding.quantity == quantity
        assert holding.total_invested == total
        assert holding.avg_purchase_price == quantize_money(total / quantity)
        assert wallet.balance_usd == Decimal("100000") - total

    def test_wallet_never_goes_negative(self, uow_factory, notifications, clock, fund) -> None:
        """Across buys, sells and withdrawals every overdraft is refused."""
        fund(USER, "1000")

        def withdraw(amount):
            return CreateWithdrawalUseCase(uow_factory, clock).execute(
                CreateWithdrawalCommand(
                    user_id=USER,
                    amount=Decimal(amount),
                    method="crypto",
                    wallet_address="bc1qexampleaddress",
                )
            )

        steps = [
            (lambda: _buy(uow_factory, notifications, clock, "5", "150"), "250"),
            (lambda: _buy(uow_factory, notifications, clock, "2", "150"), None),
            (lambda: withdraw("300"), None),
            (lambda: withdraw("250"), "0"),
            (lambda: _buy(uow_factory, notifications, clock, "1", "0.01"), None),
            (lambda: _sell(uow_factory, notifications, clock, "5", "100", "1"), "499"),
            (lambda: withdraw("499.01"), None),
            (lambda: withdraw("499"), "0"),
        ]
        balance = Decimal("1000")
        for action, expected in steps:
            if expected is None:
                with pytest.raises(InsufficientFundsError):
                    action()
            else:
                action()
                balance = Decimal(expected)
            _, wallet, _ = _snapshot(uow_factory)
            assert wallet.balance_usd == balance
            assert wallet.balance_usd >= Decimal("0")

    def test_trade_emails_are_queued(self, uow_factory, notifications, clock, fund) -> None:
        """Each trade queues a confirmation to the owner."""
        with uow_factory() as uow:
            uow.users.add(User(id=USER, full_name="Bo", email="bo@example.com", password_hash="x"))
        fund(USER, "500")
        _buy(uow_factory, notifications, clock, "1", "100")
        _sell(uow_factory, notifications, clock, "1", "100")
        assert len(notifications.messages) == 2
        assert all(m.to == "bo@example.com" for m in notifications.messages)


# ══════════════════════════════════════════════════════════════════════
# Investment plans
# ══════════════════════════════════════════════════════════════════════


class TestInvestmentPlans:
    def test_purchase_and_redeem(self, uow_factory, notifications, clock, fund) -> None:
        """A plan can be bought by amount and redeemed near NAV."""
        fund(USER, "1000")
        plan = _plan(uow_factory, clock)

        bought = PurchasePlanUseCase(uow_factory, notifications, clock).execute(
            PurchasePlanCommand(
                user_id=USER,
                plan_id=plan.id,
                investment_amount=Decimal("500"),
                units=Decimal("10"),
                processing_fee=Decimal("5"),
            )
        )
        assert bought.holding.asset_type == AssetType.PLAN
        assert bought.holding.symbol == plan.id
        assert bought.holding.total_invested == Decimal("505")
        assert bought.wallet_balance == Decimal("495")

        sold = SellPlanUseCase(
            uow_factory, notifications, Decimal("0.10"), clock
        ).execute(
            SellPlanCommand(user_id=USER, plan_id=plan.id, units=Decimal("10"), price=Decimal("52"))
        )
        assert sold.holding is None
        assert sold.transaction.net_amount == Decimal("520")
        assert sold.wallet_balance == Decimal("1015")

    def test_uneven_unit_price_keeps_amount_exact(
        self, uow_factory, notifications, clock, fund
    ) -> None:
        """Buying 100 worth of 3 units invests exactly 100 plus the fee."""
        fund(USER, "1000")
        plan = _plan(uow_factory, clock)

        bought = PurchasePlanUseCase(uow_factory, notifications, clock).execute(
            PurchasePlanCommand(
                user_id=USER,
                plan_id=plan.id,
                investment_amount=Decimal("100"),
                units=Decimal("3"),
                processing_fee=Decimal("1"),
            )
        )

        assert bought.holding.total_invested == Decimal("101")
        assert bought.transaction.price == Decimal("33.33333333")
        with uow_factory() as uow:
            assert uow.wallets.get(USER).balance_usd == Decimal("899")

    def test_minimum_investment_enforced(self, uow_factory, notifications, clock, fund) -> None:
        """Investing below the plan minimum is rejected."""
        fund(USER, "1000")
        plan = _plan(uow_factory, clock)
        with pytest.raises(ValidationError):
            PurchasePlanUseCase(uow_factory, notifications, clock).execute(
                PurchasePlanCommand(
                    user_id=USER,
                    plan_id=plan.id,
                    investment_amount=Decimal("50"),
                    units=Decimal("1"),
                )
            )

    def test_closed_plan_cannot_be_bought(self, uow_factory, notifications, clock, fund) -> None:
        """A closed plan raises PlanUnavailableError."""
        fund(USER, "1000")
        plan = _plan(uow_factory, clock, status=PlanStatus.CLOSED)
        with pytest.raises(PlanUnavailableError):
            PurchasePlanUseCase(uow_factory, notifications, clock).execute(
                PurchasePlanCommand(
                    user_id=USER,
                    plan_id=plan.id,
                    investment_amount=Decimal("500"),
                    units=Decimal("10"),
                )
            )

    def test_redeem_price_far_from_nav_rejected(
        self, uow_factory, notifications, clock, fund
    ) -> None:
        """Redeeming far from NAV is rejected."""
        fund(USER, "1000")
        plan = _plan(uow_factory, clock)
        PurchasePlanUseCase(uow_factory, notifications, clock).execute(
            PurchasePlanCommand(
                user_id=USER, plan_id=plan.id, investment_amount=Decimal("500"), units=Decimal("10")
            )
        )
        with pytest.raises(ValidationError):
            SellPlanUseCase(uow_factory, notifications, Decimal("0.10"), clock).execute(
                SellPlanCommand(
                    user_id=USER, plan_id=plan.id, units=Decimal("1"), price=Decimal("80")
                )
            )

    def test_held_plan_cannot_be_deleted(self, uow_factory, notifications, clock, fund) -> None:
        """A plan that someone holds cannot be deleted."""
        fund(USER, "1000")
        plan = _plan(uow_factory, clock)
        PurchasePlanUseCase(uow_factory, notifications, clock).execute(
            PurchasePlanCommand(
                user_id=USER, plan_id=plan.id, investment_amount=Decimal("500"), units=Decimal("10")
            )
        )
        with pytest.raises(ConflictError):
            DeletePlanUseCase(uow_factory).execute(plan.id)


# ══════════════════════════════════════════════════════════════════════
# Portfolio, history and wallet
# ══════════════════════════════════════════════════════════════════════


class TestPortfolioSummary:
    def test_values_positions_by_source(
        self, uow_factory, notifications, clock, fund, market_data
    ) -> None:
        """Summary prices stocks from quotes or overrides and plans from NAV."""
        fund(USER, "10000")
        _buy(uow_factory, notifications, clock, "10", "100", symbol="AAPL")
        _buy(uow_factory, notifications, clock, "5", "200", symbol="TSLA")
        _buy(uow_factory, notifications, clock, "2", "50", symbol="XYZ")
        market_data.prices["AAPL"] = Decimal("110")
        SetAdminPriceUseCase(uow_factory, clock).execute(
            "TSLA", Decimal("150"), "halted", "admin-1"
        )

        summary = GetPortfolioSummaryUseCase(uow_factory, market_data).execute(USER)

        sources = {p.holding.symbol: p.price_source for p in summary.positions}
        assert sources == {"AAPL": "market", "TSLA": "admin", "XYZ": "cost"}
        assert summary.total_invested == Decimal("2100.00")
        assert summary.total_value == Decimal("1950.00")
        assert summary.total_return == Decimal("-150.00")

    def test_empty_portfolio(self, uow_factory, market_data) -> None:
        """An empty portfolio sums to zero."""
        summary = GetPortfolioSummaryUseCase(uow_factory, market_data).execute(USER)
        assert summary.positions == []
        assert summary.total_value == Decimal("0")
        assert summary.return_percentage == Decimal("0")


class TestTransactionHistory:
    def test_filters_by_type(self, uow_factory, notifications, clock, fund) -> None:
        """Transaction history can be filtered by type."""
        fund(USER, "1000")
        _buy(uow_factory, notifications, clock, "2", "100")
        _sell(uow_factory, notifications, clock, "1", "100")

        sells = GetTransactionsUseCase(uow_factory).execute(
            TransactionsQuery(user_id=USER, type=TransactionType.SELL)
        )
        assert [t.type for t in sells] == [TransactionType.SELL]


class TestAdjustWallet:
    def test_debit_beyond_balance_rejected(self, uow_factory, clock, fund) -> None:
        """An admin debit larger than the balance is rejected."""
        with uow_factory() as uow:
            uow.users.add(User(id=USER, full_name="Bo", email="bo@example.com", password_hash="x"))
        fund(USER, "10")
        with pytest.raises(InsufficientFundsError):
            AdjustWalletUseCase(uow_factory, clock).execute(
                USER, Decimal("-20"), "chargeback", "admin-1"
            )

    def test_zero_adjustment_rejected(self, uow_factory, clock) -> None:
        """A zero adjustment is rejected."""
        with pytest.raises(ValidationError):
            AdjustWalletUseCase(uow_factory, clock).execute(USER, Decimal("0"), "noop", "a")
