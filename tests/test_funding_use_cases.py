"""
Tests for deposits, fiat funding requests, withdrawals and loans.

Status updates are compare-and-set: approving twice credits once,
failing twice refunds once, and terminal states stay terminal.
"""

from decimal import Decimal

import pytest

from tradevault.application.funding.deposits import (
    CreateDepositUseCase,
    DeleteDepositUseCase,
    GetUserDepositsUseCase,
    UpdateDepositStatusUseCase,
)
from tradevault.application.funding.dtos import (
    CreateDepositCommand,
    CreateLoanCommand,
    CreateWithdrawalCommand,
    SubmitFundingRequestCommand,
)
from tradevault.application.funding.funding_requests import (
    ListFundingRequestsUseCase,
    ReviewFundingRequestUseCase,
    SubmitFundingRequestUseCase,
)
from tradevault.application.funding.loans import CreateLoanUseCase, UpdateLoanStatusUseCase
from tradevault.application.funding.withdrawals import (
    CreateWithdrawalUseCase,
    UpdateWithdrawalStatusUseCase,
)
from tradevault.domain.accounts.entities import User
from tradevault.domain.errors import (
    ConflictError,
    InvalidStatusTransitionError,
    NotFoundError,
    ValidationError,
)
from tradevault.domain.funding.entities import (
    DepositStatus,
    FundingRequestStatus,
    LoanStatus,
    WithdrawalStatus,
)
from tradevault.domain.ledger.entities import WalletEntryType
from tradevault.domain.ledger.errors import (
    InsufficientFundsError,
    WithdrawalLimitExceededError,
)

USER = "user-1"


@pytest.fixture
def owner(uow_factory) -> User:
    user = User(id=USER, full_name="Carol Client", email="carol@example.com", password_hash="x")
    with uow_factory() as uow:
        uow.users.add(user)
    return user


def _balance(uow_factory) -> Decimal:
    with uow_factory() as uow:
        wallet = uow.wallets.get(USER)
    return wallet.balance_usd if wallet else Decimal("0")


def _entries(uow_factory):
    with uow_factory() as uow:
        return uow.wallet_entries.list_for_user(USER)


def _crypto_withdrawal(amount: str) -> CreateWithdrawalCommand:
    return CreateWithdrawalCommand(
        user_id=USER,
        amount=Decimal(amount),
        method="crypto",
        wallet_address="bc1qexampleaddress",
        network="BTC",
    )


# ══════════════════════════════════════════════════════════════════════
# Deposits
# ══════════════════════════════════════════════════════════════════════


class TestDeposits:
    def _deposit(self, uow_factory, clock, amount: str = "500"):
        return CreateDepositUseCase(uow_factory, clock).execute(
            CreateDepositCommand(user_id=USER, amount=Decimal(amount), method="BTC")
        )

    def test_created_pending_with_reference(self, uow_factory, clock) -> None:
        """A new deposit is pending with a DEP reference."""
        deposit = self._deposit(uow_factory, clock)
        assert deposit.status == DepositStatus.PENDING
        assert deposit.reference.startswith("DEP")

    def test_non_positive_amount_rejected(self, uow_factory, clock) -> None:
        """A zero deposit amount is rejected."""
        with pytest.raises(ValidationError):
            self._deposit(uow_factory, clock, amount="0")

    def test_approval_credits_exactly_once(
        self, uow_factory, notifications, clock, owner
    ) -> None:
        """Approving twice credits the wallet once and emails once."""
        deposit = self._deposit(uow_factory, clock)
        use_case = UpdateDepositStatusUseCase(uow_factory, notifications, clock)

        first = use_case.execute(deposit.id, "approved")
        second = use_case.execute(deposit.id, "approved")

        assert first.status == second.status == DepositStatus.APPROVED
        assert _balance(uow_factory) == Decimal("500")
        entries = _entries(uow_factory)
        assert [e.type for e in entries] == [WalletEntryType.DEPOSIT]
        assert entries[0].source_id == deposit.id
        assert len(notifications.messages) == 1
        assert notifications.messages[0].to == owner.email

    def test_approved_deposit_cannot_be_rejected(
        self, uow_factory, notifications, clock
    ) -> None:
        """An approved deposit cannot be rejected."""
        deposit = self._deposit(uow_factory, clock)
        use_case = UpdateDepositStatusUseCase(uow_factory, notifications, clock)
        use_case.execute(deposit.id, "approved")
        with pytest.raises(InvalidStatusTransitionError):
            use_case.execute(deposit.id, "rejected")
        assert _balance(uow_factory) == Decimal("500")

    def test_rejection_does_not_credit(self, uow_factory, notifications, clock) -> None:
        """Rejecting a deposit leaves the wallet untouched."""
        deposit = self._deposit(uow_factory, clock)
        UpdateDepositStatusUseCase(uow_factory, notifications, clock).execute(
            deposit.id, "rejected"
        )
        assert _balance(uow_factory) == Decimal("0")

    def test_unknown_status_rejected(self, uow_factory, notifications, clock) -> None:
        """An unknown status raises ValidationError."""
        deposit = self._deposit(uow_factory, clock)
        with pytest.raises(ValidationError):
            UpdateDepositStatusUseCase(uow_factory, notifications, clock).execute(
                deposit.id, "teleported"
            )

    def test_missing_deposit(self, uow_factory, notifications, clock) -> None:
        """Updating a missing deposit raises NotFoundError."""
        with pytest.raises(NotFoundError):
            UpdateDepositStatusUseCase(uow_factory, notifications, clock).execute(
                "nope", "approved"
            )

    def test_approved_deposit_cannot_be_deleted(
        self, uow_factory, notifications, clock
    ) -> None:
        """Approved deposits cannot be deleted."""
        deposit = self._deposit(uow_factory, clock)
        UpdateDepositStatusUseCase(uow_factory, notifications, clock).execute(
            deposit.id, "approved"
        )
        with pytest.raises(ConflictError):
            DeleteDepositUseCase(uow_factory).execute(deposit.id)

    def test_user_total_counts_only_approved(
        self, uow_factory, notifications, clock
    ) -> None:
        """User total sums approved deposits only."""
        approved = self._deposit(uow_factory, clock, amount="300")
        self._deposit(uow_factory, clock, amount="200")
        UpdateDepositStatusUseCase(uow_factory, notifications, clock).execute(
            approved.id, "approved"
        )
        result = GetUserDepositsUseCase(uow_factory).execute(USER)
        assert len(result.deposits) == 2
        assert result.total_approved == Decimal("300")


# ══════════════════════════════════════════════════════════════════════
# Fiat funding requests
# ══════════════════════════════════════════════════════════════════════


class TestFundingRequests:
    def _submit(self, uow_factory, clock, **overrides):
        values = dict(
            user_id=USER,
            currency="eur",
            amount=Decimal("250"),
            transaction_type="sepa",
            name="Carol Client",
            email="Carol@Example.com",
            image_urls=("https://img.test/funding/1.png", " "),
        )
        values.update(overrides)
        return SubmitFundingRequestUseCase(uow_factory, clock).execute(
            SubmitFundingRequestCommand(**values)
        )

    def test_submitted_pending_with_reference(self, uow_factory, clock) -> None:
        """A new request is pending, normalized and keeps non-blank images."""
        request = self._submit(uow_factory, clock)
        assert request.status == FundingRequestStatus.PENDING
        assert request.reference.startswith("FND")
        assert request.currency == "EUR"
        assert request.email == "carol@example.com"
        assert request.image_urls == ["https://img.test/funding/1.png"]
        with uow_factory() as uow:
            stored = uow.funding_requests.get(request.id)
        assert stored.image_urls == ["https://img.test/funding/1.png"]
        assert stored.amount == Decimal("250")

    @pytest.mark.parametrize(
        ("overrides", "field"),
        [
            ({"currency": "BTC"}, "currency"),
            ({"amount": Decimal("0.5")}, "amount"),
            ({"amount": Decimal("10.000000001")}, "amount"),
            ({"transaction_type": " "}, "transaction_type"),
            ({"email": ""}, "email"),
        ],
    )
    def test_invalid_submission_rejected(self, uow_factory, clock, overrides, field) -> None:
        """Unsupported currencies, small or over-precise amounts and blanks fail."""
        with pytest.raises(ValidationError) as exc_info:
            self._submit(uow_factory, clock, **overrides)
        assert exc_info.value.field == field

    def test_approval_credits_exactly_once(
        self, uow_factory, notifications, clock, owner
    ) -> None:
        """Approving twice writes one DEPOSIT entry and one email."""
        request = self._submit(uow_factory, clock)
        use_case = ReviewFundingRequestUseCase(uow_factory, notifications, clock)

        first = use_case.approve(request.id)
        second = use_case.approve(request.id)

        assert first.status == second.status == FundingRequestStatus.APPROVED
        assert first.credited_at == clock()
        assert _balance(uow_factory) == Decimal("250")
        entries = _entries(uow_factory)
        assert [e.type for e in entries] == [WalletEntryType.DEPOSIT]
        assert entries[0].source_id == request.id
        with uow_factory() as uow:
            assert uow.wallets.get(USER).total_deposited == Decimal("250")
        assert len(notifications.messages) == 1

    def test_rejected_request_is_terminal(self, uow_factory, notifications, clock) -> None:
        """A rejected request credits nothing and cannot be approved later."""
        request = self._submit(uow_factory, clock)
        use_case = ReviewFundingRequestUseCase(uow_factory, notifications, clock)
        assert use_case.reject(request.id).status == FundingRequestStatus.REJECTED
        with pytest.raises(InvalidStatusTransitionError):
            use_case.approve(request.id)
        assert _balance(uow_factory) == Decimal("0")

    def test_unknown_request(self, uow_factory, notifications, clock) -> None:
        """Reviewing a missing id raises NotFoundError."""
        with pytest.raises(NotFoundError):
            ReviewFundingRequestUseCase(uow_factory, notifications, clock).approve("nope")

    def test_pending_queue_filters_by_status(
        self, uow_factory, notifications, clock
    ) -> None:
        """The admin list narrows to pending requests on request."""
        approved = self._submit(uow_factory, clock)
        self._submit(uow_factory, clock, amount=Decimal("75"))
        ReviewFundingRequestUseCase(uow_factory, notifications, clock).approve(approved.id)

        listing = ListFundingRequestsUseCase(uow_factory)
        pending = listing.all("pending")
        assert [r.amount for r in pending] == [Decimal("75")]
        assert len(listing.all()) == 2
        assert len(listing.for_user(USER)) == 2


# ══════════════════════════════════════════════════════════════════════
# Withdrawals
# ══════════════════════════════════════════════════════════════════════


class TestWithdrawals:
    def test_creation_reserves_funds(self, uow_factory, clock, fund) -> None:
        """Creating a withdrawal debits the wallet right away."""
        fund(USER, "1000")
        withdrawal = CreateWithdrawalUseCase(uow_factory, clock).execute(
            _crypto_withdrawal("400")
        )
        assert withdrawal.status == WithdrawalStatus.PENDING
        assert withdrawal.reference.startswith("WDR")
        assert _balance(uow_factory) == Decimal("600")

    def test_insufficient_balance_creates_nothing(self, uow_factory, clock, fund) -> None:
        """A withdrawal above the balance stores nothing."""
        fund(USER, "100")
        with pytest.raises(InsufficientFundsError):
            CreateWithdrawalUseCase(uow_factory, clock).execute(_crypto_withdrawal("400"))
        with uow_factory() as uow:
            assert uow.withdrawals.list_for_user(USER) == []
        assert _balance(uow_factory) == Decimal("100")

    def test_failure_refunds_exactly_once(
        self, uow_factory, notifications, clock, fund, owner
    ) -> None:
        """Failing a withdrawal twice refunds it once."""
        fund(USER, "1000")
        withdrawal = CreateWithdrawalUseCase(uow_factory, clock).execute(
            _crypto_withdrawal("400")
        )
        use_case = UpdateWithdrawalStatusUseCase(uow_factory, notifications, clock)

        use_case.execute(withdrawal.id, "processing")
        use_case.execute(withdrawal.id, "failed")
        use_case.execute(withdrawal.id, "failed")

        assert _balance(uow_factory) == Decimal("1000")
        refunds = [e for e in _entries(uow_factory) if e.type == WalletEntryType.REFUND]
        assert len(refunds) == 1
        with uow_factory() as uow:
            wallet = uow.wallets.get(USER)
        assert wallet.total_withdrawn == Decimal("0")

    def test_failed_is_terminal(self, uow_factory, notifications, clock, fund) -> None:
        """A failed withdrawal cannot be approved."""
        fund(USER, "1000")
        withdrawal = CreateWithdrawalUseCase(uow_factory, clock).execute(
            _crypto_withdrawal("400")
        )
        use_case = UpdateWithdrawalStatusUseCase(uow_factory, notifications, clock)
        use_case.execute(withdrawal.id, "failed")
        with pytest.raises(InvalidStatusTransitionError):
            use_case.execute(withdrawal.id, "approved")

    def test_approval_records_tx_hash(self, uow_factory, notifications, clock, fund) -> None:
        """Approval stores the payout transaction hash."""
        fund(USER, "1000")
        withdrawal = CreateWithdrawalUseCase(uow_factory, clock).execute(
            _crypto_withdrawal("400")
        )
        approved = UpdateWithdrawalStatusUseCase(uow_factory, notifications, clock).execute(
            withdrawal.id, "approved", tx_hash="abc123def456"
        )
        assert approved.status == WithdrawalStatus.APPROVED
        assert approved.tx_hash == "abc123def456"
        assert _balance(uow_factory) == Decimal("600")

    def test_daily_limit_resets_next_day(self, uow_factory, clock, fund) -> None:
        """The daily limit blocks excess and resets the next UTC day."""
        fund(USER, "20000")
        use_case = CreateWithdrawalUseCase(uow_factory, clock)
        use_case.execute(_crypto_withdrawal("8000"))

        with pytest.raises(WithdrawalLimitExceededError) as exc_info:
            use_case.execute(_crypto_withdrawal("3000"))
        assert exc_info.value.remaining == Decimal("2000")

        clock.advance(days=1)
        use_case.execute(_crypto_withdrawal("3000"))
        assert _balance(uow_factory) == Decimal("9000")

    def test_stale_wallet_read_cannot_bypass_daily_limit(
        self, uow_factory, clock, fund
    ) -> None:
        """The limit is checked by the database, not against an earlier read."""
        fund(USER, "20000")
        with uow_factory() as uow:
            stale = uow.wallets.get_or_create(USER, clock())
        assert stale.daily_withdrawn == Decimal("0")

        CreateWithdrawalUseCase(uow_factory, clock).execute(_crypto_withdrawal("8000"))

        with uow_factory() as uow:
            assert not uow.wallets.reserve_daily_withdrawal(USER, Decimal("8000"), clock())
            assert uow.wallets.reserve_daily_withdrawal(USER, Decimal("2000"), clock())
            wallet = uow.wallets.get(USER)
        assert wallet.daily_withdrawn == Decimal("10000")

    def test_failed_creation_leaves_daily_total_untouched(
        self, uow_factory, clock, fund
    ) -> None:
        """A withdrawal rejected for funds does not consume the daily limit."""
        fund(USER, "100")
        with pytest.raises(InsufficientFundsError):
            CreateWithdrawalUseCase(uow_factory, clock).execute(_crypto_withdrawal("400"))
        with uow_factory() as uow:
            assert uow.wallets.reserve_daily_withdrawal(USER, Decimal("10000"), clock())

    def test_sub_cent_fraction_beyond_scale_rejected(self, uow_factory, clock, fund) -> None:
        """Amounts finer than the stored scale are refused, not rounded."""
        fund(USER, "1000")
        with pytest.raises(ValidationError) as exc_info:
            CreateWithdrawalUseCase(uow_factory, clock).execute(
                _crypto_withdrawal("0.000000004")
            )
        assert exc_info.value.field == "amount"
        assert _balance(uow_factory) == Decimal("1000")

    def test_wallet_created_concurrently_is_read_back(self, uow_factory, clock, fund) -> None:
        """get_or_create returns the existing wallet when its insert collides."""
        fund(USER, "50")
        with uow_factory() as uow:
            repo = uow.wallets
            fresh_read = repo.get
            calls = []

            def missed_first_read(user_id):
                calls.append(user_id)
                return None if len(calls) == 1 else fresh_read(user_id)

            repo.get = missed_first_read
            wallet = repo.get_or_create(USER, clock())
            repo.credit(USER, Decimal("5"), clock())

        assert wallet.balance_usd == Decimal("50")
        assert _balance(uow_factory) == Decimal("55")

    @pytest.mark.parametrize(
        ("method", "missing"),
        [("crypto", "wallet_address"), ("bank", "bank_name"), ("cashapp", "cashtag")],
    )
    def test_destination_required(self, uow_factory, clock, method, missing) -> None:
        """Each method requires its destination fields."""
        with pytest.raises(ValidationError) as exc_info:
            CreateWithdrawalUseCase(uow_factory, clock).execute(
                CreateWithdrawalCommand(user_id=USER, amount=Decimal("10"), method=method)
            )
        assert exc_info.value.field == missing

    def test_unknown_method_rejected(self, uow_factory, clock) -> None:
        """An unsupported withdrawal method is rejected."""
        with pytest.raises(ValidationError):
            CreateWithdrawalUseCase(uow_factory, clock).execute(
                CreateWithdrawalCommand(user_id=USER, amount=Decimal("10"), method="paypal")
            )


# ══════════════════════════════════════════════════════════════════════
# Loans
# ══════════════════════════════════════════════════════════════════════


class TestLoans:
    def _loan(self, uow_factory, clock, **overrides):
        values = dict(
            user_id=USER,
            loan_type="personal",
            amount=Decimal("2500"),
            term_months=12,
            income=Decimal("4000"),
            employment_status="employed",
        )
        values.update(overrides)
        return CreateLoanUseCase(uow_factory, clock).execute(CreateLoanCommand(**values))

    def test_approval_credits_principal_once(self, uow_factory, notifications, clock) -> None:
        """Approving a loan credits the principal once."""
        loan = self._loan(uow_factory, clock)
        assert loan.reference.startswith("LN")
        use_case = UpdateLoanStatusUseCase(uow_factory, notifications, clock)
        use_case.execute(loan.id, "approved")
        use_case.execute(loan.id, "approved")
        assert _balance(uow_factory) == Decimal("2500")
        assert [e.type for e in _entries(uow_factory)] == [WalletEntryType.LOAN]

    def test_rejected_loan_is_terminal(self, uow_factory, notifications, clock) -> None:
        """A rejected loan cannot be approved."""
        loan = self._loan(uow_factory, clock)
        use_case = UpdateLoanStatusUseCase(uow_factory, notifications, clock)
        rejected = use_case.execute(loan.id, "rejected")
        assert rejected.status == LoanStatus.REJECTED
        with pytest.raises(InvalidStatusTransitionError):
            use_case.execute(loan.id, "approved")
        assert _balance(uow_factory) == Decimal("0")

    def test_term_must_be_positive(self, uow_factory, clock) -> None:
        """A zero loan term is rejected."""
        with pytest.raises(ValidationError):
            self._loan(uow_factory, clock, term_months=0)
