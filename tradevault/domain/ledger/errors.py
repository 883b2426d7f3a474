"""
Domain-specific errors for the ledger bounded context.

Covers holdings, the transaction history and wallets.
No framework imports allowed.
"""

from decimal import Decimal

from tradevault.domain.errors import ConflictError, DomainError, NotFoundError


class InsufficientFundsError(DomainError):
    """Raised when a wallet lacks the balance for a debit."""

    def __init__(self, required: Decimal, available: Decimal) -> None:
        super().__init__(
            f"Insufficient funds: required {required}, available {available}"
        )
        self.required = required
        self.available = available


class InsufficientSharesError(DomainError):
    """Raised when a sale asks for more units than the holding owns."""

    def __init__(self, symbol: str, requested: Decimal, available: Decimal) -> None:
        super().__init__(
            f"Insufficient shares of {symbol}: requested {requested}, "
            f"available {available}"
        )
        self.symbol = symbol
        self.requested = requested
        self.available = available


class HoldingNotFoundError(NotFoundError):
    """Raised when a user does not own the instrument being sold."""

    def __init__(self, symbol: str) -> None:
        super().__init__("Holding", symbol)
        self.symbol = symbol


class InvestmentPlanNotFoundError(NotFoundError):
    """Raised when an investment plan cannot be found."""

    def __init__(self, plan_id: str) -> None:
        super().__init__("Investment plan", plan_id)
        self.plan_id = plan_id


class PlanUnavailableError(DomainError):
    """Raised when a plan is not open for purchases."""

    def __init__(self, plan_id: str, status: str) -> None:
        super().__init__(f"Investment plan {plan_id} is not available ({status})")
        self.plan_id = plan_id
        self.status = status


class WithdrawalLimitExceededError(DomainError):
    """Raised when a withdrawal would exceed the wallet's daily limit."""

    def __init__(self, remaining: Decimal) -> None:
        super().__init__(
            f"Daily withdrawal limit exceeded. Available today: {remaining}"
        )
        self.remaining = remaining


class ConcurrentUpdateError(ConflictError):
    """Raised when a row changed between read and conditional write."""

    def __init__(self, resource: str, identifier: str) -> None:
        super().__init__(
            f"{resource} {identifier} was modified concurrently; retry the request"
        )
        self.resource = resource
        self.identifier = identifier
