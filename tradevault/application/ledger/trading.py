"""
Buy and sell orchestration shared by stock and plan use cases.

Both functions run inside the caller's unit of work and touch the
three ledger components together: the holding, one transaction record
and the wallet (with its entry). Any error leaves all three unchanged
once the unit of work rolls back.
"""

from datetime import datetime
from decimal import Decimal
from typing import Optional

from tradevault.application.ledger.dtos import TradeResult
from tradevault.application.ledger.wallet_ops import credit_wallet, debit_wallet
from tradevault.domain.ledger.cost_basis import apply_buy, apply_sell
from tradevault.domain.ledger.entities import (
    AssetType,
    Transaction,
    TransactionType,
    WalletEntryType,
    generate_reference,
    quantize_money,
)
from tradevault.domain.ledger.errors import HoldingNotFoundError
from tradevault.domain.unit_of_work import UnitOfWork


def execute_buy(
    uow: UnitOfWork,
    *,
    user_id: str,
    asset_type: AssetType,
    symbol: str,
    name: str,
    quantity: Decimal,
    price: Decimal,
    fees: Decimal,
    at: datetime,
    gross: Optional[Decimal] = None,
) -> TradeResult:
    """Debit the wallet, merge the purchase into the holding, record it.

    `gross` overrides quantity * price as the amount paid before fees.
    """
    existing = uow.holdings.get(user_id, asset_type, symbol)
    holding = apply_buy(
        existing,
        user_id=user_id,
        symbol=symbol,
        asset_type=asset_type,
        name=name,
        quantity=quantity,
        price=price,
        fees=fees,
        at=at,
        gross=gross,
    )
    total_amount = gross if gross is not None else quantize_money(quantity * price)
    net_amount = total_amount + fees

    transaction = Transaction(
        user_id=user_id,
        type=TransactionType.BUY,
        asset_type=asset_type,
        symbol=symbol,
        asset_name=name,
        quantity=quantity,
        price=price,
        total_amount=total_amount,
        fees=fees,
        net_amount=net_amount,
        created_at=at,
        reference=generate_reference("TXN", at),
    )

    entry = debit_wallet(
        uow,
        user_id,
        net_amount,
        WalletEntryType.INVESTMENT_BUY,
        f"Bought {quantity} {symbol}",
        at,
        source_id=transaction.id,
        invested=net_amount,
    )

    if existing is None:
        holding = uow.holdings.add(holding)
    else:
        holding = uow.holdings.update(holding)
    uow.transactions.add(transaction)

    return TradeResult(transaction=transaction, holding=holding, wallet_entry=entry)


def execute_sell(
    uow: UnitOfWork,
    *,
    user_id: str,
    asset_type: AssetType,
    symbol: str,
    quantity: Decimal,
    price: Decimal,
    fees: Decimal,
    at: datetime,
) -> TradeResult:
    """Reduce or close the holding, record the sale, credit the proceeds.

    Raises:
        HoldingNotFoundError: If the user does not own the instrument.
        InsufficientSharesError: If quantity exceeds the holding.
        ConcurrentUpdateError: If the holding changed since it was read.
    """
    holding = uow.holdings.get(user_id, asset_type, symbol)
    if holding is None:
        raise HoldingNotFoundError(symbol)

    outcome = apply_sell(holding, quantity=quantity, price=price, fees=fees, at=at)

    if outcome.closed:
        uow.holdings.delete(holding)
        remaining = None
    else:
        remaining = uow.holdings.update(outcome.holding)

    transaction = Transaction(
        user_id=user_id,
        type=TransactionType.SELL,
        asset_type=asset_type,
        symbol=symbol,
        asset_name=holding.name,
        quantity=quantity,
        price=price,
        total_amount=outcome.total_amount,
        fees=fees,
        net_amount=outcome.net_amount,
        cost_basis=outcome.cost_basis,
        realized_gain=outcome.realized_gain,
        created_at=at,
        reference=generate_reference("TXN", at),
    )
    uow.transactions.add(transaction)

    entry = credit_wallet(
        uow,
        user_id,
        outcome.net_amount,
        WalletEntryType.INVESTMENT_SELL,
        f"Sold {quantity} {symbol}",
        at,
        source_id=transaction.id,
        invested=-outcome.cost_basis,
    )
    return TradeResult(transaction=transaction, holding=remaining, wallet_entry=entry)
