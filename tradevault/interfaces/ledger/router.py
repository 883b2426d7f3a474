"""
FastAPI router for the ledger bounded context.

Holdings, transactions, the wallet, investment plans and market data.
All routes delegate to use cases. No business logic here.
Input validation is handled by Pydantic schemas.
Error mapping is handled by centralized error handlers.
"""

from enum import Enum

from fastapi import APIRouter, Depends, Query, Response, status

from tradevault.application.ledger.buy_stock import BuyStockUseCase
from tradevault.application.ledger.dtos import (
    BuyStockCommand,
    PlanChanges,
    PurchasePlanCommand,
    SellPlanCommand,
    SellStockCommand,
    TransactionsQuery,
)
from tradevault.application.ledger.get_holdings import (
    GetAllHoldingsUseCase,
    GetHoldingsUseCase,
    GetHoldingUseCase,
    GetRecentTransactionsUseCase,
    GetTransactionsUseCase,
)
from tradevault.application.ledger.manage_plans import (
    CreatePlanUseCase,
    DeletePlanUseCase,
    GetPlanUseCase,
    ListPlansUseCase,
    UpdatePlanUseCase,
)
from tradevault.application.ledger.market import (
    GetQuoteUseCase,
    ListAdminPricesUseCase,
    SetAdminPriceUseCase,
)
from tradevault.application.ledger.portfolio_summary import GetPortfolioSummaryUseCase
from tradevault.application.ledger.purchase_plan import PurchasePlanUseCase
from tradevault.application.ledger.sell_plan import SellPlanUseCase
from tradevault.application.ledger.sell_stock import SellStockUseCase
from tradevault.application.ledger.wallet import (
    AdjustWalletUseCase,
    GetWalletEntriesUseCase,
    GetWalletUseCase,
)
from tradevault.domain.accounts.entities import Principal
from tradevault.domain.ledger.entities import AssetType, InvestmentPlan, TransactionType
from tradevault.interfaces.dependencies import get_current_principal, require_admin
from tradevault.interfaces.ledger.dependencies import (
    get_adjust_wallet_use_case,
    get_all_holdings_use_case,
    get_buy_stock_use_case,
    get_create_plan_use_case,
    get_delete_plan_use_case,
    get_holding_use_case,
    get_holdings_use_case,
    get_list_admin_prices_use_case,
    get_list_plans_use_case,
    get_plan_use_case,
    get_portfolio_summary_use_case,
    get_purchase_plan_use_case,
    get_quote_use_case,
    get_recent_transactions_use_case,
    get_sell_plan_use_case,
    get_sell_stock_use_case,
    get_set_admin_price_use_case,
    get_transactions_use_case,
    get_update_plan_use_case,
    get_wallet_entries_use_case,
    get_wallet_use_case,
)
from tradevault.interfaces.ledger.schemas import (
    AdjustWalletRequest,
    AdminPriceResponse,
    BuyStockRequest,
    CreatePlanRequest,
    HoldingResponse,
    InvestmentPlanResponse,
    PortfolioSummaryResponse,
    PurchasePlanRequest,
    QuoteResponse,
    SellPlanRequest,
    SellStockRequest,
    SetAdminPriceRequest,
    TradeResponse,
    TransactionResponse,
    UpdatePlanRequest,
    WalletEntryResponse,
    WalletResponse,
)
from tradevault.interfaces.schemas import ErrorResponse

router = APIRouter()

TRADE_ERRORS = {
    400: {"model": ErrorResponse},
    404: {"model": ErrorResponse},
    409: {"model": ErrorResponse},
}


# ── Wallet ───────────────────────────────────────────────────────


@router.get("/wallet", response_model=WalletResponse, tags=["wallet"])
def get_wallet(
    principal: Principal = Depends(get_current_principal),
    use_case: GetWalletUseCase = Depends(get_wallet_use_case),
) -> WalletResponse:
    return WalletResponse.model_validate(use_case.execute(principal.user_id))


@router.get("/wallet/entries", response_model=list[WalletEntryResponse], tags=["wallet"])
def get_wallet_entries(
    limit: int = Query(default=50, ge=1, le=200),
    offset: int = Query(default=0, ge=0),
    principal: Principal = Depends(get_current_principal),
    use_case: GetWalletEntriesUseCase = Depends(get_wallet_entries_use_case),
) -> list[WalletEntryResponse]:
    entries = use_case.execute(principal.user_id, limit=limit, offset=offset)
    return [WalletEntryResponse.model_validate(e) for e in entries]


@router.post(
    "/wallet/{user_id}/adjust",
    response_model=WalletEntryResponse,
    responses=TRADE_ERRORS,
    tags=["wallet"],
    summary="Credit or debit a user's wallet (admin)",
)
def adjust_wallet(
    user_id: str,
    body: AdjustWalletRequest,
    admin: Principal = Depends(require_admin),
    use_case: AdjustWalletUseCase = Depends(get_adjust_wallet_use_case),
) -> WalletEntryResponse:
    entry = use_case.execute(user_id, body.amount, body.reason, admin.user_id)
    return WalletEntryResponse.model_validate(entry)


# ── Holdings ─────────────────────────────────────────────────────


@router.get("/holdings", response_model=list[HoldingResponse], tags=["holdings"])
def list_holdings(
    asset_type: AssetType | None = Query(default=None),
    principal: Principal = Depends(get_current_principal),
    use_case: GetHoldingsUseCase = Depends(get_holdings_use_case),
) -> list[HoldingResponse]:
    holdings = use_case.execute(principal.user_id, asset_type)
    return [HoldingResponse.model_validate(h) for h in holdings]


@router.get(
    "/holdings/all",
    response_model=list[HoldingResponse],
    tags=["holdings"],
    summary="Holdings across all users (admin)",
)
def list_all_holdings(
    limit: int = Query(default=100, ge=1, le=500),
    offset: int = Query(default=0, ge=0),
    _admin: Principal = Depends(require_admin),
    use_case: GetAllHoldingsUseCase = Depends(get_all_holdings_use_case),
) -> list[HoldingResponse]:
    return [
        HoldingResponse.model_validate(h)
        for h in use_case.execute(limit=limit, offset=offset)
    ]


@router.get(
    "/holdings/{asset_type}/{symbol}",
    response_model=HoldingResponse,
    responses={404: {"model": ErrorResponse}},
    tags=["holdings"],
)
def get_holding(
    asset_type: AssetType,
    symbol: str,
    principal: Principal = Depends(get_current_principal),
    use_case: GetHoldingUseCase = Depends(get_holding_use_case),
) -> HoldingResponse:
    return HoldingResponse.model_validate(
        use_case.execute(principal.user_id, asset_type, symbol)
    )


@router.post(
    "/holdings/buy",
    response_model=TradeResponse,
    status_code=status.HTTP_201_CREATED,
    responses=TRADE_ERRORS,
    tags=["holdings"],
    summary="Buy shares",
    description="Debits the wallet and merges the purchase into the holding at average cost.",
)
def buy_stock(
    body: BuyStockRequest,
    principal: Principal = Depends(get_current_principal),
    use_case: BuyStockUseCase = Depends(get_buy_stock_use_case),
) -> TradeResponse:
    command = BuyStockCommand(
        user_id=principal.user_id,
        symbol=body.symbol,
        name=body.name,
        quantity=body.quantity,
        price=body.price,
        fees=body.fees,
    )
    return TradeResponse.model_validate(use_case.execute(command))


@router.post(
    "/holdings/sell",
    response_model=TradeResponse,
    responses=TRADE_ERRORS,
    tags=["holdings"],
    summary="Sell shares",
    description="Credits the net proceeds and records the realized gain.",
)
def sell_stock(
    body: SellStockRequest,
    principal: Principal = Depends(get_current_principal),
    use_case: SellStockUseCase = Depends(get_sell_stock_use_case),
) -> TradeResponse:
    command = SellStockCommand(
        user_id=principal.user_id,
        symbol=body.symbol,
        quantity=body.quantity,
        price=body.price,
        fees=body.fees,
    )
    return TradeResponse.model_validate(use_case.execute(command))


@router.get(
    "/portfolio/summary", response_model=PortfolioSummaryResponse, tags=["holdings"]
)
def portfolio_summary(
    principal: Principal = Depends(get_current_principal),
    use_case: GetPortfolioSummaryUseCase = Depends(get_portfolio_summary_use_case),
) -> PortfolioSummaryResponse:
    return PortfolioSummaryResponse.model_validate(use_case.execute(principal.user_id))


# ── Transactions ─────────────────────────────────────────────────


@router.get(
    "/transactions", response_model=list[TransactionResponse], tags=["transactions"]
)
def list_transactions(
    type: TransactionType | None = Query(default=None),
    asset_type: AssetType | None = Query(default=None),
    symbol: str | None = Query(default=None, max_length=64),
    limit: int = Query(default=50, ge=1, le=200),
    offset: int = Query(default=0, ge=0),
    principal: Principal = Depends(get_current_principal),
    use_case: GetTransactionsUseCase = Depends(get_transactions_use_case),
) -> list[TransactionResponse]:
    query = TransactionsQuery(
        user_id=principal.user_id,
        type=type,
        asset_type=asset_type,
        symbol=symbol,
        limit=limit,
        offset=offset,
    )
    return [TransactionResponse.model_validate(t) for t in use_case.execute(query)]


@router.get(
    "/transactions/recent",
    response_model=list[TransactionResponse],
    tags=["transactions"],
)
def recent_transactions(
    limit: int = Query(default=10, ge=1, le=50),
    principal: Principal = Depends(get_current_principal),
    use_case: GetRecentTransactionsUseCase = Depends(get_recent_transactions_use_case),
) -> list[TransactionResponse]:
    return [
        TransactionResponse.model_validate(t)
        for t in use_case.execute(principal.user_id, limit=limit)
    ]


# ── Investment plans ─────────────────────────────────────────────


@router.get(
    "/investment-plans",
    response_model=list[InvestmentPlanResponse],
    tags=["investment-plans"],
)
def list_plans(
    category: str | None = Query(default=None),
    risk_level: str | None = Query(default=None),
    featured: bool | None = Query(default=None),
    use_case: ListPlansUseCase = Depends(get_list_plans_use_case),
) -> list[InvestmentPlanResponse]:
    plans = use_case.execute(category=category, risk_level=risk_level, featured=featured)
    return [InvestmentPlanResponse.model_validate(p) for p in plans]


@router.get(
    "/investment-plans/{plan_id}",
    response_model=InvestmentPlanResponse,
    responses={404: {"model": ErrorResponse}},
    tags=["investment-plans"],
)
def get_plan(
    plan_id: str,
    use_case: GetPlanUseCase = Depends(get_plan_use_case),
) -> InvestmentPlanResponse:
    return InvestmentPlanResponse.model_validate(use_case.execute(plan_id))


@router.post(
    "/investment-plans",
    response_model=InvestmentPlanResponse,
    status_code=status.HTTP_201_CREATED,
    tags=["investment-plans"],
    summary="Create an investment plan (admin)",
)
def create_plan(
    body: CreatePlanRequest,
    _admin: Principal = Depends(require_admin),
    use_case: CreatePlanUseCase = Depends(get_create_plan_use_case),
) -> InvestmentPlanResponse:
    plan = use_case.execute(InvestmentPlan(**body.model_dump()))
    return InvestmentPlanResponse.model_validate(plan)


@router.patch(
    "/investment-plans/{plan_id}",
    response_model=InvestmentPlanResponse,
    responses={404: {"model": ErrorResponse}},
    tags=["investment-plans"],
    summary="Update an investment plan, including its NAV (admin)",
)
def update_plan(
    plan_id: str,
    body: UpdatePlanRequest,
    _admin: Principal = Depends(require_admin),
    use_case: UpdatePlanUseCase = Depends(get_update_plan_use_case),
) -> InvestmentPlanResponse:
    values = {
        k: v.value if isinstance(v, Enum) else v
        for k, v in body.model_dump(exclude_none=True).items()
    }
    plan = use_case.execute(plan_id, PlanChanges(**values))
    return InvestmentPlanResponse.model_validate(plan)


@router.delete(
    "/investment-plans/{plan_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    responses={404: {"model": ErrorResponse}, 409: {"model": ErrorResponse}},
    tags=["investment-plans"],
    summary="Delete an investment plan nobody holds (admin)",
)
def delete_plan(
    plan_id: str,
    _admin: Principal = Depends(require_admin),
    use_case: DeletePlanUseCase = Depends(get_delete_plan_use_case),
) -> Response:
    use_case.execute(plan_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post(
    "/investments/purchase",
    response_model=TradeResponse,
    status_code=status.HTTP_201_CREATED,
    responses=TRADE_ERRORS,
    tags=["investment-plans"],
)
def purchase_plan(
    body: PurchasePlanRequest,
    principal: Principal = Depends(get_current_principal),
    use_case: PurchasePlanUseCase = Depends(get_purchase_plan_use_case),
) -> TradeResponse:
    command = PurchasePlanCommand(user_id=principal.user_id, **body.model_dump())
    return TradeResponse.model_validate(use_case.execute(command))


@router.post(
    "/investments/sell",
    response_model=TradeResponse,
    responses=TRADE_ERRORS,
    tags=["investment-plans"],
)
def sell_plan(
    body: SellPlanRequest,
    principal: Principal = Depends(get_current_principal),
    use_case: SellPlanUseCase = Depends(get_sell_plan_use_case),
) -> TradeResponse:
    command = SellPlanCommand(user_id=principal.user_id, **body.model_dump())
    return TradeResponse.model_validate(use_case.execute(command))


# ── Market data ──────────────────────────────────────────────────


@router.get(
    "/market/quotes/{symbol}",
    response_model=QuoteResponse,
    responses={502: {"model": ErrorResponse}},
    tags=["market"],
)
def get_quote(
    symbol: str,
    _principal: Principal = Depends(get_current_principal),
    use_case: GetQuoteUseCase = Depends(get_quote_use_case),
) -> QuoteResponse:
    return QuoteResponse.model_validate(use_case.execute(symbol))


@router.post(
    "/market/admin-prices",
    response_model=AdminPriceResponse,
    status_code=status.HTTP_201_CREATED,
    tags=["market"],
    summary="Override the price of a symbol (admin)",
)
def set_admin_price(
    body: SetAdminPriceRequest,
    admin: Principal = Depends(require_admin),
    use_case: SetAdminPriceUseCase = Depends(get_set_admin_price_use_case),
) -> AdminPriceResponse:
    price = use_case.execute(body.symbol, body.price, body.reason, admin.user_id)
    return AdminPriceResponse.model_validate(price)


@router.get(
    "/market/admin-prices",
    response_model=list[AdminPriceResponse],
    tags=["market"],
)
def list_admin_prices(
    active_only: bool = Query(default=True),
    _admin: Principal = Depends(require_admin),
    use_case: ListAdminPricesUseCase = Depends(get_list_admin_prices_use_case),
) -> list[AdminPriceResponse]:
    return [
        AdminPriceResponse.model_validate(p)
        for p in use_case.execute(active_only=active_only)
    ]
