"""
Dependency injection for the ledger bounded context.

Provides FastAPI dependency functions that wire infrastructure
adapters into use cases via constructor injection.
These are the composition root for the ledger context.
"""

from typing import Callable

from fastapi import Depends

from tradevault.application.ledger.buy_stock import BuyStockUseCase
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
from tradevault.core.config import settings
from tradevault.domain.ledger.ports import MarketDataPort
from tradevault.domain.notifications.entities import NotificationQueue
from tradevault.domain.unit_of_work import UnitOfWork
from tradevault.interfaces.dependencies import (
    get_market_data,
    get_notification_queue,
    get_uow_factory,
)

UowFactory = Callable[[], UnitOfWork]


def get_buy_stock_use_case(
    uow_factory: UowFactory = Depends(get_uow_factory),
    notifications: NotificationQueue = Depends(get_notification_queue),
) -> BuyStockUseCase:
    """Build BuyStockUseCase with its infrastructure dependencies."""
    return BuyStockUseCase(uow_factory, notifications)


def get_sell_stock_use_case(
    uow_factory: UowFactory = Depends(get_uow_factory),
    notifications: NotificationQueue = Depends(get_notification_queue),
) -> SellStockUseCase:
    """Build SellStockUseCase with its infrastructure dependencies."""
    return SellStockUseCase(uow_factory, notifications)


def get_purchase_plan_use_case(
    uow_factory: UowFactory = Depends(get_uow_factory),
    notifications: NotificationQueue = Depends(get_notification_queue),
) -> PurchasePlanUseCase:
    return PurchasePlanUseCase(uow_factory, notifications)


def get_sell_plan_use_case(
    uow_factory: UowFactory = Depends(get_uow_factory),
    notifications: NotificationQueue = Depends(get_notification_queue),
) -> SellPlanUseCase:
    """Build SellPlanUseCase; the NAV tolerance comes from settings."""
    return SellPlanUseCase(
        uow_factory, notifications, price_tolerance=settings.plan_price_tolerance
    )


def get_holdings_use_case(
    uow_factory: UowFactory = Depends(get_uow_factory),
) -> GetHoldingsUseCase:
    return GetHoldingsUseCase(uow_factory)


def get_holding_use_case(
    uow_factory: UowFactory = Depends(get_uow_factory),
) -> GetHoldingUseCase:
    return GetHoldingUseCase(uow_factory)


def get_all_holdings_use_case(
    uow_factory: UowFactory = Depends(get_uow_factory),
) -> GetAllHoldingsUseCase:
    return GetAllHoldingsUseCase(uow_factory)


def get_transactions_use_case(
    uow_factory: UowFactory = Depends(get_uow_factory),
) -> GetTransactionsUseCase:
    return GetTransactionsUseCase(uow_factory)


def get_recent_transactions_use_case(
    uow_factory: UowFactory = Depends(get_uow_factory),
) -> GetRecentTransactionsUseCase:
    return GetRecentTransactionsUseCase(uow_factory)


def get_portfolio_summary_use_case(
    uow_factory: UowFactory = Depends(get_uow_factory),
    market_data: MarketDataPort = Depends(get_market_data),
) -> GetPortfolioSummaryUseCase:
    """Build GetPortfolioSummaryUseCase with the shared quote client."""
    return GetPortfolioSummaryUseCase(uow_factory, market_data)


def get_wallet_use_case(
    uow_factory: UowFactory = Depends(get_uow_factory),
) -> GetWalletUseCase:
    return GetWalletUseCase(uow_factory)


def get_wallet_entries_use_case(
    uow_factory: UowFactory = Depends(get_uow_factory),
) -> GetWalletEntriesUseCase:
    return GetWalletEntriesUseCase(uow_factory)


def get_adjust_wallet_use_case(
    uow_factory: UowFactory = Depends(get_uow_factory),
) -> AdjustWalletUseCase:
    return AdjustWalletUseCase(uow_factory)


def get_list_plans_use_case(
    uow_factory: UowFactory = Depends(get_uow_factory),
) -> ListPlansUseCase:
    return ListPlansUseCase(uow_factory)


def get_plan_use_case(
    uow_factory: UowFactory = Depends(get_uow_factory),
) -> GetPlanUseCase:
    return GetPlanUseCase(uow_factory)


def get_create_plan_use_case(
    uow_factory: UowFactory = Depends(get_uow_factory),
) -> CreatePlanUseCase:
    return CreatePlanUseCase(uow_factory)


def get_update_plan_use_case(
    uow_factory: UowFactory = Depends(get_uow_factory),
) -> UpdatePlanUseCase:
    return UpdatePlanUseCase(uow_factory)


def get_delete_plan_use_case(
    uow_factory: UowFactory = Depends(get_uow_factory),
) -> DeletePlanUseCase:
    return DeletePlanUseCase(uow_factory)


def get_quote_use_case(
    market_data: MarketDataPort = Depends(get_market_data),
) -> GetQuoteUseCase:
    return GetQuoteUseCase(market_data)


def get_set_admin_price_use_case(
    uow_factory: UowFactory = Depends(get_uow_factory),
) -> SetAdminPriceUseCase:
    return SetAdminPriceUseCase(uow_factory)


def get_list_admin_prices_use_case(
    uow_factory: UowFactory = Depends(get_uow_factory),
) -> ListAdminPricesUseCase:
    return ListAdminPricesUseCase(uow_factory)
