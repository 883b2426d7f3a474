"""
Adapter: Investment plan and admin price repositories.
"""

from decimal import Decimal
from typing import Optional

from sqlalchemy import delete, insert, select, update
from sqlalchemy.engine import Connection, RowMapping

from tradevault.domain.ledger.entities import (
    AdminPrice,
    InvestmentPlan,
    PlanStatus,
    RiskLevel,
)
from tradevault.domain.ledger.ports import AdminPriceRepository, InvestmentPlanRepository
from tradevault.infrastructure.db.tables import admin_prices, investment_plans


def _to_plan(row: RowMapping) -> InvestmentPlan:
    return InvestmentPlan(
        id=row["id"],
        name=row["name"],
        description=row["description"],
        category=row["category"],
        risk_level=RiskLevel(row["risk_level"]),
        nav=Decimal(str(row["nav"])),
        one_year_return=Decimal(str(row["one_year_return"])),
        min_investment=Decimal(str(row["min_investment"])),
        is_featured=row["is_featured"],
        status=PlanStatus(row["status"]),
        created_at=row["created_at"],
        updated_at=row["updated_at"],
    )


def _plan_values(plan: InvestmentPlan) -> dict:
    return {
        "name": plan.name,
        "description": plan.description,
        "category": plan.category,
        "risk_level": plan.risk_level.value,
        "nav": plan.nav,
        "one_year_return": plan.one_year_return,
        "min_investment": plan.min_investment,
        "is_featured": plan.is_featured,
        "status": plan.status.value,
        "updated_at": plan.updated_at,
    }


class SqlInvestmentPlanRepository(InvestmentPlanRepository):
    """SQL implementation of the investment plan catalog."""

    def __init__(self, conn: Connection) -> None:
        self._conn = conn

    def get(self, plan_id: str) -> Optional[InvestmentPlan]:
        row = self._conn.execute(
            select(investment_plans).where(investment_plans.c.id == plan_id)
        ).mappings().first()
        return _to_plan(row) if row else None

    def list(
        self,
        category: Optional[str] = None,
        risk_level: Optional[str] = None,
        featured: Optional[bool] = None,
    ) -> list[InvestmentPlan]:
        query = select(investment_plans)
        if category:
            query = query.where(investment_plans.c.category == category)
        if risk_level:
            query = query.where(investment_plans.c.risk_level == risk_level)
        if featured is not None:
            query = query.where(investment_plans.c.is_featured == featured)
        query = query.order_by(investment_plans.c.name)
        return [_to_plan(r) for r in self._conn.execute(query).mappings()]

    def add(self, plan: InvestmentPlan) -> None:
        self._conn.execute(
            insert(investment_plans).values(
                id=plan.id, created_at=plan.created_at, **_plan_values(plan)
            )
        )

    def update(self, plan: InvestmentPlan) -> None:
        self._conn.execute(
            update(investment_plans)
            .where(investment_plans.c.id == plan.id)
            .values(**_plan_values(plan))
        )

    def delete(self, plan_id: str) -> None:
        self._conn.execute(delete(investment_plans).where(investment_plans.c.id == plan_id))


def _to_price(row: RowMapping) -> AdminPrice:
    return AdminPrice(
        id=row["id"],
        symbol=row["symbol"],
        price=Decimal(str(row["price"])),
        reason=row["reason"],
        created_by=row["created_by"],
        is_active=row["is_active"],
        created_at=row["created_at"],
    )


class SqlAdminPriceRepository(AdminPriceRepository):
    """SQL implementation of admin price overrides."""

    def __init__(self, conn: Connection) -> None:
        self._conn = conn

    def get_active(self, symbol: str) -> Optional[AdminPrice]:
        row = self._conn.execute(
            select(admin_prices)
            .where(admin_prices.c.symbol == symbol, admin_prices.c.is_active.is_(True))
            .order_by(admin_prices.c.created_at.desc())
        ).mappings().first()
        return _to_price(row) if row else None

    def list(self, active_only: bool = True) -> list[AdminPrice]:
        query = select(admin_prices)
        if active_only:
            query = query.where(admin_prices.c.is_active.is_(True))
        query = query.order_by(admin_prices.c.created_at.desc())
        return [_to_price(r) for r in self._conn.execute(query).mappings()]

    def set_active(self, price: AdminPrice) -> None:
        self._conn.execute(
            update(admin_prices)
            .where(admin_prices.c.symbol == price.symbol, admin_prices.c.is_active.is_(True))
            .values(is_active=False)
        )
        self._conn.execute(
            insert(admin_prices).values(
                id=price.id,
                symbol=price.symbol,
                price=price.price,
                reason=price.reason,
                created_by=price.created_by,
                is_active=True,
                created_at=price.created_at,
            )
        )
