"""
Use cases: Investment plan catalog.

Listing and lookup are open to any authenticated user; create, update
and delete are admin operations (enforced at the interface layer).
Deleting a plan is refused while any holding still references it.
"""

import logging
from dataclasses import fields
from datetime import datetime
from typing import Callable, Optional

from tradevault.application.ledger.dtos import PlanChanges
from tradevault.domain.errors import ConflictError, ValidationError
from tradevault.domain.ledger.entities import (
    ZERO,
    AssetType,
    InvestmentPlan,
    PlanStatus,
    RiskLevel,
    utc_now,
)
from tradevault.domain.ledger.errors import InvestmentPlanNotFoundError
from tradevault.domain.unit_of_work import UnitOfWork

logger = logging.getLogger(__name__)


def _validate(plan: InvestmentPlan) -> None:
    if not plan.name.strip():
        raise ValidationError("Plan name is required", "name")
    if plan.nav <= ZERO:
        raise ValidationError("NAV must be greater than zero", "nav")
    if plan.min_investment < ZERO:
        raise ValidationError("Minimum investment cannot be negative", "min_investment")


def _risk_level(value: str) -> RiskLevel:
    try:
        return RiskLevel(value)
    except ValueError as exc:
        raise ValidationError(f"Unknown risk level: {value}", "risk_level") from exc


def _plan_status(value: str) -> PlanStatus:
    try:
        return PlanStatus(value)
    except ValueError as exc:
        raise ValidationError(f"Unknown plan status: {value}", "status") from exc


class ListPlansUseCase:
    def __init__(self, uow_factory: Callable[[], UnitOfWork]) -> None:
        self._uow_factory = uow_factory

    def execute(
        self,
        category: Optional[str] = None,
        risk_level: Optional[str] = None,
        featured: Optional[bool] = None,
    ) -> list[InvestmentPlan]:
        with self._uow_factory() as uow:
            return uow.plans.list(category=category, risk_level=risk_level, featured=featured)


class GetPlanUseCase:
    def __init__(self, uow_factory: Callable[[], UnitOfWork]) -> None:
        self._uow_factory = uow_factory

    def execute(self, plan_id: str) -> InvestmentPlan:
        with self._uow_factory() as uow:
            plan = uow.plans.get(plan_id)
        if plan is None:
            raise InvestmentPlanNotFoundError(plan_id)
        return plan


class CreatePlanUseCase:
    """Adds a plan to the catalog."""

    def __init__(
        self,
        uow_factory: Callable[[], UnitOfWork],
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self._uow_factory = uow_factory
        self._clock = clock

    def execute(self, plan: InvestmentPlan) -> InvestmentPlan:
        _validate(plan)
        now = self._clock()
        plan.created_at = now
        plan.updated_at = now
        with self._uow_factory() as uow:
            uow.plans.add(plan)
        logger.info("Investment plan created: id=%s, name=%s", plan.id, plan.name)
        return plan


class UpdatePlanUseCase:
    """Applies a partial update, including NAV changes."""

    def __init__(
        self,
        uow_factory: Callable[[], UnitOfWork],
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self._uow_factory = uow_factory
        self._clock = clock

    def execute(self, plan_id: str, changes: PlanChanges) -> InvestmentPlan:
        with self._uow_factory() as uow:
            plan = uow.plans.get(plan_id)
            if plan is None:
                raise InvestmentPlanNotFoundError(plan_id)

            for f in fields(changes):
                value = getattr(changes, f.name)
                if value is None:
                    continue
                if f.name == "risk_level":
                    value = _risk_level(value)
                elif f.name == "status":
                    value = _plan_status(value)
                setattr(plan, f.name, value)

            _validate(plan)
            plan.updated_at = self._clock()
            uow.plans.update(plan)

        logger.info("Investment plan updated: id=%s", plan_id)
        return plan


class DeletePlanUseCase:
    def __init__(self, uow_factory: Callable[[], UnitOfWork]) -> None:
        self._uow_factory = uow_factory

    def execute(self, plan_id: str) -> None:
        with self._uow_factory() as uow:
            if uow.plans.get(plan_id) is None:
                raise InvestmentPlanNotFoundError(plan_id)
            holders = uow.holdings.count_for_symbol(AssetType.PLAN, plan_id)
            if holders:
                raise ConflictError(
                    f"Investment plan {plan_id} is held by {holders} investor(s)"
                )
            uow.plans.delete(plan_id)
        logger.info("Investment plan deleted: id=%s", plan_id)
