"""
Money goal API endpoints (goals, summary, export, contributions)
"""
from datetime import datetime
from typing import Any

from fastapi import APIRouter, Depends, Query
from pydantic import field_validator
from sqlalchemy.orm import Session

from church_admin.api.deps import get_db, get_current_user, require_admin
from church_admin.api.v1.common import CamelModel, PersonResponse
from church_admin.application.contributions import CreateContributionUseCase, DeleteContributionUseCase
from church_admin.application.money_goals import (
    CreateMoneyGoalUseCase,
    UpdateMoneyGoalUseCase,
    DeleteMoneyGoalUseCase,
)
from church_admin.infrastructure.db.models import User
from church_admin.readmodels.money_goals import (
    MoneyGoalFilters,
    build_export,
    get_goal_summary,
    get_goal_with_stats,
    list_contributions,
    list_goals_with_stats,
    serialize_contribution,
)


router = APIRouter(prefix="/api/v1/money-goals", tags=["money-goals"])


# === Request/Response models ===

class CreateMoneyGoalRequest(CamelModel):
    name: str
    amount_goal: float
    years: int
    category_id: int | None = None


class UpdateMoneyGoalRequest(CamelModel):
    id: int | None = None  # ignored, the path id wins
    name: str | None = None
    amount_goal: float | None = None
    years: int | None = None
    status: str | None = None
    category_id: int | None = None


class CreateContributionRequest(CamelModel):
    amount: float
    reason: str | None = None

    @field_validator("amount")
    @classmethod
    def validate_amount(cls, v: float) -> float:
        if v <= 0:
            raise ValueError("amount must be positive")
        return v


class CategoryRefResponse(CamelModel):
    id: int
    name: str
    name_fr: str | None = None
    name_mg: str | None = None
    color: str | None = None
    icon: str | None = None


class ContributionResponse(CamelModel):
    id: int
    goal_id: int
    amount: float
    contributed_by: int
    contributor: PersonResponse | None = None
    transaction_id: int | None = None
    reason: str | None = None
    created_at: datetime
    updated_at: datetime


class MoneyGoalWithStatsResponse(CamelModel):
    id: int
    name: str
    amount_goal: float
    years: int
    status: str
    category_id: int | None = None
    category: CategoryRefResponse | None = None
    created_by: int
    creator: PersonResponse | None = None
    contributions: list[ContributionResponse]
    edit_history: list[dict[str, Any]]
    created_at: datetime
    updated_at: datetime
    total_contributions: float
    reached_goal: float
    progress_percentage: float
    remaining_amount: float


class MoneyGoalSummaryResponse(CamelModel):
    total_goals: int
    active_goals: int
    completed_goals: int
    total_target_amount: float
    total_reached_amount: float
    overall_progress: float


class MoneyGoalFiltersResponse(CamelModel):
    years: int | None = None
    status: str | None = None
    search: str | None = None
    category_id: int | None = None


class MoneyGoalExportResponse(CamelModel):
    goals: list[MoneyGoalWithStatsResponse]
    summary: MoneyGoalSummaryResponse
    filters: MoneyGoalFiltersResponse
    export_date: str


# === Helper function ===

def _filters(
    years: int | None = Query(None),
    status: str | None = Query(None),
    search: str | None = Query(None),
    category_id: int | None = Query(None, alias="categoryId"),
) -> MoneyGoalFilters:
    return MoneyGoalFilters(years=years, status=status or None, search=search or None, category_id=category_id)


# === Endpoints ===

@router.get("/", response_model=list[MoneyGoalWithStatsResponse])
def list_goals(
    filters: MoneyGoalFilters = Depends(_filters),
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    """List goals of a year (current year by default) with contribution stats"""
    return list_goals_with_stats(db, filters)


@router.post("/", response_model=MoneyGoalWithStatsResponse)
def create_goal(
    req: CreateMoneyGoalRequest,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    """Create a goal"""
    goal = CreateMoneyGoalUseCase(db).execute(
        name=req.name,
        amount_goal=req.amount_goal,
        years=req.years,
        created_by=user.id,
        category_id=req.category_id,
    )
    return get_goal_with_stats(db, goal.id)


@router.get("/summary", response_model=MoneyGoalSummaryResponse)
def goals_summary(
    filters: MoneyGoalFilters = Depends(_filters),
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    """Totals over the filtered goals (search is ignored)"""
    return get_goal_summary(db, filters)


@router.get("/export", response_model=MoneyGoalExportResponse)
def export_goals(
    filters: MoneyGoalFilters = Depends(_filters),
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    """Goals + summary payload for report rendering"""
    return build_export(db, filters)


@router.get("/{goal_id}", response_model=MoneyGoalWithStatsResponse)
def get_goal(
    goal_id: int,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    return get_goal_with_stats(db, goal_id)


@router.put("/{goal_id}", response_model=MoneyGoalWithStatsResponse)
def update_goal(
    goal_id: int,
    req: UpdateMoneyGoalRequest,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    """Update a goal; changed tracked fields are appended to its edit history"""
    changes = req.model_dump(exclude_unset=True, exclude={"id"})
    UpdateMoneyGoalUseCase(db).execute(
        goal_id=goal_id,
        actor_user_id=user.id,
        actor_name=user.name,
        actor_email=user.email,
        **changes,
    )
    return get_goal_with_stats(db, goal_id)


@router.delete("/{goal_id}")
def delete_goal(
    goal_id: int,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    DeleteMoneyGoalUseCase(db).execute(goal_id)
    return {"message": "Goal deleted successfully"}


@router.get("/{goal_id}/contributions", response_model=list[ContributionResponse])
def get_contributions(
    goal_id: int,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    return list_contributions(db, goal_id)


@router.post("/{goal_id}/contributions", response_model=ContributionResponse)
def create_contribution(
    goal_id: int,
    req: CreateContributionRequest,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    contribution = CreateContributionUseCase(db).execute(
        goal_id=goal_id,
        amount=req.amount,
        contributed_by=user.id,
        reason=req.reason,
    )
    return serialize_contribution(contribution)


@router.delete("/{goal_id}/contributions/{contribution_id}")
def delete_contribution(
    goal_id: int,
    contribution_id: int,
    db: Session = Depends(get_db),
    admin: User = Depends(require_admin),
):
    DeleteContributionUseCase(db).execute(goal_id=goal_id, contribution_id=contribution_id)
    return {"message": "Contribution deleted successfully"}
