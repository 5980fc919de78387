"""
Money goal read model - goals with contribution stats, summary, export.

All functions accept a SQLAlchemy Session and return plain dicts/lists
keyed by snake_case attribute names; the API layer renames them.
"""
from dataclasses import dataclass, asdict
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from sqlalchemy.orm import Session, selectinload

from church_admin.application.errors import NotFoundError, ValidationError
from church_admin.domain.money_goal import (
    GOAL_STATUSES,
    GoalFigures,
    format_timestamp,
    goal_progress,
    parse_edit_history,
    sum_contributions,
    summarize_goals,
)
from church_admin.infrastructure.db.models import MoneyGoal, MoneyGoalContribution


@dataclass
class MoneyGoalFilters:
    years: Optional[int] = None
    status: Optional[str] = None
    search: Optional[str] = None
    category_id: Optional[int] = None

    def resolved_years(self, today: Optional[datetime] = None) -> int:
        """Explicit year, or the current calendar year when none was given"""
        if self.years:
            return self.years
        return (today or datetime.now()).year


def _validate_filters(filters: MoneyGoalFilters) -> None:
    if filters.status and filters.status not in GOAL_STATUSES:
        raise ValidationError(
            f"Invalid status filter: {filters.status!r}. Use one of {', '.join(GOAL_STATUSES)}"
        )


def _filtered_query(db: Session, filters: MoneyGoalFilters, with_search: bool = True):
    _validate_filters(filters)

    query = db.query(MoneyGoal).filter(MoneyGoal.years == filters.resolved_years())

    if filters.status:
        query = query.filter(MoneyGoal.status == filters.status)

    if filters.category_id is not None:
        query = query.filter(MoneyGoal.category_id == filters.category_id)

    if with_search and filters.search:
        query = query.filter(MoneyGoal.name.ilike(f"%{filters.search.strip()}%"))

    # Same order everywhere: float sums must be accumulated identically
    return query.order_by(MoneyGoal.created_at.desc(), MoneyGoal.id.desc())


def _person(user) -> Optional[Dict[str, Any]]:
    if user is None:
        return None
    return {"id": user.id, "name": user.name, "email": user.email}


def _category(category) -> Optional[Dict[str, Any]]:
    if category is None:
        return None
    return {
        "id": category.id,
        "name": category.name,
        "name_fr": category.name_fr,
        "name_mg": category.name_mg,
        "color": category.color,
        "icon": category.icon,
    }


def serialize_contribution(contribution: MoneyGoalContribution) -> Dict[str, Any]:
    return {
        "id": contribution.id,
        "goal_id": contribution.goal_id,
        "amount": contribution.amount,
        "contributed_by": contribution.contributed_by,
        "contributor": _person(contribution.contributor),
        "transaction_id": contribution.transaction_id,
        "reason": contribution.reason,
        "created_at": contribution.created_at,
        "updated_at": contribution.updated_at,
    }


def serialize_goal(goal: MoneyGoal) -> Dict[str, Any]:
    """Goal row -> dict with parsed edit history (no stats)"""
    return {
        "id": goal.id,
        "name": goal.name,
        "amount_goal": goal.amount_goal,
        "years": goal.years,
        "status": goal.status,
        "category_id": goal.category_id,
        "category": _category(goal.category),
        "created_by": goal.created_by,
        "creator": _person(goal.creator),
        "contributions": [serialize_contribution(c) for c in goal.contributions],
        "edit_history": parse_edit_history(goal.edit_history),
        "created_at": goal.created_at,
        "updated_at": goal.updated_at,
    }


def goal_with_stats(goal: MoneyGoal) -> Dict[str, Any]:
    """Goal row -> MoneyGoalWithStats dict"""
    progress = goal_progress(goal)
    data = serialize_goal(goal)
    data.update(
        total_contributions=progress.total_contributions,
        reached_goal=progress.reached_goal,
        progress_percentage=progress.progress_percentage,
        remaining_amount=progress.remaining_amount,
    )
    return data


def _detail_options():
    return (
        selectinload(MoneyGoal.category),
        selectinload(MoneyGoal.creator),
        selectinload(MoneyGoal.contributions).selectinload(MoneyGoalContribution.contributor),
    )


def list_goals_with_stats(db: Session, filters: MoneyGoalFilters) -> List[Dict[str, Any]]:
    goals = _filtered_query(db, filters).options(*_detail_options()).all()
    return [goal_with_stats(g) for g in goals]


def get_goal_with_stats(db: Session, goal_id: int) -> Dict[str, Any]:
    goal = (
        db.query(MoneyGoal)
        .options(*_detail_options())
        .filter(MoneyGoal.id == goal_id)
        .first()
    )
    if goal is None:
        raise NotFoundError(f"Goal #{goal_id} not found")
    return goal_with_stats(goal)


def get_goal_summary(db: Session, filters: MoneyGoalFilters) -> Dict[str, Any]:
    """
    Summary without loading full goal detail: only targets, statuses and
    contribution amounts are read. Search is not applied.
    """
    goals = (
        _filtered_query(db, filters, with_search=False)
        .with_entities(MoneyGoal.id, MoneyGoal.amount_goal, MoneyGoal.status)
        .all()
    )

    amounts: Dict[int, List[float]] = {goal_id: [] for goal_id, _, _ in goals}
    if amounts:
        rows = (
            db.query(MoneyGoalContribution.goal_id, MoneyGoalContribution.amount)
            .filter(MoneyGoalContribution.goal_id.in_(list(amounts)))
            .order_by(MoneyGoalContribution.created_at, MoneyGoalContribution.id)
            .all()
        )
        for goal_id, amount in rows:
            amounts[goal_id].append(amount)

    summary = summarize_goals(
        GoalFigures(amount_goal, sum_contributions(amounts[goal_id]), status)
        for goal_id, amount_goal, status in goals
    )
    return asdict(summary)


def summarize_goals_with_stats(goals: List[Dict[str, Any]]) -> Dict[str, Any]:
    """Fold already-fetched MoneyGoalWithStats dicts into a summary"""
    return asdict(summarize_goals(goals))


def build_export(
    db: Session,
    filters: MoneyGoalFilters,
    now: Optional[datetime] = None
) -> Dict[str, Any]:
    goals = list_goals_with_stats(db, filters)
    echoed = asdict(filters)
    echoed["years"] = filters.resolved_years()
    return {
        "goals": goals,
        "summary": summarize_goals_with_stats(goals),
        "filters": echoed,
        "export_date": format_timestamp(now or datetime.now(timezone.utc)),
    }


def list_contributions(db: Session, goal_id: int) -> List[Dict[str, Any]]:
    """Contributions of a goal, newest first"""
    if db.get(MoneyGoal, goal_id) is None:
        raise NotFoundError(f"Goal #{goal_id} not found")

    contributions = (
        db.query(MoneyGoalContribution)
        .options(selectinload(MoneyGoalContribution.contributor))
        .filter(MoneyGoalContribution.goal_id == goal_id)
        .order_by(MoneyGoalContribution.created_at.desc(), MoneyGoalContribution.id.desc())
        .all()
    )
    return [serialize_contribution(c) for c in contributions]
