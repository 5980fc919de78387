"""
Money goal category read model
"""
from typing import Any, Dict, List

from sqlalchemy import func
from sqlalchemy.orm import Session

from church_admin.application.errors import NotFoundError
from church_admin.infrastructure.db.models import MoneyGoal, MoneyGoalCategory


def _serialize(category: MoneyGoalCategory, goals_count: int) -> Dict[str, Any]:
    return {
        "id": category.id,
        "name": category.name,
        "name_fr": category.name_fr,
        "name_mg": category.name_mg,
        "description": category.description,
        "color": category.color,
        "icon": category.icon,
        "is_enabled": category.is_enabled,
        "goals_count": goals_count,
        "created_at": category.created_at,
        "updated_at": category.updated_at,
    }


def _with_counts(db: Session):
    goals_count = (
        db.query(MoneyGoal.category_id, func.count(MoneyGoal.id).label("goals_count"))
        .group_by(MoneyGoal.category_id)
        .subquery()
    )
    return (
        db.query(MoneyGoalCategory, func.coalesce(goals_count.c.goals_count, 0))
        .outerjoin(goals_count, goals_count.c.category_id == MoneyGoalCategory.id)
    )


def list_categories(db: Session, include_disabled: bool = False) -> List[Dict[str, Any]]:
    """Categories ordered by name; disabled ones only on request"""
    query = _with_counts(db)
    if not include_disabled:
        query = query.filter(MoneyGoalCategory.is_enabled == True)
    rows = query.order_by(MoneyGoalCategory.name.asc()).all()
    return [_serialize(category, count) for category, count in rows]


def get_category(db: Session, category_id: int) -> Dict[str, Any]:
    row = _with_counts(db).filter(MoneyGoalCategory.id == category_id).first()
    if row is None:
        raise NotFoundError(f"Category #{category_id} not found")
    category, count = row
    return _serialize(category, count)
