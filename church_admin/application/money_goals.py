"""
Money goal use cases - create, update (with edit history), delete
"""
import logging
from datetime import datetime
from typing import Any, Dict

from sqlalchemy.orm import Session

from church_admin.application.errors import ValidationError, NotFoundError
from church_admin.domain.money_goal import (
    GOAL_STATUSES,
    GOAL_STATUS_ACTIVE,
    append_history_entry,
    build_history_entry,
    diff_goal_changes,
    parse_edit_history,
    resolve_editor_name,
    serialize_edit_history,
)
from church_admin.infrastructure.db.models import MoneyGoal, MoneyGoalCategory

logger = logging.getLogger(__name__)

MIN_YEAR = 1900
MAX_YEAR = 2200


class MoneyGoalValidationError(ValidationError):
    """Invalid money goal input"""
    pass


def _validate_name(name: str | None) -> str:
    name = (name or "").strip()
    if not name:
        raise MoneyGoalValidationError("Goal name is required")
    return name


def _validate_amount_goal(amount_goal: Any) -> float:
    if amount_goal is None or isinstance(amount_goal, bool):
        raise MoneyGoalValidationError("Target amount is required")
    try:
        value = float(amount_goal)
    except (TypeError, ValueError):
        raise MoneyGoalValidationError(f"Invalid target amount: {amount_goal!r}")
    if value <= 0:
        raise MoneyGoalValidationError("Target amount must be positive")
    return value


def _validate_years(years: Any) -> int:
    if not isinstance(years, int) or isinstance(years, bool):
        raise MoneyGoalValidationError(f"Invalid year: {years!r}")
    if not MIN_YEAR <= years <= MAX_YEAR:
        raise MoneyGoalValidationError(f"Year out of range: {years}")
    return years


def _validate_status(status: Any) -> str:
    if status not in GOAL_STATUSES:
        raise MoneyGoalValidationError(
            f"Invalid status: {status!r}. Use one of {', '.join(GOAL_STATUSES)}"
        )
    return status


def _ensure_category(db: Session, category_id: int | None) -> None:
    if category_id is None:
        return
    if db.get(MoneyGoalCategory, category_id) is None:
        raise NotFoundError(f"Category #{category_id} not found")


class CreateMoneyGoalUseCase:
    """Use case: create a money goal with an empty edit history"""

    def __init__(self, db: Session):
        self.db = db

    def execute(
        self,
        name: str,
        amount_goal: float,
        years: int,
        created_by: int,
        category_id: int | None = None,
    ) -> MoneyGoal:
        """
        Create a goal

        Args:
            name: Goal name
            amount_goal: Target amount (> 0)
            years: Target year
            created_by: ID of the creating user
            category_id: Optional category

        Returns:
            The persisted MoneyGoal
        """
        name = _validate_name(name)
        amount_goal = _validate_amount_goal(amount_goal)
        years = _validate_years(years)
        _ensure_category(self.db, category_id)

        goal = MoneyGoal(
            name=name,
            amount_goal=amount_goal,
            years=years,
            status=GOAL_STATUS_ACTIVE,
            category_id=category_id,
            created_by=created_by,
            edit_history=serialize_edit_history([]),
        )
        self.db.add(goal)
        self.db.commit()
        self.db.refresh(goal)

        logger.info("Money goal #%d created by user_id=%s", goal.id, created_by)
        return goal


class UpdateMoneyGoalUseCase:
    """
    Use case: update a goal and record the changed fields in its edit history

    Field values and the history entry are written in one transaction
    while the goal row is locked, so concurrent edits both land in history.
    """

    def __init__(self, db: Session):
        self.db = db

    def execute(
        self,
        goal_id: int,
        actor_user_id: int | None,
        actor_name: str | None = None,
        actor_email: str | None = None,
        name: str | None = ...,  # sentinel: ... means "not provided"
        amount_goal: float | None = ...,
        years: int | None = ...,
        status: str | None = ...,
        category_id: int | None = ...,
        now: datetime | None = None,
    ) -> MoneyGoal:
        goal = (
            self.db.query(MoneyGoal)
            .filter(MoneyGoal.id == goal_id)
            .with_for_update()
            .first()
        )
        if goal is None:
            self.db.rollback()
            raise NotFoundError(f"Goal #{goal_id} not found")

        try:
            payload: Dict[str, Any] = {}
            if name is not ...:
                payload["name"] = _validate_name(name)
            if amount_goal is not ...:
                payload["amount_goal"] = _validate_amount_goal(amount_goal)
            if years is not ...:
                payload["years"] = _validate_years(years)
            if status is not ...:
                payload["status"] = _validate_status(status)
            if category_id is not ...:
                _ensure_category(self.db, category_id)
                payload["category_id"] = category_id

            changes = diff_goal_changes(goal, payload)
            if not changes:
                self.db.rollback()  # release the row lock
                return goal

            for attr, value in payload.items():
                setattr(goal, attr, value)

            entry = build_history_entry(
                changes,
                editor_id=actor_user_id,
                editor_name=resolve_editor_name(actor_name, actor_email),
                now=now,
            )
            history = parse_edit_history(goal.edit_history)
            goal.edit_history = serialize_edit_history(append_history_entry(history, entry))

            self.db.commit()
        except Exception:
            self.db.rollback()
            raise

        self.db.refresh(goal)
        logger.info(
            "Money goal #%d updated by user_id=%s: %s",
            goal.id, actor_user_id, ", ".join(c.field for c in changes)
        )
        return goal


class DeleteMoneyGoalUseCase:
    """Use case: delete a goal together with its contributions"""

    def __init__(self, db: Session):
        self.db = db

    def execute(self, goal_id: int) -> None:
        goal = self.db.get(MoneyGoal, goal_id)
        if goal is None:
            raise NotFoundError(f"Goal #{goal_id} not found")

        self.db.delete(goal)
        self.db.commit()
        logger.info("Money goal #%d deleted", goal_id)
