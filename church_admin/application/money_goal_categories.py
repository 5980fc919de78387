"""
Money goal category use cases
"""
import logging

from sqlalchemy import func
from sqlalchemy.orm import Session

from church_admin.application.errors import ValidationError, NotFoundError, ConflictError
from church_admin.infrastructure.db.models import MoneyGoal, MoneyGoalCategory

logger = logging.getLogger(__name__)

# Attributes a partial update may touch
_UPDATABLE_FIELDS = ("name", "name_fr", "name_mg", "description", "color", "icon", "is_enabled")


class CategoryValidationError(ValidationError):
    """Invalid category input"""
    pass


def count_category_goals(db: Session, category_id: int) -> int:
    return (
        db.query(func.count(MoneyGoal.id))
        .filter(MoneyGoal.category_id == category_id)
        .scalar()
    ) or 0


class CreateCategoryUseCase:
    """Use case: create a money goal category"""

    def __init__(self, db: Session):
        self.db = db

    def execute(
        self,
        name: str,
        name_fr: str | None = None,
        name_mg: str | None = None,
        description: str | None = None,
        color: str | None = None,
        icon: str | None = None,
        is_enabled: bool = True,
    ) -> MoneyGoalCategory:
        name = (name or "").strip()
        if not name:
            raise CategoryValidationError("Name is required")

        category = MoneyGoalCategory(
            name=name,
            name_fr=name_fr or None,
            name_mg=name_mg or None,
            description=description or None,
            color=color or None,
            icon=icon or None,
            is_enabled=is_enabled,
        )
        self.db.add(category)
        self.db.commit()
        self.db.refresh(category)

        logger.info("Money goal category #%d created: %s", category.id, category.name)
        return category


class UpdateCategoryUseCase:
    """Use case: partial update of a category (only supplied fields change)"""

    def __init__(self, db: Session):
        self.db = db

    def execute(self, category_id: int, **changes) -> MoneyGoalCategory:
        unknown = set(changes) - set(_UPDATABLE_FIELDS)
        if unknown:
            raise CategoryValidationError(f"Unknown category fields: {', '.join(sorted(unknown))}")

        category = self.db.get(MoneyGoalCategory, category_id)
        if category is None:
            raise NotFoundError(f"Category #{category_id} not found")

        if "name" in changes:
            name = (changes["name"] or "").strip()
            if not name:
                raise CategoryValidationError("Name is required")
            changes["name"] = name

        for attr, value in changes.items():
            setattr(category, attr, value)

        self.db.commit()
        self.db.refresh(category)
        return category


class DeleteCategoryUseCase:
    """Use case: delete a category that no goal references"""

    def __init__(self, db: Session):
        self.db = db

    def execute(self, category_id: int) -> None:
        category = self.db.get(MoneyGoalCategory, category_id)
        if category is None:
            raise NotFoundError(f"Category #{category_id} not found")

        if count_category_goals(self.db, category_id) > 0:
            raise ConflictError(
                "Cannot delete category with existing goals. Move or delete the goals first."
            )

        self.db.delete(category)
        self.db.commit()
        logger.info("Money goal category #%d deleted", category_id)
