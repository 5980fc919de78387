"""
Tests for money goal categories: CRUD, goal counts, delete protection
"""
import pytest

from church_admin.application.errors import ConflictError, NotFoundError
from church_admin.application.money_goal_categories import (
    CreateCategoryUseCase,
    UpdateCategoryUseCase,
    DeleteCategoryUseCase,
    CategoryValidationError,
)
from church_admin.application.money_goals import CreateMoneyGoalUseCase, DeleteMoneyGoalUseCase
from church_admin.infrastructure.db.models import MoneyGoalCategory
from church_admin.readmodels.money_goal_categories import list_categories, get_category


@pytest.fixture
def category(db_session):
    return CreateCategoryUseCase(db_session).execute(
        name="Education Goal",
        name_fr="Objectif d'Éducation",
        name_mg="Tanjona Fampianarana",
        color="#06b6d4",
        icon="GraduationCap",
    )


class TestCategoryCrud:
    def test_create(self, category):
        assert category.id is not None
        assert category.is_enabled is True
        assert category.name_mg == "Tanjona Fampianarana"

    def test_create_requires_name(self, db_session):
        with pytest.raises(CategoryValidationError):
            CreateCategoryUseCase(db_session).execute(name=" ")

    def test_partial_update(self, db_session, category):
        UpdateCategoryUseCase(db_session).execute(category.id, color="#000000", is_enabled=False)

        db_session.refresh(category)
        assert category.color == "#000000"
        assert category.is_enabled is False
        assert category.name == "Education Goal"

    def test_update_unknown_field_rejected(self, db_session, category):
        with pytest.raises(CategoryValidationError, match="Unknown category fields"):
            UpdateCategoryUseCase(db_session).execute(category.id, goals_count=3)

    def test_update_missing_category(self, db_session):
        with pytest.raises(NotFoundError):
            UpdateCategoryUseCase(db_session).execute(404, name="X")


class TestCategoryReadModel:
    def test_list_hides_disabled_by_default(self, db_session, category):
        CreateCategoryUseCase(db_session).execute(name="Archived", is_enabled=False)

        assert [c["name"] for c in list_categories(db_session)] == ["Education Goal"]
        assert [c["name"] for c in list_categories(db_session, include_disabled=True)] == [
            "Archived", "Education Goal",
        ]

    def test_goal_count(self, db_session, admin_user, category):
        uc = CreateMoneyGoalUseCase(db_session)
        for name in ("Scholarships", "Books"):
            uc.execute(name=name, amount_goal=100, years=2024, created_by=admin_user.id,
                       category_id=category.id)

        assert get_category(db_session, category.id)["goals_count"] == 2

    def test_get_missing(self, db_session):
        with pytest.raises(NotFoundError):
            get_category(db_session, 404)


class TestDeleteCategory:
    def test_delete_unused(self, db_session, category):
        DeleteCategoryUseCase(db_session).execute(category.id)
        assert db_session.get(MoneyGoalCategory, category.id) is None

    def test_delete_with_goals_conflicts(self, db_session, admin_user, category):
        goal = CreateMoneyGoalUseCase(db_session).execute(
            name="Scholarships", amount_goal=100, years=2024, created_by=admin_user.id,
            category_id=category.id,
        )

        with pytest.raises(ConflictError, match="Cannot delete category with existing goals"):
            DeleteCategoryUseCase(db_session).execute(category.id)

        DeleteMoneyGoalUseCase(db_session).execute(goal.id)
        DeleteCategoryUseCase(db_session).execute(category.id)
        assert db_session.get(MoneyGoalCategory, category.id) is None

    def test_delete_missing(self, db_session):
        with pytest.raises(NotFoundError):
            DeleteCategoryUseCase(db_session).execute(404)
