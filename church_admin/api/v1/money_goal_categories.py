"""
Money goal category API endpoints
"""
from datetime import datetime

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from church_admin.api.deps import get_db, get_current_user, require_admin
from church_admin.api.v1.common import CamelModel
from church_admin.application.money_goal_categories import (
    CreateCategoryUseCase,
    UpdateCategoryUseCase,
    DeleteCategoryUseCase,
)
from church_admin.infrastructure.db.models import User
from church_admin.readmodels.money_goal_categories import list_categories, get_category


router = APIRouter(prefix="/api/v1/money-goal-categories", tags=["money-goal-categories"])


# === Request/Response models ===

class CreateCategoryRequest(CamelModel):
    name: str
    name_fr: str | None = None
    name_mg: str | None = None
    description: str | None = None
    color: str | None = None
    icon: str | None = None


class UpdateCategoryRequest(CamelModel):
    id: int | None = None  # ignored, the path id wins
    name: str | None = None
    name_fr: str | None = None
    name_mg: str | None = None
    description: str | None = None
    color: str | None = None
    icon: str | None = None
    is_enabled: bool | None = None


class CategoryResponse(CamelModel):
    id: int
    name: str
    name_fr: str | None = None
    name_mg: str | None = None
    description: str | None = None
    color: str | None = None
    icon: str | None = None
    is_enabled: bool
    goals_count: int
    created_at: datetime
    updated_at: datetime


# === Endpoints ===

@router.get("/", response_model=list[CategoryResponse])
def get_categories(
    include_disabled: bool = Query(False, alias="includeDisabled"),
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    """List categories (enabled only unless includeDisabled=true)"""
    return list_categories(db, include_disabled=include_disabled)


@router.post("/", response_model=CategoryResponse)
def create_category(
    req: CreateCategoryRequest,
    db: Session = Depends(get_db),
    admin: User = Depends(require_admin),
):
    category = CreateCategoryUseCase(db).execute(**req.model_dump())
    return get_category(db, category.id)


@router.get("/{category_id}", response_model=CategoryResponse)
def get_one_category(
    category_id: int,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    return get_category(db, category_id)


@router.put("/{category_id}", response_model=CategoryResponse)
def update_category(
    category_id: int,
    req: UpdateCategoryRequest,
    db: Session = Depends(get_db),
    admin: User = Depends(require_admin),
):
    """Partial update: only fields present in the body change"""
    UpdateCategoryUseCase(db).execute(
        category_id, **req.model_dump(exclude_unset=True, exclude={"id"})
    )
    return get_category(db, category_id)


@router.delete("/{category_id}")
def delete_category(
    category_id: int,
    db: Session = Depends(get_db),
    admin: User = Depends(require_admin),
):
    """Delete a category; refused (409) while goals still use it"""
    DeleteCategoryUseCase(db).execute(category_id)
    return {"message": "Category deleted successfully"}
