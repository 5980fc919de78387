"""
User administration API endpoints
"""
from datetime import datetime

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session

from church_admin.api.deps import get_db, get_current_user, require_admin
from church_admin.api.v1.common import CamelModel
from church_admin.application.users import (
    CreateUserUseCase,
    UpdateUserUseCase,
    DeleteUserUseCase,
    ChangePasswordUseCase,
)
from church_admin.infrastructure.db.models import User
from church_admin.readmodels.users import list_users, get_user, serialize_user


router = APIRouter(prefix="/api/v1/users", tags=["users"])


# === Request/Response models ===

class CreateUserRequest(CamelModel):
    email: str
    password: str
    name: str | None = None
    role: str = "user"


class UpdateUserRequest(CamelModel):
    name: str | None = None
    email: str | None = None
    role: str | None = None


class ChangePasswordRequest(CamelModel):
    current_password: str
    new_password: str


class UserResponse(CamelModel):
    id: int
    name: str | None = None
    email: str
    role: str
    created_at: datetime


# === Endpoints ===

@router.get("/", response_model=list[UserResponse])
def get_users(
    role: str | None = Query(None),
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    return list_users(db, role=role or None)


@router.post("/", response_model=UserResponse)
def create_user(
    req: CreateUserRequest,
    db: Session = Depends(get_db),
    admin: User = Depends(require_admin),
):
    created = CreateUserUseCase(db).execute(
        email=req.email, password=req.password, name=req.name, role=req.role,
    )
    return serialize_user(created)


@router.get("/{user_id}", response_model=UserResponse)
def get_one_user(
    user_id: int,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    return get_user(db, user_id)


@router.put("/{user_id}", response_model=UserResponse)
def update_user(
    user_id: int,
    req: UpdateUserRequest,
    db: Session = Depends(get_db),
    admin: User = Depends(require_admin),
):
    """Partial update: only fields present in the body change"""
    updated = UpdateUserUseCase(db).execute(user_id, **req.model_dump(exclude_unset=True))
    return serialize_user(updated)


@router.delete("/{user_id}")
def delete_user(
    user_id: int,
    db: Session = Depends(get_db),
    admin: User = Depends(require_admin),
):
    DeleteUserUseCase(db).execute(user_id, actor_user_id=admin.id)
    return {"message": "User deleted successfully"}


@router.put("/{user_id}/password")
def change_password(
    user_id: int,
    req: ChangePasswordRequest,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    """Change a password: the account owner or an admin, current password required"""
    if user.id != user_id and not user.is_admin:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Cannot change another user's password"
        )

    ChangePasswordUseCase(db).execute(
        user_id=user_id,
        current_password=req.current_password,
        new_password=req.new_password,
    )
    return {"message": "Password updated successfully"}
