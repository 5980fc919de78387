"""
Authentication routes (login, logout, current user)
"""
import logging

from fastapi import APIRouter, Depends, HTTPException, Request, status
from pydantic import BaseModel
from sqlalchemy.orm import Session

from church_admin.api.deps import get_db, get_current_user
from church_admin.api.v1.common import CamelModel
from church_admin.auth import authenticate
from church_admin.infrastructure.db.models import User

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1/auth", tags=["auth"])


class LoginRequest(BaseModel):
    email: str
    password: str


class CurrentUserResponse(CamelModel):
    id: int
    email: str
    name: str | None = None
    role: str


@router.post("/login", response_model=CurrentUserResponse)
def login(
    request: Request,
    req: LoginRequest,
    db: Session = Depends(get_db),
):
    """
    Check credentials and open a session
    """
    user = authenticate(db, req.email, req.password)
    if user is None:
        logger.warning("Failed login for %s", req.email)
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid email or password"
        )

    request.session["user_id"] = user.id
    request.session["role"] = user.role
    return user


@router.post("/logout")
def logout(request: Request):
    """
    Close the session
    """
    request.session.clear()
    return {"status": "logged_out"}


@router.get("/me", response_model=CurrentUserResponse)
def me(user: User = Depends(get_current_user)):
    return user
