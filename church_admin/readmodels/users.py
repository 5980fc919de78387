"""
User directory read model
"""
from typing import Any, Dict, List, Optional

from sqlalchemy.orm import Session

from church_admin.application.errors import NotFoundError, ValidationError
from church_admin.application.users import USER_ROLES
from church_admin.infrastructure.db.models import User


def serialize_user(user: User) -> Dict[str, Any]:
    return {
        "id": user.id,
        "name": user.name,
        "email": user.email,
        "role": user.role,
        "created_at": user.created_at,
    }


def list_users(db: Session, role: Optional[str] = None) -> List[Dict[str, Any]]:
    """Users ordered by name (then email), optionally of one role"""
    if role and role not in USER_ROLES:
        raise ValidationError(f"Invalid role filter: {role!r}")

    query = db.query(User)
    if role:
        query = query.filter(User.role == role)
    rows = query.order_by(User.name.asc(), User.email.asc()).all()
    return [serialize_user(u) for u in rows]


def get_user(db: Session, user_id: int) -> Dict[str, Any]:
    user = db.get(User, user_id)
    if user is None:
        raise NotFoundError(f"User #{user_id} not found")
    return serialize_user(user)
