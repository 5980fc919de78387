"""
User use cases
"""
import logging
import re

from sqlalchemy import or_
from sqlalchemy.orm import Session

from church_admin.application.errors import ValidationError, ConflictError, NotFoundError
from church_admin.auth import hash_password, verify_password, get_user_by_email
from church_admin.infrastructure.db.models import MoneyGoal, MoneyGoalContribution, Transaction, User

logger = logging.getLogger(__name__)

USER_ROLES = ("admin", "user")
MIN_PASSWORD_LENGTH = 8

_EMAIL_RE = re.compile(r"[^@\s]+@[^@\s]+\.[^@\s]+")


class UserValidationError(ValidationError):
    """Invalid user input"""
    pass


def _validate_email(email: str | None) -> str:
    email = (email or "").strip().lower()
    if not _EMAIL_RE.fullmatch(email):
        raise UserValidationError(f"Invalid email: {email!r}")
    return email


def _validate_password(password: str | None) -> str:
    if len(password or "") < MIN_PASSWORD_LENGTH:
        raise UserValidationError(
            f"Password must contain at least {MIN_PASSWORD_LENGTH} characters"
        )
    return password


def _validate_role(role: str | None) -> str:
    if role not in USER_ROLES:
        raise UserValidationError(f"Invalid role: {role!r}")
    return role


def _get_user(db: Session, user_id: int) -> User:
    user = db.get(User, user_id)
    if user is None:
        raise NotFoundError(f"User #{user_id} not found")
    return user


class CreateUserUseCase:
    """Use case: create a back-office user"""

    def __init__(self, db: Session):
        self.db = db

    def execute(
        self,
        email: str,
        password: str,
        name: str | None = None,
        role: str = "user",
    ) -> User:
        email = _validate_email(email)
        _validate_password(password)
        _validate_role(role)

        if get_user_by_email(self.db, email) is not None:
            raise ConflictError(f"User {email} already exists")

        user = User(
            email=email,
            name=(name or "").strip() or None,
            password_hash=hash_password(password),
            role=role,
        )
        self.db.add(user)
        self.db.commit()
        self.db.refresh(user)

        logger.info("User #%d created (%s, role=%s)", user.id, email, role)
        return user


class UpdateUserUseCase:
    """Use case: partial update of name, email and role (admin only)"""

    def __init__(self, db: Session):
        self.db = db

    def execute(self, user_id: int, **changes) -> User:
        unknown = set(changes) - {"name", "email", "role"}
        if unknown:
            raise UserValidationError(f"Unknown user fields: {', '.join(sorted(unknown))}")

        user = _get_user(self.db, user_id)

        if "email" in changes:
            email = _validate_email(changes["email"])
            other = get_user_by_email(self.db, email)
            if other is not None and other.id != user.id:
                raise ConflictError(f"User {email} already exists")
            user.email = email
        if "name" in changes:
            user.name = (changes["name"] or "").strip() or None
        if "role" in changes:
            user.role = _validate_role(changes["role"])

        self.db.commit()
        self.db.refresh(user)
        logger.info("User #%d updated: %s", user.id, ", ".join(sorted(changes)))
        return user


class DeleteUserUseCase:
    """Use case: delete a user that owns no goal, contribution or transaction"""

    def __init__(self, db: Session):
        self.db = db

    def execute(self, user_id: int, actor_user_id: int) -> None:
        if user_id == actor_user_id:
            raise UserValidationError("Cannot delete own account")

        user = _get_user(self.db, user_id)

        referenced = (
            self.db.query(MoneyGoal.id).filter(MoneyGoal.created_by == user_id).first()
            or self.db.query(MoneyGoalContribution.id)
            .filter(MoneyGoalContribution.contributed_by == user_id).first()
            or self.db.query(Transaction.id).filter(or_(
                Transaction.user_id == user_id,
                Transaction.sender_id == user_id,
                Transaction.receiver_id == user_id,
            )).first()
        )
        if referenced:
            raise ConflictError(
                "Cannot delete a user referenced by goals, contributions or transactions"
            )

        self.db.delete(user)
        self.db.commit()
        logger.info("User #%d deleted by user_id=%s", user_id, actor_user_id)


class ChangePasswordUseCase:
    """Use case: replace a password after checking the current one"""

    def __init__(self, db: Session):
        self.db = db

    def execute(self, user_id: int, current_password: str, new_password: str) -> None:
        if not current_password or not new_password:
            raise UserValidationError("Current and new password are required")

        user = _get_user(self.db, user_id)
        if not verify_password(current_password, user.password_hash):
            raise UserValidationError("Current password is incorrect")

        user.password_hash = hash_password(_validate_password(new_password))
        self.db.commit()
        logger.info("Password changed for user #%d", user_id)
