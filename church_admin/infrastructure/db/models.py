"""
SQLAlchemy ORM models
"""
from datetime import datetime, timezone

from sqlalchemy import String, Integer, Float, Text, TIMESTAMP, Boolean, ForeignKey, func
from sqlalchemy.orm import Mapped, mapped_column, relationship

from church_admin.infrastructure.db.session import Base


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class User(Base):
    """
    Back-office user (admin or regular member of the church staff)
    """
    __tablename__ = "users"

    id: Mapped[int] = mapped_column(primary_key=True)
    email: Mapped[str] = mapped_column(String(255), unique=True, nullable=False)
    name: Mapped[str | None] = mapped_column(String(255), nullable=True)
    password_hash: Mapped[str] = mapped_column(String(255), nullable=False)
    role: Mapped[str] = mapped_column(String(20), nullable=False, default="user", server_default="user")  # admin / user

    created_at: Mapped[datetime] = mapped_column(
        TIMESTAMP(timezone=True),
        default=_utcnow,
        server_default=func.now(),
        nullable=False
    )

    @property
    def is_admin(self) -> bool:
        return self.role == "admin"


class MoneyGoalCategory(Base):
    """
    Category grouping money goals (localized names fr/mg)
    """
    __tablename__ = "money_goal_categories"

    id: Mapped[int] = mapped_column(primary_key=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    name_fr: Mapped[str | None] = mapped_column(String(255), nullable=True)
    name_mg: Mapped[str | None] = mapped_column(String(255), nullable=True)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    color: Mapped[str | None] = mapped_column(String(20), nullable=True)  # "#22c55e"
    icon: Mapped[str | None] = mapped_column(String(64), nullable=True)
    is_enabled: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True, server_default="true")

    created_at: Mapped[datetime] = mapped_column(
        TIMESTAMP(timezone=True), default=_utcnow, server_default=func.now(), nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        TIMESTAMP(timezone=True),
        default=_utcnow,
        server_default=func.now(),
        onupdate=_utcnow,
        nullable=False
    )

    goals: Mapped[list["MoneyGoal"]] = relationship(back_populates="category")


class MoneyGoal(Base):
    """
    Financial target for a given year.

    edit_history holds the JSON-serialized list of edit entries
    (see church_admin.domain.money_goal).
    """
    __tablename__ = "money_goals"

    id: Mapped[int] = mapped_column(primary_key=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    amount_goal: Mapped[float] = mapped_column(Float, nullable=False)
    years: Mapped[int] = mapped_column(Integer, nullable=False, index=True)
    status: Mapped[str] = mapped_column(
        String(20), nullable=False, default="active", server_default="active", index=True
    )  # active / completed / cancelled

    category_id: Mapped[int | None] = mapped_column(
        ForeignKey("money_goal_categories.id", ondelete="RESTRICT"), nullable=True, index=True
    )
    created_by: Mapped[int] = mapped_column(ForeignKey("users.id"), nullable=False)
    edit_history: Mapped[str | None] = mapped_column(Text, nullable=True)

    created_at: Mapped[datetime] = mapped_column(
        TIMESTAMP(timezone=True), default=_utcnow, server_default=func.now(), nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        TIMESTAMP(timezone=True),
        default=_utcnow,
        server_default=func.now(),
        onupdate=_utcnow,
        nullable=False
    )

    category: Mapped[MoneyGoalCategory | None] = relationship(back_populates="goals")
    creator: Mapped[User] = relationship(foreign_keys=[created_by])
    contributions: Mapped[list["MoneyGoalContribution"]] = relationship(
        back_populates="goal",
        cascade="all, delete-orphan",
        order_by=lambda: [MoneyGoalContribution.created_at, MoneyGoalContribution.id],
    )


class MoneyGoalContribution(Base):
    """
    Amount credited toward a money goal. Never updated, only created or deleted.
    """
    __tablename__ = "money_goal_contributions"

    id: Mapped[int] = mapped_column(primary_key=True)
    goal_id: Mapped[int] = mapped_column(
        ForeignKey("money_goals.id", ondelete="CASCADE"), nullable=False, index=True
    )
    amount: Mapped[float] = mapped_column(Float, nullable=False)
    contributed_by: Mapped[int] = mapped_column(ForeignKey("users.id"), nullable=False)
    transaction_id: Mapped[int | None] = mapped_column(
        ForeignKey("transactions.id", ondelete="SET NULL"), nullable=True
    )
    reason: Mapped[str | None] = mapped_column(Text, nullable=True)

    created_at: Mapped[datetime] = mapped_column(
        TIMESTAMP(timezone=True), default=_utcnow, server_default=func.now(), nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        TIMESTAMP(timezone=True),
        default=_utcnow,
        server_default=func.now(),
        onupdate=_utcnow,
        nullable=False
    )

    goal: Mapped[MoneyGoal] = relationship(back_populates="contributions")
    contributor: Mapped[User] = relationship(foreign_keys=[contributed_by])


class SiteBalance(Base):
    """
    Running treasury balance: one row per transaction, latest row is current
    """
    __tablename__ = "site_balances"

    id: Mapped[int] = mapped_column(primary_key=True)
    amount: Mapped[float] = mapped_column(Float, nullable=False, server_default="0")

    created_at: Mapped[datetime] = mapped_column(
        TIMESTAMP(timezone=True), default=_utcnow, server_default=func.now(), nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        TIMESTAMP(timezone=True),
        default=_utcnow,
        server_default=func.now(),
        onupdate=_utcnow,
        nullable=False
    )


class Transaction(Base):
    """
    Ledger entry (credit / debit) moving the site balance
    """
    __tablename__ = "transactions"

    id: Mapped[int] = mapped_column(primary_key=True)
    amount: Mapped[float] = mapped_column(Float, nullable=False)
    type: Mapped[str] = mapped_column(String(10), nullable=False, index=True)  # credit / debit
    reason: Mapped[str | None] = mapped_column(Text, nullable=True)

    user_id: Mapped[int] = mapped_column(ForeignKey("users.id"), nullable=False)
    sender_id: Mapped[int | None] = mapped_column(ForeignKey("users.id"), nullable=True)
    receiver_id: Mapped[int | None] = mapped_column(ForeignKey("users.id"), nullable=True)
    money_goal_id: Mapped[int | None] = mapped_column(
        ForeignKey("money_goals.id", ondelete="SET NULL"), nullable=True, index=True
    )
    site_balance_id: Mapped[int | None] = mapped_column(ForeignKey("site_balances.id"), nullable=True)

    created_at: Mapped[datetime] = mapped_column(
        TIMESTAMP(timezone=True), default=_utcnow, server_default=func.now(), nullable=False, index=True
    )
    updated_at: Mapped[datetime] = mapped_column(
        TIMESTAMP(timezone=True),
        default=_utcnow,
        server_default=func.now(),
        onupdate=_utcnow,
        nullable=False
    )

    user: Mapped[User] = relationship(foreign_keys=[user_id])
    sender: Mapped[User | None] = relationship(foreign_keys=[sender_id])
    receiver: Mapped[User | None] = relationship(foreign_keys=[receiver_id])
    money_goal: Mapped[MoneyGoal | None] = relationship(foreign_keys=[money_goal_id])
    site_balance: Mapped[SiteBalance | None] = relationship(foreign_keys=[site_balance_id])
