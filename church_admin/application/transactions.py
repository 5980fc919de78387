"""
Transaction use cases - ledger entries moving the site balance
"""
import logging

from sqlalchemy import text
from sqlalchemy.orm import Session

from church_admin.application.contributions import add_contribution
from church_admin.application.errors import ValidationError, NotFoundError
from church_admin.domain.transaction import TRANSACTION_TYPES, MIN_REASON_LENGTH, next_balance
from church_admin.infrastructure.db.models import MoneyGoal, SiteBalance, Transaction

logger = logging.getLogger(__name__)

# pg_advisory_xact_lock key serializing writers of the running balance
SITE_BALANCE_LOCK_KEY = 7_301_001


class TransactionValidationError(ValidationError):
    """Invalid transaction input"""
    pass


def latest_site_balance_query(db: Session, for_update: bool = False):
    query = db.query(SiteBalance).order_by(SiteBalance.created_at.desc(), SiteBalance.id.desc())
    if for_update:
        query = query.with_for_update()
    return query


def latest_site_balance(db: Session, for_update: bool = False) -> SiteBalance | None:
    return latest_site_balance_query(db, for_update=for_update).first()


def lock_site_balance(db: Session) -> None:
    """
    Serialize balance writers until the end of the current transaction.

    Row locks alone cannot do it: the next writer inserts a new latest row
    that a waiting FOR UPDATE query will never see. SQLite already
    serializes writers, so this is a no-op there.
    """
    if db.get_bind().dialect.name == "postgresql":
        db.execute(text("SELECT pg_advisory_xact_lock(:key)"), {"key": SITE_BALANCE_LOCK_KEY})


class CreateTransactionUseCase:
    """
    Use case: record a credit/debit transaction

    In one commit:
    1. Lock and read the latest site balance
    2. Write a new SiteBalance row (previous ± amount)
    3. Create the Transaction pointing at it
    4. If a money goal is given, create a contribution linked to the transaction
    """

    def __init__(self, db: Session):
        self.db = db

    def execute(
        self,
        amount: float,
        transaction_type: str,
        reason: str,
        actor_user_id: int,
        sender_id: int | None = None,
        receiver_id: int | None = None,
        money_goal_id: int | None = None,
    ) -> Transaction:
        """
        Create a transaction

        Args:
            amount: Positive amount
            transaction_type: credit / debit
            reason: Free text, at least 3 characters
            actor_user_id: Author of the entry
            sender_id: Optional sending member
            receiver_id: Optional receiving member
            money_goal_id: Goal credited by this transaction (optional)

        Returns:
            The persisted Transaction

        Raises:
            TransactionValidationError: invalid amount, type or reason
            NotFoundError: money_goal_id does not exist
        """
        if amount is None or amount <= 0:
            raise TransactionValidationError("Amount must be positive")

        if transaction_type not in TRANSACTION_TYPES:
            raise TransactionValidationError(
                f"Invalid transaction type: {transaction_type!r}. Use credit or debit"
            )

        reason = (reason or "").strip()
        if len(reason) < MIN_REASON_LENGTH:
            raise TransactionValidationError(
                f"Reason must contain at least {MIN_REASON_LENGTH} characters"
            )

        if money_goal_id is not None and self.db.get(MoneyGoal, money_goal_id) is None:
            raise NotFoundError(f"Goal #{money_goal_id} not found")

        try:
            lock_site_balance(self.db)
            current = latest_site_balance(self.db, for_update=True)
            balance = SiteBalance(
                amount=next_balance(current.amount if current else None, transaction_type, amount)
            )
            self.db.add(balance)
            self.db.flush()

            transaction = Transaction(
                amount=amount,
                type=transaction_type,
                reason=reason,
                user_id=actor_user_id,
                sender_id=sender_id,
                receiver_id=receiver_id,
                money_goal_id=money_goal_id,
                site_balance_id=balance.id,
            )
            self.db.add(transaction)
            self.db.flush()

            if money_goal_id is not None:
                add_contribution(
                    self.db,
                    goal_id=money_goal_id,
                    amount=amount,
                    contributed_by=actor_user_id,
                    reason=reason,
                    transaction_id=transaction.id,
                )

            self.db.commit()
        except Exception:
            self.db.rollback()
            raise

        self.db.refresh(transaction)
        logger.info(
            "Transaction #%d (%s %s) recorded, site balance now %s",
            transaction.id, transaction_type, amount, balance.amount
        )
        return transaction
