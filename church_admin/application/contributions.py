"""
Money goal contribution use cases
"""
import logging

from sqlalchemy.orm import Session

from church_admin.application.errors import ValidationError, NotFoundError
from church_admin.infrastructure.db.models import MoneyGoal, MoneyGoalContribution

logger = logging.getLogger(__name__)


class ContributionValidationError(ValidationError):
    """Invalid contribution input"""
    pass


def add_contribution(
    db: Session,
    goal_id: int,
    amount: float,
    contributed_by: int,
    reason: str | None = None,
    transaction_id: int | None = None,
) -> MoneyGoalContribution:
    """
    Stage a contribution in the current transaction (flush, no commit)

    Used directly by CreateTransactionUseCase so that the ledger entry and
    the contribution share one commit.

    Raises:
        ContributionValidationError: amount is not positive
        NotFoundError: goal does not exist
    """
    if amount is None or amount <= 0:
        raise ContributionValidationError("Contribution amount must be positive")

    if db.get(MoneyGoal, goal_id) is None:
        raise NotFoundError(f"Goal #{goal_id} not found")

    contribution = MoneyGoalContribution(
        goal_id=goal_id,
        amount=amount,
        contributed_by=contributed_by,
        transaction_id=transaction_id,
        reason=(reason or "").strip() or None,
    )
    db.add(contribution)
    db.flush()
    return contribution


class CreateContributionUseCase:
    """Use case: record a contribution toward a goal"""

    def __init__(self, db: Session):
        self.db = db

    def execute(
        self,
        goal_id: int,
        amount: float,
        contributed_by: int,
        reason: str | None = None,
    ) -> MoneyGoalContribution:
        contribution = add_contribution(
            self.db,
            goal_id=goal_id,
            amount=amount,
            contributed_by=contributed_by,
            reason=reason,
        )
        self.db.commit()
        self.db.refresh(contribution)

        logger.info(
            "Contribution #%d of %s to goal #%d by user_id=%s",
            contribution.id, amount, goal_id, contributed_by
        )
        return contribution


class DeleteContributionUseCase:
    """Use case: delete one contribution of a goal"""

    def __init__(self, db: Session):
        self.db = db

    def execute(self, goal_id: int, contribution_id: int) -> None:
        contribution = self.db.query(MoneyGoalContribution).filter(
            MoneyGoalContribution.id == contribution_id,
            MoneyGoalContribution.goal_id == goal_id
        ).first()

        if contribution is None:
            raise NotFoundError(f"Contribution #{contribution_id} not found for goal #{goal_id}")

        self.db.delete(contribution)
        self.db.commit()
        logger.info("Contribution #%d of goal #%d deleted", contribution_id, goal_id)
