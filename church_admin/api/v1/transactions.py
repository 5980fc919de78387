"""
Transaction and site balance API endpoints
"""
from datetime import datetime

from fastapi import APIRouter, Depends, Query
from pydantic import field_validator
from sqlalchemy.orm import Session

from church_admin.api.deps import get_db, get_current_user, require_admin
from church_admin.api.v1.common import CamelModel
from church_admin.application.transactions import CreateTransactionUseCase
from church_admin.domain.transaction import TRANSACTION_TYPES
from church_admin.infrastructure.db.models import User
from church_admin.readmodels.transactions import (
    DEFAULT_BALANCE_HISTORY_LIMIT,
    get_site_balance,
    get_site_balance_history,
    get_transaction_summary,
    list_transactions,
    serialize_transaction,
)


router = APIRouter(prefix="/api/v1/transactions", tags=["transactions"])
balance_router = APIRouter(prefix="/api/v1/site-balance", tags=["transactions"])


# === Request/Response models ===

class CreateTransactionRequest(CamelModel):
    amount: float
    type: str  # credit / debit
    reason: str
    sender_id: int | None = None
    receiver_id: int | None = None
    money_goal_id: int | None = None

    @field_validator("type")
    @classmethod
    def validate_type(cls, v: str) -> str:
        if v not in TRANSACTION_TYPES:
            raise ValueError(f"type must be credit or debit, got: {v}")
        return v


class TransactionResponse(CamelModel):
    id: int
    amount: float
    type: str
    reason: str
    user_id: int
    user_name: str | None = None
    sender_id: int | None = None
    sender_name: str | None = None
    receiver_id: int | None = None
    receiver_name: str | None = None
    money_goal_id: int | None = None
    money_goal_name: str | None = None
    site_balance_id: int | None = None
    site_balance_amount: float | None = None
    created_at: datetime
    updated_at: datetime


class TransactionSummaryResponse(CamelModel):
    count: int
    credit: float
    debit: float
    total: float


class SiteBalanceResponse(CamelModel):
    amount: float
    updated_at: datetime | None = None


class SiteBalanceHistoryEntryResponse(CamelModel):
    amount: float
    date: datetime
    transaction_type: str | None = None
    transaction_amount: float | None = None


# === Endpoints ===

@router.get("/", response_model=list[TransactionResponse])
def get_transactions(
    type: str | None = Query(None),
    start_date: datetime | None = Query(None, alias="startDate"),
    end_date: datetime | None = Query(None, alias="endDate"),
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    return list_transactions(db, transaction_type=type, start_date=start_date, end_date=end_date)


@router.post("/", response_model=TransactionResponse, status_code=201)
def create_transaction(
    req: CreateTransactionRequest,
    db: Session = Depends(get_db),
    admin: User = Depends(require_admin),
):
    """Record a transaction (admin only); a moneyGoalId also records a contribution"""
    tx = CreateTransactionUseCase(db).execute(
        amount=req.amount,
        transaction_type=req.type,
        reason=req.reason,
        actor_user_id=admin.id,
        sender_id=req.sender_id,
        receiver_id=req.receiver_id,
        money_goal_id=req.money_goal_id,
    )
    return serialize_transaction(tx)


@router.get("/summary", response_model=TransactionSummaryResponse)
def transactions_summary(
    start_date: datetime | None = Query(None, alias="startDate"),
    end_date: datetime | None = Query(None, alias="endDate"),
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    return get_transaction_summary(db, start_date=start_date, end_date=end_date)


@balance_router.get("/", response_model=SiteBalanceResponse)
def site_balance(
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    return get_site_balance(db)


@balance_router.get("/history", response_model=list[SiteBalanceHistoryEntryResponse])
def site_balance_history(
    limit: int = Query(DEFAULT_BALANCE_HISTORY_LIMIT, ge=1, le=1000),
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    """Latest balance movements, oldest first (chart data)"""
    return get_site_balance_history(db, limit=limit)
