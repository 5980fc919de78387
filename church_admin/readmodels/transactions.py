"""
Transaction feed and site balance read model
"""
from datetime import datetime
from typing import Any, Dict, List, Optional

from sqlalchemy import func
from sqlalchemy.orm import Session, selectinload

from church_admin.application.errors import ValidationError
from church_admin.application.transactions import latest_site_balance
from church_admin.domain.transaction import (
    TRANSACTION_TYPES, TRANSACTION_TYPE_CREDIT, TRANSACTION_TYPE_DEBIT,
)
from church_admin.infrastructure.db.models import SiteBalance, Transaction


def _date_filtered(query, start_date: Optional[datetime], end_date: Optional[datetime]):
    if start_date is not None:
        query = query.filter(Transaction.created_at >= start_date)
    if end_date is not None:
        query = query.filter(Transaction.created_at <= end_date)
    return query


def serialize_transaction(tx: Transaction) -> Dict[str, Any]:
    return {
        "id": tx.id,
        "amount": tx.amount,
        "type": tx.type,
        "reason": tx.reason or "",
        "user_id": tx.user_id,
        "user_name": tx.user.name if tx.user else None,
        "sender_id": tx.sender_id,
        "sender_name": tx.sender.name if tx.sender else None,
        "receiver_id": tx.receiver_id,
        "receiver_name": tx.receiver.name if tx.receiver else None,
        "money_goal_id": tx.money_goal_id,
        "money_goal_name": tx.money_goal.name if tx.money_goal else None,
        "site_balance_id": tx.site_balance_id,
        "site_balance_amount": tx.site_balance.amount if tx.site_balance else None,
        "created_at": tx.created_at,
        "updated_at": tx.updated_at,
    }


def list_transactions(
    db: Session,
    transaction_type: Optional[str] = None,
    start_date: Optional[datetime] = None,
    end_date: Optional[datetime] = None,
) -> List[Dict[str, Any]]:
    """Transactions, newest first"""
    if transaction_type and transaction_type not in TRANSACTION_TYPES:
        raise ValidationError(f"Invalid transaction type filter: {transaction_type!r}")

    query = db.query(Transaction).options(
        selectinload(Transaction.user),
        selectinload(Transaction.sender),
        selectinload(Transaction.receiver),
        selectinload(Transaction.money_goal),
        selectinload(Transaction.site_balance),
    )
    if transaction_type:
        query = query.filter(Transaction.type == transaction_type)
    query = _date_filtered(query, start_date, end_date)

    rows = query.order_by(Transaction.created_at.desc(), Transaction.id.desc()).all()
    return [serialize_transaction(tx) for tx in rows]


def _sum_by_type(db: Session, transaction_type: str, start_date, end_date) -> float:
    query = db.query(func.coalesce(func.sum(Transaction.amount), 0.0)).filter(
        Transaction.type == transaction_type
    )
    return float(_date_filtered(query, start_date, end_date).scalar() or 0.0)


def get_transaction_summary(
    db: Session,
    start_date: Optional[datetime] = None,
    end_date: Optional[datetime] = None,
) -> Dict[str, Any]:
    """Count, total credit, total debit and net total over a date range"""
    count = _date_filtered(db.query(func.count(Transaction.id)), start_date, end_date).scalar() or 0
    credit = _sum_by_type(db, TRANSACTION_TYPE_CREDIT, start_date, end_date)
    debit = _sum_by_type(db, TRANSACTION_TYPE_DEBIT, start_date, end_date)
    return {
        "count": count,
        "credit": credit,
        "debit": debit,
        "total": credit - debit,
    }


def get_site_balance(db: Session) -> Dict[str, Any]:
    """
    Current treasury balance: latest SiteBalance row, or credit - debit over
    all transactions when no balance row exists yet.
    """
    balance = latest_site_balance(db)
    if balance is not None:
        return {"amount": balance.amount, "updated_at": balance.updated_at}

    summary = get_transaction_summary(db)
    return {"amount": summary["total"], "updated_at": None}


DEFAULT_BALANCE_HISTORY_LIMIT = 30


def get_site_balance_history(
    db: Session,
    limit: int = DEFAULT_BALANCE_HISTORY_LIMIT
) -> List[Dict[str, Any]]:
    """
    Latest `limit` balance rows, oldest first, each with the transaction
    that produced it (None for rows written without one)
    """
    if limit < 1:
        raise ValidationError(f"Invalid limit: {limit}")

    rows = (
        db.query(SiteBalance, Transaction.type, Transaction.amount)
        .outerjoin(Transaction, Transaction.site_balance_id == SiteBalance.id)
        .order_by(SiteBalance.created_at.desc(), SiteBalance.id.desc())
        .limit(limit)
        .all()
    )
    return [
        {
            "amount": balance.amount,
            "date": balance.updated_at,
            "transaction_type": tx_type,
            "transaction_amount": tx_amount,
        }
        for balance, tx_type, tx_amount in reversed(rows)
    ]
