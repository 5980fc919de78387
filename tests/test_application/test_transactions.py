"""
Tests for transactions: site balance movement and goal contributions
"""
from unittest.mock import Mock

import pytest
from sqlalchemy.dialects import postgresql

from church_admin.application.errors import NotFoundError, ValidationError
from church_admin.application.money_goals import CreateMoneyGoalUseCase
from church_admin.application.transactions import (
    CreateTransactionUseCase,
    TransactionValidationError,
    SITE_BALANCE_LOCK_KEY,
    latest_site_balance_query,
    lock_site_balance,
)
from church_admin.infrastructure.db.models import SiteBalance, Transaction
from church_admin.readmodels.money_goals import get_goal_with_stats
from church_admin.readmodels.transactions import (
    get_site_balance,
    get_site_balance_history,
    get_transaction_summary,
    list_transactions,
)


def test_balance_follows_transactions(db_session, admin_user):
    uc = CreateTransactionUseCase(db_session)
    uc.execute(amount=1000.0, transaction_type="credit", reason="Tithes", actor_user_id=admin_user.id)
    tx = uc.execute(amount=300.0, transaction_type="debit", reason="Electricity bill",
                    actor_user_id=admin_user.id)

    assert tx.site_balance.amount == 700.0
    assert get_site_balance(db_session)["amount"] == 700.0
    assert db_session.query(SiteBalance).count() == 2


def test_balance_without_rows_falls_back_to_ledger(db_session):
    assert get_site_balance(db_session) == {"amount": 0.0, "updated_at": None}


def test_transaction_for_goal_adds_contribution(db_session, admin_user):
    goal = CreateMoneyGoalUseCase(db_session).execute(
        name="Roof repair", amount_goal=1000, years=2024, created_by=admin_user.id,
    )

    tx = CreateTransactionUseCase(db_session).execute(
        amount=250.0, transaction_type="credit", reason="Special offering",
        actor_user_id=admin_user.id, money_goal_id=goal.id,
    )

    data = get_goal_with_stats(db_session, goal.id)
    assert data["total_contributions"] == 250.0
    assert data["contributions"][0]["transaction_id"] == tx.id
    assert data["contributions"][0]["reason"] == "Special offering"


def test_transaction_for_missing_goal_rolls_back(db_session, admin_user):
    with pytest.raises(NotFoundError):
        CreateTransactionUseCase(db_session).execute(
            amount=10.0, transaction_type="credit", reason="Offering",
            actor_user_id=admin_user.id, money_goal_id=404,
        )

    assert db_session.query(Transaction).count() == 0
    assert db_session.query(SiteBalance).count() == 0


@pytest.mark.parametrize("kwargs, message", [
    ({"amount": 0, "transaction_type": "credit", "reason": "Tithes"}, "Amount must be positive"),
    ({"amount": 5, "transaction_type": "refund", "reason": "Tithes"}, "Invalid transaction type"),
    ({"amount": 5, "transaction_type": "credit", "reason": " x "}, "at least 3 characters"),
])
def test_validation(db_session, admin_user, kwargs, message):
    with pytest.raises(TransactionValidationError, match=message):
        CreateTransactionUseCase(db_session).execute(actor_user_id=admin_user.id, **kwargs)


def test_list_and_summary(db_session, admin_user, member_user):
    uc = CreateTransactionUseCase(db_session)
    uc.execute(amount=500.0, transaction_type="credit", reason="Tithes",
               actor_user_id=admin_user.id, sender_id=member_user.id)
    uc.execute(amount=120.0, transaction_type="debit", reason="Flowers",
               actor_user_id=admin_user.id)

    rows = list_transactions(db_session)
    assert [r["reason"] for r in rows] == ["Flowers", "Tithes"]
    assert rows[1]["sender_name"] is None
    assert rows[1]["user_name"] == "Pasteur Rakoto"

    assert [r["type"] for r in list_transactions(db_session, transaction_type="credit")] == ["credit"]

    assert get_transaction_summary(db_session) == {
        "count": 2, "credit": 500.0, "debit": 120.0, "total": 380.0,
    }


def test_missing_goal_is_checked_before_ledger_rows(db_session, admin_user):
    uc = CreateTransactionUseCase(db_session)
    uc.execute(amount=100.0, transaction_type="credit", reason="Tithes", actor_user_id=admin_user.id)

    with pytest.raises(NotFoundError, match="Goal #404 not found"):
        uc.execute(amount=10.0, transaction_type="debit", reason="Refund",
                   actor_user_id=admin_user.id, money_goal_id=404)

    assert get_site_balance(db_session)["amount"] == 100.0
    assert db_session.query(Transaction).count() == 1


# ============================================================================
# Balance locking
# ============================================================================


def test_latest_balance_query_locks_row(db_session):
    sql = str(latest_site_balance_query(db_session, for_update=True).statement.compile(
        dialect=postgresql.dialect()
    ))
    assert "FOR UPDATE" in sql


def test_latest_balance_query_without_lock(db_session):
    sql = str(latest_site_balance_query(db_session).statement.compile(dialect=postgresql.dialect()))
    assert "FOR UPDATE" not in sql


def test_balance_lock_takes_advisory_lock_on_postgresql():
    session = Mock()
    session.get_bind.return_value.dialect.name = "postgresql"

    lock_site_balance(session)

    statement, params = session.execute.call_args.args
    assert "pg_advisory_xact_lock" in str(statement)
    assert params == {"key": SITE_BALANCE_LOCK_KEY}


def test_balance_lock_is_noop_on_sqlite():
    session = Mock()
    session.get_bind.return_value.dialect.name = "sqlite"

    lock_site_balance(session)

    session.execute.assert_not_called()


# ============================================================================
# Balance history
# ============================================================================


def test_balance_history_latest_entries_oldest_first(db_session, admin_user):
    uc = CreateTransactionUseCase(db_session)
    uc.execute(amount=100.0, transaction_type="credit", reason="Tithes", actor_user_id=admin_user.id)
    uc.execute(amount=30.0, transaction_type="debit", reason="Candles", actor_user_id=admin_user.id)
    uc.execute(amount=50.0, transaction_type="credit", reason="Offering", actor_user_id=admin_user.id)

    history = get_site_balance_history(db_session, limit=2)

    assert [(h["amount"], h["transaction_type"], h["transaction_amount"]) for h in history] == [
        (70.0, "debit", 30.0),
        (120.0, "credit", 50.0),
    ]


def test_balance_history_empty(db_session):
    assert get_site_balance_history(db_session) == []


def test_balance_history_invalid_limit(db_session):
    with pytest.raises(ValidationError):
        get_site_balance_history(db_session, limit=0)
