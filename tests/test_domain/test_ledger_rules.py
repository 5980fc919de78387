"""
Tests for ledger rules (site balance movement)
"""
from church_admin.domain.transaction import balance_delta, next_balance


def test_credit_adds():
    assert balance_delta("credit", 40.0) == 40.0
    assert next_balance(100.0, "credit", 40.0) == 140.0


def test_debit_subtracts():
    assert balance_delta("debit", 40.0) == -40.0
    assert next_balance(100.0, "debit", 40.0) == 60.0


def test_first_transaction_starts_from_zero():
    assert next_balance(None, "credit", 25.0) == 25.0
    assert next_balance(None, "debit", 25.0) == -25.0
