"""
Ledger rules: transaction types and their effect on the site balance
"""
TRANSACTION_TYPE_CREDIT = "credit"
TRANSACTION_TYPE_DEBIT = "debit"
TRANSACTION_TYPES = (TRANSACTION_TYPE_CREDIT, TRANSACTION_TYPE_DEBIT)

MIN_REASON_LENGTH = 3


def balance_delta(transaction_type: str, amount: float) -> float:
    """Credit adds to the balance, debit subtracts"""
    if transaction_type == TRANSACTION_TYPE_CREDIT:
        return amount
    return -amount


def next_balance(previous: float | None, transaction_type: str, amount: float) -> float:
    """
    Balance after applying a transaction

    Args:
        previous: Latest site balance (None when the ledger is empty)
        transaction_type: credit / debit
        amount: Positive transaction amount
    """
    delta = balance_delta(transaction_type, amount)
    if previous is None:
        return delta
    return previous + delta
