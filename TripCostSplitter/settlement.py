"""
Settlement Module

This module handles the settlement calculations for the trip cost splitter.

Features:
    - Convert net balances into settlement transactions
    - Minimize number of transactions using greedy algorithm
    - Handle rounding safely
    - Settlement summary helpers (totals, settled check, readable lines)

Data Model:
    Input - balances (list of dicts from calculate_balances):
        - id: string
        - name: string
        - balance: float (positive = owed money, negative = owes money)
        - is_family: bool

    Output - settlement plan dict:
        - transactions: list of dicts
            - from_id, from_name: debtor who pays
            - to_id, to_name: creditor who receives
            - amount: float (rounded to 2 decimal places)
            - is_from_family, is_to_family: bool
        - total_transactions: int
        - currency: string (label only, nothing is converted)

Functions:
    calculate_optimal_settlement: Convert balances into settlement transactions.
    format_settlement_transaction: Readable "X pays Y: amount" line.
    are_balances_settled: True when every balance is within one cent of zero.
    calculate_total_debt: Sum of all negative balances.
    calculate_total_credit: Sum of all positive balances.
"""

from decimal import Decimal

from currency import round_money, to_decimal
from utils import format_currency

# Threshold for ignoring tiny rounding differences
EPSILON = Decimal("0.01")


def calculate_optimal_settlement(balances: list[dict], currency: str = "EUR") -> dict:
    """
    Convert net balances into settlement transactions.

    Uses a greedy algorithm:
        1. Split entities into debtors (balance < -0.01) and creditors
           (balance > 0.01)
        2. Sort debtors most negative first, creditors largest first
        3. Match the head debtor with the head creditor for the smaller of
           their absolute balances
        4. Update both balances, re-split, re-sort and repeat until either
           side is empty

    Args:
        balances: List of balance dicts with id, name, balance, is_family.
        currency: Currency label for the plan.

    Returns:
        dict: transactions, total_transactions and currency.

    Notes:
        - Each round fully settles at least one entity, so the loop ends
        - Ties keep the input order (stable sort)
        - Does NOT modify input balances
    """
    working = [
        {
            "id": b["id"],
            "name": b["name"],
            "is_family": b.get("is_family", False),
            "balance": to_decimal(b["balance"])
        }
        for b in balances
    ]

    def debtors():
        return sorted((w for w in working if w["balance"] < -EPSILON), key=lambda w: w["balance"])

    def creditors():
        return sorted((w for w in working if w["balance"] > EPSILON), key=lambda w: w["balance"], reverse=True)

    transactions = []
    owing, owed = debtors(), creditors()

    while owing and owed:
        debtor, creditor = owing[0], owed[0]
        amount = min(abs(debtor["balance"]), creditor["balance"])

        transactions.append({
            "from_id": debtor["id"],
            "from_name": debtor["name"],
            "to_id": creditor["id"],
            "to_name": creditor["name"],
            "amount": round_money(amount),
            "is_from_family": debtor["is_family"],
            "is_to_family": creditor["is_family"]
        })

        debtor["balance"] += amount
        creditor["balance"] -= amount

        owing, owed = debtors(), creditors()

    return {
        "transactions": transactions,
        "total_transactions": len(transactions),
        "currency": currency
    }


def format_settlement_transaction(transaction: dict, currency: str = "EUR") -> str:
    """Format a transaction as "<from> pays <to>: <amount>"."""
    return (
        f"{transaction['from_name']} pays {transaction['to_name']}: "
        f"{format_currency(transaction['amount'], currency)}"
    )


def are_balances_settled(balances: list[dict]) -> bool:
    """Check if all balances are within one cent of zero."""
    return all(abs(to_decimal(b["balance"])) < EPSILON for b in balances)


def calculate_total_debt(balances: list[dict]) -> float:
    """Sum of absolute values of negative balances."""
    return round_money(sum((-to_decimal(b["balance"]) for b in balances if b["balance"] < 0), Decimal("0")))


def calculate_total_credit(balances: list[dict]) -> float:
    """Sum of positive balances."""
    return round_money(sum((to_decimal(b["balance"]) for b in balances if b["balance"] > 0), Decimal("0")))
