"""
Analytics Module

This module provides analytics and reporting features for the trip cost
splitter.

Features:
    - Category-wise expense breakdown
    - Daily spending analysis
    - Highest spending day identification
    - Per-entity payer totals
    - Top expenses

All amounts are converted into the trip's base currency first.

Data Model:
    Input - expenses: list of Expense
    Input - participants: used to resolve payers to entities

    Output - dict containing:
        - category_breakdown: {category: amount}, largest first
        - daily_spending: {date: amount}, chronological
        - highest_spending_day: {date, amount}
        - payer_totals: {entity_id: amount}
        - top_expenses: list of {expense_id, description, category,
          expense_date, amount}
        - total_spent: float

Functions:
    generate_analytics: Generate analytics from expense data.
"""

from collections import defaultdict
from decimal import Decimal
from typing import Optional

from currency import convert_to_base_currency, round_money
from participants import build_participant_map, resolve_entity_id

TOP_EXPENSES_LIMIT = 5


def generate_analytics(
    expenses: list,
    participants: list,
    tracking_mode: str,
    base_currency: str = "EUR",
    rates: Optional[dict] = None,
    top_limit: int = TOP_EXPENSES_LIMIT
) -> dict:
    """
    Generate analytics from expense data.

    Args:
        expenses: List of Expense.
        participants: List of Participant.
        tracking_mode: "individuals" or "families"; payer totals are keyed by
            the payer's entity.
        base_currency: Trip base currency.
        rates: Exchange rates into the base currency.
        top_limit: Number of expenses listed in top_expenses.

    Returns:
        dict: category_breakdown, daily_spending, highest_spending_day,
        payer_totals, top_expenses and total_spent.

    Notes:
        - All amounts rounded to 2 decimal places
        - Payers that cannot be resolved are left out of payer_totals
    """
    participant_map = build_participant_map(participants)

    category_totals = defaultdict(Decimal)
    daily_totals = defaultdict(Decimal)
    payer_totals = defaultdict(Decimal)
    converted_expenses = []
    total_spent = Decimal("0")

    for expense in expenses:
        amount = convert_to_base_currency(expense.amount, expense.currency, base_currency, rates)

        category_totals[expense.category] += amount
        daily_totals[expense.expense_date] += amount
        total_spent += amount

        payer_id = resolve_entity_id(expense.paid_by, participant_map, tracking_mode)
        if payer_id is not None:
            payer_totals[payer_id] += amount

        converted_expenses.append((amount, expense))

    category_breakdown = {
        category: round_money(amount)
        for category, amount in sorted(category_totals.items(), key=lambda item: item[1], reverse=True)
    }

    daily_spending = {
        date: round_money(amount)
        for date, amount in sorted(daily_totals.items())
    }

    highest_spending_day = {"date": None, "amount": 0.0}
    if daily_totals:
        max_date = max(daily_totals, key=daily_totals.get)
        highest_spending_day = {
            "date": max_date,
            "amount": round_money(daily_totals[max_date])
        }

    converted_expenses.sort(key=lambda item: item[0], reverse=True)
    top_expenses = [
        {
            "expense_id": expense.id,
            "description": expense.description,
            "category": expense.category,
            "expense_date": expense.expense_date,
            "amount": round_money(amount)
        }
        for amount, expense in converted_expenses[:top_limit]
    ]

    return {
        "category_breakdown": category_breakdown,
        "daily_spending": daily_spending,
        "highest_spending_day": highest_spending_day,
        "payer_totals": {payer_id: round_money(amount) for payer_id, amount in payer_totals.items()},
        "top_expenses": top_expenses,
        "total_spent": round_money(total_spent)
    }
