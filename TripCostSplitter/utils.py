"""
Utilities Module

This module provides presentation helpers and cost breakdowns for the trip
cost splitter.

Features:
    - Signed currency formatting for balances
    - Three-way balance classification (owed / owes / settled)
    - Per-entity breakdown of paid expenses and shares

Data Model:
    Input - balances: list of dicts from calculate_balances() with:
        - id: string
        - name: string
        - balance: float

    Output - explanation dict:
        - entity_id: string
        - paid_expenses: list of expenses the entity paid (newest first)
        - share_expenses: list of expenses the entity has a share of
        - total_paid: float (base currency)
        - total_share: float (base currency)

Functions:
    format_currency: Format amount with currency symbol.
    format_balance: Format a balance with a +/- prefix.
    trip_slug: File-name friendly slug of a trip name.
    get_balance_status: Classify a balance as owed, owes or settled.
    get_balance_color_class: CSS color classes for a balance.
    explain_entity_share: Breakdown of one entity's costs.
    explain_all_entities: Breakdown for every balance entry.
"""

import re
from decimal import Decimal
from typing import Optional

from allocation import calculate_expense_shares
from currency import CENT, conversion_factor, convert_to_base_currency, round_money, to_decimal
from participants import build_participant_map, resolve_entity_id

CURRENCY_SYMBOLS = {
    "EUR": "€",
    "USD": "$",
    "GBP": "£",
    "INR": "₹",
    "THB": "฿",
    "JPY": "¥",
}

BALANCE_COLOR_CLASSES = {
    "owed": "text-green-600 dark:text-green-400",
    "owes": "text-red-600 dark:text-red-400",
    "settled": "text-gray-600 dark:text-gray-400",
}


def format_currency(amount: float, currency: str = "EUR") -> str:
    """
    Format a monetary amount with the appropriate currency symbol.

    Args:
        amount: The amount to format.
        currency: ISO currency code; unknown codes are used as a prefix.

    Returns:
        str: Formatted string like "€1,234.56" or "CHF 1,234.56".
    """
    symbol = CURRENCY_SYMBOLS.get(currency, f"{currency} ")
    sign = "-" if amount < 0 else ""
    return f"{sign}{symbol}{abs(amount):,.2f}"


def get_balance_status(balance: float) -> str:
    """
    Classify a balance.

    Returns:
        str: "owed" (positive), "owes" (negative) or "settled" (within a cent).
    """
    value = to_decimal(balance)
    if abs(value) < CENT:
        return "settled"
    return "owed" if value > 0 else "owes"


def get_balance_color_class(balance: float) -> str:
    """Green when owed money, red when owing, gray when settled."""
    return BALANCE_COLOR_CLASSES[get_balance_status(balance)]


def format_balance(balance: float, currency: str = "EUR") -> str:
    """
    Format a balance with a sign prefix.

    Positive balances get "+", negative "-", settled balances no sign.
    """
    formatted = format_currency(abs(balance), currency)
    status = get_balance_status(balance)
    if status == "owed":
        return f"+{formatted}"
    if status == "owes":
        return f"-{formatted}"
    return format_currency(0, currency)


def trip_slug(trip_name: str) -> str:
    """Lower-case, hyphen-separated slug of a trip name; "trip" when empty."""
    slug = re.sub(r"[^a-z0-9-]", "", re.sub(r"\s+", "-", trip_name.strip().lower()))
    return slug or "trip"


def explain_entity_share(
    entity_id: str,
    expenses: list,
    participants: list,
    families: list,
    tracking_mode: str,
    base_currency: str = "EUR",
    rates: Optional[dict] = None
) -> dict:
    """
    Generate a breakdown of what an entity paid and what it owes.

    An expense counts as paid when its payer resolves to the entity. An
    expense counts as a share when the allocator gives the entity a positive
    amount; that share is converted with the expense's conversion factor.

    Args:
        entity_id: Participant or family id.
        expenses: List of Expense.
        participants: List of Participant.
        families: List of Family.
        tracking_mode: "individuals" or "families".
        base_currency: Trip base currency.
        rates: Exchange rates into the base currency.

    Returns:
        dict: entity_id, paid_expenses, share_expenses, total_paid, total_share.
    """
    participant_map = build_participant_map(participants)
    paid_expenses = []
    share_expenses = []
    total_paid = Decimal("0")
    total_share = Decimal("0")

    for expense in expenses:
        converted = convert_to_base_currency(expense.amount, expense.currency, base_currency, rates)
        summary = {
            "expense_id": expense.id,
            "description": expense.description,
            "category": expense.category,
            "expense_date": expense.expense_date,
            "amount": expense.amount,
            "currency": expense.currency,
            "converted_amount": round_money(converted)
        }

        if resolve_entity_id(expense.paid_by, participant_map, tracking_mode) == entity_id:
            paid_expenses.append(summary)
            total_paid += converted

        share = calculate_expense_shares(expense, participants, families, tracking_mode).get(entity_id)
        if share and share > 0:
            converted_share = share * conversion_factor(expense.amount, expense.currency, base_currency, rates)
            share_expenses.append({**summary, "share": round_money(converted_share)})
            total_share += converted_share

    paid_expenses.sort(key=lambda e: e["expense_date"], reverse=True)
    share_expenses.sort(key=lambda e: e["expense_date"], reverse=True)

    return {
        "entity_id": entity_id,
        "paid_expenses": paid_expenses,
        "share_expenses": share_expenses,
        "total_paid": round_money(total_paid),
        "total_share": round_money(total_share)
    }


def explain_all_entities(
    balances: list[dict],
    expenses: list,
    participants: list,
    families: list,
    tracking_mode: str,
    base_currency: str = "EUR",
    rates: Optional[dict] = None
) -> list[dict]:
    """
    Generate breakdowns for every entity in a balance list.

    Each explanation also carries the entity's name and final balance, and the
    list keeps the order of balances (creditors first).
    """
    explanations = []

    for balance in balances:
        explanation = explain_entity_share(
            entity_id=balance["id"],
            expenses=expenses,
            participants=participants,
            families=families,
            tracking_mode=tracking_mode,
            base_currency=base_currency,
            rates=rates
        )
        explanation["name"] = balance["name"]
        explanation["balance"] = balance["balance"]
        explanations.append(explanation)

    return explanations
