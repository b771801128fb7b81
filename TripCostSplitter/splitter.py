"""
Splitter Module

This module folds a trip's expenses and recorded settlements into one net
balance per entity.

Features:
    - Individuals or families tracking mode
    - Currency conversion into the trip's base currency
    - Recorded settlements offset balances
    - Suggested next payer (furthest behind)
    - Decimal-safe rounding

Data Model:
    Input - expenses: list of Expense
    Input - participants: list of Participant
    Input - families: list of Family
    Input - settlements: list of Settlement

    Output - dict containing:
        - balances: list of dicts sorted by balance, creditors first:
            - id: string (participant or family id)
            - name: string
            - total_paid: float
            - total_share: float
            - balance: float (total_paid - total_share, after settlements)
                - Positive = entity is owed money
                - Negative = entity owes money
            - is_family: bool
        - total_expenses: float (all expenses in base currency)
        - suggested_next_payer: balance dict with the lowest balance, or None
        - warnings: list of strings for every skipped reference

Functions:
    calculate_balances: Calculate per-entity balances.
    get_balance_for_entity: Look up one entity's balance.
"""

import logging
from decimal import Decimal
from typing import Iterable, Optional

from allocation import calculate_expense_shares
from currency import conversion_factor, convert_to_base_currency, round_money, to_decimal
from expenses import Expense
from participants import Family, Participant, build_participant_map, resolve_entity_id
from payments import Settlement

logger = logging.getLogger(__name__)


def _seed_entities(
    participants: list[Participant],
    families: list[Family],
    tracking_mode: str
) -> dict[str, dict]:
    """
    Create a zero entry for every tracked entity, in iteration order.

    Families mode tracks every family plus participants without a family;
    individuals mode tracks every participant.
    """
    entities = {}

    if tracking_mode == "families":
        for family in families:
            entities[family.id] = {"name": family.family_name, "is_family": True}
        for participant in participants:
            if not participant.family_id:
                entities[participant.id] = {"name": participant.name, "is_family": False}
    else:
        for participant in participants:
            entities[participant.id] = {"name": participant.name, "is_family": False}

    for entry in entities.values():
        entry["total_paid"] = Decimal("0")
        entry["total_share"] = Decimal("0")
        entry["balance"] = Decimal("0")

    return entities


def _warn(warnings: list, message: str) -> None:
    logger.debug(message)
    warnings.append(message)


def _to_output(entity_id: str, entry: dict) -> dict:
    return {
        "id": entity_id,
        "name": entry["name"],
        "total_paid": round_money(entry["total_paid"]),
        "total_share": round_money(entry["total_share"]),
        "balance": round_money(entry["balance"]),
        "is_family": entry["is_family"]
    }


def calculate_balances(
    expenses: list[Expense],
    participants: list[Participant],
    families: list[Family],
    tracking_mode: str,
    settlements: Iterable[Settlement] = (),
    base_currency: str = "EUR",
    rates: Optional[dict] = None
) -> dict:
    """
    Calculate per-entity balances from expenses and settlements.

    For each expense:
        1. The payer's entity total_paid increases by the converted amount
        2. Each entity's total_share increases by its allocated share, scaled
           by the same conversion factor as the expense total

    Then balance = total_paid - total_share, and every settlement in recorded
    order raises the sender's balance and lowers the receiver's.

    Args:
        expenses: All expenses of the trip.
        participants: All participants of the trip.
        families: All families of the trip.
        tracking_mode: "individuals" or "families".
        settlements: Recorded payments, applied in the given order.
        base_currency: Trip currency all totals are expressed in.
        rates: Units of each foreign currency per one base unit.

    Returns:
        dict: balances, total_expenses, suggested_next_payer and warnings.

    Notes:
        - Settlement amounts are applied as recorded, without conversion
        - Unknown payers, recipients and shares without a tracked entity are
          skipped and reported in warnings
        - Does NOT mutate its inputs
    """
    participant_map = build_participant_map(participants)
    entities = _seed_entities(participants, families, tracking_mode)
    warnings: list[str] = []
    total_expenses = Decimal("0")

    for expense in expenses:
        converted = convert_to_base_currency(expense.amount, expense.currency, base_currency, rates)
        total_expenses += converted

        payer_id = resolve_entity_id(expense.paid_by, participant_map, tracking_mode)
        if payer_id in entities:
            entities[payer_id]["total_paid"] += converted
        else:
            _warn(warnings, f"Expense {expense.id}: payer '{expense.paid_by}' is not a tracked entity")

        factor = conversion_factor(expense.amount, expense.currency, base_currency, rates)
        shares = calculate_expense_shares(expense, participants, families, tracking_mode, warnings)
        for entity_id, share in shares.items():
            if entity_id not in entities:
                _warn(warnings, f"Expense {expense.id}: share for '{entity_id}' has no tracked entity")
                continue
            entities[entity_id]["total_share"] += share * factor

    for entry in entities.values():
        entry["balance"] = entry["total_paid"] - entry["total_share"]

    for settlement in settlements:
        if settlement.currency and settlement.currency != base_currency:
            _warn(
                warnings,
                f"Settlement {settlement.id}: recorded in {settlement.currency}, "
                f"applied unconverted to {base_currency} balances"
            )

        from_id = resolve_entity_id(settlement.from_participant_id, participant_map, tracking_mode)
        to_id = resolve_entity_id(settlement.to_participant_id, participant_map, tracking_mode)
        if from_id not in entities or to_id not in entities:
            _warn(warnings, f"Settlement {settlement.id}: sender or receiver is not a tracked entity")
            continue

        amount = to_decimal(settlement.amount)
        entities[from_id]["balance"] += amount
        entities[to_id]["balance"] -= amount

    suggested_id = None
    for entity_id, entry in entities.items():
        if suggested_id is None or entry["balance"] < entities[suggested_id]["balance"]:
            suggested_id = entity_id

    balances = [_to_output(entity_id, entry) for entity_id, entry in entities.items()]
    balances.sort(key=lambda b: b["balance"], reverse=True)

    return {
        "balances": balances,
        "total_expenses": round_money(total_expenses),
        "suggested_next_payer": (
            _to_output(suggested_id, entities[suggested_id]) if suggested_id is not None else None
        ),
        "warnings": warnings
    }


def get_balance_for_entity(entity_id: str, balances: list[dict]) -> Optional[dict]:
    """Return the balance dict for an entity id, or None if not found."""
    for balance in balances:
        if balance["id"] == entity_id:
            return balance
    return None
