"""
History Module

Builds one participant's chronological feed of expenses and settlements,
showing the role they played in each.

Roles:
    - you_paid: the participant paid the expense
    - your_share: someone else paid, the participant's entity has a share
    - you_settled: the participant sent a settlement
    - you_received: the participant received a settlement

Functions:
    build_transaction_history: Merge expenses and settlements into one feed.
"""

from allocation import calculate_expense_shares
from currency import round_money
from participants import build_participant_map, resolve_entity_id


def build_transaction_history(
    expenses: list,
    settlements: list,
    participants: list,
    families: list,
    my_participant_id: str,
    tracking_mode: str
) -> list[dict]:
    """
    Merge expenses and settlements into a feed sorted newest first.

    Expenses are included when the participant paid them or when the
    participant's entity (their family in families mode) has a share.
    Settlements are included when the participant sent or received them.
    Amounts stay in each record's own currency.

    Args:
        expenses: List of Expense.
        settlements: List of Settlement.
        participants: List of Participant.
        families: List of Family.
        my_participant_id: Participant whose feed is built.
        tracking_mode: "individuals" or "families".

    Returns:
        list[dict]: Feed items with id, type, date, description, amount,
        currency, role, role_amount, my_share, payer_name, recipient_name.
        Empty when the participant is unknown.
    """
    participant_map = build_participant_map(participants)
    my_entity_id = resolve_entity_id(my_participant_id, participant_map, tracking_mode)
    if my_entity_id is None:
        return []

    def name_of(participant_id: str) -> str:
        participant = participant_map.get(participant_id)
        return participant.name if participant else "Unknown"

    items = []

    for expense in expenses:
        is_payer = expense.paid_by == my_participant_id
        shares = calculate_expense_shares(expense, participants, families, tracking_mode)
        share = shares.get(my_entity_id, 0)

        if not is_payer and share == 0:
            continue

        my_share = round_money(share)

        items.append({
            "id": f"expense-{expense.id}",
            "type": "expense",
            "date": expense.expense_date,
            "description": expense.description,
            "amount": expense.amount,
            "currency": expense.currency,
            "role": "you_paid" if is_payer else "your_share",
            "role_amount": expense.amount if is_payer else my_share,
            "my_share": my_share,
            "payer_name": None if is_payer else name_of(expense.paid_by),
            "recipient_name": None
        })

    for settlement in settlements:
        is_from = settlement.from_participant_id == my_participant_id
        is_to = settlement.to_participant_id == my_participant_id
        if not is_from and not is_to:
            continue

        items.append({
            "id": f"settlement-{settlement.id}",
            "type": "settlement",
            "date": settlement.settlement_date,
            "description": settlement.note or "Payment",
            "amount": settlement.amount,
            "currency": settlement.currency,
            "role": "you_settled" if is_from else "you_received",
            "role_amount": settlement.amount,
            "my_share": None,
            "payer_name": None if is_from else name_of(settlement.from_participant_id),
            "recipient_name": name_of(settlement.to_participant_id) if is_from else None
        })

    # ISO dates sort chronologically as strings; the sort is stable for ties.
    items.sort(key=lambda item: item["date"] or "", reverse=True)

    return items
