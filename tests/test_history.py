from factories import build_expense, build_family, build_participant, build_settlement
from history import build_transaction_history


def _trip():
    participants = [
        build_participant(id="p1", name="Alice", family_id="f1"),
        build_participant(id="p2", name="Bob", family_id="f1"),
        build_participant(id="p3", name="Carol"),
    ]
    families = [build_family(id="f1", family_name="Smith", adults=2)]
    expenses = [
        build_expense(amount=90, paid_by="p1", expense_date="2026-07-01", id="e1",
                      distribution={"type": "individuals", "participants": ["p1", "p2", "p3"]}),
        build_expense(amount=60, paid_by="p3", expense_date="2026-07-03", id="e2",
                      distribution={"type": "individuals", "participants": ["p2", "p3"]}),
        build_expense(amount=20, paid_by="p3", expense_date="2026-07-04", id="e3",
                      distribution={"type": "individuals", "participants": ["p3"]}),
    ]
    settlements = [
        build_settlement(from_participant_id="p3", to_participant_id="p1", amount=15,
                         settlement_date="2026-07-02", id="s1"),
    ]
    return expenses, settlements, participants, families


def test_history_roles_and_order():
    expenses, settlements, participants, families = _trip()
    items = build_transaction_history(expenses, settlements, participants, families, "p1", "individuals")

    assert [item["id"] for item in items] == ["settlement-s1", "expense-e1"]
    received, paid = items
    assert received["role"] == "you_received"
    assert received["payer_name"] == "Carol"
    assert received["description"] == "Payment"
    assert paid["role"] == "you_paid"
    assert paid["role_amount"] == 90
    assert paid["my_share"] == 30


def test_history_uses_family_share_in_families_mode():
    expenses, settlements, participants, families = _trip()
    items = build_transaction_history(expenses, settlements, participants, families, "p1", "families")

    share_items = [item for item in items if item["role"] == "your_share"]
    assert [item["id"] for item in share_items] == ["expense-e2"]
    assert share_items[0]["role_amount"] == 30
    assert share_items[0]["payer_name"] == "Carol"


def test_history_for_sender():
    expenses, settlements, participants, families = _trip()
    items = build_transaction_history(expenses, settlements, participants, families, "p3", "individuals")

    assert [item["role"] for item in items] == ["you_paid", "you_paid", "you_settled", "your_share"]
    settled = items[2]
    assert settled["recipient_name"] == "Alice"
    assert settled["role_amount"] == 15


def test_history_for_unknown_participant_is_empty():
    expenses, settlements, participants, families = _trip()
    assert build_transaction_history(expenses, settlements, participants, families, "ghost", "individuals") == []


def test_history_keeps_sub_cent_shares():
    participants = [build_participant(id=pid, name=name) for pid, name in [("p1", "Alice"), ("p2", "Bob"), ("p3", "Carol")]]
    expenses = [
        build_expense(amount=0.01, paid_by="p1", id="e1",
                      distribution={"type": "individuals", "participants": ["p1", "p2", "p3"]}),
    ]

    items = build_transaction_history(expenses, [], participants, [], "p2", "individuals")

    assert [item["id"] for item in items] == ["expense-e1"]
    assert items[0]["role"] == "your_share"
    assert items[0]["my_share"] == 0.0
