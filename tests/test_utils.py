import pytest

from factories import build_expense, build_participant
from splitter import calculate_balances
from utils import (
    explain_all_entities,
    explain_entity_share,
    format_balance,
    format_currency,
    get_balance_color_class,
    get_balance_status,
)


def test_format_currency():
    assert format_currency(1234.5, "EUR") == "€1,234.50"
    assert format_currency(10, "CHF") == "CHF 10.00"
    assert format_currency(-5, "USD") == "-$5.00"


def test_format_balance_signs():
    assert format_balance(50, "EUR") == "+€50.00"
    assert format_balance(-50, "EUR") == "-€50.00"
    assert format_balance(0, "EUR") == "€0.00"
    assert format_balance(0.004, "EUR") == "€0.00"


@pytest.mark.parametrize("value, status, color", [
    (10, "owed", "green"),
    (-10, "owes", "red"),
    (0, "settled", "gray"),
    (-0.005, "settled", "gray"),
])
def test_balance_classification(value, status, color):
    assert get_balance_status(value) == status
    assert color in get_balance_color_class(value)


@pytest.fixture
def trip():
    participants = [
        build_participant(id="p1", name="Alice"),
        build_participant(id="p2", name="Bob"),
    ]
    expenses = [
        build_expense(amount=100, paid_by="p1", expense_date="2026-07-01", id="e1"),
        build_expense(amount=385, currency="THB", paid_by="p2", expense_date="2026-07-03", id="e2"),
        build_expense(
            amount=40, paid_by="p2", expense_date="2026-07-02", id="e3",
            distribution={"type": "individuals", "participants": ["p2"]}
        ),
    ]
    return participants, expenses


def test_explain_entity_share(trip):
    participants, expenses = trip
    explanation = explain_entity_share("p1", expenses, participants, [], "individuals", "EUR", {"THB": 38.5})

    assert explanation["entity_id"] == "p1"
    assert [e["expense_id"] for e in explanation["paid_expenses"]] == ["e1"]
    # Newest first; e3 is Bob's alone
    assert [e["expense_id"] for e in explanation["share_expenses"]] == ["e2", "e1"]
    assert explanation["share_expenses"][0]["share"] == 5
    assert explanation["total_paid"] == 100
    assert explanation["total_share"] == 55


def test_explain_all_entities_follows_balance_order(trip):
    participants, expenses = trip
    balances = calculate_balances(expenses, participants, [], "individuals", (), "EUR", {"THB": 38.5})["balances"]
    explanations = explain_all_entities(balances, expenses, participants, [], "individuals", "EUR", {"THB": 38.5})

    assert [e["entity_id"] for e in explanations] == [b["id"] for b in balances]
    for explanation, b in zip(explanations, balances):
        assert explanation["name"] == b["name"]
        assert explanation["total_paid"] == b["total_paid"]
        assert explanation["total_share"] == pytest.approx(b["total_share"], abs=0.01)
