import copy

import pytest

from factories import balance, build_expense, build_participant
from settlement import (
    are_balances_settled,
    calculate_optimal_settlement,
    calculate_total_credit,
    calculate_total_debt,
    format_settlement_transaction,
)
from splitter import calculate_balances


def _apply(balances, transactions):
    remaining = {b["id"]: b["balance"] for b in balances}
    for tx in transactions:
        remaining[tx["from_id"]] += tx["amount"]
        remaining[tx["to_id"]] -= tx["amount"]
    return remaining


def test_no_transactions_when_all_balances_are_zero():
    result = calculate_optimal_settlement([balance("a", "A", 0), balance("b", "B", 0)])
    assert result["transactions"] == []
    assert result["total_transactions"] == 0


def test_two_person_settlement_from_expense():
    participants = [build_participant(id="a", name="A"), build_participant(id="b", name="B")]
    expense = build_expense(amount=100, paid_by="a", distribution={"type": "individuals", "participants": ["a", "b"]})
    balances = calculate_balances([expense], participants, [], "individuals")["balances"]

    result = calculate_optimal_settlement(balances)

    assert result["total_transactions"] == 1
    tx = result["transactions"][0]
    assert (tx["from_id"], tx["to_id"], tx["amount"]) == ("b", "a", 50)
    assert (tx["from_name"], tx["to_name"]) == ("B", "A")


def test_three_people_need_two_transactions():
    balances = [balance("a", "A", 60), balance("b", "B", -40), balance("c", "C", -20)]
    result = calculate_optimal_settlement(balances)
    assert result["total_transactions"] == 2
    assert sum(tx["amount"] for tx in result["transactions"]) == pytest.approx(60, abs=0.01)


def test_matches_largest_debtor_with_largest_creditor_first():
    balances = [
        balance("a", "A", 100),
        balance("b", "B", 50),
        balance("c", "C", -80),
        balance("d", "D", -70),
    ]
    result = calculate_optimal_settlement(balances)
    pairs = [(tx["from_id"], tx["to_id"], tx["amount"]) for tx in result["transactions"]]
    # c->a 80 leaves a +20; d (-70) then pays b (+50) before a (+20)
    assert pairs == [("c", "a", 80), ("d", "b", 50), ("d", "a", 20)]


def test_partial_match():
    balances = [balance("a", "A", 30), balance("b", "B", 20), balance("c", "C", -50)]
    result = calculate_optimal_settlement(balances)
    assert [tx["to_id"] for tx in result["transactions"]] == ["a", "b"]
    assert sum(tx["amount"] for tx in result["transactions"]) == pytest.approx(50, abs=0.01)


def test_balances_within_tolerance_are_settled():
    result = calculate_optimal_settlement([balance("a", "A", 0.005), balance("b", "B", -0.005)])
    assert result["transactions"] == []


def test_amounts_rounded_to_cents():
    balances = [balance("a", "A", 33.333), balance("b", "B", -16.6665), balance("c", "C", -16.6665)]
    result = calculate_optimal_settlement(balances)
    for tx in result["transactions"]:
        assert round(tx["amount"], 2) == tx["amount"]


@pytest.mark.parametrize("values", [
    [100, 50, -80, -70],
    [10.1, 20.2, 30.3, -60.6],
    [45.55, -12.34, -33.21],
    [1000, -333.33, -333.33, -333.34],
    [25, 25, 25, -25, -25, -25],
])
def test_transactions_drive_all_balances_to_zero(values):
    balances = [balance(f"e{i}", f"E{i}", v) for i, v in enumerate(values)]
    result = calculate_optimal_settlement(balances)
    remaining = _apply(balances, result["transactions"])
    assert all(abs(v) < 0.01 + 1e-9 for v in remaining.values())


def test_does_not_mutate_input():
    balances = [balance("a", "A", 60), balance("b", "B", -60)]
    before = copy.deepcopy(balances)
    calculate_optimal_settlement(balances)
    assert balances == before


def test_family_flags_carried_through():
    balances = [balance("f1", "Smith", 40, is_family=True), balance("p1", "Alice", -40)]
    tx = calculate_optimal_settlement(balances)["transactions"][0]
    assert tx["is_from_family"] is False
    assert tx["is_to_family"] is True


def test_uses_provided_currency():
    assert calculate_optimal_settlement([], "USD")["currency"] == "USD"
    assert calculate_optimal_settlement([])["currency"] == "EUR"


def test_format_settlement_transaction():
    tx = {
        "from_id": "b", "from_name": "Bob", "to_id": "a", "to_name": "Alice",
        "amount": 50, "is_from_family": False, "is_to_family": False,
    }
    assert format_settlement_transaction(tx, "EUR") == "Bob pays Alice: €50.00"


def test_are_balances_settled():
    assert are_balances_settled([balance("a", "A", 0.005), balance("b", "B", -0.005)])
    assert not are_balances_settled([balance("a", "A", 10), balance("b", "B", -10)])
    assert are_balances_settled([])


def test_total_debt_and_credit():
    balances = [balance("a", "A", 30), balance("b", "B", -20), balance("c", "C", 10)]
    assert calculate_total_debt(balances) == 20
    assert calculate_total_credit(balances) == 40
