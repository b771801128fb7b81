import io

from openpyxl import load_workbook

from factories import build_expense, build_family, build_participant, build_settlement
from splitter import calculate_balances
from spreadsheet import export_trip_workbook, workbook_filename


def _load(data):
    return load_workbook(io.BytesIO(data))


def _trip():
    participants = [
        build_participant(id="p1", name="Alice", family_id="f1"),
        build_participant(id="p2", name="Bob", family_id="f1"),
        build_participant(id="p3", name="Carol"),
    ]
    families = [build_family(id="f1", family_name="Smith", adults=2)]
    expenses = [
        build_expense(amount=90, paid_by="p1", category="Food", expense_date="2026-07-02", id="e1",
                      distribution={"type": "mixed", "families": ["f1"], "participants": ["p3"]}),
        build_expense(amount=385, currency="THB", paid_by="p3", category="Transport",
                      expense_date="2026-07-01", description="Taxi", id="e2",
                      distribution={"type": "individuals", "participants": ["p2", "ghost"]}),
    ]
    return participants, families, expenses


def test_workbook_filename():
    assert workbook_filename("Summer in Crete") == "summer-in-crete-expenses.xlsx"


def test_export_trip_workbook():
    participants, families, expenses = _trip()
    settlements = [build_settlement(from_participant_id="p3", to_participant_id="p1", amount=20, note="Cash")]
    balances = calculate_balances(expenses, participants, families, "families", settlements, "EUR", {"THB": 38.5})["balances"]

    wb = _load(export_trip_workbook(
        "Crete", "families", expenses, participants, families, balances, settlements, "EUR", {"THB": 38.5}
    ))

    assert wb.sheetnames == ["Expenses", "Balances", "Settlements", "Summary"]

    rows = list(wb["Expenses"].iter_rows(values_only=True))
    assert rows[0] == ("Date", "Description", "Category", "Amount", "Currency", "Paid By", "Split With", "Comment")
    assert rows[1][:7] == ("2026-07-01", "Taxi", "Transport", 385, "THB", "Carol", "Bob, Unknown")
    assert rows[2][5:7] == ("Alice", "Smith, Carol")

    balance_rows = list(wb["Balances"].iter_rows(min_row=2, values_only=True))
    assert [row[0] for row in balance_rows] == [b["name"] for b in balances]
    assert {row[4] for row in balance_rows} <= {"Owed", "Owes", "Settled"}

    settlement_rows = list(wb["Settlements"].iter_rows(min_row=2, values_only=True))
    assert settlement_rows == [("2026-07-02", "Carol", "Alice", 20, "EUR", "Cash")]

    summary = {row[0]: row[1] for row in wb["Summary"].iter_rows(min_row=2, values_only=True) if row[0]}
    assert summary["Trip Name"] == "Crete"
    assert summary["Tracking Mode"] == "Families"
    assert summary["Total Expenses (EUR)"] == 100
    assert summary["Families"] == 1
    assert summary["  Food"] == 90
    assert summary["  Transport"] == 10


def test_export_without_settlements_skips_sheet():
    participants, families, expenses = _trip()

    wb = _load(export_trip_workbook("Crete", "individuals", expenses, participants, families, [], []))

    assert wb.sheetnames == ["Expenses", "Balances", "Summary"]
    summary = {row[0]: row[1] for row in wb["Summary"].iter_rows(min_row=2, values_only=True) if row[0]}
    assert "Families" not in summary
