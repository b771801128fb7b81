"""
Spreadsheet Export Module

Writes a trip's expenses, balances and settlements to an Excel workbook.

Sheets:
    - Expenses: one row per expense with payer and who shares it
    - Balances: paid, share and balance per entity
    - Settlements: recorded payments (only when there are any)
    - Summary: trip details, totals and category breakdown in base currency

Functions:
    export_trip_workbook: Build the workbook and return it as .xlsx bytes.
    workbook_filename: Download filename for a trip's workbook.
"""

import io
from typing import Optional

from openpyxl import Workbook
from openpyxl.styles import Alignment, Font, PatternFill
from openpyxl.utils import get_column_letter

from analytics import generate_analytics
from participants import build_family_map, build_participant_map
from utils import get_balance_status, trip_slug

STATUS_LABELS = {"owed": "Owed", "owes": "Owes", "settled": "Settled"}

MONEY_FORMAT = "0.00"


def workbook_filename(trip_name: str) -> str:
    """<slug>-expenses.xlsx for a trip name."""
    return f"{trip_slug(trip_name)}-expenses.xlsx"


def _style_header(ws):
    font = Font(bold=True, color="FFFFFF")
    fill = PatternFill("solid", fgColor="E76F51")
    align = Alignment(horizontal="center", vertical="center")
    for cell in ws[1]:
        cell.font = font
        cell.fill = fill
        cell.alignment = align
    ws.freeze_panes = "A2"


def _autosize_columns(ws, min_width=8, max_width=45):
    for col in range(1, ws.max_column + 1):
        letter = get_column_letter(col)
        longest = max((len(str(cell.value)) for cell in ws[letter] if cell.value is not None), default=0)
        ws.column_dimensions[letter].width = max(min_width, min(max_width, longest + 2))


def _money_columns(ws, *columns):
    for row in range(2, ws.max_row + 1):
        for col in columns:
            ws.cell(row, col).number_format = MONEY_FORMAT


def _split_with(distribution, participant_map: dict, family_map: dict) -> str:
    """Names of everyone listed on a distribution, families first."""
    names = [
        family_map[fid].family_name if fid in family_map else "Unknown"
        for fid in getattr(distribution, "families", [])
    ]
    names += [
        participant_map[pid].name if pid in participant_map else "Unknown"
        for pid in getattr(distribution, "participants", [])
    ]
    return ", ".join(names)


def export_trip_workbook(
    trip_name: str,
    tracking_mode: str,
    expenses: list,
    participants: list,
    families: list,
    balances: list[dict],
    settlements: list,
    base_currency: str = "EUR",
    rates: Optional[dict] = None
) -> bytes:
    """
    Build the trip workbook.

    Args:
        trip_name: Name shown on the Summary sheet.
        tracking_mode: "individuals" or "families".
        expenses: List of Expense; amounts stay in their own currency.
        participants: List of Participant.
        families: List of Family.
        balances: Balance list from calculate_balances().
        settlements: List of Settlement.
        base_currency: Currency of the balances and summary totals.
        rates: Exchange rates into the base currency.

    Returns:
        bytes: The .xlsx file content.
    """
    participant_map = build_participant_map(participants)
    family_map = build_family_map(families)

    def name_of(participant_id: str) -> str:
        participant = participant_map.get(participant_id)
        return participant.name if participant else "Unknown"

    wb = Workbook()
    wb.remove(wb.active)

    ws = wb.create_sheet("Expenses")
    ws.append(["Date", "Description", "Category", "Amount", "Currency", "Paid By", "Split With", "Comment"])
    _style_header(ws)
    for expense in sorted(expenses, key=lambda e: e.expense_date):
        ws.append([
            expense.expense_date,
            expense.description,
            expense.category,
            expense.amount,
            expense.currency,
            name_of(expense.paid_by),
            _split_with(expense.distribution, participant_map, family_map),
            expense.comment or ""
        ])
    _money_columns(ws, 4)
    _autosize_columns(ws)

    ws = wb.create_sheet("Balances")
    ws.append(["Participant/Family", "Total Paid", "Total Share", "Balance", "Status"])
    _style_header(ws)
    for b in balances:
        ws.append([
            b["name"],
            b["total_paid"],
            b["total_share"],
            b["balance"],
            STATUS_LABELS[get_balance_status(b["balance"])]
        ])
    _money_columns(ws, 2, 3, 4)
    _autosize_columns(ws)

    if settlements:
        ws = wb.create_sheet("Settlements")
        ws.append(["Date", "From", "To", "Amount", "Currency", "Note"])
        _style_header(ws)
        for settlement in sorted(settlements, key=lambda s: s.settlement_date):
            ws.append([
                settlement.settlement_date,
                name_of(settlement.from_participant_id),
                name_of(settlement.to_participant_id),
                settlement.amount,
                settlement.currency,
                settlement.note or ""
            ])
        _money_columns(ws, 4)
        _autosize_columns(ws)

    analytics = generate_analytics(expenses, participants, tracking_mode, base_currency, rates)

    ws = wb.create_sheet("Summary")
    ws.append(["Metric", "Value"])
    _style_header(ws)
    ws.append(["Trip Name", trip_name])
    ws.append(["Tracking Mode", "Families" if tracking_mode == "families" else "Individuals"])
    ws.append(["Base Currency", base_currency])
    ws.append([])
    ws.append([f"Total Expenses ({base_currency})", analytics["total_spent"]])
    ws.append(["Number of Expenses", len(expenses)])
    ws.append(["Participants", len(participants)])
    if tracking_mode == "families":
        ws.append(["Families", len(families)])
    ws.append([])
    ws.append(["Category Breakdown", None])
    ws.cell(ws.max_row, 1).font = Font(bold=True)
    for category, amount in analytics["category_breakdown"].items():
        ws.append([f"  {category}", amount])
        ws.cell(ws.max_row, 2).number_format = MONEY_FORMAT
    _autosize_columns(ws)

    buffer = io.BytesIO()
    wb.save(buffer)
    return buffer.getvalue()
