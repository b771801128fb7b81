"""
Report Module

Renders a trip's settlement plan as HTML and converts it to PDF.

PDF includes: trip name, summary (total to settle, payments required),
required payments table and current balances table.

Functions:
    render_settlement_report_html: Build the HTML report.
    export_settlement_plan_pdf: Convert the HTML report to PDF bytes.
    report_filename: Download filename for a trip's report.
"""

import io
import logging
from datetime import date
from html import escape
from typing import Optional

from xhtml2pdf import pisa

from settlement import calculate_total_debt
from utils import format_balance, format_currency, get_balance_status, trip_slug

logger = logging.getLogger(__name__)

STATUS_LABELS = {"owed": "Is owed", "owes": "Owes", "settled": "Settled"}


def report_filename(trip_name: str) -> str:
    """settlement-plan-<slug>.pdf for a trip name."""
    return f"settlement-plan-{trip_slug(trip_name)}.pdf"


def render_settlement_report_html(
    trip_name: str,
    plan: dict,
    balances: list[dict],
    generated_on: Optional[date] = None
) -> str:
    """
    Build the settlement report as an HTML document.

    Args:
        trip_name: Name shown in the title.
        plan: Output of calculate_optimal_settlement().
        balances: Balance list from calculate_balances().
        generated_on: Report date; defaults to today.

    Returns:
        str: HTML document.
    """
    currency = plan.get("currency", "EUR")
    generated_on = generated_on or date.today()
    total_to_settle = calculate_total_debt(balances)

    if plan["total_transactions"] == 0:
        payments_html = '<p class="settled">All balances are settled!</p>'
    else:
        rows = "".join(
            f"<tr><td>{i}</td><td>{escape(tx['from_name'])}</td>"
            f"<td>{escape(tx['to_name'])}</td><td>{format_currency(tx['amount'], currency)}</td></tr>"
            for i, tx in enumerate(plan["transactions"], start=1)
        )
        payments_html = (
            "<h2>Required Payments</h2>"
            "<table><tr><th>#</th><th>From</th><th>To</th><th>Amount</th></tr>"
            f"{rows}</table>"
        )

    balance_rows = "".join(
        f"<tr><td>{escape(b['name'])}{' (family)' if b.get('is_family') else ''}</td>"
        f"<td>{format_currency(b['total_paid'], currency)}</td>"
        f"<td>{format_currency(b['total_share'], currency)}</td>"
        f"<td>{format_balance(b['balance'], currency)}</td>"
        f"<td>{STATUS_LABELS[get_balance_status(b['balance'])]}</td></tr>"
        for b in sorted(balances, key=lambda b: b["balance"], reverse=True)
    ) or '<tr><td colspan="5">No participants</td></tr>'

    return f"""
    <!DOCTYPE html>
    <html>
    <head>
        <meta charset="UTF-8">
        <style>
            body {{ font-family: Helvetica, Arial, sans-serif; padding: 20px; color: #333; }}
            h1 {{ color: #e76f51; border-bottom: 2px solid #e76f51; padding-bottom: 10px; }}
            h2 {{ color: #444; margin-top: 25px; }}
            table {{ width: 100%; border-collapse: collapse; margin: 15px 0; }}
            th, td {{ border: 1px solid #ddd; padding: 8px; text-align: left; }}
            th {{ background: #e76f51; color: white; }}
            .settled {{ color: #228b22; font-weight: bold; }}
        </style>
    </head>
    <body>
        <h1>Settlement Plan</h1>
        <p><strong>Trip:</strong> {escape(trip_name)}</p>
        <p><strong>Generated:</strong> {generated_on.strftime('%B %d, %Y')}</p>

        <h2>Summary</h2>
        <p>Total Amount to Settle: {format_currency(total_to_settle, currency)}</p>
        <p>Transactions Required: {plan['total_transactions']}</p>

        {payments_html}

        <h2>Current Balances</h2>
        <table>
            <tr><th>Participant/Family</th><th>Total Paid</th><th>Total Share</th><th>Balance</th><th>Status</th></tr>
            {balance_rows}
        </table>
    </body>
    </html>
    """


def export_settlement_plan_pdf(
    trip_name: str,
    plan: dict,
    balances: list[dict],
    generated_on: Optional[date] = None
) -> bytes:
    """
    Render the settlement report and convert it to PDF.

    Raises:
        RuntimeError: If xhtml2pdf reports a conversion error.
    """
    html_content = render_settlement_report_html(trip_name, plan, balances, generated_on)

    pdf_buffer = io.BytesIO()
    status = pisa.CreatePDF(io.StringIO(html_content), dest=pdf_buffer, encoding="utf-8")
    if status.err:
        logger.error("PDF conversion failed for trip %s (%d errors)", trip_name, status.err)
        raise RuntimeError("Could not generate settlement plan PDF")

    return pdf_buffer.getvalue()
