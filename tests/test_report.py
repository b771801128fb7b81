from datetime import date

from factories import balance
from report import export_settlement_plan_pdf, render_settlement_report_html, report_filename
from settlement import calculate_optimal_settlement


def _trip_balances():
    return [
        balance("p1", "Alice", 60.0),
        balance("p2", "Bob <b>", -30.0),
        balance("f1", "Smith", -30.0, is_family=True),
    ]


def test_report_filename():
    assert report_filename("Summer in Crete") == "settlement-plan-summer-in-crete.pdf"
    assert report_filename("  ") == "settlement-plan-trip.pdf"


def test_report_html_lists_payments_and_balances():
    balances = _trip_balances()
    plan = calculate_optimal_settlement(balances, "EUR")
    html = render_settlement_report_html("Crete", plan, balances, date(2026, 7, 10))

    assert "Trip:</strong> Crete" in html
    assert "July 10, 2026" in html
    assert "Total Amount to Settle: €60.00" in html
    assert "Transactions Required: 2" in html
    assert "Bob &lt;b&gt;" in html
    assert "Smith (family)" in html
    assert "+€60.00" in html
    assert "All balances are settled!" not in html


def test_report_html_when_settled():
    balances = [balance("p1", "Alice", 0.0), balance("p2", "Bob", 0.0)]
    plan = calculate_optimal_settlement(balances, "EUR")
    html = render_settlement_report_html("Crete", plan, balances)

    assert "All balances are settled!" in html
    assert "Required Payments" not in html


def test_export_pdf_returns_pdf_bytes():
    balances = _trip_balances()
    plan = calculate_optimal_settlement(balances, "EUR")

    pdf = export_settlement_plan_pdf("Crete", plan, balances, date(2026, 7, 10))

    assert pdf.startswith(b"%PDF")
