from datetime import date
from decimal import Decimal

import pytest

from app.errors import ValidationError
from app.services import ExportService, StatementService


@pytest.fixture()
def statement(owner, prop, unit, add_reservation, add_expense):
    add_reservation(unit, date(2024, 1, 3), date(2024, 1, 7), "600", guest_name="Ali, Jr.")
    add_reservation(unit, date(2024, 1, 20), date(2024, 1, 22), "400", guest_name="Bea")
    add_expense(prop, "100", on=date(2024, 1, 15))
    return StatementService.generate_statement(prop.id, date(2024, 1, 1), date(2024, 1, 31), owner.id)


def test_statement_csv_layout(statement):
    lines = ExportService.statement_csv(statement).splitlines()

    assert lines[0] == "Owner Statement"
    assert "Period,2024-01-01 to 2024-01-31" in lines
    assert "Net Payout,800.00" in lines
    assert "Payout Status,pending" in lines
    booking_header = lines.index("Reservation ID,Guest Name,Stay Dates,Revenue,Taxes,Fees,Net Revenue")
    assert lines[booking_header - 1] == "Detailed Booking Lines"
    assert '"Ali, Jr."' in lines[booking_header + 1]
    assert lines[-1] == "Property Expense,2024-01-15,100.00,Expense from 2024-01-15"


def test_statement_csv_round_trips_totals(statement):
    totals = ExportService.parse_statement_csv(ExportService.statement_csv(statement))

    assert totals == {
        "total_revenue": Decimal("1000.00"),
        "total_expenses": Decimal("100.00"),
        "management_fee": Decimal("100.00"),
        "net_payout": Decimal("800.00"),
    }


def test_parse_statement_csv_requires_totals():
    with pytest.raises(ValidationError):
        ExportService.parse_statement_csv("Owner Statement\nTotal Revenue,10.00\n")


def test_statement_html(statement):
    html = ExportService.statement_html(statement)

    assert "<h1" in html and "Owner Statement" in html
    assert "Palm Court" in html
    assert "Ali, Jr." in html
    assert "800.00" in html
    assert html == ExportService.statement_html(statement)


def test_statement_pdf_is_reproducible(statement):
    first = ExportService.statement_pdf(statement)

    assert first.startswith(b"%PDF")
    assert first == ExportService.statement_pdf(statement)


def test_records_csv_excludes_internal_columns():
    rows = [
        {"id": 1, "owner_id": 2, "type": "charge", "amount": "5.00", "notes": 'said "hi", left'},
        {"id": 2, "owner_id": 2, "type": "payment_received", "amount": "7.50", "notes": None},
    ]

    lines = ExportService.records_csv(rows).splitlines()

    assert lines[0] == "type,amount,notes"
    assert lines[1] == 'charge,5.00,"said ""hi"", left"'
    assert lines[2] == "payment_received,7.50,"


def test_records_csv_empty():
    assert ExportService.records_csv([]) == ""
