from datetime import date
from decimal import Decimal

import pytest

from app.errors import AppError, AuthorizationError, DuplicateError, ValidationError
from app.models import DisbursementRecord, OwnerStatement
from app.services import BalanceService, PropertyService, StatementService, UnitService

JAN_START = date(2024, 1, 1)
JAN_END = date(2024, 1, 31)


@pytest.fixture()
def january(owner, prop, unit, add_reservation, add_expense):
    add_reservation(unit, date(2024, 1, 3), date(2024, 1, 7), "600", guest_name="Ali")
    add_reservation(unit, date(2024, 1, 20), date(2024, 1, 22), "400", payment_status="confirmed", guest_name="Bea")
    add_expense(prop, "100", on=date(2024, 1, 15))
    return prop


def test_generate_statement_totals(owner, january):
    statement = StatementService.generate_statement(january.id, JAN_START, JAN_END, owner.id)

    assert statement.total_revenue == Decimal("1000.00")
    assert statement.total_expenses == Decimal("100.00")
    assert statement.management_fee == Decimal("100.00")
    assert statement.net_payout == Decimal("800.00")
    assert statement.payout_status == "pending"
    assert len(statement.booking_lines) == 2
    assert len(statement.expense_lines) == 1


def test_generate_statement_lines(owner, january):
    statement = StatementService.generate_statement(january.id, "2024-01-01", "2024-01-31", owner.id)

    first = statement.booking_lines[0]
    assert first.guest_name == "Ali"
    assert first.stay_dates == "2024-01-03 to 2024-01-07"
    assert first.taxes == Decimal("0.00")
    assert first.net_revenue == first.revenue == Decimal("600.00")

    expense = statement.expense_lines[0]
    assert expense.expense_type == "Property Expense"
    assert expense.notes == "Expense from 2024-01-15"


def test_period_boundaries_are_inclusive(owner, prop, unit, add_reservation, add_expense):
    add_reservation(unit, JAN_START, JAN_END, "300")
    add_reservation(unit, date(2024, 1, 30), date(2024, 2, 1), "999")
    add_reservation(unit, date(2023, 12, 30), date(2024, 1, 2), "999")
    add_expense(prop, "10", on=JAN_START)
    add_expense(prop, "20", on=JAN_END)
    add_expense(prop, "999", on=date(2024, 2, 1))

    statement = StatementService.generate_statement(prop.id, JAN_START, JAN_END, owner.id)

    assert statement.total_revenue == Decimal("300.00")
    assert statement.total_expenses == Decimal("30.00")


def test_unpaid_reservations_are_excluded(owner, prop, unit, add_reservation):
    add_reservation(unit, date(2024, 1, 3), date(2024, 1, 5), "250", payment_status="pending")

    statement = StatementService.generate_statement(prop.id, JAN_START, JAN_END, owner.id)

    assert statement.total_revenue == Decimal("0.00")
    assert statement.booking_lines == []


def test_deleted_units_keep_historical_revenue(owner, prop, unit, add_reservation):
    add_reservation(unit, date(2024, 1, 3), date(2024, 1, 5), "250")
    UnitService.soft_delete_unit(unit.id, owner.id)

    statement = StatementService.generate_statement(prop.id, JAN_START, JAN_END, owner.id)

    assert statement.total_revenue == Decimal("250.00")


def test_duplicate_period_is_rejected(owner, january):
    StatementService.generate_statement(january.id, JAN_START, JAN_END, owner.id)

    with pytest.raises(DuplicateError):
        StatementService.generate_statement(january.id, JAN_START, JAN_END, owner.id)
    assert OwnerStatement.query.count() == 1


def test_inverted_period_is_rejected(owner, prop):
    with pytest.raises(ValidationError):
        StatementService.generate_statement(prop.id, JAN_END, JAN_START, owner.id)


def test_foreign_property_is_rejected(other_owner, prop):
    with pytest.raises(AuthorizationError):
        StatementService.generate_statement(prop.id, JAN_START, JAN_END, other_owner.id)


def test_management_fee_follows_config(ctx, owner, january):
    ctx.config["MANAGEMENT_FEE_PERCENT"] = "12.5"

    statement = StatementService.generate_statement(january.id, JAN_START, JAN_END, owner.id)

    assert statement.management_fee == Decimal("125.00")
    assert statement.net_payout == Decimal("775.00")


def test_fee_rounds_half_up():
    totals = StatementService.compute_totals(Decimal("0.05"), Decimal("0"), Decimal("10"))

    assert totals["management_fee"] == Decimal("0.01")
    assert totals["net_payout"] == Decimal("0.04")


def test_list_statements_by_month(owner, january):
    StatementService.generate_statement(january.id, JAN_START, JAN_END, owner.id)
    StatementService.generate_statement(january.id, date(2024, 2, 1), date(2024, 2, 29), owner.id)

    assert len(StatementService.list_statements(owner.id)) == 2
    assert [s.period_start for s in StatementService.list_statements(owner.id, period="2024-02")] == [
        date(2024, 2, 1)
    ]


def test_marking_paid_records_owner_payout(owner, january):
    statement = StatementService.generate_statement(january.id, JAN_START, JAN_END, owner.id)

    StatementService.update_payout_status(statement.id, owner.id, "paid")

    assert statement.payout_status == "paid"
    assert statement.paid_at is not None
    payout = DisbursementRecord.query.filter_by(statement_id=statement.id).one()
    assert payout.type == "payout_to_owner"
    assert payout.amount == Decimal("800.00")
    assert payout.status == "completed"
    assert BalanceService.compute_balance(owner.id) == Decimal("-800.00")


def test_paid_is_terminal(owner, january):
    statement = StatementService.generate_statement(january.id, JAN_START, JAN_END, owner.id)
    StatementService.update_payout_status(statement.id, owner.id, "paid")

    with pytest.raises(AppError):
        StatementService.update_payout_status(statement.id, owner.id, "pending")


def test_other_owner_cannot_read_statement(owner, other_owner, january):
    statement = StatementService.generate_statement(january.id, JAN_START, JAN_END, owner.id)

    with pytest.raises(AuthorizationError):
        StatementService.get_statement(statement.id, other_owner.id)


def test_beach_house_march_statement(owner, add_reservation, add_expense):
    beach = PropertyService.create_property(owner.id, {"name": "Beach House", "city": "Khobar"})
    cabin = UnitService.create_unit({"name": "Cabin", "property_id": beach.id}, owner.id)
    add_reservation(cabin, date(2024, 3, 2), date(2024, 3, 9), "700")
    add_reservation(cabin, date(2024, 3, 15), date(2024, 3, 18), "300", payment_status="confirmed")
    add_expense(beach, "100", on=date(2024, 3, 10))

    statement = StatementService.generate_statement(beach.id, date(2024, 3, 1), date(2024, 3, 31), owner.id)

    assert (statement.total_revenue, statement.total_expenses) == (Decimal("1000.00"), Decimal("100.00"))
    assert (statement.management_fee, statement.net_payout) == (Decimal("100.00"), Decimal("800.00"))
    assert (len(statement.booking_lines), len(statement.expense_lines)) == (2, 1)


def test_previous_month_period():
    assert StatementService.previous_month(date(2024, 3, 15)) == (date(2024, 2, 1), date(2024, 2, 29))
    assert StatementService.previous_month(date(2024, 1, 1)) == (date(2023, 12, 1), date(2023, 12, 31))


def test_generate_all_skips_existing_statements(owner, other_owner, january):
    other = PropertyService.create_property(other_owner.id, {"name": "Other Place", "city": "Dammam"})
    existing = StatementService.generate_statement(january.id, JAN_START, JAN_END, owner.id)

    results = StatementService.generate_all_for_period(JAN_START, JAN_END)

    assert [(r["property_id"], r["status"]) for r in results] == [(january.id, "skipped"), (other.id, "created")]
    assert OwnerStatement.query.count() == 2
    created = StatementService.find_existing(other.id, JAN_START, JAN_END)
    assert created.owner_id == other_owner.id
    assert StatementService.find_existing(january.id, JAN_START, JAN_END).id == existing.id


def test_generate_statements_command(ctx, owner, january):
    result = ctx.test_cli_runner().invoke(args=["generate-statements", "--period", "2024-01"])

    assert result.exit_code == 0, result.output
    assert f"property {january.id}: created" in result.output
    assert "1 created, 0 not created for 2024-01-01..2024-01-31" in result.output

    again = ctx.test_cli_runner().invoke(args=["generate-statements", "--period", "2024-01"])
    assert f"property {january.id}: skipped" in again.output


def test_concurrent_duplicate_maps_to_duplicate_error(owner, january, monkeypatch):
    StatementService.generate_statement(january.id, JAN_START, JAN_END, owner.id)
    # Simulate a second writer that passed the pre-check before the first committed.
    monkeypatch.setattr(StatementService, "find_existing", staticmethod(lambda *_args: None))

    with pytest.raises(DuplicateError):
        StatementService.generate_statement(january.id, JAN_START, JAN_END, owner.id)
    assert OwnerStatement.query.count() == 1
