from decimal import Decimal

import pytest
from sqlalchemy.exc import OperationalError

from app.errors import RemoteServiceError
from app.models import OwnerBalance
from app.services import BalanceService, PaymentService


def _txn(owner, kind, amount, status="completed", **extra):
    payload = {"type": kind, "amount": amount, "date": "2024-03-01", "status": status}
    payload.update(extra)
    return PaymentService.record_transaction(owner.id, payload)


def test_balance_nets_received_against_charges(owner):
    _txn(owner, "payment_received", "500")
    _txn(owner, "charge", "200")

    assert BalanceService.compute_balance(owner.id) == Decimal("300.00")


def test_balance_ignores_non_completed_rows(owner):
    _txn(owner, "payment_received", "500")
    _txn(owner, "payment_received", "999", status="pending")
    _txn(owner, "charge", "50", status="failed")

    assert BalanceService.compute_balance(owner.id) == Decimal("500.00")


def test_balance_subtracts_completed_disbursements(owner):
    _txn(owner, "payment_received", "1000")
    PaymentService.record_disbursement(
        owner.id, {"type": "payout_to_owner", "amount": "400", "date": "2024-03-02"}
    )
    PaymentService.record_disbursement(
        owner.id, {"type": "staff_payment", "amount": "100", "date": "2024-03-02", "status": "pending"}
    )

    assert BalanceService.compute_balance(owner.id) == Decimal("600.00")


def test_balance_is_additive_over_new_rows(owner):
    _txn(owner, "payment_received", "120.10")
    before = BalanceService.compute_balance(owner.id)
    _txn(owner, "charge", "20.05")

    assert BalanceService.compute_balance(owner.id) == before - Decimal("20.05")


def test_balance_counts_rows_where_user_is_guest(owner, other_owner):
    _txn(other_owner, "payment_received", "75", guest_id=owner.id)

    assert BalanceService.compute_balance(owner.id) == Decimal("75.00")


def test_balance_without_rows_is_zero(owner):
    assert BalanceService.compute_balance(owner.id) == Decimal("0.00")


def test_recording_refreshes_stored_snapshot(owner):
    _txn(owner, "payment_received", "500")
    _txn(owner, "charge", "200")

    balance = OwnerBalance.query.filter_by(owner_id=owner.id, property_id=None).one()
    assert balance.current_balance == Decimal("300.00")
    assert balance.currency == "SAR"


def test_list_balances_reports_live_figure_before_any_snapshot(owner):
    balances = BalanceService.list_balances(owner.id)

    assert len(balances) == 1
    assert BalanceService.to_dict(balances[0])["current_balance"] == "0.00"
    assert OwnerBalance.query.count() == 0


def test_balance_query_failure_is_surfaced(owner, monkeypatch):
    def broken(*_args, **_kwargs):
        raise OperationalError("SELECT", {}, Exception("connection lost"))

    monkeypatch.setattr(BalanceService, "_completed_rows", staticmethod(broken))

    with pytest.raises(RemoteServiceError):
        BalanceService.compute_balance(owner.id)


def test_status_change_updates_balance(owner):
    record = _txn(owner, "payment_received", "300", status="pending")
    assert BalanceService.compute_balance(owner.id) == Decimal("0.00")

    PaymentService.update_status(record, "completed")

    assert BalanceService.compute_balance(owner.id) == Decimal("300.00")


def test_payout_disbursement_reduces_balance(owner):
    _txn(owner, "payment_received", "500")
    PaymentService.record_disbursement(
        owner.id, {"type": "payout_to_owner", "amount": "200", "date": "2024-03-05"}
    )

    assert BalanceService.compute_balance(owner.id) == Decimal("300.00")


def test_recording_refreshes_guest_snapshot(owner, other_owner):
    _txn(owner, "payment_received", "1.00", guest_id=other_owner.id)
    _txn(owner, "payment_received", "75.00", guest_id=other_owner.id)

    stored = OwnerBalance.query.filter_by(owner_id=other_owner.id, property_id=None).one()
    assert stored.current_balance == BalanceService.compute_balance(other_owner.id) == Decimal("76.00")
    assert [b.current_balance for b in BalanceService.list_balances(other_owner.id)] == [Decimal("76.00")]


def test_recording_refreshes_stored_property_snapshot(owner, prop):
    BalanceService.refresh_balance(owner.id, prop.id)

    _txn(owner, "payment_received", "40", property_id=prop.id)
    PaymentService.record_disbursement(
        owner.id, {"type": "staff_payment", "amount": "15", "date": "2024-03-02", "property_id": prop.id}
    )

    scoped = OwnerBalance.query.filter_by(owner_id=owner.id, property_id=prop.id).one()
    assert scoped.current_balance == Decimal("25.00")
