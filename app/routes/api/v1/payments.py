from datetime import date

from flask import Blueprint, Response, abort, jsonify, request
from flask_login import current_user, login_required

from app.services import BalanceService, ExportService, PaymentService

api_payment_bp = Blueprint("api_payment", __name__)

FILTER_KEYS = ("type", "payment_method", "status", "date_from", "date_to")


def _ledger_kind(kind):
    if kind not in {"transactions", "disbursements"}:
        abort(404)
    return kind


def _filters():
    return {key: request.args.get(key) for key in FILTER_KEYS if request.args.get(key)}


@api_payment_bp.get("/<kind>")
@login_required
def list_records(kind):
    records = PaymentService.list_records(_ledger_kind(kind), current_user.id, _filters())
    return jsonify({"items": [PaymentService.to_dict(r) for r in records]})


@api_payment_bp.post("/transactions")
@login_required
def create_transaction():
    record = PaymentService.record_transaction(current_user.id, request.get_json(silent=True) or {})
    return jsonify(PaymentService.to_dict(record)), 201


@api_payment_bp.post("/disbursements")
@login_required
def create_disbursement():
    record = PaymentService.record_disbursement(current_user.id, request.get_json(silent=True) or {})
    return jsonify(PaymentService.to_dict(record)), 201


@api_payment_bp.patch("/<kind>/<int:record_id>/status")
@login_required
def update_status(kind, record_id):
    record = PaymentService.get_record(_ledger_kind(kind), record_id, current_user.id)
    payload = request.get_json(silent=True) or {}
    record = PaymentService.update_status(record, payload.get("status"))
    return jsonify(PaymentService.to_dict(record))


@api_payment_bp.get("/balance")
@login_required
def current_balance():
    property_id = request.args.get("property_id", type=int)
    return jsonify(
        {
            "owner_id": current_user.id,
            "property_id": property_id,
            "current_balance": str(BalanceService.compute_balance(current_user.id, property_id)),
        }
    )


@api_payment_bp.get("/balances")
@login_required
def list_balances():
    return jsonify({"items": [BalanceService.to_dict(b) for b in BalanceService.list_balances(current_user.id)]})


@api_payment_bp.get("/<kind>/export")
@login_required
def export_records(kind):
    records = PaymentService.list_records(_ledger_kind(kind), current_user.id, _filters())
    body = ExportService.records_csv([PaymentService.to_dict(r) for r in records])
    filename = f"{kind}_{date.today().isoformat()}.csv"
    return Response(body, mimetype="text/csv", headers={"Content-Disposition": f"attachment; filename={filename}"})
