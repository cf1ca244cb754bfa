from datetime import date

from flask import Blueprint, Response, jsonify, request
from flask_login import current_user, login_required

from app.decorators import owner_required
from app.services import ExpenseService, ExportService

api_expense_bp = Blueprint("api_expense", __name__)


@api_expense_bp.get("")
@login_required
@owner_required
def list_expenses():
    items = ExpenseService.list_expenses(current_user.id, property_id=request.args.get("property_id", type=int))
    return jsonify({"items": [ExpenseService.to_dict(e) for e in items]})


@api_expense_bp.post("")
@login_required
@owner_required
def create_expense():
    expense = ExpenseService.record_expense(current_user.id, request.get_json(silent=True) or {})
    return jsonify(ExpenseService.to_dict(expense)), 201


@api_expense_bp.get("/export")
@login_required
@owner_required
def export_expenses():
    items = ExpenseService.list_expenses(current_user.id, property_id=request.args.get("property_id", type=int))
    body = ExportService.records_csv([ExpenseService.to_dict(e) for e in items])
    filename = f"expenses_{date.today().isoformat()}.csv"
    return Response(body, mimetype="text/csv", headers={"Content-Disposition": f"attachment; filename={filename}"})
