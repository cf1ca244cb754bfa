from flask import Blueprint, Response, jsonify, request
from flask_login import current_user, login_required

from app.decorators import owner_required
from app.errors import ValidationError
from app.services import ExportService, StatementService

api_statement_bp = Blueprint("api_statement", __name__)

EXPORT_FORMATS = {
    "csv": ("text/csv", ExportService.statement_csv),
    "html": ("text/html", ExportService.statement_html),
    "pdf": ("application/pdf", ExportService.statement_pdf),
}


@api_statement_bp.get("")
@login_required
@owner_required
def list_statements():
    statements = StatementService.list_statements(
        current_user.id,
        property_id=request.args.get("property_id", type=int),
        period=request.args.get("period"),
    )
    return jsonify({"items": [StatementService.to_dict(s) for s in statements]})


@api_statement_bp.post("")
@login_required
@owner_required
def generate_statement():
    payload = request.get_json(silent=True) or {}
    statement = StatementService.generate_statement(
        payload.get("property_id"),
        payload.get("period_start"),
        payload.get("period_end"),
        current_user.id,
    )
    return jsonify(StatementService.to_dict(statement, include_lines=True)), 201


@api_statement_bp.get("/<int:statement_id>")
@login_required
@owner_required
def get_statement(statement_id):
    statement = StatementService.get_statement(statement_id, current_user.id)
    return jsonify(StatementService.to_dict(statement, include_lines=True))


@api_statement_bp.patch("/<int:statement_id>/payout-status")
@login_required
@owner_required
def update_payout_status(statement_id):
    payload = request.get_json(silent=True) or {}
    statement = StatementService.update_payout_status(statement_id, current_user.id, payload.get("payout_status"))
    return jsonify(StatementService.to_dict(statement))


@api_statement_bp.get("/<int:statement_id>/export")
@login_required
@owner_required
def export_statement(statement_id):
    fmt = (request.args.get("format") or "csv").lower()
    if fmt not in EXPORT_FORMATS:
        raise ValidationError("Unsupported export format.", fields=["format"])
    statement = StatementService.get_statement(statement_id, current_user.id)
    mimetype, render = EXPORT_FORMATS[fmt]
    headers = {}
    if fmt != "html":
        headers["Content-Disposition"] = f"attachment; filename={ExportService.statement_filename(statement, fmt)}"
    return Response(render(statement), mimetype=mimetype, headers=headers)
