from datetime import date

from flask import Blueprint, Response, jsonify, request
from flask_login import current_user, login_required

from app.decorators import owner_required
from app.errors import ValidationError
from app.services import ExportService, TaskService

api_task_bp = Blueprint("api_task", __name__)


def _listed_tasks():
    return TaskService.list_tasks(
        current_user.id,
        property_id=request.args.get("property_id", type=int),
        status=request.args.get("status"),
    )


@api_task_bp.get("")
@login_required
@owner_required
def list_tasks():
    return jsonify({"items": [TaskService.to_dict(t) for t in _listed_tasks()]})


@api_task_bp.post("")
@login_required
@owner_required
def create_task():
    task = TaskService.create_task(current_user.id, request.get_json(silent=True) or {})
    return jsonify(TaskService.to_dict(task)), 201


@api_task_bp.patch("/<int:task_id>/status")
@login_required
@owner_required
def update_task_status(task_id):
    payload = request.get_json(silent=True) or {}
    task = TaskService.update_status(task_id, current_user.id, payload.get("status"))
    return jsonify(TaskService.to_dict(task))


@api_task_bp.get("/export")
@login_required
@owner_required
def export_tasks():
    fmt = (request.args.get("format") or "csv").lower()
    rows = [TaskService.to_dict(t) for t in _listed_tasks()]
    filename = f"tasks_{date.today().isoformat()}"
    if fmt == "csv":
        return Response(
            ExportService.records_csv(rows),
            mimetype="text/csv",
            headers={"Content-Disposition": f"attachment; filename={filename}.csv"},
        )
    if fmt == "html":
        return Response(ExportService.records_html("Tasks Report", rows), mimetype="text/html")
    raise ValidationError("Unsupported export format.", fields=["format"])
