from flask import Blueprint, jsonify, request
from flask_login import current_user, login_required

from app.decorators import owner_required
from app.services import UnitService

api_unit_bp = Blueprint("api_unit", __name__)


def _unit_payload():
    # Units arrive as multipart forms when pictures are attached.
    if request.files or request.form:
        return request.form.to_dict()
    return request.get_json(silent=True) or {}


@api_unit_bp.get("")
@login_required
@owner_required
def list_units():
    units = UnitService.list_units(current_user.id, property_id=request.args.get("property_id", type=int))
    return jsonify({"items": [UnitService.to_dict(u) for u in units]})


@api_unit_bp.post("")
@login_required
@owner_required
def create_unit():
    unit = UnitService.create_unit(
        _unit_payload(),
        current_user.id,
        main_picture=request.files.get("main_picture"),
        additional_pictures=request.files.getlist("additional_pictures"),
    )
    payload = UnitService.to_dict(unit)
    payload["listing"] = UnitService.listing_to_dict(unit.listing)
    return jsonify(payload), 201


@api_unit_bp.put("/<int:unit_id>")
@login_required
@owner_required
def update_unit(unit_id):
    unit = UnitService.update_unit(
        unit_id,
        _unit_payload(),
        current_user.id,
        main_picture=request.files.get("main_picture"),
        additional_pictures=request.files.getlist("additional_pictures"),
    )
    payload = UnitService.to_dict(unit)
    payload["listing"] = UnitService.listing_to_dict(unit.listing)
    return jsonify(payload)


@api_unit_bp.patch("/<int:unit_id>/visibility")
@login_required
@owner_required
def toggle_visibility(unit_id):
    unit = UnitService.toggle_visibility(unit_id, current_user.id)
    return jsonify({"id": unit.id, "is_visible": unit.is_visible})


@api_unit_bp.delete("/<int:unit_id>")
@login_required
@owner_required
def delete_unit(unit_id):
    unit = UnitService.soft_delete_unit(unit_id, current_user.id)
    return jsonify({"id": unit.id, "is_deleted": unit.is_deleted})
