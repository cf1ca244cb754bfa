from flask import Blueprint, jsonify, request
from flask_login import current_user, login_required

from app.decorators import owner_required
from app.services import PropertyService

api_property_bp = Blueprint("api_property", __name__)


@api_property_bp.get("")
@login_required
@owner_required
def list_properties():
    return jsonify({"items": [PropertyService.to_dict(p) for p in PropertyService.list_properties(current_user.id)]})


@api_property_bp.post("")
@login_required
@owner_required
def create_property():
    payload = request.get_json(silent=True) or {}
    prop = PropertyService.create_property(current_user.id, payload)
    return jsonify(PropertyService.to_dict(prop)), 201
