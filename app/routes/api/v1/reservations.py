from flask import Blueprint, jsonify, request
from flask_login import current_user, login_required

from app.decorators import owner_required
from app.services import ReservationService

api_reservation_bp = Blueprint("api_reservation", __name__)


@api_reservation_bp.get("")
@login_required
@owner_required
def list_reservations():
    items = ReservationService.list_reservations(current_user.id, unit_id=request.args.get("unit_id", type=int))
    return jsonify({"items": [ReservationService.to_dict(r) for r in items]})


@api_reservation_bp.post("")
@login_required
@owner_required
def create_reservation():
    reservation = ReservationService.create_reservation(current_user.id, request.get_json(silent=True) or {})
    return jsonify(ReservationService.to_dict(reservation)), 201
