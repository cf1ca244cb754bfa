from flask import Blueprint, jsonify, request

from app.extensions import cache
from app.services import UnitService

api_listing_bp = Blueprint("api_listing", __name__)


@api_listing_bp.get("")
@cache.cached(query_string=True)
def list_listings():
    limit = min(request.args.get("limit", default=12, type=int) or 12, 50)
    listings = UnitService.list_public_listings(city=request.args.get("city"), limit=limit)
    return jsonify({"items": [UnitService.listing_to_dict(item) for item in listings]})
