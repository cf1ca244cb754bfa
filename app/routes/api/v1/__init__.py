from flask import Blueprint

from app.extensions import csrf
from app.routes.api.v1.auth import api_auth_bp
from app.routes.api.v1.expenses import api_expense_bp
from app.routes.api.v1.listings import api_listing_bp
from app.routes.api.v1.payments import api_payment_bp
from app.routes.api.v1.properties import api_property_bp
from app.routes.api.v1.reservations import api_reservation_bp
from app.routes.api.v1.statements import api_statement_bp
from app.routes.api.v1.tasks import api_task_bp
from app.routes.api.v1.units import api_unit_bp

api_v1_bp = Blueprint("api_v1", __name__)
api_v1_bp.register_blueprint(api_auth_bp, url_prefix="/auth")
api_v1_bp.register_blueprint(api_property_bp, url_prefix="/properties")
api_v1_bp.register_blueprint(api_unit_bp, url_prefix="/units")
api_v1_bp.register_blueprint(api_listing_bp, url_prefix="/listings")
api_v1_bp.register_blueprint(api_reservation_bp, url_prefix="/reservations")
api_v1_bp.register_blueprint(api_expense_bp, url_prefix="/expenses")
api_v1_bp.register_blueprint(api_statement_bp, url_prefix="/statements")
api_v1_bp.register_blueprint(api_payment_bp, url_prefix="/payments")
api_v1_bp.register_blueprint(api_task_bp, url_prefix="/tasks")

csrf.exempt(api_v1_bp)
