from flask import Blueprint, jsonify, request
from flask_login import current_user, login_required, login_user, logout_user

from app.extensions import limiter
from app.services import AuthService

api_auth_bp = Blueprint("api_auth", __name__)


@api_auth_bp.post("/register")
@limiter.limit("10 per minute")
def api_register():
    payload = request.get_json(silent=True) or {}
    user = AuthService.register_user(
        full_name=payload.get("full_name", ""),
        email=payload.get("email", ""),
        password=payload.get("password", ""),
        role=payload.get("role", "owner"),
        phone=payload.get("phone", ""),
    )
    login_user(user)
    return jsonify(AuthService.serialize_user(user)), 201


@api_auth_bp.post("/login")
@limiter.limit("10 per minute")
def api_login():
    payload = request.get_json(silent=True) or {}
    user = AuthService.authenticate_user(payload.get("email", ""), payload.get("password", ""))
    login_user(user, remember=bool(payload.get("remember")))
    return jsonify(AuthService.serialize_user(user))


@api_auth_bp.post("/logout")
@login_required
def api_logout():
    logout_user()
    return jsonify({"ok": True})


@api_auth_bp.get("/check")
def api_check():
    if not current_user.is_authenticated:
        return jsonify({"error": "Unauthorized"}), 401
    return jsonify({"user": AuthService.serialize_user(current_user)})
