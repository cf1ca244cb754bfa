from datetime import datetime, timezone

from sqlalchemy.exc import IntegrityError

from app.errors import AppError, AuthenticationError, DuplicateError, ValidationError
from app.extensions import bcrypt, db
from app.models import User

ROLES = {"owner", "guest"}


class AuthService:
    @staticmethod
    def register_user(full_name, email, password, role="owner", phone=None):
        role = (role or "owner").strip().lower()
        if role not in ROLES:
            raise ValidationError("Invalid role.", fields=["role"])

        normalized_email = (email or "").strip().lower()
        missing = [
            name
            for name, value in (("full_name", full_name), ("email", normalized_email), ("password", password))
            if not (value or "").strip()
        ]
        if missing:
            raise ValidationError("Name, email, and password are required.", fields=missing)
        if "@" not in normalized_email:
            raise ValidationError("Invalid email address.", fields=["email"])
        if len(password) < 8:
            raise ValidationError("Password must be at least 8 characters.", fields=["password"])

        if User.query.filter_by(email=normalized_email).first():
            raise DuplicateError("Email already registered.")

        user = User(
            full_name=full_name.strip(),
            email=normalized_email,
            phone=(phone or "").strip() or None,
            role=role,
            password_hash=bcrypt.generate_password_hash(password).decode("utf-8"),
        )
        try:
            db.session.add(user)
            db.session.commit()
        except IntegrityError as exc:
            db.session.rollback()
            raise DuplicateError("Email already registered.") from exc
        return user

    @staticmethod
    def authenticate_user(email, password):
        user = User.query.filter_by(email=(email or "").strip().lower()).first()
        if not user:
            raise AuthenticationError("Invalid credentials.")

        try:
            is_valid = bcrypt.check_password_hash(user.password_hash, password or "")
        except ValueError:
            is_valid = False

        if not is_valid:
            raise AuthenticationError("Invalid credentials.")
        if not user.is_active_user:
            raise AppError("User account is inactive.", 403)
        user.last_login = datetime.now(timezone.utc)
        db.session.commit()
        return user

    @staticmethod
    def serialize_user(user):
        return {
            "id": user.id,
            "full_name": user.full_name,
            "email": user.email,
            "role": user.role,
        }
