from functools import wraps

from flask_login import current_user

from app.errors import AuthenticationError, AuthorizationError


def role_required(*roles):
    """Allow only authenticated users holding one of ``roles``; admins always pass."""

    def wrapper(func):
        @wraps(func)
        def inner(*args, **kwargs):
            if not current_user.is_authenticated:
                raise AuthenticationError("Unauthorized")
            if current_user.role != "admin" and current_user.role not in roles:
                raise AuthorizationError(f"This action requires the {' or '.join(roles)} role.")
            return func(*args, **kwargs)

        return inner

    return wrapper


owner_required = role_required("owner")
