import calendar
from datetime import date, datetime
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation

from app.errors import ValidationError

CENTS = Decimal("0.01")


def money(value) -> Decimal:
    return Decimal(str(value or 0)).quantize(CENTS, rounding=ROUND_HALF_UP)


def parse_decimal(value, name, default=None, minimum=None):
    if value is None or (isinstance(value, str) and not value.strip()):
        if default is None:
            raise ValidationError(f"{name} is required.", fields=[name])
        return Decimal(str(default))
    try:
        parsed = Decimal(str(value).strip())
    except (InvalidOperation, TypeError) as exc:
        raise ValidationError(f"Invalid {name} value.", fields=[name]) from exc
    if not parsed.is_finite():
        raise ValidationError(f"Invalid {name} value.", fields=[name])
    if minimum is not None and parsed < Decimal(str(minimum)):
        raise ValidationError(f"{name} must be at least {minimum}.", fields=[name])
    return parsed


def parse_int(value, name, default=None, minimum=None):
    if value is None or (isinstance(value, str) and not value.strip()):
        if default is None:
            raise ValidationError(f"{name} is required.", fields=[name])
        return int(default)
    try:
        parsed = int(str(value).strip())
    except (TypeError, ValueError) as exc:
        raise ValidationError(f"Invalid {name} value.", fields=[name]) from exc
    if minimum is not None and parsed < minimum:
        raise ValidationError(f"{name} must be at least {minimum}.", fields=[name])
    return parsed


def parse_date(value, name, required=True):
    # accepts date objects or "YYYY-MM-DD"
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if not value:
        if required:
            raise ValidationError(f"{name} is required.", fields=[name])
        return None
    try:
        return datetime.strptime(str(value).strip(), "%Y-%m-%d").date()
    except ValueError as exc:
        raise ValidationError(f"Invalid {name}; expected YYYY-MM-DD.", fields=[name]) from exc


def parse_month(value):
    # "YYYY-MM" -> (first day, last day)
    try:
        year, month = (int(part) for part in str(value).split("-"))
        start = date(year, month, 1)
    except (TypeError, ValueError) as exc:
        raise ValidationError("Invalid period; expected YYYY-MM.", fields=["period"]) from exc
    return start, date(year, month, calendar.monthrange(year, month)[1])


def parse_bool(value, default=False):
    if value is None:
        return default
    if isinstance(value, bool):
        return value
    return str(value).strip().lower() in {"1", "true", "yes", "on"}


def require_fields(data, fields):
    missing = [f for f in fields if f not in data or data[f] in ("", None)]
    if missing:
        raise ValidationError("Missing required fields.", fields=missing)


def clean_text(value):
    return (value or "").strip() or None
