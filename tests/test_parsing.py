from datetime import date
from decimal import Decimal

import pytest

from app.errors import ValidationError
from app.services.parsing import money, parse_date, parse_decimal, parse_month, require_fields


def test_money_rounds_half_up():
    assert money("2.345") == Decimal("2.35")
    assert money(None) == Decimal("0.00")


def test_parse_month_covers_whole_month():
    assert parse_month("2024-02") == (date(2024, 2, 1), date(2024, 2, 29))
    with pytest.raises(ValidationError):
        parse_month("February")


def test_parse_decimal_minimum():
    assert parse_decimal("", "price", default=0) == Decimal("0")
    with pytest.raises(ValidationError) as exc:
        parse_decimal("-1", "price", minimum=0)
    assert exc.value.fields == ["price"]


def test_parse_date():
    assert parse_date("2024-01-31", "d") == date(2024, 1, 31)
    assert parse_date(None, "d", required=False) is None
    with pytest.raises(ValidationError):
        parse_date("31/01/2024", "d")


def test_require_fields_lists_missing():
    with pytest.raises(ValidationError) as exc:
        require_fields({"name": "", "city": "Riyadh"}, ["name", "city", "floor"])
    assert exc.value.fields == ["name", "floor"]
