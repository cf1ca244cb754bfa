import pytest

from app.errors import ValidationError
from app.models import Property
from app.services import DataService


@pytest.fixture()
def properties(owner):
    return DataService.insert(
        Property,
        [
            {"user_id": owner.id, "name": "Alpha", "city": "Riyadh"},
            {"user_id": owner.id, "name": "Bravo", "city": "Jeddah"},
            {"user_id": owner.id, "name": "Charlie", "city": "Riyadh North"},
        ],
    )


def test_select_with_operators(properties):
    names = [p.name for p in DataService.select(Property, {"city__ilike": "riyadh"}, order_by=["-name"])]

    assert names == ["Charlie", "Alpha"]


def test_select_in_and_ne(properties):
    rows = DataService.select(Property, {"name__in": ["Alpha", "Bravo"], "city__ne": "Jeddah"})

    assert [p.name for p in rows] == ["Alpha"]


def test_first_returns_none_when_missing(properties):
    assert DataService.first(Property, {"name": "Delta"}) is None


def test_update_and_delete(properties):
    assert DataService.update(Property, {"country": "SA"}, {"city": "Jeddah"}) == 1
    assert DataService.first(Property, {"name": "Bravo"}).country == "SA"

    assert DataService.delete(Property, {"name": "Alpha"}) == 1
    assert len(DataService.select(Property)) == 2


def test_unfiltered_writes_are_refused(properties):
    with pytest.raises(ValidationError):
        DataService.update(Property, {"country": "SA"}, {})
    with pytest.raises(ValidationError):
        DataService.delete(Property, None)


def test_unknown_column_and_operator(properties):
    with pytest.raises(ValidationError):
        DataService.select(Property, {"colour": "red"})
    with pytest.raises(ValidationError):
        DataService.select(Property, {"name__like": "A"})
