from datetime import date
from decimal import Decimal
from io import BytesIO

import pytest
from PIL import Image
from werkzeug.datastructures import FileStorage

from app import create_app
from app.extensions import db
from app.models import Expense, Reservation
from app.services import AuthService, PropertyService, UnitService


@pytest.fixture()
def app(tmp_path):
    app = create_app("testing", overrides={"UPLOAD_DIR": str(tmp_path / "uploads")})
    yield app
    with app.app_context():
        db.session.remove()
        db.drop_all()


@pytest.fixture()
def client(app):
    return app.test_client()


@pytest.fixture()
def ctx(app):
    with app.app_context():
        yield app


@pytest.fixture()
def owner(ctx):
    return AuthService.register_user("Olivia Owner", "owner@example.com", "password123")


@pytest.fixture()
def other_owner(ctx):
    return AuthService.register_user("Oscar Other", "other@example.com", "password123")


@pytest.fixture()
def prop(owner):
    return PropertyService.create_property(
        owner.id, {"name": "Palm Court", "address": "12 Palm St", "city": "Riyadh", "country": "SA"}
    )


@pytest.fixture()
def unit(owner, prop):
    return UnitService.create_unit(
        {"name": "A1", "property_id": prop.id, "price_per_night": "150", "bedrooms": 2, "max_guests": 4},
        owner.id,
    )


@pytest.fixture()
def make_image():
    def _make(filename="photo.png", color=(200, 30, 30)):
        buffer = BytesIO()
        Image.new("RGB", (4, 4), color).save(buffer, format="PNG")
        buffer.seek(0)
        return FileStorage(stream=buffer, filename=filename, content_type="image/png")

    return _make


@pytest.fixture()
def add_reservation():
    def _add(unit, check_in, check_out, total, payment_status="paid", guest_name="Guest"):
        reservation = Reservation(
            unit_id=unit.id,
            guest_name=guest_name,
            check_in_date=check_in,
            check_out_date=check_out,
            payment_status=payment_status,
            total_price=Decimal(str(total)),
        )
        db.session.add(reservation)
        db.session.commit()
        return reservation

    return _add


@pytest.fixture()
def add_expense():
    def _add(prop, amount, on=date(2024, 1, 10)):
        expense = Expense(
            property_id=prop.id,
            user_id=prop.user_id,
            category="maintenance",
            amount=Decimal(str(amount)),
            total_amount=Decimal(str(amount)),
            payment_method="cash",
            date=on,
        )
        db.session.add(expense)
        db.session.commit()
        return expense

    return _add


@pytest.fixture()
def login(client):
    def _login(email="api-owner@example.com", password="password123", full_name="Api Owner", role="owner"):
        response = client.post(
            "/api/v1/auth/register",
            json={"full_name": full_name, "email": email, "password": password, "role": role},
        )
        assert response.status_code == 201, response.get_json()
        return response.get_json()

    return _login
