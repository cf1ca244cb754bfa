from app.errors import AuthorizationError, NotFoundError, ValidationError
from app.extensions import db
from app.models import Property
from app.services.parsing import clean_text


class PropertyService:
    @staticmethod
    def get_owned_property(property_id, owner_id):
        try:
            property_id = int(property_id)
        except (TypeError, ValueError) as exc:
            raise ValidationError("Invalid property.", fields=["property_id"]) from exc

        prop = db.session.get(Property, property_id)
        if not prop:
            raise NotFoundError("Property not found.")
        if prop.user_id != owner_id:
            raise AuthorizationError("Invalid property or property does not belong to you.")
        return prop

    @staticmethod
    def create_property(owner_id, payload):
        name = (payload.get("name") or "").strip()
        if not name:
            raise ValidationError("Property name is required.", fields=["name"])

        prop = Property(
            user_id=owner_id,
            name=name,
            address=clean_text(payload.get("address")),
            city=clean_text(payload.get("city")),
            country=clean_text(payload.get("country")),
        )
        db.session.add(prop)
        db.session.commit()
        return prop

    @staticmethod
    def list_properties(owner_id):
        return Property.query.filter_by(user_id=owner_id).order_by(Property.name.asc()).all()

    @staticmethod
    def to_dict(prop):
        return {
            "id": prop.id,
            "name": prop.name,
            "address": prop.address,
            "city": prop.city,
            "country": prop.country,
        }
