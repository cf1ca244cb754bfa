import logging
from decimal import Decimal

from flask import current_app
from sqlalchemy.exc import SQLAlchemyError

from app.errors import AppError, NotFoundError, RemoteServiceError, ValidationError
from app.extensions import cache, db
from app.models import Listing, Property, Unit
from app.services.data_service import DataService
from app.services.parsing import parse_decimal, parse_int, require_fields
from app.services.property_service import PropertyService
from app.services.storage_service import StorageService

logger = logging.getLogger(__name__)

UNIT_BUCKET = "units"
UNIT_STATUSES = {"vacant", "occupied", "reserved", "maintenance"}


class UnitService:
    """Keeps each unit and its public marketplace listing in step.

    The listing is found through its ``unit_id`` and every unit+listing write
    happens in a single transaction.
    """

    @staticmethod
    def listing_title(prop, unit_name):
        return f"{prop.name} - {unit_name}"

    @staticmethod
    def _listing_fields(prop, unit):
        return {
            "title": UnitService.listing_title(prop, unit.name),
            "description": f"Comfortable unit in {prop.name}. Perfect for your stay in {prop.city}.",
            "price_per_night": unit.price_per_night,
            "bedrooms": unit.bedrooms,
            "bathrooms": unit.bathrooms,
            "guests": unit.max_guests,
            "address": prop.address,
            "city": prop.city,
            "country": prop.country,
            "image_url": unit.main_picture_url,
        }

    @staticmethod
    def _parse_payload(payload, current=None):
        require_fields(payload, ["name", "property_id"])
        fields = {
            "name": str(payload["name"]).strip(),
            "floor": parse_int(payload.get("floor"), "floor", default=current.floor if current else 0),
            "price_per_night": parse_decimal(
                payload.get("price_per_night", payload.get("price")),
                "price_per_night",
                default=current.price_per_night if current else 0,
                minimum=0,
            ),
            "bedrooms": parse_int(payload.get("bedrooms"), "bedrooms", default=current.bedrooms if current else 1, minimum=0),
            "bathrooms": parse_decimal(
                payload.get("bathrooms"), "bathrooms", default=current.bathrooms if current else 1, minimum=0
            ),
            "max_guests": parse_int(
                payload.get("max_guests"), "max_guests", default=current.max_guests if current else 2, minimum=1
            ),
        }
        if not fields["name"]:
            raise ValidationError("Missing required fields.", fields=["name"])
        status = (payload.get("status") or "").strip().lower()
        if status:
            if status not in UNIT_STATUSES:
                raise ValidationError("Invalid unit status.", fields=["status"])
            fields["status"] = status
        return fields

    @staticmethod
    def _upload_pictures(owner_id, property_id, name, main_picture, additional_pictures):
        """Upload pictures; returns (main_url or None, additional urls, every uploaded url)."""
        uploaded = []
        main_url = None
        additional_urls = []
        try:
            if main_picture and main_picture.filename:
                main_url = StorageService.upload_image(UNIT_BUCKET, "units", owner_id, property_id, name, main_picture)
                uploaded.append(main_url)

            for picture in additional_pictures or []:
                if not picture or not picture.filename:
                    continue
                if not StorageService.is_allowed(picture.filename):
                    logger.warning("Skipping unsupported additional picture %s", picture.filename)
                    continue
                url = StorageService.upload_image(UNIT_BUCKET, "units", owner_id, property_id, name, picture)
                uploaded.append(url)
                additional_urls.append(url)
        except AppError:
            StorageService.remove_urls(UNIT_BUCKET, uploaded)
            raise
        return main_url, additional_urls, uploaded

    @staticmethod
    def _commit_or_compensate(uploaded, action):
        try:
            db.session.commit()
        except SQLAlchemyError as exc:
            db.session.rollback()
            StorageService.remove_urls(UNIT_BUCKET, uploaded)
            logger.error("Unit %s failed and was rolled back: %s", action, exc)
            raise RemoteServiceError(f"Could not {action} unit.") from exc
        # Public listings are served from the view cache.
        cache.clear()

    @staticmethod
    def get_owned_unit(unit_id, owner_id):
        unit = db.session.get(Unit, unit_id)
        if not unit or unit.is_deleted:
            raise NotFoundError("Unit not found.")
        PropertyService.get_owned_property(unit.property_id, owner_id)
        return unit

    @staticmethod
    def create_unit(payload, owner_id, main_picture=None, additional_pictures=None):
        fields = UnitService._parse_payload(payload)
        prop = PropertyService.get_owned_property(payload["property_id"], owner_id)

        main_url, additional_urls, uploaded = UnitService._upload_pictures(
            owner_id, prop.id, fields["name"], main_picture, additional_pictures
        )

        status = fields.pop("status", "vacant")
        unit = Unit(
            property_id=prop.id,
            user_id=owner_id,
            status=status,
            is_visible=True,
            is_deleted=False,
            main_picture_url=main_url,
            additional_pictures_urls=additional_urls or None,
            **fields,
        )
        db.session.add(unit)
        db.session.flush()

        listing = Listing(
            host_id=owner_id,
            unit_id=unit.id,
            currency="USD",
            property_type="Unit",
            rating=Decimal("5.00"),
            review_count=0,
            is_active=True,
            is_visible=True,
            **UnitService._listing_fields(prop, unit),
        )
        db.session.add(listing)
        UnitService._commit_or_compensate(uploaded, "create")
        current_app.logger.info("Unit %s created with listing %s", unit.id, listing.id)
        return unit

    @staticmethod
    def update_unit(unit_id, payload, owner_id, main_picture=None, additional_pictures=None):
        unit = UnitService.get_owned_unit(unit_id, owner_id)
        payload = {"name": unit.name, "property_id": unit.property_id, **dict(payload)}
        fields = UnitService._parse_payload(payload, current=unit)
        prop = PropertyService.get_owned_property(payload["property_id"], owner_id)

        new_main = main_picture if main_picture and main_picture.filename else None
        new_additional = [p for p in additional_pictures or [] if p and p.filename]

        main_url, additional_urls, uploaded = UnitService._upload_pictures(
            owner_id, prop.id, fields["name"], new_main, new_additional
        )
        replaced = []
        if new_main:
            replaced.append(unit.main_picture_url)
            unit.main_picture_url = main_url
        if new_additional:
            replaced.extend(unit.additional_pictures_urls or [])
            unit.additional_pictures_urls = additional_urls or None

        for key, value in fields.items():
            setattr(unit, key, value)
        unit.property_id = prop.id

        listing = unit.listing
        if listing is None:
            logger.warning("Unit %s had no listing; recreating it", unit.id)
            listing = Listing(host_id=owner_id, unit_id=unit.id, is_active=unit.is_visible, is_visible=unit.is_visible)
            db.session.add(listing)
        for key, value in UnitService._listing_fields(prop, unit).items():
            setattr(listing, key, value)
        listing.is_visible = unit.is_visible

        UnitService._commit_or_compensate(uploaded, "update")
        # Old objects go only once the replacements are committed.
        StorageService.remove_urls(UNIT_BUCKET, [url for url in replaced if url])
        return unit

    @staticmethod
    def toggle_visibility(unit_id, owner_id):
        unit = UnitService.get_owned_unit(unit_id, owner_id)
        unit.is_visible = not unit.is_visible
        if unit.listing is not None:
            unit.listing.is_active = unit.is_visible
            unit.listing.is_visible = unit.is_visible
        else:
            logger.warning("Unit %s has no listing to toggle", unit.id)
        UnitService._commit_or_compensate([], "toggle")
        return unit

    @staticmethod
    def soft_delete_unit(unit_id, owner_id):
        unit = UnitService.get_owned_unit(unit_id, owner_id)
        DataService.soft_delete(Unit, {"id": unit.id}, commit=False)
        DataService.update(Listing, {"is_active": False, "is_visible": False}, {"unit_id": unit.id}, commit=False)
        UnitService._commit_or_compensate([], "delete")
        db.session.refresh(unit)
        return unit

    @staticmethod
    def list_units(owner_id, property_id=None):
        query = (
            Unit.query.join(Property, Property.id == Unit.property_id)
            .filter(Unit.is_deleted.is_(False))
            .filter(Property.user_id == owner_id)
        )
        if property_id:
            query = query.filter(Unit.property_id == int(property_id))
        return query.order_by(Unit.property_id.asc(), Unit.name.asc()).all()

    @staticmethod
    def list_public_listings(city=None, limit=12):
        filters = {"is_active": True, "is_visible": True}
        if city:
            filters["city__ilike"] = city
        return DataService.select(Listing, filters, order_by=["-created_at", "-id"], limit=limit)

    @staticmethod
    def to_dict(unit):
        return {
            "id": unit.id,
            "property_id": unit.property_id,
            "name": unit.name,
            "floor": unit.floor,
            "price_per_night": str(unit.price_per_night),
            "bedrooms": unit.bedrooms,
            "bathrooms": str(unit.bathrooms),
            "max_guests": unit.max_guests,
            "status": unit.status,
            "is_visible": unit.is_visible,
            "is_deleted": unit.is_deleted,
            "main_picture_url": unit.main_picture_url,
            "additional_pictures_urls": unit.additional_pictures_urls or [],
        }

    @staticmethod
    def listing_to_dict(listing):
        return {
            "id": listing.id,
            "unit_id": listing.unit_id,
            "title": listing.title,
            "description": listing.description,
            "price_per_night": str(listing.price_per_night),
            "currency": listing.currency,
            "bedrooms": listing.bedrooms,
            "bathrooms": str(listing.bathrooms),
            "guests": listing.guests,
            "address": listing.address,
            "city": listing.city,
            "country": listing.country,
            "image_url": listing.image_url,
            "rating": float(listing.rating),
            "review_count": listing.review_count,
            "is_active": listing.is_active,
            "is_visible": listing.is_visible,
        }
