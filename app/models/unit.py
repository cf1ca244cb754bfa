from app.extensions import db
from app.models.base import PKType, TimestampMixin


class Unit(TimestampMixin, db.Model):
    __tablename__ = "units"

    id = db.Column(PKType, primary_key=True, autoincrement=True)
    property_id = db.Column(PKType, db.ForeignKey("properties.id", ondelete="CASCADE"), nullable=False, index=True)
    user_id = db.Column(PKType, db.ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    name = db.Column(db.String(140), nullable=False)
    floor = db.Column(db.Integer, nullable=False, default=0)
    price_per_night = db.Column(db.Numeric(12, 2), nullable=False, default=0)
    bedrooms = db.Column(db.Integer, nullable=False, default=1)
    bathrooms = db.Column(db.Numeric(4, 1), nullable=False, default=1)
    max_guests = db.Column(db.Integer, nullable=False, default=2)
    status = db.Column(db.String(24), nullable=False, default="vacant", index=True)
    is_visible = db.Column(db.Boolean, nullable=False, default=True, index=True)
    is_deleted = db.Column(db.Boolean, nullable=False, default=False, index=True)
    main_picture_url = db.Column(db.String(500), nullable=True)
    additional_pictures_urls = db.Column(db.JSON, nullable=True)

    property = db.relationship("Property", back_populates="units")
    listing = db.relationship("Listing", back_populates="unit", uselist=False)
    reservations = db.relationship("Reservation", back_populates="unit", lazy="dynamic")

    __table_args__ = (
        db.Index("ix_units_property_deleted", "property_id", "is_deleted"),
    )
