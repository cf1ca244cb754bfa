from app.extensions import db
from app.models.base import PKType, TimestampMixin


class Listing(TimestampMixin, db.Model):
    __tablename__ = "listings"

    id = db.Column(PKType, primary_key=True, autoincrement=True)
    host_id = db.Column(PKType, db.ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    unit_id = db.Column(PKType, db.ForeignKey("units.id", ondelete="CASCADE"), nullable=False, unique=True)
    title = db.Column(db.String(300), nullable=False)
    description = db.Column(db.Text, nullable=True)
    price_per_night = db.Column(db.Numeric(12, 2), nullable=False, default=0)
    currency = db.Column(db.String(3), nullable=False, default="USD")
    property_type = db.Column(db.String(40), nullable=False, default="Unit")
    bedrooms = db.Column(db.Integer, nullable=False, default=1)
    bathrooms = db.Column(db.Numeric(4, 1), nullable=False, default=1)
    guests = db.Column(db.Integer, nullable=False, default=2)
    address = db.Column(db.String(255), nullable=True)
    city = db.Column(db.String(120), nullable=True, index=True)
    country = db.Column(db.String(120), nullable=True)
    image_url = db.Column(db.String(500), nullable=True)
    rating = db.Column(db.Numeric(3, 2), nullable=False, default=5)
    review_count = db.Column(db.Integer, nullable=False, default=0)
    is_active = db.Column(db.Boolean, nullable=False, default=True, index=True)
    is_visible = db.Column(db.Boolean, nullable=False, default=True, index=True)

    host = db.relationship("User", back_populates="listings")
    unit = db.relationship("Unit", back_populates="listing")

    __table_args__ = (
        db.Index("ix_listings_active_visible", "is_active", "is_visible"),
    )
