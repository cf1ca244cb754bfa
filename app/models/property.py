from app.extensions import db
from app.models.base import PKType, TimestampMixin


class Property(TimestampMixin, db.Model):
    __tablename__ = "properties"

    id = db.Column(PKType, primary_key=True, autoincrement=True)
    user_id = db.Column(PKType, db.ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    name = db.Column(db.String(140), nullable=False)
    address = db.Column(db.String(255), nullable=True)
    city = db.Column(db.String(120), nullable=True, index=True)
    country = db.Column(db.String(120), nullable=True)

    owner = db.relationship("User", back_populates="properties")
    units = db.relationship("Unit", back_populates="property", lazy="dynamic")
    expenses = db.relationship("Expense", back_populates="property", lazy="dynamic")
