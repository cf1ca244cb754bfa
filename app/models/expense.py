from app.extensions import db
from app.models.base import PKType, TimestampMixin


class Expense(TimestampMixin, db.Model):
    __tablename__ = "expenses"

    id = db.Column(PKType, primary_key=True, autoincrement=True)
    property_id = db.Column(PKType, db.ForeignKey("properties.id", ondelete="CASCADE"), nullable=False, index=True)
    user_id = db.Column(PKType, db.ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    category = db.Column(db.String(60), nullable=False)
    sub_category = db.Column(db.String(120), nullable=True)
    amount = db.Column(db.Numeric(12, 2), nullable=False)
    tax_percentage = db.Column(db.Numeric(5, 2), nullable=False, default=0)
    total_amount = db.Column(db.Numeric(12, 2), nullable=False)
    payment_method = db.Column(db.String(40), nullable=False, default="cash")
    date = db.Column(db.Date, nullable=False, index=True)
    notes = db.Column(db.Text, nullable=True)

    property = db.relationship("Property", back_populates="expenses")
