from app.extensions import db
from app.models.base import PKType, TimestampMixin


class Reservation(TimestampMixin, db.Model):
    __tablename__ = "reservations"

    id = db.Column(PKType, primary_key=True, autoincrement=True)
    unit_id = db.Column(PKType, db.ForeignKey("units.id", ondelete="CASCADE"), nullable=False, index=True)
    guest_name = db.Column(db.String(120), nullable=False)
    guest_email = db.Column(db.String(255), nullable=True)
    check_in_date = db.Column(db.Date, nullable=False, index=True)
    check_out_date = db.Column(db.Date, nullable=False, index=True)
    status = db.Column(db.String(24), nullable=False, default="confirmed")
    payment_status = db.Column(db.String(24), nullable=False, default="pending", index=True)
    total_price = db.Column(db.Numeric(12, 2), nullable=False, default=0)

    unit = db.relationship("Unit", back_populates="reservations")

    __table_args__ = (
        db.CheckConstraint("check_out_date > check_in_date", name="ck_reservation_dates"),
    )
