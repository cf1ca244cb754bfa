from app.extensions import db
from app.models.base import PKType, TimestampMixin

PAYOUT_STATUSES = ("pending", "paid", "on_hold", "overdue")


class OwnerStatement(TimestampMixin, db.Model):
    __tablename__ = "owner_statements"

    id = db.Column(PKType, primary_key=True, autoincrement=True)
    owner_id = db.Column(PKType, db.ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    property_id = db.Column(PKType, db.ForeignKey("properties.id", ondelete="CASCADE"), nullable=False, index=True)
    period_start = db.Column(db.Date, nullable=False)
    period_end = db.Column(db.Date, nullable=False)
    total_revenue = db.Column(db.Numeric(12, 2), nullable=False, default=0)
    total_expenses = db.Column(db.Numeric(12, 2), nullable=False, default=0)
    management_fee_pct = db.Column(db.Numeric(5, 2), nullable=False, default=10)
    management_fee = db.Column(db.Numeric(12, 2), nullable=False, default=0)
    net_payout = db.Column(db.Numeric(12, 2), nullable=False, default=0)
    payout_status = db.Column(db.String(24), nullable=False, default="pending", index=True)
    paid_at = db.Column(db.DateTime(timezone=True), nullable=True)

    property = db.relationship("Property")
    booking_lines = db.relationship(
        "StatementBookingLine",
        back_populates="statement",
        cascade="all, delete-orphan",
        order_by="StatementBookingLine.id",
    )
    expense_lines = db.relationship(
        "StatementExpenseLine",
        back_populates="statement",
        cascade="all, delete-orphan",
        order_by="StatementExpenseLine.id",
    )

    __table_args__ = (
        db.UniqueConstraint("property_id", "period_start", "period_end", name="uq_statement_property_period"),
        db.CheckConstraint("period_end >= period_start", name="ck_statement_period"),
    )


class StatementBookingLine(db.Model):
    __tablename__ = "owner_statement_booking_lines"

    id = db.Column(PKType, primary_key=True, autoincrement=True)
    statement_id = db.Column(
        PKType, db.ForeignKey("owner_statements.id", ondelete="CASCADE"), nullable=False, index=True
    )
    reservation_id = db.Column(PKType, db.ForeignKey("reservations.id", ondelete="SET NULL"), nullable=True)
    guest_name = db.Column(db.String(120), nullable=False)
    stay_dates = db.Column(db.String(40), nullable=False)
    revenue = db.Column(db.Numeric(12, 2), nullable=False, default=0)
    taxes = db.Column(db.Numeric(12, 2), nullable=False, default=0)
    fees = db.Column(db.Numeric(12, 2), nullable=False, default=0)
    net_revenue = db.Column(db.Numeric(12, 2), nullable=False, default=0)

    statement = db.relationship("OwnerStatement", back_populates="booking_lines")


class StatementExpenseLine(db.Model):
    __tablename__ = "owner_statement_expense_lines"

    id = db.Column(PKType, primary_key=True, autoincrement=True)
    statement_id = db.Column(
        PKType, db.ForeignKey("owner_statements.id", ondelete="CASCADE"), nullable=False, index=True
    )
    expense_type = db.Column(db.String(60), nullable=False, default="Property Expense")
    amount = db.Column(db.Numeric(12, 2), nullable=False, default=0)
    date = db.Column(db.Date, nullable=False)
    notes = db.Column(db.Text, nullable=True)

    statement = db.relationship("OwnerStatement", back_populates="expense_lines")
