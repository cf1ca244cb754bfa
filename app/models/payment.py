from sqlalchemy.orm import declared_attr

from app.extensions import db
from app.models.base import PKType, TimestampMixin

TRANSACTION_TYPES = ("payment_received", "charge", "payout_to_owner", "refund_to_guest", "staff_payment", "supplier_payment")
DISBURSEMENT_TYPES = ("payout_to_owner", "refund_to_guest", "staff_payment", "supplier_payment")
PAYMENT_STATUSES = ("pending", "completed", "failed", "refunded", "cancelled")


class LedgerColumnsMixin:
    """Columns shared by both money ledgers."""

    id = db.Column(PKType, primary_key=True, autoincrement=True)
    transaction_id = db.Column(db.String(40), nullable=False, unique=True, index=True)
    type = db.Column(db.String(32), nullable=False, index=True)
    amount = db.Column(db.Numeric(12, 2), nullable=False)
    currency = db.Column(db.String(3), nullable=False, default="SAR")
    payment_method = db.Column(db.String(40), nullable=True)
    date = db.Column(db.Date, nullable=False, index=True)
    status = db.Column(db.String(24), nullable=False, default="completed", index=True)
    reference_number = db.Column(db.String(80), nullable=True)
    notes = db.Column(db.Text, nullable=True)

    @declared_attr
    def owner_id(cls):
        return db.Column(PKType, db.ForeignKey("users.id", ondelete="SET NULL"), nullable=True, index=True)

    @declared_attr
    def guest_id(cls):
        return db.Column(PKType, db.ForeignKey("users.id", ondelete="SET NULL"), nullable=True, index=True)

    @declared_attr
    def property_id(cls):
        return db.Column(PKType, db.ForeignKey("properties.id", ondelete="SET NULL"), nullable=True, index=True)

    @declared_attr
    def unit_id(cls):
        return db.Column(PKType, db.ForeignKey("units.id", ondelete="SET NULL"), nullable=True)

    @declared_attr
    def reservation_id(cls):
        return db.Column(PKType, db.ForeignKey("reservations.id", ondelete="SET NULL"), nullable=True)


class PaymentTransaction(LedgerColumnsMixin, TimestampMixin, db.Model):
    __tablename__ = "payment_transactions"

    description = db.Column(db.Text, nullable=True)
    invoice_id = db.Column(db.String(64), nullable=True)

    __table_args__ = (
        db.CheckConstraint("amount >= 0", name="ck_payment_transaction_amount"),
    )


class DisbursementRecord(LedgerColumnsMixin, TimestampMixin, db.Model):
    __tablename__ = "disbursement_records"

    statement_id = db.Column(
        PKType, db.ForeignKey("owner_statements.id", ondelete="SET NULL"), nullable=True, index=True
    )

    __table_args__ = (
        db.CheckConstraint("amount >= 0", name="ck_disbursement_amount"),
    )


class OwnerBalance(db.Model):
    __tablename__ = "owner_balances"

    id = db.Column(PKType, primary_key=True, autoincrement=True)
    owner_id = db.Column(PKType, db.ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    property_id = db.Column(PKType, db.ForeignKey("properties.id", ondelete="CASCADE"), nullable=True)
    current_balance = db.Column(db.Numeric(12, 2), nullable=False, default=0)
    currency = db.Column(db.String(3), nullable=False, default="SAR")
    last_updated = db.Column(db.DateTime(timezone=True), nullable=False)

    property = db.relationship("Property")

    __table_args__ = (
        db.UniqueConstraint("owner_id", "property_id", name="uq_owner_balance_owner_property"),
    )
