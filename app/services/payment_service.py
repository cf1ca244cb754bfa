import secrets
import string
import time

from flask import current_app
from sqlalchemy import or_

from app.errors import AppError, NotFoundError, ValidationError
from app.extensions import db
from app.models import DisbursementRecord, PaymentTransaction
from app.models.payment import DISBURSEMENT_TYPES, PAYMENT_STATUSES, TRANSACTION_TYPES
from app.services.balance_service import BalanceService
from app.services.parsing import clean_text, money, parse_date, parse_decimal, parse_int

PAYMENT_TRANSITIONS = {
    "pending": {"completed", "failed", "cancelled"},
    "completed": {"refunded"},
    "failed": set(),
    "refunded": set(),
    "cancelled": set(),
}

LEDGERS = {
    "transactions": (PaymentTransaction, TRANSACTION_TYPES),
    "disbursements": (DisbursementRecord, DISBURSEMENT_TYPES),
}

_ID_ALPHABET = string.ascii_uppercase + string.digits


class PaymentService:
    @staticmethod
    def _generate_transaction_id():
        suffix = "".join(secrets.choice(_ID_ALPHABET) for _ in range(9))
        return f"TXN_{int(time.time() * 1000)}_{suffix}"

    @staticmethod
    def _optional_id(payload, key):
        value = payload.get(key)
        if value in (None, ""):
            return None
        return parse_int(value, key, minimum=1)

    @staticmethod
    def _build(model, allowed_types, user_id, payload):
        kind = (payload.get("type") or "").strip().lower()
        if kind not in allowed_types:
            raise ValidationError("Invalid type.", fields=["type"])
        status = (payload.get("status") or "completed").strip().lower()
        if status not in PAYMENT_STATUSES:
            raise ValidationError("Invalid status.", fields=["status"])

        amount = parse_decimal(payload.get("amount"), "amount", minimum=0)
        owner_id = PaymentService._optional_id(payload, "owner_id") or user_id

        record = model(
            transaction_id=PaymentService._generate_transaction_id(),
            type=kind,
            amount=money(amount),
            currency=(payload.get("currency") or current_app.config["DEFAULT_CURRENCY"]).strip().upper()[:3],
            payment_method=clean_text(payload.get("payment_method")),
            date=parse_date(payload.get("date"), "date"),
            status=status,
            reference_number=clean_text(payload.get("reference_number")),
            notes=clean_text(payload.get("notes")),
            owner_id=owner_id,
            guest_id=PaymentService._optional_id(payload, "guest_id"),
            property_id=PaymentService._optional_id(payload, "property_id"),
            unit_id=PaymentService._optional_id(payload, "unit_id"),
            reservation_id=PaymentService._optional_id(payload, "reservation_id"),
        )
        return record

    @staticmethod
    def record_transaction(user_id, payload):
        record = PaymentService._build(PaymentTransaction, TRANSACTION_TYPES, user_id, payload)
        record.description = clean_text(payload.get("description"))
        record.invoice_id = clean_text(payload.get("invoice_id"))
        db.session.add(record)
        db.session.flush()
        BalanceService.refresh_for_record(record)
        db.session.commit()
        return record

    @staticmethod
    def record_disbursement(user_id, payload, statement_id=None, commit=True):
        record = PaymentService._build(DisbursementRecord, DISBURSEMENT_TYPES, user_id, payload)
        record.statement_id = statement_id
        db.session.add(record)
        db.session.flush()
        BalanceService.refresh_for_record(record)
        if commit:
            db.session.commit()
        return record

    @staticmethod
    def list_records(kind, user_id, filters=None):
        model, allowed_types = LEDGERS[kind]
        filters = filters or {}
        query = model.query.filter(or_(model.owner_id == user_id, model.guest_id == user_id))

        if filters.get("type"):
            if filters["type"] not in allowed_types:
                raise ValidationError("Invalid type.", fields=["type"])
            query = query.filter(model.type == filters["type"])
        if filters.get("payment_method"):
            query = query.filter(model.payment_method == filters["payment_method"])
        if filters.get("status"):
            query = query.filter(model.status == filters["status"])
        date_from = parse_date(filters.get("date_from"), "date_from", required=False)
        date_to = parse_date(filters.get("date_to"), "date_to", required=False)
        if date_from:
            query = query.filter(model.date >= date_from)
        if date_to:
            query = query.filter(model.date <= date_to)
        return query.order_by(model.date.desc(), model.id.desc()).all()

    @staticmethod
    def list_transactions(user_id, filters=None):
        return PaymentService.list_records("transactions", user_id, filters)

    @staticmethod
    def list_disbursements(user_id, filters=None):
        return PaymentService.list_records("disbursements", user_id, filters)

    @staticmethod
    def get_record(kind, record_id, user_id):
        model, _ = LEDGERS[kind]
        record = db.session.get(model, record_id)
        if not record or user_id not in {record.owner_id, record.guest_id}:
            raise NotFoundError("Record not found.")
        return record

    @staticmethod
    def update_status(record, new_status):
        current = (record.status or "").lower()
        new_status = (new_status or "").strip().lower()
        if new_status not in PAYMENT_TRANSITIONS.get(current, set()):
            raise AppError(f"Invalid status transition from {current} to {new_status}.", 400)

        record.status = new_status
        db.session.flush()
        BalanceService.refresh_for_record(record)
        db.session.commit()
        return record

    @staticmethod
    def to_dict(record):
        payload = {
            "id": record.id,
            "transaction_id": record.transaction_id,
            "type": record.type,
            "amount": str(money(record.amount)),
            "currency": record.currency,
            "payment_method": record.payment_method,
            "date": record.date.isoformat(),
            "status": record.status,
            "reference_number": record.reference_number,
            "notes": record.notes,
            "owner_id": record.owner_id,
            "guest_id": record.guest_id,
            "property_id": record.property_id,
            "unit_id": record.unit_id,
            "reservation_id": record.reservation_id,
        }
        if isinstance(record, PaymentTransaction):
            payload["description"] = record.description
            payload["invoice_id"] = record.invoice_id
        else:
            payload["statement_id"] = record.statement_id
        return payload
