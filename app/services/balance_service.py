import logging
from decimal import Decimal

from flask import current_app
from sqlalchemy import or_
from sqlalchemy.exc import SQLAlchemyError

from app.errors import RemoteServiceError
from app.extensions import db
from app.models import DisbursementRecord, OwnerBalance, PaymentTransaction
from app.models.base import utcnow
from app.services.parsing import money

logger = logging.getLogger(__name__)


class BalanceService:
    @staticmethod
    def _completed_rows(model, party_id, property_id=None):
        # A user id can appear on either side of a ledger row; both count.
        query = (
            model.query.with_entities(model.type, model.amount)
            .filter(or_(model.owner_id == party_id, model.guest_id == party_id))
            .filter(model.status == "completed")
        )
        if property_id is not None:
            query = query.filter(model.property_id == property_id)
        return query.all()

    @staticmethod
    def compute_balance(owner_id, property_id=None):
        """received - charged - disbursed, over completed ledger rows only."""
        try:
            transactions = BalanceService._completed_rows(PaymentTransaction, owner_id, property_id)
            disbursements = BalanceService._completed_rows(DisbursementRecord, owner_id, property_id)
        except SQLAlchemyError as exc:
            db.session.rollback()
            logger.exception("Balance computation failed for user %s", owner_id)
            raise RemoteServiceError("Could not compute balance.") from exc

        received = sum((Decimal(str(amount)) for kind, amount in transactions if kind == "payment_received"), Decimal("0"))
        charged = sum((Decimal(str(amount)) for kind, amount in transactions if kind == "charge"), Decimal("0"))
        disbursed = sum((Decimal(str(amount)) for _kind, amount in disbursements), Decimal("0"))
        return money(received - charged - disbursed)

    @staticmethod
    def refresh_balance(owner_id, property_id=None, commit=True):
        current = BalanceService.compute_balance(owner_id, property_id)
        balance = OwnerBalance.query.filter_by(owner_id=owner_id, property_id=property_id).first()
        if balance is None:
            balance = OwnerBalance(
                owner_id=owner_id,
                property_id=property_id,
                currency=current_app.config["DEFAULT_CURRENCY"],
            )
            db.session.add(balance)
        balance.current_balance = current
        balance.last_updated = utcnow()
        if commit:
            db.session.commit()
        return balance

    @staticmethod
    def refresh_for_record(record, commit=False):
        """Refresh every cached balance a ledger row contributes to."""
        parties = sorted({record.owner_id, record.guest_id} - {None})
        for party_id in parties:
            BalanceService.refresh_balance(party_id, commit=False)
        if record.property_id is not None and parties:
            scoped = OwnerBalance.query.filter(
                OwnerBalance.owner_id.in_(parties),
                OwnerBalance.property_id == record.property_id,
            ).all()
            for balance in scoped:
                BalanceService.refresh_balance(balance.owner_id, record.property_id, commit=False)
        if commit:
            db.session.commit()

    @staticmethod
    def list_balances(owner_id):
        stored = OwnerBalance.query.filter_by(owner_id=owner_id).order_by(OwnerBalance.id.asc()).all()
        if stored:
            return stored
        # Nothing cached yet: report the live figure without persisting it.
        return [
            OwnerBalance(
                owner_id=owner_id,
                property_id=None,
                current_balance=BalanceService.compute_balance(owner_id),
                currency=current_app.config["DEFAULT_CURRENCY"],
                last_updated=utcnow(),
            )
        ]

    @staticmethod
    def to_dict(balance):
        return {
            "owner_id": balance.owner_id,
            "property_id": balance.property_id,
            "property_name": balance.property.name if balance.property_id and balance.property else None,
            "current_balance": str(money(balance.current_balance)),
            "currency": balance.currency,
            "last_updated": balance.last_updated.isoformat() if balance.last_updated else None,
        }
