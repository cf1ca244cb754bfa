import logging
from datetime import date, timedelta
from decimal import Decimal

from flask import current_app
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from app.errors import AppError, AuthorizationError, DuplicateError, NotFoundError, RemoteServiceError, ValidationError
from app.extensions import db
from app.models import Expense, OwnerStatement, Property, Reservation, StatementBookingLine, StatementExpenseLine, Unit
from app.models.base import utcnow
from app.models.statement import PAYOUT_STATUSES
from app.services.parsing import money, parse_date, parse_month
from app.services.payment_service import PaymentService
from app.services.property_service import PropertyService

logger = logging.getLogger(__name__)

REVENUE_PAYMENT_STATUSES = ("paid", "confirmed")
EXPENSE_LINE_TYPE = "Property Expense"

PAYOUT_TRANSITIONS = {
    "pending": {"paid", "on_hold", "overdue"},
    "on_hold": {"pending", "paid"},
    "overdue": {"paid", "on_hold"},
    "paid": set(),
}


class StatementService:
    @staticmethod
    def management_fee_pct():
        return Decimal(str(current_app.config.get("MANAGEMENT_FEE_PERCENT", "10")))

    @staticmethod
    def compute_totals(total_revenue, total_expenses, fee_pct=Decimal("10")):
        total_revenue = money(total_revenue)
        total_expenses = money(total_expenses)
        management_fee = money(total_revenue * fee_pct / Decimal("100"))
        net_payout = total_revenue - total_expenses - management_fee
        return {
            "total_revenue": total_revenue,
            "total_expenses": total_expenses,
            "management_fee": management_fee,
            "net_payout": net_payout,
        }

    @staticmethod
    def find_existing(property_id, period_start, period_end):
        return OwnerStatement.query.filter_by(
            property_id=property_id,
            period_start=period_start,
            period_end=period_end,
        ).first()

    @staticmethod
    def qualifying_reservations(property_id, period_start, period_end):
        unit_ids = [row.id for row in Unit.query.with_entities(Unit.id).filter(Unit.property_id == property_id).all()]
        if not unit_ids:
            return []
        return (
            Reservation.query.filter(Reservation.unit_id.in_(unit_ids))
            .filter(Reservation.check_in_date >= period_start)
            .filter(Reservation.check_out_date <= period_end)
            .filter(Reservation.payment_status.in_(REVENUE_PAYMENT_STATUSES))
            .order_by(Reservation.check_in_date.asc(), Reservation.id.asc())
            .all()
        )

    @staticmethod
    def period_expenses(property_id, period_start, period_end):
        return (
            Expense.query.filter(Expense.property_id == property_id)
            .filter(Expense.date >= period_start, Expense.date <= period_end)
            .order_by(Expense.date.asc(), Expense.id.asc())
            .all()
        )

    @staticmethod
    def generate_statement(property_id, period_start, period_end, owner_id):
        period_start = parse_date(period_start, "period_start")
        period_end = parse_date(period_end, "period_end")
        if period_end < period_start:
            raise ValidationError("Period end must not be before period start.", fields=["period_end"])
        prop = PropertyService.get_owned_property(property_id, owner_id)

        if StatementService.find_existing(prop.id, period_start, period_end):
            raise DuplicateError("A statement already exists for this property and period.")

        try:
            reservations = StatementService.qualifying_reservations(prop.id, period_start, period_end)
            expenses = StatementService.period_expenses(prop.id, period_start, period_end)
        except SQLAlchemyError as exc:
            db.session.rollback()
            logger.exception("Statement inputs unavailable for property %s", prop.id)
            raise RemoteServiceError("Could not load reservations or expenses.") from exc

        fee_pct = StatementService.management_fee_pct()
        totals = StatementService.compute_totals(
            sum((Decimal(str(r.total_price or 0)) for r in reservations), Decimal("0")),
            sum((Decimal(str(e.amount or 0)) for e in expenses), Decimal("0")),
            fee_pct,
        )

        statement = OwnerStatement(
            owner_id=owner_id,
            property_id=prop.id,
            period_start=period_start,
            period_end=period_end,
            management_fee_pct=fee_pct,
            payout_status="pending",
            **totals,
        )
        for res in reservations:
            revenue = money(res.total_price)
            statement.booking_lines.append(
                StatementBookingLine(
                    reservation_id=res.id,
                    guest_name=res.guest_name,
                    stay_dates=f"{res.check_in_date.isoformat()} to {res.check_out_date.isoformat()}",
                    revenue=revenue,
                    taxes=Decimal("0.00"),
                    fees=Decimal("0.00"),
                    net_revenue=revenue,
                )
            )
        for exp in expenses:
            statement.expense_lines.append(
                StatementExpenseLine(
                    expense_type=EXPENSE_LINE_TYPE,
                    amount=money(exp.amount),
                    date=exp.date,
                    notes=f"Expense from {exp.date.isoformat()}",
                )
            )

        db.session.add(statement)
        try:
            db.session.commit()
        except IntegrityError as exc:
            # Lost a race with a concurrent generator for the same period.
            db.session.rollback()
            raise DuplicateError("A statement already exists for this property and period.") from exc
        except SQLAlchemyError as exc:
            db.session.rollback()
            logger.exception("Statement for property %s could not be saved", prop.id)
            raise RemoteServiceError("Could not save statement.") from exc

        current_app.logger.info(
            "Statement %s generated for property %s (%s..%s): %d bookings, %d expenses",
            statement.id,
            prop.id,
            period_start,
            period_end,
            len(reservations),
            len(expenses),
        )
        return statement

    @staticmethod
    def previous_month(today=None):
        first_of_month = (today or date.today()).replace(day=1)
        period_end = first_of_month - timedelta(days=1)
        return period_end.replace(day=1), period_end

    @staticmethod
    def generate_all_for_period(period_start=None, period_end=None):
        """Generate one statement per property; defaults to the previous calendar month.

        Returns ``{"property_id", "status", "message"}`` per property where
        status is ``created``, ``skipped`` or ``error``.
        """
        if period_start is None or period_end is None:
            period_start, period_end = StatementService.previous_month()
        period_start = parse_date(period_start, "period_start")
        period_end = parse_date(period_end, "period_end")
        current_app.logger.info("Generating owner statements for %s..%s", period_start, period_end)

        results = []
        properties = Property.query.with_entities(Property.id, Property.user_id).order_by(Property.id.asc()).all()
        for property_id, owner_id in properties:
            if StatementService.find_existing(property_id, period_start, period_end):
                results.append({"property_id": property_id, "status": "skipped", "message": "Statement already exists"})
                continue
            try:
                statement = StatementService.generate_statement(property_id, period_start, period_end, owner_id)
            except DuplicateError as exc:
                results.append({"property_id": property_id, "status": "skipped", "message": exc.message})
            except AppError as exc:
                logger.warning("Statement for property %s failed: %s", property_id, exc.message)
                results.append({"property_id": property_id, "status": "error", "message": exc.message})
            else:
                results.append(
                    {"property_id": property_id, "status": "created", "message": f"Statement {statement.id} created"}
                )
        return results

    @staticmethod
    def list_statements(owner_id, property_id=None, period=None):
        query = OwnerStatement.query.filter(OwnerStatement.owner_id == owner_id)
        if property_id:
            query = query.filter(OwnerStatement.property_id == int(property_id))
        if period:
            start, end = parse_month(period)
            query = query.filter(OwnerStatement.period_start >= start, OwnerStatement.period_end <= end)
        return query.order_by(OwnerStatement.period_start.desc(), OwnerStatement.id.desc()).all()

    @staticmethod
    def get_statement(statement_id, owner_id):
        statement = db.session.get(OwnerStatement, statement_id)
        if not statement:
            raise NotFoundError("Statement not found.")
        if statement.owner_id != owner_id:
            raise AuthorizationError("Not authorized for this statement.")
        return statement

    @staticmethod
    def update_payout_status(statement_id, owner_id, new_status):
        statement = StatementService.get_statement(statement_id, owner_id)
        current = statement.payout_status
        new_status = (new_status or "").strip().lower()
        if new_status not in PAYOUT_STATUSES:
            raise ValidationError("Invalid payout status.", fields=["payout_status"])
        if new_status not in PAYOUT_TRANSITIONS.get(current, set()):
            raise AppError(f"Invalid payout status transition from {current} to {new_status}.", 400)

        statement.payout_status = new_status
        if new_status == "paid":
            statement.paid_at = utcnow()
            PaymentService.record_disbursement(
                owner_id,
                {
                    "type": "payout_to_owner",
                    "amount": max(statement.net_payout, Decimal("0")),
                    "date": statement.paid_at.date(),
                    "status": "completed",
                    "property_id": statement.property_id,
                    "notes": f"Owner payout for statement {statement.id}",
                },
                statement_id=statement.id,
                commit=False,
            )
        db.session.commit()
        return statement

    @staticmethod
    def to_dict(statement, include_lines=False):
        payload = {
            "id": statement.id,
            "owner_id": statement.owner_id,
            "property_id": statement.property_id,
            "property_name": statement.property.name if statement.property else None,
            "period_start": statement.period_start.isoformat(),
            "period_end": statement.period_end.isoformat(),
            "total_revenue": str(money(statement.total_revenue)),
            "total_expenses": str(money(statement.total_expenses)),
            "management_fee": str(money(statement.management_fee)),
            "net_payout": str(money(statement.net_payout)),
            "payout_status": statement.payout_status,
            "created_at": statement.created_at.isoformat() if statement.created_at else None,
        }
        if include_lines:
            payload["booking_lines"] = [
                {
                    "reservation_id": line.reservation_id,
                    "guest_name": line.guest_name,
                    "stay_dates": line.stay_dates,
                    "revenue": str(money(line.revenue)),
                    "taxes": str(money(line.taxes)),
                    "fees": str(money(line.fees)),
                    "net_revenue": str(money(line.net_revenue)),
                }
                for line in statement.booking_lines
            ]
            payload["expense_lines"] = [
                {
                    "expense_type": line.expense_type,
                    "amount": str(money(line.amount)),
                    "date": line.date.isoformat(),
                    "notes": line.notes,
                }
                for line in statement.expense_lines
            ]
        return payload
