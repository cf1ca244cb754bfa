from app.errors import NotFoundError, ValidationError
from app.extensions import db
from app.models import Property, Reservation, Unit
from app.services.parsing import clean_text, money, parse_date, parse_decimal, require_fields
from app.services.property_service import PropertyService

PAYMENT_STATUSES = {"pending", "paid", "confirmed", "refunded", "cancelled"}


class ReservationService:
    @staticmethod
    def create_reservation(owner_id, payload):
        require_fields(payload, ["unit_id", "guest_name", "check_in_date", "check_out_date"])
        unit = db.session.get(Unit, int(payload["unit_id"]))
        if not unit or unit.is_deleted:
            raise NotFoundError("Unit not found.")
        PropertyService.get_owned_property(unit.property_id, owner_id)

        check_in = parse_date(payload["check_in_date"], "check_in_date")
        check_out = parse_date(payload["check_out_date"], "check_out_date")
        if check_out <= check_in:
            raise ValidationError("Check-out must be after check-in.", fields=["check_out_date"])

        payment_status = (payload.get("payment_status") or "pending").strip().lower()
        if payment_status not in PAYMENT_STATUSES:
            raise ValidationError("Invalid payment status.", fields=["payment_status"])

        reservation = Reservation(
            unit_id=unit.id,
            guest_name=str(payload["guest_name"]).strip(),
            guest_email=clean_text(payload.get("guest_email")),
            check_in_date=check_in,
            check_out_date=check_out,
            status=(payload.get("status") or "confirmed").strip().lower(),
            payment_status=payment_status,
            total_price=money(parse_decimal(payload.get("total_price"), "total_price", default=0, minimum=0)),
        )
        db.session.add(reservation)
        db.session.commit()
        return reservation

    @staticmethod
    def list_reservations(owner_id, unit_id=None):
        query = (
            Reservation.query.join(Unit, Unit.id == Reservation.unit_id)
            .join(Property, Property.id == Unit.property_id)
            .filter(Property.user_id == owner_id)
        )
        if unit_id:
            query = query.filter(Reservation.unit_id == int(unit_id))
        return query.order_by(Reservation.check_in_date.desc()).all()

    @staticmethod
    def to_dict(reservation):
        return {
            "id": reservation.id,
            "unit_id": reservation.unit_id,
            "guest_name": reservation.guest_name,
            "guest_email": reservation.guest_email,
            "check_in_date": reservation.check_in_date.isoformat(),
            "check_out_date": reservation.check_out_date.isoformat(),
            "status": reservation.status,
            "payment_status": reservation.payment_status,
            "total_price": str(money(reservation.total_price)),
        }
