from decimal import Decimal

from app.extensions import db
from app.models import Expense
from app.services.parsing import clean_text, money, parse_date, parse_decimal, require_fields
from app.services.property_service import PropertyService


class ExpenseService:
    @staticmethod
    def record_expense(owner_id, payload):
        require_fields(payload, ["property_id", "category", "amount", "payment_method", "date"])
        prop = PropertyService.get_owned_property(payload["property_id"], owner_id)

        amount = parse_decimal(payload.get("amount"), "amount", minimum=Decimal("0.01"))
        tax_pct = parse_decimal(payload.get("tax_percentage"), "tax_percentage", default=0, minimum=0)

        expense = Expense(
            property_id=prop.id,
            user_id=owner_id,
            category=str(payload["category"]).strip(),
            sub_category=clean_text(payload.get("sub_category")),
            amount=money(amount),
            tax_percentage=tax_pct,
            total_amount=money(amount + amount * tax_pct / Decimal("100")),
            payment_method=str(payload["payment_method"]).strip(),
            date=parse_date(payload.get("date"), "date"),
            notes=clean_text(payload.get("notes")),
        )
        db.session.add(expense)
        db.session.commit()
        return expense

    @staticmethod
    def list_expenses(owner_id, property_id=None):
        query = Expense.query.filter(Expense.user_id == owner_id)
        if property_id:
            query = query.filter(Expense.property_id == int(property_id))
        return query.order_by(Expense.date.desc(), Expense.id.desc()).all()

    @staticmethod
    def to_dict(expense):
        return {
            "id": expense.id,
            "property_id": expense.property_id,
            "category": expense.category,
            "sub_category": expense.sub_category,
            "amount": str(money(expense.amount)),
            "tax_percentage": str(expense.tax_percentage),
            "total_amount": str(money(expense.total_amount)),
            "payment_method": expense.payment_method,
            "date": expense.date.isoformat(),
            "notes": expense.notes,
        }
