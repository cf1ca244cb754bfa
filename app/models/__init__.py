from app.models.expense import Expense
from app.models.listing import Listing
from app.models.payment import DisbursementRecord, OwnerBalance, PaymentTransaction
from app.models.property import Property
from app.models.reservation import Reservation
from app.models.statement import OwnerStatement, StatementBookingLine, StatementExpenseLine
from app.models.task import Task
from app.models.unit import Unit
from app.models.user import User

__all__ = [
    "User",
    "Property",
    "Unit",
    "Listing",
    "Reservation",
    "Expense",
    "PaymentTransaction",
    "DisbursementRecord",
    "OwnerBalance",
    "OwnerStatement",
    "StatementBookingLine",
    "StatementExpenseLine",
    "Task",
]
