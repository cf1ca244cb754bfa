from app.services.auth_service import AuthService
from app.services.balance_service import BalanceService
from app.services.data_service import DataService
from app.services.expense_service import ExpenseService
from app.services.export_service import ExportService
from app.services.payment_service import PaymentService
from app.services.property_service import PropertyService
from app.services.reservation_service import ReservationService
from app.services.statement_service import StatementService
from app.services.storage_service import StorageService
from app.services.task_service import TaskService
from app.services.unit_service import UnitService

__all__ = [
    "AuthService",
    "BalanceService",
    "DataService",
    "ExpenseService",
    "ExportService",
    "PaymentService",
    "PropertyService",
    "ReservationService",
    "StatementService",
    "StorageService",
    "TaskService",
    "UnitService",
]
