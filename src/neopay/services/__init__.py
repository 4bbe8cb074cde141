"""NeoPay services."""

from neopay.services.cash_advance_service import CashAdvanceService
from neopay.services.company_service import CompanyService, CompanyStats
from neopay.services.deduction_service import DeductionService
from neopay.services.driver_service import DriverService
from neopay.services.expense_service import ExpenseService
from neopay.services.load_service import LoadService
from neopay.services.pay_statement_service import PayStatementService
from neopay.services.payment_service import PaymentService
from neopay.services.receipt_processor import ReceiptProcessor
from neopay.services.receipt_service import ReceiptService
from neopay.services.state_machine import (
    LoadStateMachine,
    LoadStatus,
    PayStatementStateMachine,
    PayStatementStatus,
    ReceiptStateMachine,
    ReceiptStatus,
)
from neopay.services.trip_service import TripService

__all__ = [
    "CashAdvanceService",
    "CompanyService",
    "CompanyStats",
    "DeductionService",
    "DriverService",
    "ExpenseService",
    "LoadService",
    "PayStatementService",
    "PaymentService",
    "ReceiptProcessor",
    "ReceiptService",
    "TripService",
    "LoadStateMachine",
    "LoadStatus",
    "PayStatementStateMachine",
    "PayStatementStatus",
    "ReceiptStateMachine",
    "ReceiptStatus",
]
