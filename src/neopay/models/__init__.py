"""ORM models."""

from neopay.models.base import Base, TimestampMixin
from neopay.models.company import Company, CompanyUser
from neopay.models.driver import Driver
from neopay.models.expenses import CashAdvance, Deduction, Expense, Receipt, ReceiptItem
from neopay.models.fleet import Load, Trip
from neopay.models.payroll import Payment, PayStatement, PayStatementItem

__all__ = [
    "Base",
    "TimestampMixin",
    "Company",
    "CompanyUser",
    "Driver",
    "Trip",
    "Load",
    "Expense",
    "Receipt",
    "ReceiptItem",
    "CashAdvance",
    "Deduction",
    "Payment",
    "PayStatement",
    "PayStatementItem",
]
