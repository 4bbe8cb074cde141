"""Pydantic schemas for API request/response models.

This is the one place where storage field names (snake_case) map to the
wire format (camelCase): every model uses the camel alias generator, and
responses are validated straight from ORM rows.
"""

import datetime as dt
from decimal import Decimal
from typing import Annotated, Literal

from pydantic import BaseModel, ConfigDict, Field, PlainSerializer, computed_field
from pydantic.alias_generators import to_camel

from neopay.services.state_machine import LoadStateMachine

# Decimal internally, JSON number on the wire
Money = Annotated[Decimal, PlainSerializer(float, return_type=float, when_used="json")]

DriverTypeLiteral = Literal["company", "owner"]
EmploymentTypeLiteral = Literal["W2", "1099"]
RateTypeLiteral = Literal["per_mile", "percentage", "hourly", "fixed"]
TripStatusLiteral = Literal["pending", "completed", "cancelled"]
CashAdvanceStatusLiteral = Literal["pending", "approved", "rejected", "paid"]
DeductionTypeLiteral = Literal["tax", "insurance", "retirement", "other"]


class CamelModel(BaseModel):
    """Base schema: camelCase on the wire, snake_case in Python."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


class ErrorResponse(CamelModel):
    """Error body for every non-2xx response."""

    message: str
    error: str | None = None


class MessageResponse(CamelModel):
    message: str


# ============================================================================
# Company schemas
# ============================================================================

CompanyStatusLiteral = Literal["Active", "Inactive", "Suspended"]
SubscriptionTierLiteral = Literal["basic", "premium", "enterprise"]
SubscriptionStatusLiteral = Literal["trial", "active", "expired", "cancelled"]


class CompanyCreate(CamelModel):
    """``ownerId`` defaults to the caller."""

    name: str
    address: str | None = None
    city: str | None = None
    state: str | None = None
    zip: str | None = None
    phone: str | None = None
    email: str | None = None
    website: str | None = None
    tax_id: str | None = None
    status: CompanyStatusLiteral | None = None
    subscription_tier: SubscriptionTierLiteral | None = None
    subscription_status: SubscriptionStatusLiteral | None = None
    trial_ends_at: dt.datetime | None = None
    owner_id: str | None = None


class CompanyUpdate(CamelModel):
    name: str | None = None
    address: str | None = None
    city: str | None = None
    state: str | None = None
    zip: str | None = None
    phone: str | None = None
    email: str | None = None
    website: str | None = None
    tax_id: str | None = None
    status: CompanyStatusLiteral | None = None
    subscription_tier: SubscriptionTierLiteral | None = None
    subscription_status: SubscriptionStatusLiteral | None = None
    trial_ends_at: dt.datetime | None = None
    owner_id: str | None = None


class CompanyResponse(CamelModel):
    id: int
    name: str
    address: str | None = None
    city: str | None = None
    state: str | None = None
    zip: str | None = None
    phone: str | None = None
    email: str | None = None
    website: str | None = None
    tax_id: str | None = None
    status: str
    subscription_tier: str
    subscription_status: str
    trial_ends_at: dt.datetime | None = None
    owner_id: str
    created_at: dt.datetime | None = None
    updated_at: dt.datetime | None = None


class CompanyDeleted(CamelModel):
    message: str
    company: CompanyResponse


class CompanyUserCreate(CamelModel):
    user_id: str
    role: str


class CompanyUserRoleUpdate(CamelModel):
    role: str


class CompanyUserResponse(CamelModel):
    id: int
    company_id: int
    user_id: str
    role: str
    created_at: dt.datetime | None = None
    updated_at: dt.datetime | None = None


class CompanyUserRemoved(CamelModel):
    message: str
    member: CompanyUserResponse


class CompanyStatsResponse(CamelModel):
    total_drivers: int
    active_drivers: int
    company_drivers: int
    owner_operators: int
    w2_drivers: int
    contractors: int
    total_payments: Money
    pending_payments: Money
    total_trip_earnings: Money
    total_loads: int
    assigned_loads: int
    in_progress_loads: int
    completed_loads: int


# ============================================================================
# Driver schemas
# ============================================================================


class DriverCreate(CamelModel):
    name: str
    email: str
    phone: str
    license: str
    company_id: int | None = None
    status: Literal["active", "inactive"] | None = None
    type: DriverTypeLiteral | None = None
    employment_type: EmploymentTypeLiteral | None = None
    join_date: dt.date | None = None
    pay_rate: Decimal | None = Field(default=None, ge=0)
    pay_rate_type: RateTypeLiteral | None = None
    tax_withholding_percent: Decimal | None = Field(default=None, ge=0, le=100)
    has_benefits: bool | None = None
    user_id: str | None = None


class DriverUpdate(CamelModel):
    name: str | None = None
    email: str | None = None
    phone: str | None = None
    license: str | None = None
    company_id: int | None = None
    status: Literal["active", "inactive"] | None = None
    type: DriverTypeLiteral | None = None
    employment_type: EmploymentTypeLiteral | None = None
    join_date: dt.date | None = None
    pay_rate: Decimal | None = Field(default=None, ge=0)
    pay_rate_type: RateTypeLiteral | None = None
    tax_withholding_percent: Decimal | None = Field(default=None, ge=0, le=100)
    has_benefits: bool | None = None
    user_id: str | None = None


class DriverResponse(CamelModel):
    id: int
    company_id: int | None = None
    name: str
    email: str
    phone: str
    license: str
    status: str
    type: str
    employment_type: str
    join_date: dt.date | None = None
    pay_rate: Money | None = None
    pay_rate_type: str
    tax_withholding_percent: Money | None = None
    has_benefits: bool
    user_id: str | None = None
    created_at: dt.datetime | None = None
    updated_at: dt.datetime | None = None


class DriverDeleted(CamelModel):
    message: str
    driver: DriverResponse


# ============================================================================
# Trip schemas
# ============================================================================


class TripCreate(CamelModel):
    """Amount is always computed from distance, rate and rate type."""

    driver_id: int
    date: dt.date
    origin: str
    destination: str
    distance: Decimal
    rate: Decimal
    rate_type: RateTypeLiteral | None = None
    hours_worked: Decimal | None = Field(default=None, ge=0)
    load_id: int | None = None
    company_id: int | None = None
    status: TripStatusLiteral | None = None


class TripUpdate(CamelModel):
    driver_id: int | None = None
    date: dt.date | None = None
    origin: str | None = None
    destination: str | None = None
    distance: Decimal | None = None
    rate: Decimal | None = None
    rate_type: RateTypeLiteral | None = None
    hours_worked: Decimal | None = Field(default=None, ge=0)
    amount: Decimal | None = None
    load_id: int | None = None
    company_id: int | None = None
    status: TripStatusLiteral | None = None


class TripResponse(CamelModel):
    id: int
    company_id: int | None = None
    driver_id: int
    driver_name: str | None = None
    driver_type: str | None = None
    load_id: int | None = None
    date: dt.date
    origin: str
    destination: str
    distance: Money
    rate: Money
    rate_type: str
    hours_worked: Money | None = None
    amount: Money | None = None
    status: str


class TripDeleted(CamelModel):
    message: str
    trip: TripResponse


class TripStatsResponse(CamelModel):
    total_trips: int
    total_miles: Money
    total_earnings: Money
    average_rate: Money


# ============================================================================
# Load schemas
# ============================================================================


class LoadCreate(CamelModel):
    company_id: int | None = None
    driver_id: int | None = None
    load_number: str | None = None
    customer: str | None = None
    pickup_date: dt.date | None = None
    delivery_date: dt.date | None = None
    origin: str | None = None
    destination: str | None = None
    distance: Decimal | None = None
    rate: Decimal | None = None
    status: str | None = None


class LoadUpdate(CamelModel):
    driver_id: int | None = None
    load_number: str | None = None
    customer: str | None = None
    pickup_date: dt.date | None = None
    delivery_date: dt.date | None = None
    origin: str | None = None
    destination: str | None = None
    distance: Decimal | None = None
    rate: Decimal | None = None
    status: str | None = None


class LoadAssign(CamelModel):
    """``driverId: null`` unassigns."""

    driver_id: int | None = None


class LoadStatusUpdate(CamelModel):
    status: str | None = None


class LoadResponse(CamelModel):
    id: int
    company_id: int
    driver_id: int | None = None
    load_number: str | None = None
    customer: str | None = None
    pickup_date: dt.date | None = None
    delivery_date: dt.date | None = None
    origin: str | None = None
    destination: str | None = None
    distance: Money | None = None
    rate: Money | None = None
    status: str
    created_by: str | None = None
    created_at: dt.datetime | None = None

    @computed_field(alias="nextStatuses")  # type: ignore[prop-decorator]
    @property
    def next_statuses(self) -> list[str]:
        return LoadStateMachine.get_next_statuses(self.status)


class LoadDeleted(CamelModel):
    message: str
    load: LoadResponse


# ============================================================================
# Expense schemas
# ============================================================================


class ExpenseCreate(CamelModel):
    driver_id: int
    category: str
    amount: Decimal = Field(gt=0)
    date: dt.date
    description: str | None = None
    receipt_id: int | None = None


class ExpenseUpdate(CamelModel):
    category: str | None = None
    amount: Decimal | None = Field(default=None, gt=0)
    date: dt.date | None = None
    description: str | None = None


class ExpenseResponse(CamelModel):
    id: int
    driver_id: int
    driver_name: str | None = None
    category: str
    amount: Money
    date: dt.date
    description: str
    receipt_id: int | None = None


class ExpenseDeleted(CamelModel):
    message: str
    expense: ExpenseResponse


class CategorySummaryResponse(CamelModel):
    category: str
    total: Money
    count: int


class DriverSummaryResponse(CamelModel):
    driver_id: int
    driver_name: str | None = None
    total: Money
    count: int


# ============================================================================
# Receipt schemas
# ============================================================================


class ReceiptUpload(CamelModel):
    """``fileData`` is base64, optionally as a ``data:`` URL."""

    driver_id: int
    file_name: str
    file_data: str


class ReceiptUpdate(CamelModel):
    vendor: str | None = None
    date: dt.date | None = None
    amount: Decimal | None = None
    category: str | None = None


class ReceiptItemResponse(CamelModel):
    id: int
    description: str
    quantity: int
    price: Money


class ReceiptResponse(CamelModel):
    id: int
    driver_id: int
    driver_name: str | None = None
    file_name: str
    file_path: str
    upload_date: dt.date
    status: str
    vendor: str | None = None
    date: dt.date | None = None
    amount: Money | None = None
    category: str | None = None
    items: list[ReceiptItemResponse] = []


class ReceiptDeleted(CamelModel):
    message: str
    receipt: ReceiptResponse


# ============================================================================
# Payment schemas
# ============================================================================


class PaymentCreate(CamelModel):
    driver_id: int
    amount: Decimal
    date: dt.date | None = None
    status: str | None = None
    description: str | None = None


class PaymentUpdate(CamelModel):
    amount: Decimal | None = None
    date: dt.date | None = None
    status: str | None = None
    description: str | None = None


class PaymentResponse(CamelModel):
    id: int
    driver_id: int
    driver_name: str | None = None
    pay_statement_id: int | None = None
    amount: Money
    date: dt.date
    status: str
    description: str | None = None


class PaymentDeleted(CamelModel):
    message: str
    payment: PaymentResponse


# ============================================================================
# Pay statement schemas
# ============================================================================


class GenerateStatementRequest(CamelModel):
    driver_id: int
    period_start: dt.date
    period_end: dt.date
    tax_withholding_percent: Decimal | None = Field(default=None, ge=0, le=100)


class PayStatementItemResponse(CamelModel):
    id: int
    item_type: str
    reference_id: int | None = None
    description: str
    amount: Money


class PayStatementResponse(CamelModel):
    id: int
    company_id: int | None = None
    driver_id: int
    driver_name: str | None = None
    period_start: dt.date
    period_end: dt.date
    trip_total: Money
    expense_total: Money
    cash_advance_total: Money
    gross_pay: Money
    tax_withholding_percent: Money
    tax_withholding: Money
    deductions_total: Money
    net_pay: Money
    status: str
    generated_date: dt.date
    items: list[PayStatementItemResponse] = []


class PayStatementStatusUpdate(CamelModel):
    status: str


class PayStatementDeleted(CamelModel):
    message: str
    statement: PayStatementResponse


class GeneratedStatementResponse(CamelModel):
    """Result of the payments generate-statement endpoint."""

    statement: PayStatementResponse
    payment: PaymentResponse
    trips: list[TripResponse]
    expenses: list[ExpenseResponse]


# ============================================================================
# Cash advance and deduction schemas
# ============================================================================


class CashAdvanceCreate(CamelModel):
    driver_id: int
    amount: Decimal = Field(gt=0)
    date: dt.date | None = None
    description: str | None = None
    status: CashAdvanceStatusLiteral | None = None


class CashAdvanceResponse(CamelModel):
    id: int
    company_id: int | None = None
    driver_id: int
    driver_name: str | None = None
    date: dt.date
    amount: Money
    description: str
    status: str


class CashAdvanceDeleted(CamelModel):
    message: str
    cash_advance: CashAdvanceResponse


class DeductionCreate(CamelModel):
    driver_id: int
    amount: Decimal = Field(ge=0)
    type: DeductionTypeLiteral | None = None
    description: str | None = None
    date: dt.date | None = None


class DeductionResponse(CamelModel):
    id: int
    company_id: int | None = None
    driver_id: int
    pay_statement_id: int | None = None
    type: str
    description: str
    amount: Money
    date: dt.date


class DeductionDeleted(CamelModel):
    message: str
    deduction: DeductionResponse


# ============================================================================
# Health schemas
# ============================================================================


class HealthResponse(BaseModel):
    """Health check response."""

    status: str
    timestamp: dt.datetime
    database: str
