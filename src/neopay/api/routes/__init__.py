"""API route modules."""

from neopay.api.routes.cash_advances import router as cash_advances_router
from neopay.api.routes.companies import router as companies_router
from neopay.api.routes.deductions import router as deductions_router
from neopay.api.routes.drivers import router as drivers_router
from neopay.api.routes.expenses import router as expenses_router
from neopay.api.routes.health import router as health_router
from neopay.api.routes.loads import router as loads_router
from neopay.api.routes.pay_statements import router as pay_statements_router
from neopay.api.routes.payments import router as payments_router
from neopay.api.routes.receipts import router as receipts_router
from neopay.api.routes.trips import router as trips_router

__all__ = [
    "cash_advances_router",
    "companies_router",
    "deductions_router",
    "drivers_router",
    "expenses_router",
    "health_router",
    "loads_router",
    "pay_statements_router",
    "payments_router",
    "receipts_router",
    "trips_router",
]
