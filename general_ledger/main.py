"""
General Ledger: FastAPI application.

This is the entry point for the application.
All routers are registered here.
"""

from fastapi import FastAPI

from general_ledger.config import get_settings
from general_ledger.logging_config import configure_logging
from general_ledger.api.health import router as health_router
from general_ledger.api.ledger import router as ledger_router
from general_ledger.api.entries import router as entries_router
from general_ledger.api.parties import router as parties_router
from general_ledger.api.invoices import router as invoices_router
from general_ledger.api.payroll import router as payroll_router
from general_ledger.api.reports import router as reports_router
from general_ledger.api.tax import router as tax_router

settings = get_settings()
configure_logging(settings.LOG_LEVEL)

app = FastAPI(
    title=settings.APP_NAME,
    version=settings.APP_VERSION,
    description="Double-entry general ledger with subledger workflows and reporting",
    debug=settings.DEBUG,
)

# Register routers
app.include_router(health_router)
app.include_router(ledger_router)
app.include_router(entries_router)
app.include_router(parties_router)
app.include_router(invoices_router)
app.include_router(payroll_router)
app.include_router(reports_router)
app.include_router(tax_router)
