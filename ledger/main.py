"""
FastAPI application entry point.

Run with: uvicorn ledger.main:app --reload
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from ledger import telemetry
from ledger._version import VERSION
from ledger.config import settings
from ledger.database import init_db
from ledger.dependencies import get_ledger
from ledger.exceptions import LedgerError
from ledger.routers import accounts_router, assets_router, operations_router

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler.

    Startup: create the state table, initialize telemetry, and roll forward
    any trade a previous process left pending.
    """
    await init_db()
    print("Database initialized")

    if telemetry.setup_telemetry(settings):
        # Attach OTLP handler to root logger for log export
        handler = telemetry.get_log_handler()
        if handler:
            logging.getLogger().addHandler(handler)
            logging.getLogger().setLevel(logging.INFO)
        print("Telemetry initialized (OTLP metrics + logs enabled)")
    else:
        print("Telemetry disabled")

    await get_ledger().startup()

    yield

    print("Application shutting down")


app = FastAPI(
    title="Asset Ledger API",
    description="Accounts, assets and atomic asset trades",
    version=VERSION,
    lifespan=lifespan,
)


@app.exception_handler(LedgerError)
async def ledger_error_handler(request: Request, exc: LedgerError):
    """Report ledger failures as {detail, kind} with the error's status code."""
    if exc.status_code >= 500:
        logger.error(
            "Ledger operation failed",
            extra={"path": request.url.path, "kind": exc.kind, "error": exc.message},
        )
    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": exc.message, "kind": exc.kind},
    )


app.include_router(operations_router, prefix="/api/v1", tags=["operations"])
app.include_router(accounts_router, prefix="/api/v1", tags=["accounts"])
app.include_router(assets_router, prefix="/api/v1", tags=["assets"])


@app.get("/health")
async def health_check():
    """Health check endpoint."""
    return {"status": "ok"}


@app.get("/api/version")
async def get_version():
    """Get API version information."""
    return {
        "version": VERSION,
        "api_version": "v1",
    }
