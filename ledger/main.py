"""
FastAPI application and entry point.

This module creates and configures the FastAPI application:
  1. Logging — configured once at import
  2. Lifespan manager — creates tables, builds the TransferEngine, disposes
     the DB engine on shutdown
  3. CORS middleware — allows frontend origins to make cross-origin requests
  4. Exception handlers — maps domain errors to structured HTTP responses
  5. Router registration — users, accounts, transactions

Running locally:
    uvicorn ledger.main:app --reload
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

import ledger.models  # noqa: F401  (registers all tables on Base.metadata)
from ledger.config import settings
from ledger.database import AsyncSessionLocal, Base, engine
from ledger.exceptions import register_exception_handlers
from ledger.logging_config import setup_logging
from ledger.routers import accounts, transactions, users
from ledger.services.transfer_engine import TransferEngine

setup_logging(settings.LOG_LEVEL)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Startup:
      Creates all database tables if they don't exist, then builds the one
      TransferEngine every request in this process shares (its account
      locks only serialize writers that use the same instance).

    Shutdown:
      Disposes of the database engine, closing all connections cleanly.
    """
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    app.state.transfer_engine = TransferEngine(
        AsyncSessionLocal,
        allow_non_positive_amounts=settings.ALLOW_NON_POSITIVE_TRANSFERS,
    )
    logger.info("%s %s started", settings.APP_NAME, settings.APP_VERSION)
    yield
    await engine.dispose()
    logger.info("%s stopped", settings.APP_NAME)


app = FastAPI(
    title=settings.APP_NAME,
    version=settings.APP_VERSION,
    description="Minimal ledger: users, accounts and atomic transfers between accounts",
    lifespan=lifespan,
)

# ---------------------------------------------------------------------------
# Middleware
# ---------------------------------------------------------------------------

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.ALLOWED_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# ---------------------------------------------------------------------------
# Exception handlers
# ---------------------------------------------------------------------------

register_exception_handlers(app)

# ---------------------------------------------------------------------------
# Routers
# ---------------------------------------------------------------------------

app.include_router(users.router, prefix="/users", tags=["Users"])
app.include_router(accounts.router, prefix="/accounts", tags=["Accounts"])
app.include_router(transactions.router, prefix="/transactions", tags=["Transactions"])


# ---------------------------------------------------------------------------
# Health check
# ---------------------------------------------------------------------------

@app.get("/health", tags=["Health"])
async def health_check():
    """Liveness probe for deployment orchestrators."""
    return {"status": "ok", "version": settings.APP_VERSION}
