"""
FastAPI application factory and entry point.

This module creates and configures the FastAPI application:
  1. Lifespan manager — logging, engine, tables and services on startup;
     pending ledger writes and engine disposal on shutdown
  2. CORS middleware — any developer frontend may call the sandbox
  3. Exception handlers — maps domain errors to HTTP responses
  4. Router registration — accounts, transactions, payments

Running locally:
    uvicorn povy_sandbox.main:app --reload
    python -m povy_sandbox
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

import povy_sandbox.models  # noqa: F401  (registers tables on Base.metadata)
from povy_sandbox.config import Settings, settings
from povy_sandbox.container import build_services
from povy_sandbox.database import create_engine, create_session_factory, create_tables
from povy_sandbox.exceptions import register_exception_handlers
from povy_sandbox.logging_config import setup_logging
from povy_sandbox.routers import accounts, payments, transactions

logger = logging.getLogger(__name__)


def create_app(app_settings: Settings = settings) -> FastAPI:
    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """
        Startup:
          Configures logging, creates the engine and any missing tables, and
          builds the stores/coordinator once for the whole process.

        Shutdown:
          Waits for in-flight ledger writes, then closes all connections.
        """
        # --- Startup ---
        setup_logging(app_settings.LOG_LEVEL, app_settings.LOG_FORMAT)
        engine = create_engine(app_settings.DATABASE_URL, echo=app_settings.DEBUG)
        await create_tables(engine)
        app.state.services = build_services(create_session_factory(engine), app_settings)
        logger.info("%s %s started", app_settings.APP_NAME, app_settings.APP_VERSION)
        yield
        # --- Shutdown ---
        await app.state.services.recorder.drain()
        await engine.dispose()

    app = FastAPI(
        title=app_settings.APP_NAME,
        version=app_settings.APP_VERSION,
        description="Sandbox accounts, simulated payments and transaction history",
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=app_settings.ALLOWED_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    register_exception_handlers(app)

    app.include_router(accounts.router, prefix="/api/accounts", tags=["Accounts"])
    app.include_router(transactions.router, prefix="/api/accounts", tags=["Transactions"])
    app.include_router(payments.router, prefix="/api/payments", tags=["Payments"])

    @app.get("/", tags=["Health"])
    async def root():
        return {"message": "Povy API running (sandbox)"}

    @app.get("/health", tags=["Health"])
    async def health_check():
        """Health check endpoint for deployment health checks."""
        return {"status": "ok", "version": app_settings.APP_VERSION}

    return app


app = create_app()
