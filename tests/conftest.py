"""
Test fixtures for the Povy sandbox test suite.

This module provides shared fixtures used across all test files:

  - db_engine / session_factory: Fresh SQLite database file for each test
  - services: The stores, recorder and coordinator bound to that database
  - client: Async HTTP test client talking to an app wired to those services
  - create_account: Helper that creates a test account through the API
  - history: Helper that waits for pending ledger writes, then reads history

Key design decisions:
  - A temporary SQLite *file* is used instead of an in-memory database so
    that concurrent sessions each get their own connection, the same way
    they do against the real database file.
  - httpx's ASGITransport does not run the application lifespan, so the
    client fixture builds the services itself and puts them on app.state,
    exactly where the lifespan would.
  - Ledger writes happen in the background. Anything that reads history
    must drain the recorder first; the history fixture does that.
"""

import pytest
import pytest_asyncio
from httpx import AsyncClient, ASGITransport

from povy_sandbox.config import Settings
from povy_sandbox.container import build_services
from povy_sandbox.database import create_engine, create_session_factory, create_tables
from povy_sandbox.main import create_app


@pytest.fixture
def test_settings():
    """Defaults, without reading a local .env and without ledger retry delays."""
    return Settings(_env_file=None, LEDGER_RETRY_DELAY_SECONDS=0)


@pytest_asyncio.fixture
async def db_engine(tmp_path):
    """Create a fresh async engine with all tables for each test."""
    engine = create_engine(f"sqlite+aiosqlite:///{tmp_path / 'sandbox.db'}")
    await create_tables(engine)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(db_engine):
    return create_session_factory(db_engine)


@pytest_asyncio.fixture
async def services(session_factory, test_settings):
    services = build_services(session_factory, test_settings)
    yield services
    await services.recorder.drain()


@pytest_asyncio.fixture
async def client(services, test_settings):
    """Async HTTP test client with the test services injected."""
    app = create_app(test_settings)
    app.state.services = services

    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as ac:
        yield ac


@pytest.fixture
def create_account(client):
    """
    Create a test account through the API and return the response body.

    Usage:
        account = await create_account(initialBalance=100)
    """
    async def _create(**body) -> dict:
        response = await client.post("/api/accounts", json=body)
        assert response.status_code == 201, f"Account creation failed: {response.text}"
        return response.json()

    return _create


@pytest.fixture
def history(client, services):
    """Read an account's transaction history once all ledger writes have landed."""
    async def _history(account_number: str) -> list[dict]:
        await services.recorder.drain()
        response = await client.get(f"/api/accounts/{account_number}/transactions")
        assert response.status_code == 200
        return response.json()

    return _history
