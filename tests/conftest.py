"""Shared fixtures: a fresh SQLite database per test, tokens and an HTTP client."""

import pytest
from fastapi.testclient import TestClient

from pro_directory_api.app.core.config import settings
from pro_directory_api.app.core.db import init_db
from pro_directory_api.app.core.security import create_account_token, create_admin_token
from pro_directory_api.app.main import app
from pro_directory_api.app.schemas.account import AccountCreate
from pro_directory_api.app.services.account_service import AccountService


# ============================================================================
# Database
# ============================================================================

@pytest.fixture
def database(tmp_path, monkeypatch):
    """Point the application at an empty, migrated database file."""
    path = tmp_path / "pro_directory_test.db"
    monkeypatch.setattr(settings, "database_url", str(path))
    monkeypatch.setattr(settings, "admin_static_token", "")
    init_db()
    return path


@pytest.fixture
def electrician(database):
    """Professional whose primary category is Electrician, no extras."""
    return AccountService.create_account(
        AccountCreate(username="sparky", email="sparky@example.com", primary_service_category="Electrician"),
        actor="admin",
    )


@pytest.fixture
def paying_electrician(database):
    return AccountService.create_account(
        AccountCreate(
            username="volt",
            primary_service_category="Electrician",
            subscription_status="active",
            stripe_customer_id="cus_123",
        ),
        actor="admin",
    )


# ============================================================================
# HTTP
# ============================================================================

@pytest.fixture
def client(database):
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def admin_headers():
    return {"Authorization": f"Bearer {create_admin_token()}"}


@pytest.fixture
def owner_headers(electrician):
    return {"Authorization": f"Bearer {create_account_token(electrician.id)}"}
