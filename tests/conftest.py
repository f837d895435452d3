"""
Pytest configuration and fixtures.

Every fixture runs on the in-memory storage backend with a fixed signing
secret and the cheapest bcrypt cost, so no test touches AWS.
"""
from typing import Callable

import pytest
from fastapi.testclient import TestClient

from formgrader.app import create_app
from formgrader.config import Settings
from formgrader.services.auth_service import TokenService
from formgrader.services.memory_store import InMemoryCredentialStore, InMemorySubmissionStore

from tests.helpers import MASTER_EMAIL, TEST_SECRET


@pytest.fixture
def settings() -> Settings:
    return Settings(
        jwt_secret=TEST_SECRET,
        master_email=MASTER_EMAIL,
        bcrypt_rounds=4,
        storage_backend="memory",
    )


@pytest.fixture
def token_service(settings) -> TokenService:
    return TokenService.from_settings(settings)


@pytest.fixture
def users_store() -> InMemoryCredentialStore:
    return InMemoryCredentialStore()


@pytest.fixture
def forms_store() -> InMemorySubmissionStore:
    return InMemorySubmissionStore()


@pytest.fixture
def app(settings, users_store, forms_store):
    return create_app(settings, users_store=users_store, forms_store=forms_store)


@pytest.fixture
def client(app) -> TestClient:
    return TestClient(app)


@pytest.fixture
def register(client) -> Callable[..., str]:
    """Register through the API and return the issued token."""

    def _register(
        email: str,
        first_name: str = "Ada",
        last_name: str = "Lovelace",
        password: str = "password123",
    ) -> str:
        response = client.post(
            "/api/auth/register",
            json={
                "firstName": first_name,
                "lastName": last_name,
                "email": email,
                "password": password,
            },
        )
        assert response.status_code == 200, response.text
        return response.json()["token"]

    return _register
