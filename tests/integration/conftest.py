"""
Integration test fixtures for Coach Digital.

Provides fixtures specific to integration testing:
- FastAPI test clients with isolated databases
- Authenticated request headers
- A verification service with a fake clock and captured codes
"""

from unittest.mock import patch

import pytest


# ─────────────────────────────────────────────────────────────────────────────
# API Fixtures
# ─────────────────────────────────────────────────────────────────────────────


class FakeClock:
    def __init__(self, now: float = 0.0):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def verification_clock():
    return FakeClock()


@pytest.fixture
def sent_codes() -> list:
    """(phone_number, code) pairs delivered by the test verification service."""
    return []


@pytest.fixture
def verification_service(verification_clock, sent_codes):
    from coach.messaging.verification import VerificationCodeStore, VerificationService

    return VerificationService(
        store=VerificationCodeStore(clock=verification_clock),
        sender=lambda phone, code: sent_codes.append((phone, code)),
        ttl_seconds=600,
    )


@pytest.fixture
def api_app(temp_db, verification_service):
    """FastAPI app with both stores on a temporary database."""
    with (
        patch("coach.memory.notes.DB_PATH", temp_db),
        patch("coach.messaging.inbox.DB_PATH", temp_db),
    ):
        from coach.dashboard.backend.main import app
        from coach.dashboard.backend.routes.whatsapp import get_verification_service

        app.dependency_overrides[get_verification_service] = lambda: verification_service

        yield app

        app.dependency_overrides.clear()


@pytest.fixture
def test_client(api_app):
    """Test client for the API."""
    from fastapi.testclient import TestClient

    with TestClient(api_app) as client:
        yield client


@pytest.fixture
def auth_headers(mock_user_id) -> dict:
    """Headers identifying the standard test user."""
    return {"X-User-ID": mock_user_id}


@pytest.fixture
def other_auth_headers(other_user_id) -> dict:
    return {"X-User-ID": other_user_id}
