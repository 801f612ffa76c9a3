"""Tests for API health endpoint behavior.

These tests validate deterministic response behavior for healthy and
store-unavailable states.
"""

from fastapi.testclient import TestClient

from trading_ledger.api.application import create_api_application
from trading_ledger.config import AppSettings
from trading_ledger.domain import HealthStatus


class _HealthyStore:
    """Test double that simulates a reachable snapshot store."""

    def store_label(self) -> str:
        """Return deterministic target label.

        Returns:
            str: Health target label.
        """

        return "file:///ledger"

    def store_check_health(self) -> HealthStatus:
        """Return healthy store result.

        Returns:
            HealthStatus: Healthy store response.
        """

        return HealthStatus(status="ok", detail="ledger directory is writable")


class _FailingStore:
    """Test double that simulates an unreachable snapshot store."""

    def store_label(self) -> str:
        """Return deterministic target label.

        Returns:
            str: Health target label.
        """

        return "file:///ledger"

    def store_check_health(self) -> HealthStatus:
        """Raise deterministic connection error.

        Raises:
            ConnectionError: Always raised by this test double.
        """

        raise ConnectionError("ledger directory does not exist: /ledger")


def _unused_session_factory():
    """Fail loudly if a health test ever opens a ledger session."""

    raise AssertionError("health checks must not open ledger sessions")


def _build_settings() -> AppSettings:
    """Create test settings object.

    Returns:
        AppSettings: Deterministic test settings for API creation.
    """

    return AppSettings(environment_name="test", ledger_slot_name="defaultDB")


def test_api_foundation_index_reports_environment_and_slot() -> None:
    """Return service identification on the root route."""

    client = TestClient(create_api_application(_build_settings(), _HealthyStore(), _unused_session_factory))

    response = client.get("/")

    assert response.status_code == 200
    assert response.json() == {
        "service": "trading-ledger",
        "status": "foundation-ready",
        "environment": "test",
        "slot": "defaultDB",
    }


def test_api_health_returns_success_when_store_is_available() -> None:
    """Return HTTP 200 and healthy payload when the store reports success.

    Returns:
        None: Assertions validate response behavior.
    """

    client = TestClient(create_api_application(_build_settings(), _HealthyStore(), _unused_session_factory))

    response = client.get("/health")

    assert response.status_code == 200
    assert response.json()["status"] == "ok"
    assert response.json()["app"] == "up"
    assert response.json()["store"] == "ok"
    assert response.json()["target"] == "file:///ledger"


def test_api_health_returns_service_unavailable_when_store_is_down() -> None:
    """Return HTTP 503 and degraded payload when the store reports failure.

    Returns:
        None: Assertions validate response behavior.
    """

    client = TestClient(create_api_application(_build_settings(), _FailingStore(), _unused_session_factory))

    response = client.get("/health")

    assert response.status_code == 503
    assert response.json()["status"] == "degraded"
    assert response.json()["store"] == "down"
