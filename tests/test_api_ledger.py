"""Tests for ledger API authentication, reports and transaction responses."""

from __future__ import annotations

from datetime import datetime, timezone
from decimal import Decimal

from fastapi.testclient import TestClient

from trading_ledger.api.application import create_api_application
from trading_ledger.config import AppSettings
from trading_ledger.domain import BOOTSTRAP_EDITOR_ID, Account, LedgerSnapshot, SnapshotMetadata, Stock
from trading_ledger.ledger import AuthenticationOutcome, TradingSession, TransactionOutcome
from trading_ledger.store import FileSnapshotStore

_SLOT_NAME = "defaultDB"


def _build_snapshot() -> LedgerSnapshot:
    """Create a bootstrap snapshot for API tests.

    Returns:
        LedgerSnapshot: Two accounts and two stocks on day one.
    """

    return LedgerSnapshot(
        accounts=(
            Account(user_name="alice", password="pw1", display_name="Alice", balance=Decimal("100")),
            Account(user_name="bob", password="pw2", display_name="Bob", balance=Decimal("50")),
        ),
        stocks=(
            Stock(stock_id="AAA", company_name="Alpha", current_price=Decimal("10"), available_quantity=5),
            Stock(stock_id="BBB", company_name="Beta", current_price=Decimal("2.5"), available_quantity=100),
        ),
        day=1,
        metadata=SnapshotMetadata(
            last_edit_timestamp=datetime(2026, 10, 19, 8, 0, tzinfo=timezone.utc),
            last_editor_id=BOOTSTRAP_EDITOR_ID,
        ),
    )


def _build_client(tmp_path, seed: bool = True) -> tuple[TestClient, FileSnapshotStore]:
    """Create a test client over a file store in a temporary directory.

    Returns:
        tuple[TestClient, FileSnapshotStore]: Client and its backing store.
    """

    store = FileSnapshotStore(tmp_path)
    if seed:
        store.store_save(_SLOT_NAME, _build_snapshot())
    application = create_api_application(
        AppSettings(environment_name="test", ledger_slot_name=_SLOT_NAME),
        store,
        lambda: TradingSession(store=store, slot_name=_SLOT_NAME),
    )
    return TestClient(application), store


class _StaleSessionStub:
    """Session double whose every mutation loses the optimistic commit."""

    def authenticate(self, user_name: str, password: str) -> AuthenticationOutcome:
        _ = (user_name, password)
        return AuthenticationOutcome(status="logged_in", message="logged in")

    def purchase(self, stock_number: int, quantity: int) -> TransactionOutcome:
        _ = (stock_number, quantity)
        return TransactionOutcome(operation="purchase", status="stale", message="out of date")


class _HealthyStoreStub:
    """Store double used only for application construction."""

    def store_label(self) -> str:
        return "memory://"


def test_api_ledger_rejects_missing_and_wrong_credentials(tmp_path) -> None:
    """Return 401 without credentials or with a wrong password."""

    client, _ = _build_client(tmp_path)

    missing = client.get("/ledger/stocks")
    wrong = client.get("/ledger/stocks", auth=("alice", "nope"))

    assert missing.status_code == 401
    assert wrong.status_code == 401
    assert wrong.json()["code"] == "INVALID_CREDENTIALS"
    assert wrong.json()["message"] == "login failed"


def test_api_ledger_lists_stocks_and_status(tmp_path) -> None:
    """Return numbered market rows and the account summary."""

    client, _ = _build_client(tmp_path)

    stocks = client.get("/ledger/stocks", auth=("alice", "pw1"))
    status_response = client.get("/ledger/status", auth=("alice", "pw1"))

    assert stocks.status_code == 200
    assert stocks.json()["rows"][1] == {
        "number": 2,
        "stock_id": "BBB",
        "company_name": "Beta",
        "current_price": "2.5",
        "available_quantity": 100,
    }
    assert status_response.status_code == 200
    assert status_response.json()["account_name"] == "Alice"
    assert status_response.json()["balance"] == "100"
    assert status_response.json()["current_day_index"] == 1


def test_api_ledger_purchase_sale_and_day_advance_commit(tmp_path) -> None:
    """Commit purchase, day advance and sale through the API."""

    client, store = _build_client(tmp_path)

    purchase = client.post("/ledger/purchases", json={"stock_number": 1, "quantity": 2}, auth=("bob", "pw2"))
    positions = client.get("/ledger/positions", auth=("bob", "pw2"))
    day = client.post("/ledger/days", auth=("bob", "pw2"))
    sale = client.post("/ledger/sales", json={"position_number": 1, "quantity": 1}, auth=("bob", "pw2"))
    tracking = client.get("/ledger/positions/tracking", auth=("bob", "pw2"))
    rankings = client.get("/ledger/rankings", auth=("alice", "pw1"))

    assert purchase.status_code == 200
    assert purchase.json() == {"status": "committed", "operation": "purchase", "message": "purchase committed"}
    assert positions.json()["rows"][0]["quantity"] == 2
    assert day.status_code == 200
    assert sale.status_code == 200
    assert tracking.json()["rows"][0]["stock_id"] == "AAA"
    assert [row["user_name"] for row in rankings.json()["rows"]] == ["alice", "bob"]
    stored = store.store_load(_SLOT_NAME)
    assert stored.day == 2
    assert stored.metadata.last_editor_id == "bob"
    assert stored.account_by_user_name("bob").positions[0].quantity == 1


def test_api_ledger_transaction_failure_returns_reason(tmp_path) -> None:
    """Return 422 with the business reason for rejected transactions."""

    client, store = _build_client(tmp_path)

    response = client.post("/ledger/purchases", json={"stock_number": 3, "quantity": 1}, auth=("alice", "pw1"))

    assert response.status_code == 422
    assert response.json()["code"] == "TRANSACTION_FAILED"
    assert response.json()["reason"] == "stock doesn't exist"
    assert store.store_load(_SLOT_NAME) == _build_snapshot()


def test_api_ledger_stale_outcome_returns_conflict() -> None:
    """Return 409 with the stale code when the commit loses to another writer."""

    application = create_api_application(
        AppSettings(environment_name="test"),
        _HealthyStoreStub(),
        _StaleSessionStub,
    )
    client = TestClient(application)

    response = client.post("/ledger/purchases", json={"stock_number": 1, "quantity": 1}, auth=("alice", "pw1"))

    assert response.status_code == 409
    assert response.json()["code"] == "STALE_SNAPSHOT"
    assert response.json()["operation"] == "purchase"


def test_api_ledger_unseeded_slot_returns_service_unavailable(tmp_path) -> None:
    """Return 503 when the shared slot holds no snapshot."""

    client, _ = _build_client(tmp_path, seed=False)

    response = client.get("/ledger/stocks", auth=("alice", "pw1"))

    assert response.status_code == 503
    assert response.json()["code"] == "STORE_UNAVAILABLE"
