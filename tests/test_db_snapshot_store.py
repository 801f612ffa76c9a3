"""Tests for the SQLAlchemy snapshot store over an Alembic-migrated SQLite database."""

from __future__ import annotations

from datetime import datetime, timezone
from decimal import Decimal
from pathlib import Path

import pytest
from alembic import command
from alembic.config import Config
from sqlalchemy import inspect, text

from trading_ledger.db import SQLAlchemySnapshotStore, db_create_engine
from trading_ledger.domain import (
    BOOTSTRAP_EDITOR_ID,
    Account,
    LedgerSnapshot,
    SnapshotCorruptError,
    SnapshotMetadata,
    SnapshotNotFoundError,
    Stock,
)

_ALEMBIC_INI_PATH = Path(__file__).resolve().parents[1] / "alembic.ini"
_EDITED_AT = datetime(2026, 10, 19, 12, 0, tzinfo=timezone.utc)


def _migration_upgrade_sqlite(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> str:
    """Create a temporary SQLite database migrated to head.

    Returns:
        str: SQLAlchemy URL of the migrated database.
    """

    database_url = f"sqlite:///{tmp_path / 'ledger.db'}"
    monkeypatch.setenv("DATABASE_URL", database_url)
    alembic_config = Config(str(_ALEMBIC_INI_PATH))
    command.upgrade(alembic_config, "head")
    command.upgrade(alembic_config, "head")
    return database_url


def _build_snapshot(editor_id: str = BOOTSTRAP_EDITOR_ID) -> LedgerSnapshot:
    """Create a minimal snapshot for database store tests.

    Returns:
        LedgerSnapshot: Snapshot stamped with the given editor.
    """

    return LedgerSnapshot(
        accounts=(Account(user_name="alice", password="pw1", display_name="Alice", balance=Decimal("25.3")),),
        stocks=(Stock(stock_id="SPX", company_name="sp500", current_price=Decimal("3.25"), available_quantity=1500),),
        day=1,
        metadata=SnapshotMetadata(last_edit_timestamp=_EDITED_AT, last_editor_id=editor_id),
    )


def test_migrations_create_ledger_slot_table_idempotently(tmp_path, monkeypatch) -> None:
    """Apply migrations twice and verify the slot table exists."""

    database_url = _migration_upgrade_sqlite(tmp_path, monkeypatch)
    engine = db_create_engine(database_url)
    try:
        table_names = set(inspect(engine).get_table_names())
    finally:
        engine.dispose()

    assert {"ledger_slot", "alembic_version"}.issubset(table_names)


def test_db_store_upserts_and_loads_slot(tmp_path, monkeypatch) -> None:
    """Insert then replace one slot row and read back the latest snapshot."""

    engine = db_create_engine(_migration_upgrade_sqlite(tmp_path, monkeypatch))
    store = SQLAlchemySnapshotStore(engine=engine)
    try:
        with pytest.raises(SnapshotNotFoundError):
            store.store_load("defaultDB")

        store.store_save("defaultDB", _build_snapshot())
        store.store_save("defaultDB", _build_snapshot(editor_id="alice"))

        assert store.store_load("defaultDB") == _build_snapshot(editor_id="alice")
        assert store.store_load_metadata("defaultDB") == SnapshotMetadata(_EDITED_AT, "alice")
        with engine.connect() as connection:
            row_count = connection.execute(text("SELECT COUNT(*) FROM ledger_slot")).scalar_one()
        assert row_count == 1
    finally:
        engine.dispose()


def test_db_store_compare_and_swap_is_conditional(tmp_path, monkeypatch) -> None:
    """Swap only when metadata columns match and report missing slots."""

    engine = db_create_engine(_migration_upgrade_sqlite(tmp_path, monkeypatch))
    store = SQLAlchemySnapshotStore(engine=engine)
    try:
        with pytest.raises(SnapshotNotFoundError):
            store.store_compare_and_swap(
                "defaultDB",
                SnapshotMetadata(_EDITED_AT, BOOTSTRAP_EDITOR_ID),
                _build_snapshot(editor_id="alice"),
            )

        store.store_save("defaultDB", _build_snapshot())
        rejected = store.store_compare_and_swap(
            "defaultDB",
            SnapshotMetadata(_EDITED_AT, "bob"),
            _build_snapshot(editor_id="alice"),
        )
        accepted = store.store_compare_and_swap(
            "defaultDB",
            SnapshotMetadata(_EDITED_AT, BOOTSTRAP_EDITOR_ID),
            _build_snapshot(editor_id="alice"),
        )

        assert not rejected
        assert accepted
        assert store.store_load_metadata("defaultDB").last_editor_id == "alice"
    finally:
        engine.dispose()


def test_db_store_reports_corrupt_payload(tmp_path, monkeypatch) -> None:
    """Raise a corruption error when the stored payload is not a snapshot document."""

    engine = db_create_engine(_migration_upgrade_sqlite(tmp_path, monkeypatch))
    store = SQLAlchemySnapshotStore(engine=engine)
    try:
        with engine.begin() as connection:
            connection.execute(
                text(
                    "INSERT INTO ledger_slot (slot_name, last_edit_timestamp, last_editor_id, payload, updated_at_utc) "
                    "VALUES ('defaultDB', :timestamp, 'alice', '[]', :timestamp)"
                ),
                {"timestamp": _EDITED_AT.isoformat()},
            )

        with pytest.raises(SnapshotCorruptError):
            store.store_load("defaultDB")
        assert store.store_check_health().status == "ok"
        assert store.store_label().startswith("sqlite:///")
    finally:
        engine.dispose()
