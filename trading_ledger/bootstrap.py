"""Application bootstrap wiring for startup validation and dependency assembly."""

from __future__ import annotations

import logging
import random
from collections.abc import Callable
from pathlib import Path

from fastapi import FastAPI

from trading_ledger.api import create_api_application
from trading_ledger.config import AppSettings, config_load_settings
from trading_ledger.db import SQLAlchemySnapshotStore, db_create_engine
from trading_ledger.domain import SnapshotNotFoundError
from trading_ledger.ledger import TradingSession, seed_build_initial_snapshot
from trading_ledger.store import FileSnapshotStore, SnapshotStorePort

logger = logging.getLogger(__name__)


def bootstrap_create_store(settings: AppSettings) -> SnapshotStorePort:
    """Build the configured snapshot store backend.

    Args:
        settings: Validated runtime settings.

    Returns:
        SnapshotStorePort: File or database store.
    """

    if settings.store_backend == "database":
        engine = db_create_engine(database_url=settings.database_url)
        return SQLAlchemySnapshotStore(engine=engine)

    ledger_directory = Path(settings.ledger_directory)
    ledger_directory.mkdir(parents=True, exist_ok=True)
    return FileSnapshotStore(directory=ledger_directory)


def bootstrap_create_session_factory(
    settings: AppSettings,
    store: SnapshotStorePort,
) -> Callable[[], TradingSession]:
    """Build a callable opening a new session over the configured slot.

    Args:
        settings: Validated runtime settings.
        store: Snapshot store shared by every session.

    Returns:
        Callable[[], TradingSession]: Session factory.
    """

    def bootstrap_open_session() -> TradingSession:
        return TradingSession(store=store, slot_name=settings.ledger_slot_name)

    return bootstrap_open_session


def bootstrap_create_application(settings: AppSettings | None = None) -> FastAPI:
    """Assemble the runtime application after validating startup configuration.

    Args:
        settings: Optional pre-loaded settings; loaded from the environment when omitted.

    Returns:
        FastAPI: Fully initialized FastAPI application instance.

    Raises:
        SettingsLoadError: Raised when startup configuration validation fails.
    """

    resolved_settings = settings or config_load_settings()
    store = bootstrap_create_store(resolved_settings)
    return create_api_application(
        settings=resolved_settings,
        store=store,
        session_factory=bootstrap_create_session_factory(resolved_settings, store),
    )


def bootstrap_seed_store(settings: AppSettings | None = None, force: bool = False) -> bool:
    """Write the initial snapshot to the configured slot.

    Args:
        settings: Optional pre-loaded settings; loaded from the environment when omitted.
        force: Overwrite a slot that already holds a snapshot.

    Returns:
        bool: True when a snapshot was written, False when the slot was already seeded.

    Raises:
        SettingsLoadError: Raised when startup configuration validation fails.
        SnapshotStoreError: Raised when the store cannot be read or written.
    """

    resolved_settings = settings or config_load_settings()
    store = bootstrap_create_store(resolved_settings)
    slot_name = resolved_settings.ledger_slot_name

    if not force:
        try:
            store.store_load_metadata(slot_name)
            logger.info("slot %s on %s is already seeded; use --force to overwrite", slot_name, store.store_label())
            return False
        except SnapshotNotFoundError:
            pass

    random_source = random.Random(resolved_settings.bootstrap_seed)
    snapshot = seed_build_initial_snapshot(
        random_unit_interval_provider=random_source.random,
        random_stock_count=resolved_settings.bootstrap_random_stock_count,
        balance_min=resolved_settings.bootstrap_balance_min,
        balance_max=resolved_settings.bootstrap_balance_max,
    )
    store.store_save(slot_name, snapshot)
    logger.info(
        "seeded slot %s on %s with %d accounts and %d stocks",
        slot_name,
        store.store_label(),
        len(snapshot.accounts),
        len(snapshot.stocks),
    )
    return True
