"""Database service for ledger slot persistence with atomic compare-and-swap."""

from __future__ import annotations

import logging
from datetime import datetime, timezone

from sqlalchemy import Engine, text
from sqlalchemy.exc import SQLAlchemyError

from trading_ledger.domain import (
    HealthStatus,
    LedgerSnapshot,
    SnapshotCorruptError,
    SnapshotMetadata,
    SnapshotNotFoundError,
    SnapshotStoreError,
)
from trading_ledger.store import (
    SnapshotStorePort,
    codec_decode_snapshot,
    codec_dump_snapshot_json,
    codec_parse_document,
)
from trading_ledger.store.codec import codec_parse_timestamp

logger = logging.getLogger(__name__)


class SQLAlchemySnapshotStore(SnapshotStorePort):
    """SQLAlchemy implementation of the snapshot store over the `ledger_slot` table.

    Edit metadata is kept in dedicated columns beside the JSON payload so the
    conditional write can match it in a single `UPDATE ... WHERE` statement.
    """

    _SLOT_SELECT_QUERY = (
        "SELECT slot_name, last_edit_timestamp, last_editor_id, payload "
        "FROM ledger_slot WHERE slot_name = :slot_name"
    )
    _SLOT_METADATA_SELECT_QUERY = (
        "SELECT last_edit_timestamp, last_editor_id FROM ledger_slot WHERE slot_name = :slot_name"
    )
    _SLOT_UPSERT_QUERY = (
        "INSERT INTO ledger_slot (slot_name, last_edit_timestamp, last_editor_id, payload, updated_at_utc) "
        "VALUES (:slot_name, :last_edit_timestamp, :last_editor_id, :payload, :updated_at_utc) "
        "ON CONFLICT (slot_name) DO UPDATE SET "
        "last_edit_timestamp = excluded.last_edit_timestamp, "
        "last_editor_id = excluded.last_editor_id, "
        "payload = excluded.payload, "
        "updated_at_utc = excluded.updated_at_utc"
    )
    _SLOT_COMPARE_AND_SWAP_QUERY = (
        "UPDATE ledger_slot SET "
        "last_edit_timestamp = :last_edit_timestamp, "
        "last_editor_id = :last_editor_id, "
        "payload = :payload, "
        "updated_at_utc = :updated_at_utc "
        "WHERE slot_name = :slot_name "
        "AND last_edit_timestamp = :expected_last_edit_timestamp "
        "AND last_editor_id = :expected_last_editor_id"
    )

    def __init__(self, engine: Engine):
        """Initialize slot persistence service.

        Args:
            engine: SQLAlchemy engine used for all persistence operations.

        Returns:
            None: Initializer does not return values.

        Raises:
            ValueError: Raised when engine is invalid.
        """

        if engine is None:
            raise ValueError("engine must not be None")
        self._engine = engine

    def store_label(self) -> str:
        """Return the target database URL for diagnostics.

        Returns:
            str: Rendered engine URL string without password.
        """

        return self._engine.url.render_as_string(hide_password=True)

    def store_check_health(self) -> HealthStatus:
        """Verify database connectivity using a deterministic lightweight query.

        Returns:
            HealthStatus: Health payload with status and diagnostic detail.

        Raises:
            ConnectionError: Raised when connectivity check fails.
        """

        try:
            with self._engine.connect() as connection:
                connection.execute(text("SELECT 1"))
            return HealthStatus(status="ok", detail="database connectivity verified")
        except SQLAlchemyError as error:
            raise ConnectionError("database connectivity check failed") from error

    def store_load(self, slot_name: str) -> LedgerSnapshot:
        """Load and decode the snapshot held by one slot row.

        Args:
            slot_name: Slot identifier.

        Returns:
            LedgerSnapshot: Decoded snapshot.

        Raises:
            SnapshotNotFoundError: Raised when the slot row does not exist.
            SnapshotCorruptError: Raised when the payload cannot be decoded.
            SnapshotStoreError: Raised when the database read fails.
        """

        normalized_slot_name = self._store_validate_slot_name(slot_name)
        try:
            with self._engine.connect() as connection:
                row = connection.execute(
                    text(self._SLOT_SELECT_QUERY),
                    {"slot_name": normalized_slot_name},
                ).mappings().first()
        except SQLAlchemyError as error:
            raise SnapshotStoreError("ledger slot read failed", slot_name=normalized_slot_name) from error

        if row is None:
            raise SnapshotNotFoundError(f"no snapshot in slot {normalized_slot_name}", slot_name=normalized_slot_name)

        document = codec_parse_document(row["payload"], slot_name=normalized_slot_name)
        snapshot = codec_decode_snapshot(document, slot_name=normalized_slot_name)
        logger.debug("loaded slot %s edited by %s", normalized_slot_name, snapshot.metadata.last_editor_id)
        return snapshot

    def store_load_metadata(self, slot_name: str) -> SnapshotMetadata:
        """Load edit metadata columns of one slot row.

        Args:
            slot_name: Slot identifier.

        Returns:
            SnapshotMetadata: Current edit metadata.

        Raises:
            SnapshotNotFoundError: Raised when the slot row does not exist.
            SnapshotCorruptError: Raised when metadata columns are invalid.
            SnapshotStoreError: Raised when the database read fails.
        """

        normalized_slot_name = self._store_validate_slot_name(slot_name)
        try:
            with self._engine.connect() as connection:
                row = connection.execute(
                    text(self._SLOT_METADATA_SELECT_QUERY),
                    {"slot_name": normalized_slot_name},
                ).mappings().first()
        except SQLAlchemyError as error:
            raise SnapshotStoreError("ledger slot metadata read failed", slot_name=normalized_slot_name) from error

        if row is None:
            raise SnapshotNotFoundError(f"no snapshot in slot {normalized_slot_name}", slot_name=normalized_slot_name)
        return self._store_metadata_from_row(row, normalized_slot_name)

    def store_save(self, slot_name: str, snapshot: LedgerSnapshot) -> None:
        """Insert or replace one slot row in a single transaction.

        Args:
            slot_name: Slot identifier.
            snapshot: Snapshot to persist.

        Raises:
            SnapshotStoreError: Raised when the database write fails.
        """

        normalized_slot_name = self._store_validate_slot_name(slot_name)
        try:
            with self._engine.begin() as connection:
                connection.execute(
                    text(self._SLOT_UPSERT_QUERY),
                    self._store_build_write_parameters(normalized_slot_name, snapshot),
                )
        except SQLAlchemyError as error:
            raise SnapshotStoreError("ledger slot write failed", slot_name=normalized_slot_name) from error

        logger.debug("saved slot %s edited by %s", normalized_slot_name, snapshot.metadata.last_editor_id)

    def store_compare_and_swap(
        self,
        slot_name: str,
        expected_metadata: SnapshotMetadata,
        snapshot: LedgerSnapshot,
    ) -> bool:
        """Replace one slot row only when its metadata columns still match.

        The metadata match and the write happen in one conditional `UPDATE`, so
        no other writer can land between the check and the write.

        Args:
            slot_name: Slot identifier.
            expected_metadata: Metadata the slot row must currently hold.
            snapshot: Snapshot to persist.

        Returns:
            bool: True when written, False when the slot metadata differed.

        Raises:
            SnapshotNotFoundError: Raised when the slot row does not exist.
            SnapshotStoreError: Raised when the database write fails.
        """

        normalized_slot_name = self._store_validate_slot_name(slot_name)
        parameters = self._store_build_write_parameters(normalized_slot_name, snapshot)
        parameters["expected_last_edit_timestamp"] = expected_metadata.last_edit_timestamp.isoformat()
        parameters["expected_last_editor_id"] = expected_metadata.last_editor_id

        try:
            with self._engine.begin() as connection:
                result = connection.execute(text(self._SLOT_COMPARE_AND_SWAP_QUERY), parameters)
                swapped = result.rowcount == 1
                slot_exists = swapped or (
                    connection.execute(
                        text(self._SLOT_METADATA_SELECT_QUERY),
                        {"slot_name": normalized_slot_name},
                    ).first()
                    is not None
                )
        except SQLAlchemyError as error:
            raise SnapshotStoreError("ledger slot compare-and-swap failed", slot_name=normalized_slot_name) from error

        if not slot_exists:
            raise SnapshotNotFoundError(f"no snapshot in slot {normalized_slot_name}", slot_name=normalized_slot_name)
        if not swapped:
            logger.debug("compare-and-swap rejected for slot %s", normalized_slot_name)
        return swapped

    @staticmethod
    def _store_build_write_parameters(slot_name: str, snapshot: LedgerSnapshot) -> dict[str, str]:
        return {
            "slot_name": slot_name,
            "last_edit_timestamp": snapshot.metadata.last_edit_timestamp.isoformat(),
            "last_editor_id": snapshot.metadata.last_editor_id,
            "payload": codec_dump_snapshot_json(snapshot),
            "updated_at_utc": datetime.now(timezone.utc).isoformat(),
        }

    @staticmethod
    def _store_metadata_from_row(row, slot_name: str) -> SnapshotMetadata:
        try:
            return SnapshotMetadata(
                last_edit_timestamp=codec_parse_timestamp(row["last_edit_timestamp"]),
                last_editor_id=row["last_editor_id"],
            )
        except ValueError as error:
            raise SnapshotCorruptError(f"slot metadata is invalid: {error}", slot_name=slot_name) from error

    @staticmethod
    def _store_validate_slot_name(slot_name: str) -> str:
        if not isinstance(slot_name, str) or not slot_name.strip():
            raise ValueError("slot_name must not be blank")
        return slot_name.strip()
