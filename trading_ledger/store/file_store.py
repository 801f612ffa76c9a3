"""File-backed snapshot store with atomic slot replacement."""

from __future__ import annotations

import logging
import os
import re
import tempfile
from pathlib import Path

from trading_ledger.domain import (
    HealthStatus,
    LedgerSnapshot,
    SnapshotCorruptError,
    SnapshotMetadata,
    SnapshotNotFoundError,
    SnapshotStoreError,
)

from .codec import codec_decode_metadata, codec_decode_snapshot, codec_dump_snapshot_json, codec_parse_document
from .interfaces import SnapshotStorePort

logger = logging.getLogger(__name__)

SLOT_NAME_PATTERN = re.compile(r"[A-Za-z0-9_-]+")


class FileSnapshotStore(SnapshotStorePort):
    """Snapshot store keeping one JSON document per slot in a directory.

    Writes go to a temporary file in the slot directory which is then renamed
    over the slot file, so readers observe either the previous or the new
    document, never a partial one.

    The compare-and-swap check and the rename are separate steps. Another
    process can still replace the slot between them; callers needing a single
    atomic conditional write should use the database store.
    """

    def __init__(self, directory: str | os.PathLike[str]):
        """Initialize file snapshot store.

        Args:
            directory: Directory holding slot files.

        Returns:
            None: Initializer does not return values.

        Raises:
            ValueError: Raised when directory is blank.
        """

        if directory is None or not str(directory).strip():
            raise ValueError("directory must not be blank")
        self._directory = Path(directory)

    def store_label(self) -> str:
        """Return the slot directory as a file URI label.

        Returns:
            str: Store target label.
        """

        return f"file://{self._directory.resolve()}"

    def store_check_health(self) -> HealthStatus:
        """Verify that the slot directory exists and is writable.

        Returns:
            HealthStatus: Health payload with status and diagnostic detail.

        Raises:
            ConnectionError: Raised when the directory is missing or read-only.
        """

        if not self._directory.is_dir():
            raise ConnectionError(f"ledger directory does not exist: {self._directory}")
        if not os.access(self._directory, os.W_OK):
            raise ConnectionError(f"ledger directory is not writable: {self._directory}")
        return HealthStatus(status="ok", detail="ledger directory is writable")

    def store_slot_path(self, slot_name: str) -> Path:
        """Return the file path backing one slot.

        Args:
            slot_name: Slot identifier.

        Returns:
            Path: Slot file path.

        Raises:
            ValueError: Raised when slot name contains unsupported characters.
        """

        if not isinstance(slot_name, str) or not SLOT_NAME_PATTERN.fullmatch(slot_name):
            raise ValueError(f"invalid slot_name={slot_name!r}")
        return self._directory / f"{slot_name}.json"

    def store_load(self, slot_name: str) -> LedgerSnapshot:
        """Load and decode the snapshot held by one slot file.

        Args:
            slot_name: Slot identifier.

        Returns:
            LedgerSnapshot: Decoded snapshot.

        Raises:
            SnapshotNotFoundError: Raised when the slot file does not exist.
            SnapshotCorruptError: Raised when the slot file cannot be decoded.
            SnapshotStoreError: Raised when the file cannot be read.
        """

        document = codec_parse_document(self._store_read_slot(slot_name), slot_name=slot_name)
        snapshot = codec_decode_snapshot(document, slot_name=slot_name)
        logger.debug("loaded slot %s edited by %s", slot_name, snapshot.metadata.last_editor_id)
        return snapshot

    def store_load_metadata(self, slot_name: str) -> SnapshotMetadata:
        """Load the edit metadata of one slot file.

        Args:
            slot_name: Slot identifier.

        Returns:
            SnapshotMetadata: Current on-disk edit metadata.

        Raises:
            SnapshotNotFoundError: Raised when the slot file does not exist.
            SnapshotCorruptError: Raised when the slot file cannot be decoded.
            SnapshotStoreError: Raised when the file cannot be read.
        """

        document = codec_parse_document(self._store_read_slot(slot_name), slot_name=slot_name)
        return codec_decode_metadata(document, slot_name=slot_name)

    def store_save(self, slot_name: str, snapshot: LedgerSnapshot) -> None:
        """Atomically replace one slot file with a new snapshot.

        Args:
            slot_name: Slot identifier.
            snapshot: Snapshot to persist.

        Raises:
            SnapshotStoreError: Raised when the temporary write or rename fails.
        """

        slot_path = self.store_slot_path(slot_name)
        payload = codec_dump_snapshot_json(snapshot)
        temporary_path: str | None = None
        try:
            with tempfile.NamedTemporaryFile(
                mode="w",
                encoding="utf-8",
                dir=self._directory,
                prefix=f".{slot_name}.",
                suffix=".tmp",
                delete=False,
            ) as temporary_file:
                temporary_path = temporary_file.name
                temporary_file.write(payload)
                temporary_file.flush()
                os.fsync(temporary_file.fileno())
            os.replace(temporary_path, slot_path)
        except OSError as error:
            if temporary_path is not None and os.path.exists(temporary_path):
                os.unlink(temporary_path)
            raise SnapshotStoreError(f"cannot save slot to {slot_path}", slot_name=slot_name) from error

        logger.debug("saved slot %s edited by %s", slot_name, snapshot.metadata.last_editor_id)

    def store_compare_and_swap(
        self,
        slot_name: str,
        expected_metadata: SnapshotMetadata,
        snapshot: LedgerSnapshot,
    ) -> bool:
        """Replace one slot file when its metadata still matches expectations.

        Args:
            slot_name: Slot identifier.
            expected_metadata: Metadata the slot file must currently hold.
            snapshot: Snapshot to persist.

        Returns:
            bool: True when written, False when the slot metadata differed.

        Raises:
            SnapshotNotFoundError: Raised when the slot file does not exist.
            SnapshotStoreError: Raised when the read or write fails.
        """

        current_metadata = self.store_load_metadata(slot_name)
        if current_metadata != expected_metadata:
            logger.debug("compare-and-swap rejected for slot %s", slot_name)
            return False
        self.store_save(slot_name, snapshot)
        return True

    def _store_read_slot(self, slot_name: str) -> str:
        slot_path = self.store_slot_path(slot_name)
        try:
            return slot_path.read_text(encoding="utf-8")
        except FileNotFoundError as error:
            raise SnapshotNotFoundError(f"no snapshot at {slot_path}", slot_name=slot_name) from error
        except UnicodeDecodeError as error:
            raise SnapshotCorruptError(f"slot file is not UTF-8 text: {slot_path}", slot_name=slot_name) from error
        except OSError as error:
            raise SnapshotStoreError(f"cannot read slot file {slot_path}", slot_name=slot_name) from error
