"""Typed interfaces for snapshot store backends.

A store persists whole ledger snapshots under named slots. Backends perform no
business validation beyond decoding the entity model.
"""

from typing import Protocol

from trading_ledger.domain import HealthStatus, LedgerSnapshot, SnapshotMetadata


class SnapshotStorePort(Protocol):
    """Port definition for durable snapshot slots."""

    def store_label(self) -> str:
        """Return a stable label for the active store target.

        Returns:
            str: Store target label for diagnostics.
        """

    def store_check_health(self) -> HealthStatus:
        """Check store reachability and return deterministic health payload.

        Returns:
            HealthStatus: Store health status payload.

        Raises:
            ConnectionError: Raised when the store cannot be reached.
        """

    def store_load(self, slot_name: str) -> LedgerSnapshot:
        """Load the full snapshot held by one slot.

        Args:
            slot_name: Slot identifier.

        Returns:
            LedgerSnapshot: Decoded snapshot.

        Raises:
            SnapshotNotFoundError: Raised when the slot holds no snapshot.
            SnapshotCorruptError: Raised when slot content cannot be decoded.
            SnapshotStoreError: Raised when the read fails.
        """

    def store_load_metadata(self, slot_name: str) -> SnapshotMetadata:
        """Load only the edit metadata of one slot.

        Args:
            slot_name: Slot identifier.

        Returns:
            SnapshotMetadata: Current on-store edit metadata.

        Raises:
            SnapshotNotFoundError: Raised when the slot holds no snapshot.
            SnapshotCorruptError: Raised when slot content cannot be decoded.
            SnapshotStoreError: Raised when the read fails.
        """

    def store_save(self, slot_name: str, snapshot: LedgerSnapshot) -> None:
        """Write a snapshot to one slot unconditionally.

        Args:
            slot_name: Slot identifier.
            snapshot: Snapshot to persist.

        Raises:
            SnapshotStoreError: Raised when the write fails.
        """

    def store_compare_and_swap(
        self,
        slot_name: str,
        expected_metadata: SnapshotMetadata,
        snapshot: LedgerSnapshot,
    ) -> bool:
        """Write a snapshot only when the slot still carries the expected metadata.

        Args:
            slot_name: Slot identifier.
            expected_metadata: Metadata the slot must currently hold.
            snapshot: Snapshot to persist.

        Returns:
            bool: True when written, False when the slot metadata differed.

        Raises:
            SnapshotNotFoundError: Raised when the slot holds no snapshot.
            SnapshotStoreError: Raised when the read or write fails.
        """
