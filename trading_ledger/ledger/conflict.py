"""Snapshot staleness detection for optimistic commits."""

from __future__ import annotations

from trading_ledger.domain import SnapshotMetadata


def conflict_is_fresh(
    local_metadata: SnapshotMetadata,
    store_metadata: SnapshotMetadata,
    editor_id: str,
) -> bool:
    """Decide whether a session's view of a slot may still be committed.

    A view is fresh when nobody committed since it was loaded, when it is
    newer than the store, when the store's last edit came from the same editor,
    or when the store has only ever been written by bootstrap.

    Args:
        local_metadata: Metadata the session loaded with its snapshot.
        store_metadata: Metadata currently held by the store slot.
        editor_id: User name of the committing session's account.

    Returns:
        bool: True when the commit may proceed, False when the view is stale.
    """

    if store_metadata == local_metadata:
        return True
    if local_metadata.last_edit_timestamp > store_metadata.last_edit_timestamp:
        return True
    if store_metadata.last_editor_id == editor_id:
        return True
    return store_metadata.is_bootstrap
