"""Tests for optimistic commit freshness decisions."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

from trading_ledger.domain import BOOTSTRAP_EDITOR_ID, SnapshotMetadata
from trading_ledger.ledger import conflict_is_fresh

_LOADED_AT = datetime(2026, 10, 19, 12, 0, tzinfo=timezone.utc)


def test_conflict_unchanged_store_is_fresh() -> None:
    """Treat a slot nobody wrote since the session loaded it as fresh."""

    metadata = SnapshotMetadata(_LOADED_AT, "alice")

    assert conflict_is_fresh(metadata, SnapshotMetadata(_LOADED_AT, "alice"), editor_id="bob")


def test_conflict_foreign_newer_edit_is_stale() -> None:
    """Reject when another account committed after the session loaded."""

    local_metadata = SnapshotMetadata(_LOADED_AT, "alice")
    store_metadata = SnapshotMetadata(_LOADED_AT + timedelta(seconds=1), "carol")

    assert not conflict_is_fresh(local_metadata, store_metadata, editor_id="bob")


def test_conflict_own_edit_and_bootstrap_are_fresh() -> None:
    """Accept store edits made by the same account or by bootstrap."""

    local_metadata = SnapshotMetadata(_LOADED_AT, "alice")
    newer = _LOADED_AT + timedelta(minutes=5)

    assert conflict_is_fresh(local_metadata, SnapshotMetadata(newer, "bob"), editor_id="bob")
    assert conflict_is_fresh(local_metadata, SnapshotMetadata(newer, BOOTSTRAP_EDITOR_ID), editor_id="bob")


def test_conflict_local_view_newer_than_store_is_fresh() -> None:
    """Accept when the session's view carries a strictly later timestamp."""

    local_metadata = SnapshotMetadata(_LOADED_AT + timedelta(days=1), "alice")
    store_metadata = SnapshotMetadata(_LOADED_AT, "carol")

    assert conflict_is_fresh(local_metadata, store_metadata, editor_id="bob")
