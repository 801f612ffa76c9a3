"""JSON slot document encoding for ledger snapshots.

The document keeps a fixed key order: format version, edit timestamp, editor
id, accounts, stocks and day. Decimal values are written as strings so prices
and balances survive the round trip exactly.
"""

from __future__ import annotations

import json
from collections.abc import Mapping
from datetime import datetime
from decimal import Decimal, InvalidOperation
from typing import Any

from trading_ledger.domain import (
    Account,
    LedgerSnapshot,
    Position,
    SnapshotCorruptError,
    SnapshotMetadata,
    Stock,
)

SNAPSHOT_FORMAT_VERSION = 1


def codec_encode_snapshot(snapshot: LedgerSnapshot) -> dict[str, Any]:
    """Encode a snapshot into a JSON-serializable slot document.

    Args:
        snapshot: Snapshot to encode.

    Returns:
        dict[str, Any]: Ordered slot document.
    """

    return {
        "format_version": SNAPSHOT_FORMAT_VERSION,
        "last_edit_timestamp": snapshot.metadata.last_edit_timestamp.isoformat(),
        "last_editor_id": snapshot.metadata.last_editor_id,
        "accounts": [_codec_encode_account(account) for account in snapshot.accounts],
        "stocks": [_codec_encode_stock(stock) for stock in snapshot.stocks],
        "day": snapshot.day,
    }


def codec_decode_snapshot(document: Mapping[str, Any], slot_name: str | None = None) -> LedgerSnapshot:
    """Decode a slot document into a validated snapshot.

    Args:
        document: Parsed slot document.
        slot_name: Optional slot identifier used in error context.

    Returns:
        LedgerSnapshot: Decoded snapshot.

    Raises:
        SnapshotCorruptError: Raised when the document is malformed or any entity fails validation.
    """

    try:
        _codec_require_format_version(document)
        return LedgerSnapshot(
            accounts=tuple(_codec_decode_account(account) for account in document["accounts"]),
            stocks=tuple(_codec_decode_stock(stock) for stock in document["stocks"]),
            day=document["day"],
            metadata=_codec_decode_metadata_fields(document),
        )
    except (KeyError, TypeError, ValueError, InvalidOperation) as error:
        raise SnapshotCorruptError(f"snapshot document is invalid: {error}", slot_name=slot_name) from error


def codec_decode_metadata(document: Mapping[str, Any], slot_name: str | None = None) -> SnapshotMetadata:
    """Decode only the edit metadata of a slot document.

    Args:
        document: Parsed slot document.
        slot_name: Optional slot identifier used in error context.

    Returns:
        SnapshotMetadata: Decoded metadata.

    Raises:
        SnapshotCorruptError: Raised when metadata fields are missing or invalid.
    """

    try:
        _codec_require_format_version(document)
        return _codec_decode_metadata_fields(document)
    except (KeyError, TypeError, ValueError) as error:
        raise SnapshotCorruptError(f"snapshot metadata is invalid: {error}", slot_name=slot_name) from error


def codec_dump_snapshot_json(snapshot: LedgerSnapshot) -> str:
    """Serialize a snapshot to slot JSON text."""

    return json.dumps(codec_encode_snapshot(snapshot), indent=2)


def codec_parse_document(payload: str | bytes, slot_name: str | None = None) -> dict[str, Any]:
    """Parse slot JSON text into a document mapping.

    Args:
        payload: Raw slot content.
        slot_name: Optional slot identifier used in error context.

    Returns:
        dict[str, Any]: Parsed document.

    Raises:
        SnapshotCorruptError: Raised when content is not a JSON object.
    """

    try:
        document = json.loads(payload)
    except (UnicodeDecodeError, json.JSONDecodeError) as error:
        raise SnapshotCorruptError(f"snapshot payload is not valid JSON: {error}", slot_name=slot_name) from error
    if not isinstance(document, dict):
        raise SnapshotCorruptError("snapshot payload must be a JSON object", slot_name=slot_name)
    return document


def codec_parse_timestamp(timestamp_value: str) -> datetime:
    """Parse an offset-aware ISO-8601 timestamp.

    Raises:
        ValueError: Raised when timestamp is invalid or offset-naive.
    """

    if not isinstance(timestamp_value, str):
        raise ValueError(f"timestamp must be a string, got {timestamp_value!r}")
    parsed_timestamp = datetime.fromisoformat(timestamp_value)
    if parsed_timestamp.tzinfo is None or parsed_timestamp.utcoffset() is None:
        raise ValueError(f"timestamp must be offset-aware: {timestamp_value}")
    return parsed_timestamp


def _codec_require_format_version(document: Mapping[str, Any]) -> None:
    format_version = document["format_version"]
    if format_version != SNAPSHOT_FORMAT_VERSION:
        raise ValueError(f"unsupported format_version={format_version}")


def _codec_decode_metadata_fields(document: Mapping[str, Any]) -> SnapshotMetadata:
    return SnapshotMetadata(
        last_edit_timestamp=codec_parse_timestamp(document["last_edit_timestamp"]),
        last_editor_id=document["last_editor_id"],
    )


def _codec_encode_stock(stock: Stock) -> dict[str, Any]:
    return {
        "stock_id": stock.stock_id,
        "company_name": stock.company_name,
        "current_price": str(stock.current_price),
        "available_quantity": stock.available_quantity,
    }


def _codec_decode_stock(payload: Mapping[str, Any]) -> Stock:
    return Stock(
        stock_id=payload["stock_id"],
        company_name=payload["company_name"],
        current_price=Decimal(payload["current_price"]),
        available_quantity=payload["available_quantity"],
    )


def _codec_encode_position(position: Position) -> dict[str, Any]:
    return {
        "stock_id": position.stock_id,
        "quantity": position.quantity,
        "purchase_price": str(position.purchase_price),
        "purchase_timestamp": position.purchase_timestamp.isoformat(),
        "purchase_day_index": position.purchase_day_index,
    }


def _codec_decode_position(payload: Mapping[str, Any]) -> Position:
    return Position(
        stock_id=payload["stock_id"],
        quantity=payload["quantity"],
        purchase_price=Decimal(payload["purchase_price"]),
        purchase_timestamp=codec_parse_timestamp(payload["purchase_timestamp"]),
        purchase_day_index=payload["purchase_day_index"],
    )


def _codec_encode_account(account: Account) -> dict[str, Any]:
    return {
        "user_name": account.user_name,
        "password": account.password,
        "display_name": account.display_name,
        "balance": str(account.balance),
        "positions": [_codec_encode_position(position) for position in account.positions],
        "current_day_index": account.current_day_index,
    }


def _codec_decode_account(payload: Mapping[str, Any]) -> Account:
    return Account(
        user_name=payload["user_name"],
        password=payload["password"],
        display_name=payload["display_name"],
        balance=Decimal(payload["balance"]),
        positions=tuple(_codec_decode_position(position) for position in payload["positions"]),
        current_day_index=payload["current_day_index"],
    )
