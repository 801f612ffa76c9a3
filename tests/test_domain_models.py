"""Tests for ledger entity validation and derived profit."""

from __future__ import annotations

from datetime import datetime, timezone
from decimal import Decimal

import pytest

from trading_ledger.domain import (
    BOOTSTRAP_EDITOR_ID,
    Account,
    LedgerSnapshot,
    LedgerValidationError,
    Position,
    SnapshotMetadata,
    Stock,
    domain_calculate_profit,
)

_PURCHASED_AT = datetime(2026, 10, 1, 9, 30, tzinfo=timezone.utc)


def _build_position(stock_id: str, quantity: int, purchase_price: str) -> Position:
    """Create a valid lot for tests.

    Returns:
        Position: Lot purchased on day one.
    """

    return Position(
        stock_id=stock_id,
        quantity=quantity,
        purchase_price=Decimal(purchase_price),
        purchase_timestamp=_PURCHASED_AT,
        purchase_day_index=1,
    )


def test_stock_rejects_identifier_outside_length_range() -> None:
    """Reject stock identifiers shorter than three characters with an entity-scoped message."""

    with pytest.raises(LedgerValidationError) as error_info:
        Stock(stock_id="AB", company_name="Alpha", current_price=Decimal("1"), available_quantity=1)

    assert str(error_info.value) == "Stock.init: invalid stock_id:'AB'"
    assert error_info.value.field_name == "stock_id"


def test_stock_rejects_negative_price_and_coerces_numeric_input() -> None:
    """Reject negative prices and normalize plain numbers to Decimal."""

    with pytest.raises(LedgerValidationError):
        Stock(stock_id="AAA", company_name="Alpha", current_price=Decimal("-0.01"), available_quantity=1)

    stock = Stock(stock_id="AAA", company_name="Alpha", current_price=3.25, available_quantity=0)

    assert stock.current_price == Decimal("3.25")


def test_position_rejects_zero_quantity_and_invalid_timestamps() -> None:
    """Require positive lot quantity and an offset-aware timestamp after the floor."""

    with pytest.raises(LedgerValidationError):
        _build_position("AAA", 0, "1")
    with pytest.raises(LedgerValidationError):
        Position(
            stock_id="AAA",
            quantity=1,
            purchase_price=Decimal("1"),
            purchase_timestamp=datetime(2026, 10, 1, 9, 30),
            purchase_day_index=1,
        )
    with pytest.raises(LedgerValidationError):
        Position(
            stock_id="AAA",
            quantity=1,
            purchase_price=Decimal("1"),
            purchase_timestamp=datetime(1899, 12, 31, tzinfo=timezone.utc),
            purchase_day_index=1,
        )


def test_account_requires_alphanumeric_user_name() -> None:
    """Reject user names containing anything other than letters and digits."""

    with pytest.raises(LedgerValidationError):
        Account(user_name="bad name", password="pw", display_name="Bad", balance=Decimal("1"))
    with pytest.raises(LedgerValidationError):
        Account(user_name=BOOTSTRAP_EDITOR_ID, password="pw", display_name="Bad", balance=Decimal("1"))

    account = Account(user_name="alice1", password="pw", display_name="Alice", balance=Decimal("1"))
    assert account.positions == ()
    assert account.current_day_index == 1
    assert account.credentials_match("alice1", "pw")
    assert not account.credentials_match("alice1", "PW")


def test_snapshot_rejects_duplicates_and_unknown_position_stocks() -> None:
    """Reject duplicate user names, duplicate stock ids and lots of unlisted stocks."""

    metadata = SnapshotMetadata(last_edit_timestamp=_PURCHASED_AT, last_editor_id=BOOTSTRAP_EDITOR_ID)
    stock = Stock(stock_id="AAA", company_name="Alpha", current_price=Decimal("1"), available_quantity=1)
    account = Account(user_name="alice", password="pw", display_name="Alice", balance=Decimal("1"))

    with pytest.raises(LedgerValidationError):
        LedgerSnapshot(accounts=(account, account), stocks=(stock,), day=1, metadata=metadata)
    with pytest.raises(LedgerValidationError):
        LedgerSnapshot(accounts=(account,), stocks=(stock, stock), day=1, metadata=metadata)
    with pytest.raises(LedgerValidationError):
        LedgerSnapshot(
            accounts=(Account("bob", "pw", "Bob", Decimal("1"), positions=(_build_position("ZZZ", 1, "1"),)),),
            stocks=(stock,),
            day=1,
            metadata=metadata,
        )
    with pytest.raises(LedgerValidationError):
        LedgerSnapshot(accounts=(account,), stocks=(stock,), day=0, metadata=metadata)


def test_snapshot_with_account_requires_existing_user_name() -> None:
    """Replace accounts by user name and refuse to add new ones."""

    metadata = SnapshotMetadata(last_edit_timestamp=_PURCHASED_AT, last_editor_id=BOOTSTRAP_EDITOR_ID)
    snapshot = LedgerSnapshot(
        accounts=(Account("alice", "pw", "Alice", Decimal("1")),),
        stocks=(),
        day=1,
        metadata=metadata,
    )

    updated = snapshot.with_account(Account("alice", "pw", "Alice", Decimal("9")))

    assert updated.account_by_user_name("alice").balance == Decimal("9")
    assert snapshot.account_by_user_name("alice").balance == Decimal("1")
    with pytest.raises(KeyError):
        snapshot.with_account(Account("carol", "pw", "Carol", Decimal("1")))


def test_profit_sums_lots_grouped_by_stock_at_current_prices() -> None:
    """Aggregate per-stock lot profit using live stock prices."""

    stocks_by_id = {
        "AAA": Stock(stock_id="AAA", company_name="Alpha", current_price=Decimal("12"), available_quantity=0),
        "BBB": Stock(stock_id="BBB", company_name="Beta", current_price=Decimal("2.5"), available_quantity=0),
    }
    positions = [
        _build_position("AAA", 2, "10"),
        _build_position("BBB", 4, "3"),
        _build_position("AAA", 1, "11"),
    ]

    assert domain_calculate_profit(positions, stocks_by_id) == Decimal("3.0")
    assert domain_calculate_profit([], stocks_by_id) == Decimal("0")


def test_metadata_marks_bootstrap_sentinel() -> None:
    """Identify snapshots never edited by a real account."""

    assert SnapshotMetadata(_PURCHASED_AT, BOOTSTRAP_EDITOR_ID).is_bootstrap
    assert not SnapshotMetadata(_PURCHASED_AT, "alice").is_bootstrap
