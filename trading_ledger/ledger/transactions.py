"""Pure ledger snapshot transitions for trading operations.

Each transition validates its inputs against one snapshot and returns a new
snapshot; nothing here reads or writes a store. Sessions wrap these functions
in the refresh and commit protocol.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable
from dataclasses import replace
from datetime import datetime
from decimal import Decimal

from trading_ledger.domain import Account, LedgerSnapshot, Position, TransactionFailedError

PRICE_FACTOR_MIN = Decimal("0.85")
PRICE_FACTOR_MAX = Decimal("1.15")

REASON_STOCK_NOT_FOUND = "stock doesn't exist"
REASON_NOT_ENOUGH_QUANTITY = "not enough quantity"
REASON_NOT_ENOUGH_MONEY = "not enough money"
REASON_INVALID_QUANTITY = "invalid quantity"


def transaction_apply_purchase(
    snapshot: LedgerSnapshot,
    user_name: str,
    stock_number: int,
    quantity: int,
    purchased_at: datetime,
) -> LedgerSnapshot:
    """Buy shares of one listed stock into a new lot.

    A zero quantity passes validation and yields an unchanged ledger state.

    Args:
        snapshot: Snapshot to transition.
        user_name: Purchasing account user name.
        stock_number: 1-based stock number as listed.
        quantity: Shares to buy.
        purchased_at: Offset-aware purchase time recorded on the lot.

    Returns:
        LedgerSnapshot: Snapshot with the lot appended, stock availability and balance reduced.

    Raises:
        TransactionFailedError: Raised when the stock number, quantity or balance check fails.
        KeyError: Raised when the user name is not part of the snapshot.
    """

    account = _transaction_require_account(snapshot, user_name)
    _transaction_require_int("stock_number", stock_number)
    _transaction_require_int("quantity", quantity)

    stock_index = stock_number - 1
    if stock_index < 0 or stock_index >= len(snapshot.stocks):
        raise TransactionFailedError(REASON_STOCK_NOT_FOUND)
    stock = snapshot.stocks[stock_index]

    if quantity < 0 or quantity > stock.available_quantity:
        raise TransactionFailedError(REASON_NOT_ENOUGH_QUANTITY)

    cost = stock.current_price * quantity
    if cost > account.balance:
        raise TransactionFailedError(REASON_NOT_ENOUGH_MONEY)

    if quantity == 0:
        return snapshot

    lot = Position(
        stock_id=stock.stock_id,
        quantity=quantity,
        purchase_price=stock.current_price,
        purchase_timestamp=purchased_at,
        purchase_day_index=snapshot.day,
    )
    updated_account = replace(
        account,
        balance=account.balance - cost,
        positions=account.positions + (lot,),
    )
    updated_stock = replace(stock, available_quantity=stock.available_quantity - quantity)
    return snapshot.with_stock(updated_stock).with_account(updated_account)


def transaction_apply_sell(
    snapshot: LedgerSnapshot,
    user_name: str,
    position_number: int,
    quantity: int,
) -> LedgerSnapshot:
    """Sell shares out of one owned lot at the current market price.

    Args:
        snapshot: Snapshot to transition.
        user_name: Selling account user name.
        position_number: 1-based lot number in the account's current lot list.
        quantity: Shares to sell.

    Returns:
        LedgerSnapshot: Snapshot with the lot reduced or removed, balance credited and stock restored.

    Raises:
        TransactionFailedError: Raised when the position number or quantity check fails.
        KeyError: Raised when the user name is not part of the snapshot.
    """

    account = _transaction_require_account(snapshot, user_name)
    _transaction_require_int("position_number", position_number)
    _transaction_require_int("quantity", quantity)

    position_index = position_number - 1
    if position_index < 0 or position_index >= len(account.positions):
        raise TransactionFailedError(REASON_STOCK_NOT_FOUND)
    lot = account.positions[position_index]

    if quantity < 0 or quantity > lot.quantity:
        raise TransactionFailedError(REASON_INVALID_QUANTITY)

    remaining_positions = list(account.positions)
    if quantity == lot.quantity:
        del remaining_positions[position_index]
    elif quantity > 0:
        remaining_positions[position_index] = replace(lot, quantity=lot.quantity - quantity)

    stock = snapshot.stock_by_id(lot.stock_id)
    updated_account = replace(
        account,
        balance=account.balance + stock.current_price * quantity,
        positions=tuple(remaining_positions),
    )
    updated_stock = replace(stock, available_quantity=stock.available_quantity + quantity)
    return snapshot.with_stock(updated_stock).with_account(updated_account)


def transaction_apply_advance_day(
    snapshot: LedgerSnapshot,
    user_name: str,
    random_unit_interval_provider: Callable[[], float],
) -> LedgerSnapshot:
    """Move every stock price by a bounded random factor and advance one day.

    Args:
        snapshot: Snapshot to transition.
        user_name: Account advancing its own day index.
        random_unit_interval_provider: Provider returning values in [0.0, 1.0], drawn once per stock.

    Returns:
        LedgerSnapshot: Snapshot with repriced stocks and day counters incremented by one.

    Raises:
        ValueError: Raised when the provider returns a value outside [0.0, 1.0].
        KeyError: Raised when the user name is not part of the snapshot.
    """

    account = _transaction_require_account(snapshot, user_name)
    repriced_stocks = tuple(
        replace(
            stock,
            current_price=stock.current_price * transaction_price_factor(random_unit_interval_provider()),
        )
        for stock in snapshot.stocks
    )
    updated_account = replace(account, current_day_index=account.current_day_index + 1)
    return replace(snapshot, stocks=repriced_stocks, day=snapshot.day + 1).with_account(updated_account)


def transaction_price_factor(random_ratio: float) -> Decimal:
    """Map a unit-interval ratio onto the daily price factor range.

    Args:
        random_ratio: Value in [0.0, 1.0].

    Returns:
        Decimal: Factor in [0.85, 1.15].

    Raises:
        ValueError: Raised when the ratio is outside [0.0, 1.0].
    """

    ratio = float(random_ratio)
    if ratio < 0.0 or ratio > 1.0:
        raise ValueError("random_unit_interval_provider must return a value in [0.0, 1.0]")
    return PRICE_FACTOR_MIN + Decimal(str(ratio)) * (PRICE_FACTOR_MAX - PRICE_FACTOR_MIN)


def transaction_rank_accounts(accounts: Iterable[Account]) -> list[Account]:
    """Order accounts for the leaderboard.

    Higher balance ranks first; on equal balance the account that needed fewer
    days ranks first. User name breaks any remaining tie deterministically.

    Args:
        accounts: Accounts to rank.

    Returns:
        list[Account]: Ranked accounts.
    """

    return sorted(accounts, key=lambda account: (-account.balance, account.current_day_index, account.user_name))


def _transaction_require_account(snapshot: LedgerSnapshot, user_name: str) -> Account:
    account = snapshot.account_by_user_name(user_name)
    if account is None:
        raise KeyError(user_name)
    return account


def _transaction_require_int(field_name: str, value: object) -> None:
    if isinstance(value, bool) or not isinstance(value, int):
        raise TypeError(f"{field_name} must be an integer")
