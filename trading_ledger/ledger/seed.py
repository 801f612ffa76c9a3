"""Initial ledger snapshot used to bootstrap an empty store slot."""

from __future__ import annotations

import math
import random
from collections.abc import Callable
from datetime import datetime, timezone
from decimal import Decimal

from trading_ledger.domain import BOOTSTRAP_EDITOR_ID, Account, LedgerSnapshot, SnapshotMetadata, Stock

SEED_ACCOUNT_ROSTER: tuple[tuple[str, str, str], ...] = (
    ("tuan", "123", "tuanPQ"),
    ("congnv", "wpr", "congNV"),
    ("thangnx", "ss1", "thangNX"),
    ("camnh", "dbs", "camNH"),
    ("quandd", "se1", "quanDD"),
)

SEED_FIXED_STOCKS: tuple[tuple[str, str, str, int], ...] = (
    ("COMP", "composite.,ltd", "12.88", 12),
    ("NDX", "noDogex", "11.3", 103),
    ("SPX", "sp500", "3.25", 1500),
    ("INDU", "india adu", "10.25", 50),
    ("TLA", "Tesla", "100.163", 15),
)

_UPPERCASE_LETTERS = "ABCDEFGHIJKLMNOPQRSTUVWXYZ"


def seed_build_initial_snapshot(
    random_unit_interval_provider: Callable[[], float] | None = None,
    random_stock_count: int = 5,
    balance_min: Decimal = Decimal("20"),
    balance_max: Decimal = Decimal("30"),
    now: datetime | None = None,
) -> LedgerSnapshot:
    """Build the day-one snapshot with the default roster and market.

    Accounts receive a random balance rounded up to one decimal place. The
    market lists the fixed stocks first, followed by randomly generated ones
    whose identifiers never collide with earlier listings.

    Args:
        random_unit_interval_provider: Optional provider returning values in [0.0, 1.0).
        random_stock_count: Number of generated stocks appended after the fixed ones.
        balance_min: Lower bound of starting balances.
        balance_max: Upper bound of starting balances.
        now: Optional offset-aware bootstrap timestamp.

    Returns:
        LedgerSnapshot: Snapshot stamped with the bootstrap editor sentinel.

    Raises:
        ValueError: Raised when counts or balance bounds are invalid, or the provider
            returns a value outside [0.0, 1.0].
    """

    if isinstance(random_stock_count, bool) or not isinstance(random_stock_count, int) or random_stock_count < 0:
        raise ValueError("random_stock_count must be a non-negative integer")
    balance_min = Decimal(str(balance_min))
    balance_max = Decimal(str(balance_max))
    if balance_min < 0 or balance_max < balance_min:
        raise ValueError("balance bounds must satisfy 0 <= balance_min <= balance_max")

    next_random = random_unit_interval_provider or random.random
    accounts = tuple(
        Account(
            user_name=user_name,
            password=password,
            display_name=display_name,
            balance=_seed_draw_tenths(next_random(), balance_min, balance_max),
        )
        for user_name, password, display_name in SEED_ACCOUNT_ROSTER
    )

    stocks = [
        Stock(stock_id=stock_id, company_name=company_name, current_price=Decimal(price), available_quantity=quantity)
        for stock_id, company_name, price, quantity in SEED_FIXED_STOCKS
    ]
    taken_stock_ids = {stock.stock_id for stock in stocks}
    for _ in range(random_stock_count):
        stock_id = _seed_draw_letters(next_random, 3)
        while stock_id in taken_stock_ids:
            stock_id = _seed_draw_letters(next_random, 3)
        taken_stock_ids.add(stock_id)
        stocks.append(
            Stock(
                stock_id=stock_id,
                company_name="".join(letter * 2 for letter in _seed_draw_letters(next_random, 3)),
                current_price=_seed_draw_tenths(next_random(), Decimal("1"), Decimal("20")),
                available_quantity=min(int(_seed_require_unit(next_random()) * 900 + 100), 999),
            )
        )

    return LedgerSnapshot(
        accounts=accounts,
        stocks=tuple(stocks),
        day=1,
        metadata=SnapshotMetadata(
            last_edit_timestamp=now or datetime.now(timezone.utc),
            last_editor_id=BOOTSTRAP_EDITOR_ID,
        ),
    )


def _seed_draw_tenths(random_ratio: float, lower: Decimal, upper: Decimal) -> Decimal:
    ratio = Decimal(str(_seed_require_unit(random_ratio)))
    tenths = math.ceil(ratio * (upper - lower) * 10 + lower * 10)
    return Decimal(tenths) / 10


def _seed_draw_letters(next_random: Callable[[], float], length: int) -> str:
    letters = []
    for _ in range(length):
        index = min(int(_seed_require_unit(next_random()) * 26), 25)
        letters.append(_UPPERCASE_LETTERS[index])
    return "".join(letters)


def _seed_require_unit(random_ratio: float) -> float:
    ratio = float(random_ratio)
    if ratio < 0.0 or ratio > 1.0:
        raise ValueError("random_unit_interval_provider must return a value in [0.0, 1.0]")
    return ratio
