"""Typed domain models shared across runtime layers.

Ledger entities are immutable values validated at construction time. Mutating
operations derive new values with `dataclasses.replace` instead of changing
shared instances, so a snapshot held by one session can never be altered by
another.
"""

from __future__ import annotations

import re
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field, replace
from datetime import datetime, timezone
from decimal import Decimal, InvalidOperation

from .errors import LedgerValidationError

BOOTSTRAP_EDITOR_ID = "<bootstrap>"
PURCHASE_TIMESTAMP_FLOOR = datetime(1900, 1, 1, tzinfo=timezone.utc)

_USER_NAME_PATTERN = re.compile(r"[A-Za-z0-9]+")


@dataclass(frozen=True)
class AppMetadata:
    """Static application metadata for runtime identification.

    Attributes:
        application_name: Human-readable app name.
        environment_name: Runtime environment label.
    """

    application_name: str
    environment_name: str


@dataclass(frozen=True)
class HealthStatus:
    """Health response contract used by health-check surfaces.

    Attributes:
        status: Overall status text for service health.
        detail: Additional message suitable for operational diagnostics.
    """

    status: str
    detail: str


@dataclass(frozen=True)
class Stock:
    """Tradable stock listed on the ledger market.

    Attributes:
        stock_id: Short ticker identifier (3 to 6 characters).
        company_name: Company display name (1 to 20 characters).
        current_price: Current market price per share.
        available_quantity: Shares still available for purchase.
    """

    stock_id: str
    company_name: str
    current_price: Decimal
    available_quantity: int

    def __post_init__(self) -> None:
        if not isinstance(self.stock_id, str) or not 3 <= len(self.stock_id) <= 6:
            raise LedgerValidationError("Stock", "stock_id", self.stock_id)
        if not isinstance(self.company_name, str) or not 1 <= len(self.company_name) <= 20:
            raise LedgerValidationError("Stock", "company_name", self.company_name)
        object.__setattr__(
            self,
            "current_price",
            _domain_require_non_negative_decimal("Stock", "current_price", self.current_price),
        )
        _domain_require_int("Stock", "available_quantity", self.available_quantity, minimum=0)


@dataclass(frozen=True)
class Position:
    """One purchased lot of a stock, tracked independently of other lots.

    The lot references its stock by identifier; current price is always read
    from the owning snapshot's stock list.

    Attributes:
        stock_id: Identifier of the purchased stock.
        quantity: Remaining shares in this lot.
        purchase_price: Price per share paid at purchase time.
        purchase_timestamp: Offset-aware purchase time.
        purchase_day_index: Ledger day on which the lot was purchased.
    """

    stock_id: str
    quantity: int
    purchase_price: Decimal
    purchase_timestamp: datetime
    purchase_day_index: int

    def __post_init__(self) -> None:
        if not isinstance(self.stock_id, str) or not self.stock_id:
            raise LedgerValidationError("Position", "stock_id", self.stock_id)
        _domain_require_int("Position", "quantity", self.quantity, minimum=1)
        object.__setattr__(
            self,
            "purchase_price",
            _domain_require_non_negative_decimal("Position", "purchase_price", self.purchase_price),
        )
        if (
            not isinstance(self.purchase_timestamp, datetime)
            or self.purchase_timestamp.tzinfo is None
            or self.purchase_timestamp <= PURCHASE_TIMESTAMP_FLOOR
        ):
            raise LedgerValidationError("Position", "purchase_timestamp", self.purchase_timestamp)
        _domain_require_int("Position", "purchase_day_index", self.purchase_day_index, minimum=1)


@dataclass(frozen=True)
class Account:
    """Ledger participant holding cash and purchased lots.

    Attributes:
        user_name: Unique alphanumeric login name.
        password: Plaintext password compared by exact equality.
        display_name: Human-readable name.
        balance: Cash balance.
        positions: Ordered purchased lots.
        current_day_index: Number of days this account has advanced through.
    """

    user_name: str
    password: str
    display_name: str
    balance: Decimal
    positions: tuple[Position, ...] = field(default_factory=tuple)
    current_day_index: int = 1

    def __post_init__(self) -> None:
        if not isinstance(self.user_name, str) or not _USER_NAME_PATTERN.fullmatch(self.user_name):
            raise LedgerValidationError("Account", "user_name", self.user_name)
        if not isinstance(self.password, str) or not self.password:
            raise LedgerValidationError("Account", "password", self.password)
        if not isinstance(self.display_name, str) or not self.display_name:
            raise LedgerValidationError("Account", "display_name", self.display_name)
        object.__setattr__(
            self,
            "balance",
            _domain_require_non_negative_decimal("Account", "balance", self.balance),
        )
        positions = tuple(self.positions)
        if any(not isinstance(position, Position) for position in positions):
            raise LedgerValidationError("Account", "positions", self.positions)
        object.__setattr__(self, "positions", positions)
        _domain_require_int("Account", "current_day_index", self.current_day_index, minimum=1)

    def credentials_match(self, user_name: str, password: str) -> bool:
        """Return whether the given credentials identify this account."""

        return self.user_name == user_name and self.password == password


@dataclass(frozen=True)
class SnapshotMetadata:
    """Edit metadata compared by the conflict detector.

    Attributes:
        last_edit_timestamp: Offset-aware time of the last committed edit.
        last_editor_id: User name of the last editor, or the bootstrap sentinel.
    """

    last_edit_timestamp: datetime
    last_editor_id: str

    def __post_init__(self) -> None:
        if not isinstance(self.last_edit_timestamp, datetime) or self.last_edit_timestamp.tzinfo is None:
            raise LedgerValidationError("SnapshotMetadata", "last_edit_timestamp", self.last_edit_timestamp)
        if not isinstance(self.last_editor_id, str) or not self.last_editor_id:
            raise LedgerValidationError("SnapshotMetadata", "last_editor_id", self.last_editor_id)

    @property
    def is_bootstrap(self) -> bool:
        """Whether the slot has never been edited by a real account."""

        return self.last_editor_id == BOOTSTRAP_EDITOR_ID


@dataclass(frozen=True)
class LedgerSnapshot:
    """Full ledger state at one point in time; the unit of persistence.

    Attributes:
        accounts: Accounts keyed by unique user name, in roster order.
        stocks: Market stocks in listing order.
        day: Global ledger day counter.
        metadata: Last-edit metadata used for conflict detection.
    """

    accounts: tuple[Account, ...]
    stocks: tuple[Stock, ...]
    day: int
    metadata: SnapshotMetadata

    def __post_init__(self) -> None:
        accounts = tuple(self.accounts)
        stocks = tuple(self.stocks)
        _domain_require_int("LedgerSnapshot", "day", self.day, minimum=1)

        user_names = [account.user_name for account in accounts]
        if len(set(user_names)) != len(user_names):
            raise LedgerValidationError("LedgerSnapshot", "accounts", user_names)
        stock_ids = {stock.stock_id for stock in stocks}
        if len(stock_ids) != len(stocks):
            raise LedgerValidationError("LedgerSnapshot", "stocks", [stock.stock_id for stock in stocks])
        for account in accounts:
            for position in account.positions:
                if position.stock_id not in stock_ids:
                    raise LedgerValidationError("LedgerSnapshot", "positions", position.stock_id)

        object.__setattr__(self, "accounts", accounts)
        object.__setattr__(self, "stocks", stocks)

    def stock_by_id(self, stock_id: str) -> Stock:
        """Return the listed stock with the given identifier.

        Raises:
            KeyError: Raised when no listed stock has this identifier.
        """

        for stock in self.stocks:
            if stock.stock_id == stock_id:
                return stock
        raise KeyError(stock_id)

    def stocks_by_id(self) -> dict[str, Stock]:
        """Return listed stocks keyed by identifier."""

        return {stock.stock_id: stock for stock in self.stocks}

    def account_by_user_name(self, user_name: str) -> Account | None:
        """Return the account with the given user name, if any."""

        for account in self.accounts:
            if account.user_name == user_name:
                return account
        return None

    def account_by_credentials(self, user_name: str, password: str) -> Account | None:
        """Return the account matching both credentials exactly, if any."""

        for account in self.accounts:
            if account.credentials_match(user_name, password):
                return account
        return None

    def account_profit(self, account: Account) -> Decimal:
        """Return the derived profit of an account at current market prices."""

        return domain_calculate_profit(account.positions, self.stocks_by_id())

    def with_account(self, account: Account) -> LedgerSnapshot:
        """Return a copy with the same-named account replaced.

        Raises:
            KeyError: Raised when the account is not part of this snapshot.
        """

        if self.account_by_user_name(account.user_name) is None:
            raise KeyError(account.user_name)
        return replace(
            self,
            accounts=tuple(
                account if existing.user_name == account.user_name else existing for existing in self.accounts
            ),
        )

    def with_stock(self, stock: Stock) -> LedgerSnapshot:
        """Return a copy with the same-identifier stock replaced.

        Raises:
            KeyError: Raised when the stock is not listed in this snapshot.
        """

        self.stock_by_id(stock.stock_id)
        return replace(
            self,
            stocks=tuple(stock if existing.stock_id == stock.stock_id else existing for existing in self.stocks),
        )

    def with_metadata(self, metadata: SnapshotMetadata) -> LedgerSnapshot:
        """Return a copy stamped with new edit metadata."""

        return replace(self, metadata=metadata)


def domain_calculate_profit(positions: Sequence[Position], stocks_by_id: Mapping[str, Stock]) -> Decimal:
    """Compute unrealized profit of lots at current market prices.

    Lots are grouped by stock identity before summation, so several lots of the
    same stock contribute one per-stock subtotal.

    Args:
        positions: Purchased lots.
        stocks_by_id: Live stocks keyed by identifier.

    Returns:
        Decimal: Sum of `quantity * (current_price - purchase_price)` over all lots.

    Raises:
        KeyError: Raised when a lot references an unknown stock.
    """

    profit_by_stock: dict[str, Decimal] = {}
    for position in positions:
        current_price = stocks_by_id[position.stock_id].current_price
        lot_profit = position.quantity * (current_price - position.purchase_price)
        profit_by_stock[position.stock_id] = profit_by_stock.get(position.stock_id, Decimal("0")) + lot_profit
    return sum(profit_by_stock.values(), Decimal("0"))


def _domain_require_int(entity_name: str, field_name: str, value: object, minimum: int) -> None:
    if isinstance(value, bool) or not isinstance(value, int) or value < minimum:
        raise LedgerValidationError(entity_name, field_name, value)


def _domain_require_non_negative_decimal(entity_name: str, field_name: str, value: object) -> Decimal:
    if isinstance(value, bool) or not isinstance(value, (Decimal, int, float, str)):
        raise LedgerValidationError(entity_name, field_name, value)
    try:
        decimal_value = value if isinstance(value, Decimal) else Decimal(str(value))
    except InvalidOperation as error:
        raise LedgerValidationError(entity_name, field_name, value) from error
    if not decimal_value.is_finite() or decimal_value < 0:
        raise LedgerValidationError(entity_name, field_name, value)
    return decimal_value
