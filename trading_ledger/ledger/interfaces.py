"""Typed result contracts for ledger sessions and reports."""

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal

TRANSACTION_STATUS_COMMITTED = "committed"
TRANSACTION_STATUS_STALE = "stale"

AUTHENTICATION_STATUS_LOGGED_IN = "logged_in"
AUTHENTICATION_STATUS_LOGIN_FAILED = "login_failed"
AUTHENTICATION_STATUS_ALREADY_LOGGED_IN = "already_logged_in"


@dataclass(frozen=True)
class TransactionOutcome:
    """Result contract for one mutating session operation.

    A `stale` outcome means the session's snapshot was behind the store at
    commit time; the mutation was discarded, the session refreshed, and the
    operation may be re-issued.

    Attributes:
        operation: Operation name (`purchase`, `sell`, `advance_day`).
        status: Final state (`committed` or `stale`).
        message: Human-readable outcome message.
    """

    operation: str
    status: str
    message: str

    @property
    def committed(self) -> bool:
        """Whether the mutation reached the store."""

        return self.status == TRANSACTION_STATUS_COMMITTED


@dataclass(frozen=True)
class AuthenticationOutcome:
    """Result contract for a session login attempt.

    Attributes:
        status: One of `logged_in`, `login_failed`, `already_logged_in`.
        message: Human-readable outcome message.
    """

    status: str
    message: str

    @property
    def authenticated(self) -> bool:
        """Whether the session holds an account after the attempt."""

        return self.status != AUTHENTICATION_STATUS_LOGIN_FAILED


@dataclass(frozen=True)
class StockListingRow:
    """One market listing row.

    Attributes:
        number: 1-based stock number used by purchase.
        stock_id: Stock identifier.
        company_name: Company display name.
        current_price: Current market price.
        available_quantity: Shares available for purchase.
    """

    number: int
    stock_id: str
    company_name: str
    current_price: Decimal
    available_quantity: int


@dataclass(frozen=True)
class PositionListingRow:
    """One owned-lot row.

    Attributes:
        number: 1-based position number used by sell.
        stock_id: Stock identifier.
        company_name: Company display name.
        purchase_price: Price per share paid.
        quantity: Remaining shares in the lot.
        purchase_day_index: Ledger day of purchase.
        purchase_timestamp: Purchase time.
    """

    number: int
    stock_id: str
    company_name: str
    purchase_price: Decimal
    quantity: int
    purchase_day_index: int
    purchase_timestamp: datetime


@dataclass(frozen=True)
class PositionTrackingRow:
    """One investment-tracking row comparing current and purchase prices.

    Attributes:
        number: 1-based position number.
        stock_id: Stock identifier.
        company_name: Company display name.
        current_price: Current market price.
        purchase_price: Price per share paid.
        price_change: Per-share difference between current and purchase price.
        lot_profit: Price change multiplied by remaining lot quantity.
    """

    number: int
    stock_id: str
    company_name: str
    current_price: Decimal
    purchase_price: Decimal
    price_change: Decimal
    lot_profit: Decimal


@dataclass(frozen=True)
class AccountRankingRow:
    """One leaderboard row.

    Attributes:
        rank: 1-based leaderboard position.
        user_name: Account user name.
        display_name: Account display name.
        balance: Cash balance used for ranking.
        profit: Derived unrealized profit.
        current_day_index: Days the account has advanced through.
    """

    rank: int
    user_name: str
    display_name: str
    balance: Decimal
    profit: Decimal
    current_day_index: int


@dataclass(frozen=True)
class LedgerReport:
    """Report rows together with the snapshot edit time they were read at.

    Attributes:
        last_edit_timestamp: Edit timestamp of the snapshot the rows came from.
        rows: Ordered report rows.
    """

    last_edit_timestamp: datetime
    rows: tuple
