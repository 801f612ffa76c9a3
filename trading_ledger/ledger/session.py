"""Client trading session over one shared snapshot slot."""

from __future__ import annotations

import logging
import random
from collections.abc import Callable
from datetime import datetime, timedelta, timezone
from decimal import Decimal

from trading_ledger.domain import (
    AccessDeniedError,
    Account,
    LedgerSnapshot,
    SnapshotMetadata,
)
from trading_ledger.store import SnapshotStorePort

from .conflict import conflict_is_fresh
from .interfaces import (
    AUTHENTICATION_STATUS_ALREADY_LOGGED_IN,
    AUTHENTICATION_STATUS_LOGGED_IN,
    AUTHENTICATION_STATUS_LOGIN_FAILED,
    TRANSACTION_STATUS_COMMITTED,
    TRANSACTION_STATUS_STALE,
    AuthenticationOutcome,
    LedgerReport,
    TransactionOutcome,
)
from .reports import report_list_positions, report_list_stocks, report_rank_accounts, report_track_positions
from .transactions import transaction_apply_advance_day, transaction_apply_purchase, transaction_apply_sell

logger = logging.getLogger(__name__)

GUEST_SESSION_NAME = "[guest session]"
STALE_SESSION_MESSAGE = "Your session is out of date, we've just updated for you. Please try again!"


def _session_utc_now() -> datetime:
    return datetime.now(timezone.utc)


class TradingSession:
    """One client's view of the shared ledger slot.

    The session holds an in-memory snapshot and at most one authenticated
    account. Every report and mutation reloads the slot first. Mutations are
    committed optimistically: the store metadata is re-read right before the
    write and the write is a compare-and-swap against it, so a session whose
    snapshot fell behind discards its change, refreshes and reports `stale`.

    A slot last edited by the committing account is always fresh for it, so
    two sessions of the same account are last-writer-wins: the later commit
    replaces the earlier one's change. The swap only guards against other
    accounts' edits.

    Not thread-safe; each caller should hold its own session.
    """

    def __init__(
        self,
        store: SnapshotStorePort,
        slot_name: str,
        clock: Callable[[], datetime] | None = None,
        random_unit_interval_provider: Callable[[], float] | None = None,
    ):
        """Open a session and load the slot's current snapshot.

        Args:
            store: Snapshot store holding the shared slot.
            slot_name: Slot identifier.
            clock: Optional provider of offset-aware real time.
            random_unit_interval_provider: Optional provider returning values in [0.0, 1.0] for day advances.

        Returns:
            None: Initializer does not return values.

        Raises:
            ValueError: Raised when store or slot name are invalid.
            SnapshotStoreError: Raised when the initial load fails.
        """

        if store is None:
            raise ValueError("store must not be None")
        if not isinstance(slot_name, str) or not slot_name.strip():
            raise ValueError("slot_name must not be blank")

        self._store = store
        self._slot_name = slot_name.strip()
        self._clock = clock or _session_utc_now
        self._random_unit_interval_provider = random_unit_interval_provider or random.random
        self._account: Account | None = None
        self._snapshot: LedgerSnapshot = self._store.store_load(self._slot_name)

    @property
    def snapshot(self) -> LedgerSnapshot:
        """Snapshot currently held in memory."""

        return self._snapshot

    @property
    def is_authenticated(self) -> bool:
        """Whether an account is logged in on this session."""

        return self._account is not None

    @property
    def editor_id(self) -> str | None:
        """Identifier stamped on commits made by this session."""

        return None if self._account is None else self._account.user_name

    def refresh(self) -> None:
        """Reload the slot and re-resolve the authenticated account.

        The account is looked up again by user name and password; when it no
        longer matches, the session silently becomes unauthenticated.

        Raises:
            SnapshotStoreError: Raised when loading fails; in-memory state is left untouched.
        """

        snapshot = self._store.store_load(self._slot_name)
        self._snapshot = snapshot
        if self._account is not None:
            resolved_account = snapshot.account_by_credentials(self._account.user_name, self._account.password)
            if resolved_account is None:
                logger.info("account %s no longer matches, session signed out", self._account.user_name)
            self._account = resolved_account

    def authenticate(self, user_name: str, password: str) -> AuthenticationOutcome:
        """Log an account in by exact credential match.

        Args:
            user_name: Account user name.
            password: Account password.

        Returns:
            AuthenticationOutcome: `already_logged_in` without checking credentials when an
            account is already held, otherwise `logged_in` or `login_failed`.
        """

        if self._account is not None:
            return AuthenticationOutcome(
                status=AUTHENTICATION_STATUS_ALREADY_LOGGED_IN,
                message="you have already logged in",
            )

        account = self._snapshot.account_by_credentials(user_name, password)
        if account is None:
            logger.info("login failed for %s", user_name)
            return AuthenticationOutcome(status=AUTHENTICATION_STATUS_LOGIN_FAILED, message="login failed")

        self._account = account
        logger.info("account %s logged in", account.user_name)
        return AuthenticationOutcome(status=AUTHENTICATION_STATUS_LOGGED_IN, message="logged in")

    def deauthenticate(self) -> str:
        """Sign the current account out.

        Returns:
            str: Outcome message.
        """

        if self._account is None:
            return "you are not logged in!"
        self._account = None
        return "signed out"

    def require_authenticated(self) -> Account:
        """Return the authenticated account.

        Returns:
            Account: Account currently logged in.

        Raises:
            AccessDeniedError: Raised when no account is logged in.
        """

        if self._account is None:
            raise AccessDeniedError("not logged in")
        return self._account

    @property
    def current_account_name(self) -> str:
        """Display name of the logged-in account, or the guest label."""

        return GUEST_SESSION_NAME if self._account is None else self._account.display_name

    @property
    def current_balance(self) -> Decimal | None:
        """Cash balance of the logged-in account."""

        return None if self._account is None else self._account.balance

    @property
    def current_day_index(self) -> int | None:
        """Day index of the logged-in account."""

        return None if self._account is None else self._account.current_day_index

    def server_time(self) -> datetime:
        """Return virtual server time: real time shifted by the elapsed ledger days."""

        return self._session_virtual_time(self._snapshot.day)

    def list_stocks(self) -> LedgerReport:
        """Return market listing rows from a freshly loaded snapshot.

        Raises:
            AccessDeniedError: Raised when no account is logged in.
        """

        self._session_refresh_authenticated()
        return report_list_stocks(self._snapshot)

    def list_positions(self) -> LedgerReport:
        """Return the account's lots from a freshly loaded snapshot.

        Raises:
            AccessDeniedError: Raised when no account is logged in.
        """

        account = self._session_refresh_authenticated()
        return report_list_positions(self._snapshot, account)

    def track_positions(self) -> LedgerReport:
        """Return current-versus-purchase price rows for the account's lots.

        Raises:
            AccessDeniedError: Raised when no account is logged in.
        """

        account = self._session_refresh_authenticated()
        return report_track_positions(self._snapshot, account)

    def rank_accounts(self) -> LedgerReport:
        """Return the leaderboard from a freshly loaded snapshot.

        Ranking is a pure read; derived profit figures are computed per call
        and never persisted.

        Raises:
            AccessDeniedError: Raised when no account is logged in.
        """

        self._session_refresh_authenticated()
        return report_rank_accounts(self._snapshot)

    def purchase(self, stock_number: int, quantity: int) -> TransactionOutcome:
        """Buy shares of a listed stock and commit.

        Args:
            stock_number: 1-based stock number as listed.
            quantity: Shares to buy.

        Returns:
            TransactionOutcome: `committed`, or `stale` when the snapshot fell behind.

        Raises:
            AccessDeniedError: Raised when no account is logged in.
            TransactionFailedError: Raised when validation fails.
            SnapshotStoreError: Raised when store I/O fails.
        """

        account = self._session_refresh_authenticated()
        mutated_snapshot = transaction_apply_purchase(
            self._snapshot,
            user_name=account.user_name,
            stock_number=stock_number,
            quantity=quantity,
            purchased_at=self._clock(),
        )
        return self._session_commit("purchase", mutated_snapshot)

    def sell(self, position_number: int, quantity: int) -> TransactionOutcome:
        """Sell shares out of an owned lot and commit.

        Args:
            position_number: 1-based lot number as listed by `list_positions`.
            quantity: Shares to sell.

        Returns:
            TransactionOutcome: `committed`, or `stale` when the snapshot fell behind.

        Raises:
            AccessDeniedError: Raised when no account is logged in.
            TransactionFailedError: Raised when validation fails.
            SnapshotStoreError: Raised when store I/O fails.
        """

        account = self._session_refresh_authenticated()
        mutated_snapshot = transaction_apply_sell(
            self._snapshot,
            user_name=account.user_name,
            position_number=position_number,
            quantity=quantity,
        )
        return self._session_commit("sell", mutated_snapshot)

    def advance_day(
        self,
        random_unit_interval_provider: Callable[[], float] | None = None,
    ) -> TransactionOutcome:
        """Reprice every stock within ±15% and advance the day counters.

        Args:
            random_unit_interval_provider: Optional provider overriding the session default.

        Returns:
            TransactionOutcome: `committed`, or `stale` when the snapshot fell behind.

        Raises:
            AccessDeniedError: Raised when no account is logged in.
            ValueError: Raised when the provider returns a value outside [0.0, 1.0].
            SnapshotStoreError: Raised when store I/O fails.
        """

        account = self._session_refresh_authenticated()
        mutated_snapshot = transaction_apply_advance_day(
            self._snapshot,
            user_name=account.user_name,
            random_unit_interval_provider=random_unit_interval_provider or self._random_unit_interval_provider,
        )
        return self._session_commit("advance_day", mutated_snapshot)

    def _session_refresh_authenticated(self) -> Account:
        self.require_authenticated()
        self.refresh()
        return self.require_authenticated()

    def _session_virtual_time(self, day: int) -> datetime:
        return self._clock() + timedelta(days=day - 1)

    def _session_commit(self, operation: str, mutated_snapshot: LedgerSnapshot) -> TransactionOutcome:
        account = self.require_authenticated()
        store_metadata = self._store.store_load_metadata(self._slot_name)

        if conflict_is_fresh(self._snapshot.metadata, store_metadata, account.user_name):
            stamped_snapshot = mutated_snapshot.with_metadata(
                SnapshotMetadata(
                    last_edit_timestamp=self._session_virtual_time(mutated_snapshot.day),
                    last_editor_id=account.user_name,
                )
            )
            if self._store.store_compare_and_swap(self._slot_name, store_metadata, stamped_snapshot):
                self._snapshot = stamped_snapshot
                self._account = stamped_snapshot.account_by_user_name(account.user_name)
                logger.info("%s committed by %s", operation, account.user_name)
                return TransactionOutcome(
                    operation=operation,
                    status=TRANSACTION_STATUS_COMMITTED,
                    message=f"{operation} committed",
                )

        logger.warning("%s by %s rejected: session snapshot is stale", operation, account.user_name)
        self.refresh()
        return TransactionOutcome(operation=operation, status=TRANSACTION_STATUS_STALE, message=STALE_SESSION_MESSAGE)
