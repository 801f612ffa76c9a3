"""Ledger layer package for trading transitions, sessions and reports."""

from .conflict import conflict_is_fresh
from .interfaces import (
	AUTHENTICATION_STATUS_ALREADY_LOGGED_IN,
	AUTHENTICATION_STATUS_LOGGED_IN,
	AUTHENTICATION_STATUS_LOGIN_FAILED,
	TRANSACTION_STATUS_COMMITTED,
	TRANSACTION_STATUS_STALE,
	AccountRankingRow,
	AuthenticationOutcome,
	LedgerReport,
	PositionListingRow,
	PositionTrackingRow,
	StockListingRow,
	TransactionOutcome,
)
from .reports import report_list_positions, report_list_stocks, report_rank_accounts, report_track_positions
from .seed import SEED_ACCOUNT_ROSTER, SEED_FIXED_STOCKS, seed_build_initial_snapshot
from .session import GUEST_SESSION_NAME, STALE_SESSION_MESSAGE, TradingSession
from .transactions import (
	transaction_apply_advance_day,
	transaction_apply_purchase,
	transaction_apply_sell,
	transaction_price_factor,
	transaction_rank_accounts,
)

__all__ = [
	"AUTHENTICATION_STATUS_ALREADY_LOGGED_IN",
	"AUTHENTICATION_STATUS_LOGGED_IN",
	"AUTHENTICATION_STATUS_LOGIN_FAILED",
	"GUEST_SESSION_NAME",
	"SEED_ACCOUNT_ROSTER",
	"SEED_FIXED_STOCKS",
	"STALE_SESSION_MESSAGE",
	"TRANSACTION_STATUS_COMMITTED",
	"TRANSACTION_STATUS_STALE",
	"AccountRankingRow",
	"AuthenticationOutcome",
	"LedgerReport",
	"PositionListingRow",
	"PositionTrackingRow",
	"StockListingRow",
	"TradingSession",
	"TransactionOutcome",
	"conflict_is_fresh",
	"report_list_positions",
	"report_list_stocks",
	"report_rank_accounts",
	"report_track_positions",
	"seed_build_initial_snapshot",
	"transaction_apply_advance_day",
	"transaction_apply_purchase",
	"transaction_apply_sell",
	"transaction_price_factor",
	"transaction_rank_accounts",
]
