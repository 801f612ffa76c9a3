"""Report row builders over one ledger snapshot."""

from __future__ import annotations

from trading_ledger.domain import Account, LedgerSnapshot

from .interfaces import (
    AccountRankingRow,
    LedgerReport,
    PositionListingRow,
    PositionTrackingRow,
    StockListingRow,
)
from .transactions import transaction_rank_accounts


def report_list_stocks(snapshot: LedgerSnapshot) -> LedgerReport:
    """Build market listing rows numbered for purchase."""

    return LedgerReport(
        last_edit_timestamp=snapshot.metadata.last_edit_timestamp,
        rows=tuple(
            StockListingRow(
                number=number,
                stock_id=stock.stock_id,
                company_name=stock.company_name,
                current_price=stock.current_price,
                available_quantity=stock.available_quantity,
            )
            for number, stock in enumerate(snapshot.stocks, start=1)
        ),
    )


def report_list_positions(snapshot: LedgerSnapshot, account: Account) -> LedgerReport:
    """Build owned-lot rows numbered for sell."""

    stocks_by_id = snapshot.stocks_by_id()
    return LedgerReport(
        last_edit_timestamp=snapshot.metadata.last_edit_timestamp,
        rows=tuple(
            PositionListingRow(
                number=number,
                stock_id=position.stock_id,
                company_name=stocks_by_id[position.stock_id].company_name,
                purchase_price=position.purchase_price,
                quantity=position.quantity,
                purchase_day_index=position.purchase_day_index,
                purchase_timestamp=position.purchase_timestamp,
            )
            for number, position in enumerate(account.positions, start=1)
        ),
    )


def report_track_positions(snapshot: LedgerSnapshot, account: Account) -> LedgerReport:
    """Build rows comparing each lot's purchase price with the current price."""

    stocks_by_id = snapshot.stocks_by_id()
    rows = []
    for number, position in enumerate(account.positions, start=1):
        stock = stocks_by_id[position.stock_id]
        price_change = stock.current_price - position.purchase_price
        rows.append(
            PositionTrackingRow(
                number=number,
                stock_id=stock.stock_id,
                company_name=stock.company_name,
                current_price=stock.current_price,
                purchase_price=position.purchase_price,
                price_change=price_change,
                lot_profit=price_change * position.quantity,
            )
        )
    return LedgerReport(last_edit_timestamp=snapshot.metadata.last_edit_timestamp, rows=tuple(rows))


def report_rank_accounts(snapshot: LedgerSnapshot) -> LedgerReport:
    """Build leaderboard rows in ranking order."""

    return LedgerReport(
        last_edit_timestamp=snapshot.metadata.last_edit_timestamp,
        rows=tuple(
            AccountRankingRow(
                rank=rank,
                user_name=account.user_name,
                display_name=account.display_name,
                balance=account.balance,
                profit=snapshot.account_profit(account),
                current_day_index=account.current_day_index,
            )
            for rank, account in enumerate(transaction_rank_accounts(snapshot.accounts), start=1)
        ),
    )
