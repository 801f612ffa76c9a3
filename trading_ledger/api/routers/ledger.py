"""Ledger API router composition for trading session endpoints.

Every request opens its own trading session, authenticates it with the HTTP
Basic credentials sent along, and runs exactly one report or mutation.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import asdict
from datetime import datetime
from decimal import Decimal

from fastapi import APIRouter, Depends, status
from fastapi.responses import JSONResponse
from fastapi.security import HTTPBasic, HTTPBasicCredentials
from pydantic import BaseModel, Field

from trading_ledger.domain import AccessDeniedError, SnapshotStoreError, TransactionFailedError
from trading_ledger.ledger import LedgerReport, TradingSession, TransactionOutcome

_BASIC_SECURITY = HTTPBasic()


class PurchaseRequest(BaseModel):
    """Request body for buying shares of a listed stock."""

    stock_number: int = Field(description="1-based stock number as listed by /ledger/stocks")
    quantity: int


class SaleRequest(BaseModel):
    """Request body for selling shares out of an owned lot."""

    position_number: int = Field(description="1-based lot number as listed by /ledger/positions")
    quantity: int


def api_create_ledger_router(session_factory: Callable[[], TradingSession]) -> APIRouter:
    """Create ledger router with report and transaction endpoints.

    Args:
        session_factory: Callable opening a fresh session over the shared slot.

    Returns:
        APIRouter: Router exposing `/ledger/*` endpoints.

    Raises:
        ValueError: Raised when session_factory is invalid.
    """

    if session_factory is None:
        raise ValueError("session_factory must not be None")

    router = APIRouter(prefix="/ledger", tags=["ledger"])

    def api_run_authenticated(
        credentials: HTTPBasicCredentials,
        handler: Callable[[TradingSession], JSONResponse],
    ) -> JSONResponse:
        try:
            session = session_factory()
            authentication = session.authenticate(credentials.username, credentials.password)
            if not authentication.authenticated:
                return api_error_response(
                    status.HTTP_401_UNAUTHORIZED,
                    code="INVALID_CREDENTIALS",
                    message=authentication.message,
                    headers={"WWW-Authenticate": "Basic"},
                )
            return handler(session)
        except AccessDeniedError as error:
            return api_error_response(
                status.HTTP_401_UNAUTHORIZED,
                code="NOT_AUTHENTICATED",
                message=str(error),
                headers={"WWW-Authenticate": "Basic"},
            )
        except TransactionFailedError as error:
            return api_error_response(
                status.HTTP_422_UNPROCESSABLE_ENTITY,
                code="TRANSACTION_FAILED",
                message="transaction failed",
                reason=error.reason,
            )
        except SnapshotStoreError as error:
            return api_error_response(
                status.HTTP_503_SERVICE_UNAVAILABLE,
                code="STORE_UNAVAILABLE",
                message=str(error),
            )

    @router.get("/status")
    def api_ledger_status(credentials: HTTPBasicCredentials = Depends(_BASIC_SECURITY)) -> JSONResponse:
        """Return the authenticated account summary and virtual server time."""

        def handler(session: TradingSession) -> JSONResponse:
            payload = {
                "account_name": session.current_account_name,
                "balance": api_serialize_value(session.current_balance),
                "current_day_index": session.current_day_index,
                "day": session.snapshot.day,
                "server_time": session.server_time().isoformat(),
            }
            return JSONResponse(content=payload, status_code=status.HTTP_200_OK)

        return api_run_authenticated(credentials, handler)

    @router.get("/stocks")
    def api_ledger_stock_list(credentials: HTTPBasicCredentials = Depends(_BASIC_SECURITY)) -> JSONResponse:
        """Return market listing rows."""

        return api_run_authenticated(credentials, lambda session: api_report_response(session.list_stocks()))

    @router.get("/positions")
    def api_ledger_position_list(credentials: HTTPBasicCredentials = Depends(_BASIC_SECURITY)) -> JSONResponse:
        """Return the authenticated account's lots."""

        return api_run_authenticated(credentials, lambda session: api_report_response(session.list_positions()))

    @router.get("/positions/tracking")
    def api_ledger_position_tracking(credentials: HTTPBasicCredentials = Depends(_BASIC_SECURITY)) -> JSONResponse:
        """Return current-versus-purchase price rows for the account's lots."""

        return api_run_authenticated(credentials, lambda session: api_report_response(session.track_positions()))

    @router.get("/rankings")
    def api_ledger_rankings(credentials: HTTPBasicCredentials = Depends(_BASIC_SECURITY)) -> JSONResponse:
        """Return the leaderboard."""

        return api_run_authenticated(credentials, lambda session: api_report_response(session.rank_accounts()))

    @router.post("/purchases")
    def api_ledger_purchase(
        purchase_request: PurchaseRequest,
        credentials: HTTPBasicCredentials = Depends(_BASIC_SECURITY),
    ) -> JSONResponse:
        """Buy shares of a listed stock.

        Returns:
            JSONResponse: 200 when committed, 409 when the snapshot was stale.
        """

        return api_run_authenticated(
            credentials,
            lambda session: api_outcome_response(
                session.purchase(purchase_request.stock_number, purchase_request.quantity)
            ),
        )

    @router.post("/sales")
    def api_ledger_sale(
        sale_request: SaleRequest,
        credentials: HTTPBasicCredentials = Depends(_BASIC_SECURITY),
    ) -> JSONResponse:
        """Sell shares out of an owned lot.

        Returns:
            JSONResponse: 200 when committed, 409 when the snapshot was stale.
        """

        return api_run_authenticated(
            credentials,
            lambda session: api_outcome_response(session.sell(sale_request.position_number, sale_request.quantity)),
        )

    @router.post("/days")
    def api_ledger_advance_day(credentials: HTTPBasicCredentials = Depends(_BASIC_SECURITY)) -> JSONResponse:
        """Reprice the market and advance one day.

        Returns:
            JSONResponse: 200 when committed, 409 when the snapshot was stale.
        """

        return api_run_authenticated(credentials, lambda session: api_outcome_response(session.advance_day()))

    return router


def api_error_response(
    status_code: int,
    code: str,
    message: str,
    headers: dict[str, str] | None = None,
    **extra_fields: object,
) -> JSONResponse:
    """Build the shared error payload.

    Args:
        status_code: HTTP status code.
        code: Stable machine-readable error code.
        message: Human-readable error message.
        headers: Optional response headers.
        extra_fields: Additional payload fields.

    Returns:
        JSONResponse: Error response.
    """

    payload = {"status": "error", "code": code, "message": message, **extra_fields}
    return JSONResponse(content=payload, status_code=status_code, headers=headers)


def api_outcome_response(outcome: TransactionOutcome) -> JSONResponse:
    """Map a transaction outcome to an HTTP response.

    Args:
        outcome: Session transaction outcome.

    Returns:
        JSONResponse: 200 for committed outcomes, 409 with `STALE_SNAPSHOT` for stale ones.
    """

    if not outcome.committed:
        return api_error_response(
            status.HTTP_409_CONFLICT,
            code="STALE_SNAPSHOT",
            message=outcome.message,
            operation=outcome.operation,
        )
    payload = {"status": outcome.status, "operation": outcome.operation, "message": outcome.message}
    return JSONResponse(content=payload, status_code=status.HTTP_200_OK)


def api_report_response(report: LedgerReport) -> JSONResponse:
    """Serialize a ledger report to a 200 response."""

    payload = {
        "last_edit_timestamp": report.last_edit_timestamp.isoformat(),
        "rows": [{key: api_serialize_value(value) for key, value in asdict(row).items()} for row in report.rows],
    }
    return JSONResponse(content=payload, status_code=status.HTTP_200_OK)


def api_serialize_value(value: object) -> object:
    """Convert decimals and timestamps to JSON-safe strings."""

    if isinstance(value, Decimal):
        return str(value)
    if isinstance(value, datetime):
        return value.isoformat()
    return value


__all__ = [
    "PurchaseRequest",
    "SaleRequest",
    "api_create_ledger_router",
    "api_error_response",
    "api_outcome_response",
    "api_report_response",
    "api_serialize_value",
]
