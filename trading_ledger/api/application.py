"""FastAPI application factory for the trading ledger service."""

from collections.abc import Callable

from fastapi import FastAPI

from trading_ledger.config import AppSettings
from trading_ledger.domain import AppMetadata
from trading_ledger.ledger import TradingSession
from trading_ledger.store import SnapshotStorePort

from .routers import api_create_health_router, api_create_ledger_router


def create_api_application(
    settings: AppSettings,
    store: SnapshotStorePort,
    session_factory: Callable[[], TradingSession],
) -> FastAPI:
    """Create the FastAPI application instance for the service.

    Args:
        settings: Validated application settings used for runtime metadata.
        store: Snapshot store backend used by health endpoints.
        session_factory: Callable opening a trading session per request.

    Returns:
        FastAPI: Framework application instance with health and ledger routes.
    """

    metadata = AppMetadata(application_name="Trading Ledger", environment_name=settings.environment_name)
    application = FastAPI(title=metadata.application_name)

    @application.get("/", tags=["foundation"])
    def foundation_index() -> dict[str, str]:
        """Return a minimal foundation response for bootstrap verification.

        Returns:
            dict[str, str]: Service identification payload.
        """

        return {
            "service": "trading-ledger",
            "status": "foundation-ready",
            "environment": metadata.environment_name,
            "slot": settings.ledger_slot_name,
        }

    application.include_router(api_create_health_router(store=store))
    application.include_router(api_create_ledger_router(session_factory=session_factory))

    return application
