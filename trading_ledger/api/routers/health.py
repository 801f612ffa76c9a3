"""Health endpoint router composition for app and snapshot store checks."""

from fastapi import APIRouter, status
from fastapi.responses import JSONResponse

from trading_ledger.store import SnapshotStorePort


def api_create_health_router(store: SnapshotStorePort) -> APIRouter:
    """Create health-check router with app and snapshot store status.

    Args:
        store: Snapshot store backend shared by ledger sessions.

    Returns:
        APIRouter: Router exposing `/health` endpoint.

    Raises:
        ValueError: Raised when store is invalid.
    """

    if store is None:
        raise ValueError("store must not be None")

    router = APIRouter(tags=["health"])

    @router.get("/health")
    def api_health_status() -> JSONResponse:
        """Return application and snapshot store health state.

        Returns:
            JSONResponse: Deterministic health payload for operational checks.
        """

        try:
            store_health = store.store_check_health()
            payload = {
                "status": "ok",
                "app": "up",
                "store": store_health.status,
                "detail": store_health.detail,
                "target": store.store_label(),
            }
            return JSONResponse(content=payload, status_code=status.HTTP_200_OK)
        except ConnectionError as error:
            payload = {
                "status": "degraded",
                "app": "up",
                "store": "down",
                "detail": str(error),
                "target": store.store_label(),
            }
            return JSONResponse(content=payload, status_code=status.HTTP_503_SERVICE_UNAVAILABLE)

    return router
