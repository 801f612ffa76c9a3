"""API layer package for the ledger FastAPI application and routers."""

from .application import create_api_application

__all__ = ["create_api_application"]
