"""Database layer package for all SQL and persistence boundaries."""

from .session import db_create_engine
from .snapshot_store import SQLAlchemySnapshotStore

__all__ = [
	"SQLAlchemySnapshotStore",
	"db_create_engine",
]
