"""Domain models used across application layer boundaries."""

from .errors import (
	AccessDeniedError,
	LedgerValidationError,
	SnapshotCorruptError,
	SnapshotNotFoundError,
	SnapshotStoreError,
	TransactionFailedError,
)
from .models import (
	BOOTSTRAP_EDITOR_ID,
	PURCHASE_TIMESTAMP_FLOOR,
	Account,
	AppMetadata,
	HealthStatus,
	LedgerSnapshot,
	Position,
	SnapshotMetadata,
	Stock,
	domain_calculate_profit,
)

__all__ = [
	"BOOTSTRAP_EDITOR_ID",
	"PURCHASE_TIMESTAMP_FLOOR",
	"AccessDeniedError",
	"Account",
	"AppMetadata",
	"HealthStatus",
	"LedgerSnapshot",
	"LedgerValidationError",
	"Position",
	"SnapshotCorruptError",
	"SnapshotMetadata",
	"SnapshotNotFoundError",
	"SnapshotStoreError",
	"Stock",
	"TransactionFailedError",
	"domain_calculate_profit",
]
