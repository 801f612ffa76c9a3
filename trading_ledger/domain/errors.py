"""Project-native typed exceptions for ledger entities, sessions and stores."""

from __future__ import annotations


class LedgerValidationError(ValueError):
    """Entity construction failure caused by an out-of-range or malformed field.

    Attributes:
        entity_name: Entity type that rejected the value.
        field_name: Field that failed validation.
    """

    def __init__(self, entity_name: str, field_name: str, value: object):
        super().__init__(f"{entity_name}.init: invalid {field_name}:'{value}'")
        self.entity_name = entity_name
        self.field_name = field_name


class AccessDeniedError(PermissionError):
    """Operation requiring an authenticated account was invoked without one."""


class TransactionFailedError(RuntimeError):
    """Business-rule violation detected while validating a transaction.

    Attributes:
        reason: Human-readable failure reason.
    """

    def __init__(self, reason: str):
        super().__init__(reason)
        self.reason = reason


class SnapshotStoreError(RuntimeError):
    """Base exception for snapshot store I/O failures.

    Attributes:
        slot_name: Slot the failing operation targeted.
    """

    def __init__(self, message: str, slot_name: str | None = None):
        super().__init__(message)
        self.slot_name = slot_name


class SnapshotNotFoundError(SnapshotStoreError):
    """Requested slot does not hold a snapshot."""


class SnapshotCorruptError(SnapshotStoreError):
    """Slot content could not be decoded into a valid snapshot."""
