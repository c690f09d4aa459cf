"""Domain errors for ERRATA."""


class DomainError(Exception):
    """Base class for all domain errors."""


class InvalidSnapshotError(DomainError):
    """Raised when a persisted catalog snapshot is malformed."""

    def __init__(self, reason: str) -> None:
        super().__init__(f"Invalid catalog snapshot: {reason}")
        self.reason = reason
