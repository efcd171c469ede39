"""Domain-specific exceptions"""


class DomainException(Exception):
    """Base exception for domain layer"""

    pass


class DataAccessError(DomainException):
    """Backend read or write failed.

    Subclasses carry a ``kind`` tag so callers can branch on the failure
    category without inspecting backend error text.
    """

    kind = "unknown"

    def __init__(self, message: str, table: str | None = None):
        super().__init__(message)
        self.table = table


class ConflictError(DataAccessError):
    """Unique-key violation on insert"""

    kind = "conflict"


class BackendValidationError(DataAccessError):
    """Backend rejected the payload, or returned a row that failed decoding"""

    kind = "validation"


class BackendUnavailableError(DataAccessError):
    """Timeout, connection failure, or 5xx from the backend"""

    kind = "network"


class UnknownBackendError(DataAccessError):
    """Backend failure that fits no other category"""

    kind = "unknown"


class FeedbackValidationError(DomainException):
    """Feedback or rating submission is incomplete; raised before any write"""

    def __init__(self, field: str, message: str):
        super().__init__(message)
        self.field = field
