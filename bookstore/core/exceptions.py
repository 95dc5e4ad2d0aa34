"""
Business error taxonomy.

Every failure raised by the promotion, report and rules services is one of the
classes below. Each carries a stable ``kind`` string so callers can branch on
the failure without matching message text, a user-facing ``message`` and an
optional ``context`` dict with structured details (shortfall, offending
fields, ...). The HTTP status for each kind is decided by the API layer.
"""
import logging
from contextlib import contextmanager
from typing import Any, Dict, Iterator, Optional

from sqlalchemy.exc import SQLAlchemyError


logger = logging.getLogger(__name__)


class BookstoreError(Exception):
    """Base class for all typed business errors."""

    kind: str = "error"

    def __init__(self, message: str, context: Optional[Dict[str, Any]] = None):
        self.message = message
        self.context = context or {}
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "error": self.kind,
            "message": self.message,
            "context": self.context,
        }

    def __repr__(self) -> str:
        return f"{type(self).__name__}(message={self.message!r}, context={self.context!r})"


class MissingParameterError(BookstoreError):
    """A required input was omitted or empty."""
    kind = "missing_parameter"


class InvalidParameterError(BookstoreError):
    """An input was present but malformed or out of range."""
    kind = "invalid_parameter"


class NotFoundError(BookstoreError):
    """The referenced promotion or rules record does not exist."""
    kind = "not_found"


class ExpiredError(BookstoreError):
    """Today is outside the promotion window.

    ``context["reason"]`` is ``"not_started"`` or ``"expired"``.
    """
    kind = "expired"

    @property
    def reason(self) -> Optional[str]:
        return self.context.get("reason")


class ExhaustedError(BookstoreError):
    """The promotion reached its redemption cap."""
    kind = "exhausted"


class BelowMinimumError(BookstoreError):
    """The order total is below the promotion minimum."""
    kind = "below_minimum"

    @property
    def shortfall(self):
        return self.context.get("shortfall")


class NotApplicableError(BookstoreError):
    """None of the cart's books are in the promotion scope."""
    kind = "not_applicable"


class DurationExceededError(BookstoreError):
    """The promotion window is longer than the configured maximum."""
    kind = "duration_exceeded"


class InvalidRulesError(BookstoreError):
    """One or more rules fields violate their constraints."""
    kind = "invalid_rules"


class InternalError(BookstoreError):
    """Unclassified failure from the storage layer."""
    kind = "internal"


@contextmanager
def storage_errors(operation: str) -> Iterator[None]:
    """Re-raise database failures inside the block as InternalError."""
    try:
        yield
    except SQLAlchemyError as exc:
        logger.error("Storage failure during %s: %s", operation, exc, exc_info=True)
        raise InternalError(
            "Lỗi hệ thống, vui lòng thử lại sau",
            {"operation": operation},
        ) from exc
