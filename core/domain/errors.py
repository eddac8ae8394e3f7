"""
Order lifecycle errors.

Every error carries the HTTP status it maps to, so the API layer can
translate them without knowing each class.
"""
from typing import Optional


class OrderLifecycleError(Exception):
    """Base class for expected lifecycle failures."""

    status_code: int = 400

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class CommitValidationError(OrderLifecycleError, ValueError):
    """Missing or malformed identifiers. Raised before any store access."""

    status_code = 400


class OrderNotFoundError(OrderLifecycleError):
    """
    Order does not exist, or belongs to another seller.

    Both causes share one message so non-owners cannot probe for
    order existence.
    """

    status_code = 404

    def __init__(self, message: str = "Order not found or unauthorized"):
        super().__init__(message)


class InvalidOrderStateError(OrderLifecycleError):
    """Order is not in the status the operation expects."""

    status_code = 409

    def __init__(self, actual_status: str, message: Optional[str] = None):
        self.actual_status = actual_status
        super().__init__(message or f"Invalid order status: {actual_status}")


class SweepCrashedError(OrderLifecycleError):
    """A batch run failed before it could iterate its candidates."""

    status_code = 500
