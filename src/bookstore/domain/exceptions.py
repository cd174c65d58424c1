"""Domain-level exceptions.

All business rule violations are expressed as subclasses of DomainException
so the CLI layer can catch them uniformly and display user-friendly messages.
None of them is retried by the core; retry policy belongs to the caller.
"""

from __future__ import annotations


class DomainException(Exception):
    """Base class for all domain errors."""


class InvalidRequest(DomainException):
    """Malformed input: empty cart, non-positive quantity, blank address."""


class EntityNotFoundError(DomainException):
    """A requested entity does not exist."""


class BookNotFound(EntityNotFoundError):

    def __init__(self, book_id: int) -> None:
        super().__init__(f"Book #{book_id} not found")
        self.book_id = book_id


class OrderNotFound(EntityNotFoundError):

    def __init__(self, order_id: int) -> None:
        super().__init__(f"Order #{order_id} not found")
        self.order_id = order_id


class UserNotFound(EntityNotFoundError):

    def __init__(self, user_id: int) -> None:
        super().__init__(f"User #{user_id} not found")
        self.user_id = user_id


class InsufficientStock(DomainException):
    """Requested quantity exceeds the stock currently on hand."""

    def __init__(self, book_id: int, requested: int, available: int | None = None) -> None:
        message = f"Insufficient stock for book #{book_id} (need {requested}"
        if available is not None:
            message += f", have {available}"
        super().__init__(message + ")")
        self.book_id = book_id
        self.requested = requested
        self.available = available


class Forbidden(DomainException):
    """The caller is not allowed to act on this entity."""


class InvalidState(DomainException):
    """A status transition is not permitted from the current status."""
