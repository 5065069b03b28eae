from __future__ import annotations


class BookstoreError(Exception):
    """Base class for errors raised by the inventory store."""


class InvalidArgument(BookstoreError, ValueError):
    """The operation does not support the given address or argument."""


class InvalidAddress(InvalidArgument):
    """The address does not match any known resource shape."""

    def __init__(self, uri: str, operation: str = "access") -> None:
        self.uri = uri
        self.operation = operation
        super().__init__(f"Cannot {operation} unknown URI {uri}")


class InvalidInput(BookstoreError, ValueError):
    """A required field is missing or fails a validation rule."""

    def __init__(self, message: str, field: str | None = None) -> None:
        self.field = field
        super().__init__(message)


class OutOfStockError(BookstoreError, ValueError):
    """A sale was attempted on a book whose quantity is already zero."""
