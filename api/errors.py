"""
Domain errors raised by the book handler and storage layer.

Each error carries the HTTP status it is rendered with; the FastAPI
exception handlers in ``api.main`` are the only place that turns them
into responses.
"""

from typing import List

from fastapi import status


class BookAPIError(Exception):
    """Base class for errors that map to a client-facing HTTP status."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class BookValidationError(BookAPIError):
    """Payload failed the create or update schema check."""

    status_code = status.HTTP_400_BAD_REQUEST

    def __init__(self, violations: List[str]):
        self.violations = list(violations)
        super().__init__("; ".join(self.violations))


class BookNotFoundError(BookAPIError):
    """No book is stored under the requested isbn."""

    status_code = status.HTTP_404_NOT_FOUND

    def __init__(self, isbn: str):
        self.isbn = isbn
        super().__init__(f"There is no book with an isbn of '{isbn}'")


class BookConflictError(BookAPIError):
    """A book with the same isbn already exists."""

    status_code = status.HTTP_409_CONFLICT

    def __init__(self, isbn: str):
        self.isbn = isbn
        super().__init__(f"A book with an isbn of '{isbn}' already exists")
