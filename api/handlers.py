"""
Book resource operations.

The handler validates input, issues at most one storage call, and turns
the storage outcome into a ``Book`` or a domain error. It knows nothing
about HTTP; ``api.main`` renders its errors.
"""

from typing import Any, List

import structlog

from api.database import BookDatabase
from api.errors import BookNotFoundError, BookValidationError
from api.models import Book
from api.schemas import BookCreateSchema, BookUpdateSchema, parse

logger = structlog.get_logger(__name__)


class BookResourceHandler:
    """List, get, create, update and delete books against an injected store."""

    def __init__(self, database: BookDatabase):
        self.database = database

    async def list_books(self) -> List[Book]:
        return await self.database.list_books()

    async def get_book(self, isbn: str) -> Book:
        book = await self.database.get_book(isbn)
        if book is None:
            logger.info("Book not found", isbn=isbn)
            raise BookNotFoundError(isbn)
        return book

    async def create_book(self, payload: Any) -> Book:
        """
        Validate a full book payload and insert it.

        Raises:
            BookValidationError: Payload does not match the create schema
            BookConflictError: The isbn is already taken
        """
        fields, violations = parse(payload, BookCreateSchema)
        if violations:
            logger.info("Rejected book payload", operation="create", violations=violations)
            raise BookValidationError(violations)

        book = await self.database.create_book(fields)
        logger.info("Book created", isbn=book.isbn)
        return book

    async def update_book(self, isbn: str, payload: Any) -> Book:
        """
        Validate a partial book payload and merge it into the stored book.

        Only the keys present in ``payload`` change. ``isbn`` and unknown keys
        are rejected before storage is touched.

        Raises:
            BookValidationError: Payload does not match the update schema
            BookNotFoundError: No book has this isbn
        """
        fields, violations = parse(payload, BookUpdateSchema)
        if violations:
            logger.info("Rejected book payload", operation="update", isbn=isbn, violations=violations)
            raise BookValidationError(violations)

        book = await self.database.update_book(isbn, fields)
        if book is None:
            logger.info("Book not found", isbn=isbn)
            raise BookNotFoundError(isbn)

        logger.info("Book updated", isbn=isbn, fields=sorted(fields))
        return book

    async def delete_book(self, isbn: str) -> str:
        if not await self.database.delete_book(isbn):
            logger.info("Book not found", isbn=isbn)
            raise BookNotFoundError(isbn)

        logger.info("Book deleted", isbn=isbn)
        return "Book deleted"
