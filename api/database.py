"""
Relational storage for books.

A single aiosqlite connection is opened in autocommit mode, so every
statement below commits atomically on its own. Each operation is exactly
one statement; mutating statements use RETURNING to hand back the row they
touched, which removes any need for a read-then-write pair.
"""

import sqlite3
from pathlib import Path
from typing import Any, Dict, List, Optional

import aiosqlite
import structlog

from api.errors import BookConflictError
from api.models import Book

logger = structlog.get_logger(__name__)

BOOK_COLUMNS = (
    "isbn",
    "amazon_url",
    "author",
    "language",
    "pages",
    "publisher",
    "title",
    "year",
)
MUTABLE_COLUMNS = BOOK_COLUMNS[1:]

_SELECT_COLUMNS = ", ".join(BOOK_COLUMNS)

BOOKS_TABLE = """
    CREATE TABLE IF NOT EXISTS books (
        isbn TEXT PRIMARY KEY,
        amazon_url TEXT NOT NULL,
        author TEXT NOT NULL,
        language TEXT NOT NULL,
        pages INTEGER NOT NULL,
        publisher TEXT NOT NULL,
        title TEXT NOT NULL,
        year INTEGER NOT NULL
    )
"""


class BookDatabase:
    """
    Async SQLite store for the ``books`` table.
    Handles connection, schema creation and the single-statement CRUD calls.
    """

    def __init__(self, database_path: str):
        """
        Initialize the book store.

        Args:
            database_path: SQLite file path, or ":memory:"
        """
        self.database_path = database_path
        self.file_path: Optional[Path] = None if database_path == ":memory:" else Path(database_path)
        self.connection: Optional[aiosqlite.Connection] = None

    async def connect(self) -> None:
        """Open the connection and make sure the books table exists."""
        try:
            if self.file_path:
                self.file_path.parent.mkdir(parents=True, exist_ok=True)

            self.connection = await aiosqlite.connect(self.database_path, isolation_level=None)
            self.connection.row_factory = aiosqlite.Row

            if self.file_path:
                await self.connection.execute("PRAGMA journal_mode=WAL")
                await self.connection.execute("PRAGMA busy_timeout=5000")

            await self.connection.execute(BOOKS_TABLE)
            logger.info("Connected to book database", database=self.database_path)

        except sqlite3.Error as e:
            logger.error("Failed to connect to book database", database=self.database_path, error=str(e))
            raise

    async def disconnect(self) -> None:
        """Close the connection."""
        if self.connection:
            await self.connection.close()
            self.connection = None
            logger.info("Disconnected from book database")

    async def _fetch_all(self, query: str, params: tuple = ()) -> List[Dict[str, Any]]:
        if self.connection is None:
            raise RuntimeError("Book database is not connected")
        async with self.connection.execute(query, params) as cursor:
            rows = await cursor.fetchall()
        return [dict(row) for row in rows]

    async def _fetch_one(self, query: str, params: tuple = ()) -> Optional[Dict[str, Any]]:
        rows = await self._fetch_all(query, params)
        return rows[0] if rows else None

    async def list_books(self) -> List[Book]:
        """Get every book ordered by title."""
        try:
            rows = await self._fetch_all(f"SELECT {_SELECT_COLUMNS} FROM books ORDER BY title")
            return [Book(**row) for row in rows]
        except sqlite3.Error as e:
            logger.error("Failed to list books", error=str(e))
            raise

    async def get_book(self, isbn: str) -> Optional[Book]:
        """
        Get a single book by isbn.

        Returns:
            Book if found, None otherwise
        """
        try:
            row = await self._fetch_one(
                f"SELECT {_SELECT_COLUMNS} FROM books WHERE isbn = ?", (isbn,)
            )
            return Book(**row) if row else None
        except sqlite3.Error as e:
            logger.error("Failed to get book", isbn=isbn, error=str(e))
            raise

    async def create_book(self, fields: Dict[str, Any]) -> Book:
        """
        Insert a complete book.

        Args:
            fields: All eight book attributes

        Returns:
            The stored book

        Raises:
            BookConflictError: A book with the same isbn already exists
        """
        placeholders = ", ".join("?" for _ in BOOK_COLUMNS)
        params = tuple(fields[column] for column in BOOK_COLUMNS)
        try:
            row = await self._fetch_one(
                f"INSERT INTO books ({_SELECT_COLUMNS}) VALUES ({placeholders}) "
                f"RETURNING {_SELECT_COLUMNS}",
                params,
            )
        except sqlite3.IntegrityError as e:
            if "UNIQUE" not in str(e):
                logger.error("Failed to insert book", isbn=fields["isbn"], error=str(e))
                raise
            logger.warning("Book already exists", isbn=fields["isbn"])
            raise BookConflictError(fields["isbn"]) from e
        except sqlite3.Error as e:
            logger.error("Failed to insert book", isbn=fields["isbn"], error=str(e))
            raise

        logger.debug("Inserted book", isbn=row["isbn"])
        return Book(**row)

    async def update_book(self, isbn: str, fields: Dict[str, Any]) -> Optional[Book]:
        """
        Merge the supplied attributes into an existing book.

        An empty ``fields`` still issues the update as a no-op refresh so the
        caller learns whether the book exists.

        Args:
            isbn: Identifier of the book to change
            fields: Subset of the mutable attributes

        Returns:
            The merged book, or None when no book has that isbn
        """
        unknown = set(fields) - set(MUTABLE_COLUMNS)
        if unknown:
            raise ValueError(f"Cannot update columns: {sorted(unknown)}")

        if fields:
            assignments = ", ".join(f"{column} = ?" for column in fields)
            params = tuple(fields.values()) + (isbn,)
        else:
            assignments = "isbn = isbn"
            params = (isbn,)

        try:
            row = await self._fetch_one(
                f"UPDATE books SET {assignments} WHERE isbn = ? RETURNING {_SELECT_COLUMNS}",
                params,
            )
        except sqlite3.Error as e:
            logger.error("Failed to update book", isbn=isbn, error=str(e))
            raise

        if row:
            logger.debug("Updated book", isbn=isbn, fields=sorted(fields))
            return Book(**row)
        return None

    async def delete_book(self, isbn: str) -> bool:
        """
        Delete a book by isbn.

        Returns:
            bool: True if a row was removed, False if none matched
        """
        try:
            row = await self._fetch_one("DELETE FROM books WHERE isbn = ? RETURNING isbn", (isbn,))
        except sqlite3.Error as e:
            logger.error("Failed to delete book", isbn=isbn, error=str(e))
            raise

        if row:
            logger.debug("Deleted book", isbn=isbn)
        return row is not None

    async def health_check(self) -> Dict:
        """
        Perform database health check.

        Returns:
            Dictionary with health status
        """
        try:
            row = await self._fetch_one("SELECT COUNT(*) AS books_count FROM books")
            return {
                "status": "healthy",
                "books_count": row["books_count"]
            }
        except (sqlite3.Error, RuntimeError) as e:
            logger.error("Database health check failed", error=str(e))
            return {
                "status": "unhealthy",
                "error": str(e)
            }
