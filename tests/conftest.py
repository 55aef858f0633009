"""
Pytest configuration and shared fixtures.
"""

import pytest
import pytest_asyncio
from fastapi.testclient import TestClient
from unittest.mock import AsyncMock

from api.config import APIConfig
from api.database import BookDatabase
from api.main import create_app
from api.models import Book


@pytest.fixture
def sample_book_payload():
    """Create a complete, valid book payload."""
    return {
        "isbn": "999999999",
        "amazon_url": "https://amazon.com/couperin",
        "author": "Francois Couperin",
        "language": "french",
        "pages": 999,
        "publisher": "French Baroque Masters",
        "title": "The Mysterious Barricades",
        "year": 2020
    }


@pytest.fixture
def other_book_payload():
    """Create a second valid book payload with a different isbn."""
    return {
        "isbn": "8675309",
        "amazon_url": "https://amazon.com/test",
        "author": "Balzac",
        "language": "english",
        "pages": 500,
        "publisher": "Music Man Ltd.",
        "title": "Iowa Stubborn Dames",
        "year": 1910
    }


@pytest.fixture
def full_update_payload():
    """Create an update payload carrying every mutable attribute."""
    return {
        "amazon_url": "https://amazon.com/morefun",
        "author": "Isaac Asimov",
        "language": "german",
        "pages": 1000,
        "publisher": "Foundation Ltd",
        "title": "Updated Book",
        "year": 2000
    }


@pytest_asyncio.fixture
async def book_database():
    """Create a connected in-memory book database."""
    database = BookDatabase(":memory:")
    await database.connect()
    yield database
    await database.disconnect()


@pytest.fixture
def mock_book_database(sample_book_payload):
    """Create a mock book database for testing."""
    database = AsyncMock(spec=BookDatabase)
    book = Book(**sample_book_payload)
    database.list_books.return_value = [book]
    database.get_book.return_value = book
    database.create_book.return_value = book
    database.update_book.return_value = book
    database.delete_book.return_value = True
    return database


@pytest.fixture
def client():
    """Create a test client backed by a fresh in-memory database."""
    app = create_app(APIConfig(database_path=":memory:"))
    with TestClient(app) as test_client:
        yield test_client
