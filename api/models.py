"""
API response models for the FastAPI application.
"""

from datetime import datetime
from typing import List

from pydantic import BaseModel, Field


class Book(BaseModel):
    """A stored book; every attribute is always populated."""
    isbn: str = Field(..., description="Unique book identifier")
    amazon_url: str = Field(..., description="Amazon product page")
    author: str = Field(..., description="Book author")
    language: str = Field(..., description="Language the book is written in")
    pages: int = Field(..., description="Number of pages")
    publisher: str = Field(..., description="Book publisher")
    title: str = Field(..., description="Book title")
    year: int = Field(..., description="Year of publication")

    model_config = {
        "json_schema_extra": {
            "example": {
                "isbn": "0691161518",
                "amazon_url": "http://a.co/eobPtX2",
                "author": "Matthew Lane",
                "language": "english",
                "pages": 264,
                "publisher": "Princeton University Press",
                "title": "Power-Up: Unlocking the Hidden Mathematics in Video Games",
                "year": 2017
            }
        }
    }


class BookResponse(BaseModel):
    """Single book envelope."""
    book: Book = Field(..., description="The requested book")


class BookListResponse(BaseModel):
    """Response model for the full book listing, ordered by title."""
    books: List[Book] = Field(..., description="List of books")


class MessageResponse(BaseModel):
    """Plain confirmation message."""
    message: str = Field(..., description="Confirmation message")


class ErrorDetail(BaseModel):
    """Error body nested under the ``error`` key."""
    message: str = Field(..., description="Error message")
    status: int = Field(..., description="HTTP status code")


class ErrorResponse(BaseModel):
    """Error response model."""
    error: ErrorDetail


class HealthResponse(BaseModel):
    """Health check response model."""
    status: str = Field(..., description="Service status")
    timestamp: datetime = Field(..., description="Current timestamp")
    version: str = Field(..., description="API version")
    database_status: str = Field(..., description="Database connection status")
