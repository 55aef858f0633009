"""
FastAPI main application for the Bookstore API.
"""

from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import Any, Optional

import structlog
from fastapi import Body, Depends, FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from api.config import APIConfig, config
from api.database import BookDatabase
from api.errors import BookAPIError
from api.handlers import BookResourceHandler
from api.models import (
    BookListResponse, BookResponse, ErrorResponse,
    HealthResponse, MessageResponse
)

logger = structlog.get_logger(__name__)


def error_response(message: str, status_code: int, headers: Optional[dict] = None) -> JSONResponse:
    """Render the ``{"error": {"message", "status"}}`` envelope."""
    return JSONResponse(
        status_code=status_code,
        content=ErrorResponse(error={"message": message, "status": status_code}).model_dump(),
        headers=headers
    )


def get_book_handler(request: Request) -> BookResourceHandler:
    """Build a handler around the database opened by the application lifespan."""
    return BookResourceHandler(request.app.state.database)


def create_app(settings: Optional[APIConfig] = None) -> FastAPI:
    """
    Create the FastAPI application.

    Args:
        settings: Configuration to use instead of the environment-derived one

    Returns:
        Configured FastAPI application
    """
    settings = settings or config

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Application lifespan manager."""
        logger.info("Starting Bookstore API", database=settings.database_path)

        database = BookDatabase(settings.database_path)
        await database.connect()
        app.state.database = database

        yield

        logger.info("Shutting down Bookstore API")
        await database.disconnect()

    app = FastAPI(
        title=settings.api_title,
        description=settings.api_description,
        version=settings.api_version,
        debug=settings.debug,
        lifespan=lifespan
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=settings.cors_allow_credentials,
        allow_methods=settings.cors_allow_methods,
        allow_headers=settings.cors_allow_headers,
    )

    # Exception handlers
    @app.exception_handler(BookAPIError)
    async def book_api_exception_handler(request: Request, exc: BookAPIError):
        """Handle domain errors raised by the book handler."""
        return error_response(exc.message, exc.status_code)

    @app.exception_handler(RequestValidationError)
    async def request_validation_exception_handler(request: Request, exc: RequestValidationError):
        """Report unreadable request bodies as validation failures."""
        message = "; ".join(error["msg"] for error in exc.errors())
        return error_response(message, status.HTTP_400_BAD_REQUEST)

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException):
        """Handle HTTP exceptions, including unknown routes."""
        return error_response(str(exc.detail), exc.status_code, headers=exc.headers)

    @app.exception_handler(Exception)
    async def general_exception_handler(request: Request, exc: Exception):
        """Handle general exceptions without leaking internals."""
        logger.error("Unhandled exception", error=str(exc), path=request.url.path)
        return error_response("Internal server error", status.HTTP_500_INTERNAL_SERVER_ERROR)

    @app.get("/health", response_model=HealthResponse, tags=["Health"])
    async def health_check(request: Request):
        """Health check endpoint."""
        health_info = await request.app.state.database.health_check()
        db_status = health_info.get("status", "unknown")

        return HealthResponse(
            status="healthy" if db_status == "healthy" else "degraded",
            timestamp=datetime.now(timezone.utc),
            version=settings.api_version,
            database_status=db_status
        )

    # Books endpoints
    @app.get("/books", response_model=BookListResponse, tags=["Books"])
    async def list_books(handler: BookResourceHandler = Depends(get_book_handler)):
        """Get every book, ordered by title."""
        return BookListResponse(books=await handler.list_books())

    @app.get(
        "/books/{isbn}",
        response_model=BookResponse,
        responses={404: {"model": ErrorResponse}},
        tags=["Books"]
    )
    async def get_book(isbn: str, handler: BookResourceHandler = Depends(get_book_handler)):
        """Get a single book by isbn."""
        return BookResponse(book=await handler.get_book(isbn))

    @app.post(
        "/books",
        response_model=BookResponse,
        status_code=status.HTTP_201_CREATED,
        responses={400: {"model": ErrorResponse}, 409: {"model": ErrorResponse}},
        tags=["Books"]
    )
    async def create_book(
        payload: Any = Body(None),
        handler: BookResourceHandler = Depends(get_book_handler)
    ):
        """
        Create a book.

        All eight attributes are required; unknown keys are rejected.
        """
        return BookResponse(book=await handler.create_book(payload))

    @app.put(
        "/books/{isbn}",
        response_model=BookResponse,
        responses={400: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
        tags=["Books"]
    )
    async def update_book(
        isbn: str,
        payload: Any = Body(None),
        handler: BookResourceHandler = Depends(get_book_handler)
    ):
        """
        Update a book.

        Any subset of the attributes except ``isbn`` may be sent; the rest keep
        their stored values.
        """
        return BookResponse(book=await handler.update_book(isbn, payload))

    @app.delete(
        "/books/{isbn}",
        response_model=MessageResponse,
        responses={404: {"model": ErrorResponse}},
        tags=["Books"]
    )
    async def delete_book(isbn: str, handler: BookResourceHandler = Depends(get_book_handler)):
        """Delete a book by isbn."""
        return MessageResponse(message=await handler.delete_book(isbn))

    return app


app = create_app()
