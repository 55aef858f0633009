"""
Payload schemas for creating and updating books.

Both schemas are strict: JSON types are not coerced (``"12"`` is not an
integer, ``true`` is not an integer) and keys outside the declared set are
rejected. ``validate`` reports every violation at once instead of stopping
at the first one.
"""

from typing import Any, Dict, List, Tuple, Type

from pydantic import BaseModel, ConfigDict, Field, ValidationError

IMMUTABLE_FIELDS = ("isbn",)

# Integers are stored as signed 64-bit SQLite INTEGER values
SQLITE_INTEGER_MIN = -2**63
SQLITE_INTEGER_MAX = 2**63 - 1


class BookCreateSchema(BaseModel):
    """Every attribute is required when a book is created."""

    model_config = ConfigDict(extra="forbid", strict=True)

    isbn: str = Field(..., min_length=1, description="Unique book identifier")
    amazon_url: str = Field(..., description="Amazon product page")
    author: str = Field(..., description="Book author")
    language: str = Field(..., description="Language the book is written in")
    pages: int = Field(..., ge=0, le=SQLITE_INTEGER_MAX, description="Number of pages")
    publisher: str = Field(..., description="Book publisher")
    title: str = Field(..., min_length=1, description="Book title")
    year: int = Field(
        ..., ge=SQLITE_INTEGER_MIN, le=SQLITE_INTEGER_MAX, description="Year of publication"
    )


class BookUpdateSchema(BaseModel):
    """
    Any subset of the mutable attributes.

    Defaults are never validated, so an explicit ``null`` for a supplied
    key still fails the type check while an omitted key is left alone.
    ``isbn`` is not declared and is therefore rejected like any unknown key.
    """

    model_config = ConfigDict(extra="forbid", strict=True)

    amazon_url: str = Field(None, description="Amazon product page")
    author: str = Field(None, description="Book author")
    language: str = Field(None, description="Language the book is written in")
    pages: int = Field(None, ge=0, le=SQLITE_INTEGER_MAX, description="Number of pages")
    publisher: str = Field(None, description="Book publisher")
    title: str = Field(None, min_length=1, description="Book title")
    year: int = Field(
        None, ge=SQLITE_INTEGER_MIN, le=SQLITE_INTEGER_MAX, description="Year of publication"
    )


def _format_error(error: Dict[str, Any]) -> str:
    field = ".".join(str(part) for part in error["loc"]) or "body"
    if error["type"] == "extra_forbidden" and field in IMMUTABLE_FIELDS:
        return f"{field}: The {field} of a book cannot be changed"
    return f"{field}: {error['msg']}"


def parse(payload: Any, schema: Type[BaseModel]) -> Tuple[Dict[str, Any], List[str]]:
    """
    Validate a decoded JSON payload once and split the outcome.

    Args:
        payload: Parsed request body
        schema: ``BookCreateSchema`` or ``BookUpdateSchema``

    Returns:
        The attributes the payload actually supplied (empty when rejected)
        and the violation messages, in field order followed by unknown keys
    """
    if not isinstance(payload, dict):
        return {}, ["body: Request body must be a JSON object"]

    try:
        model = schema.model_validate(payload)
    except ValidationError as e:
        return {}, [_format_error(error) for error in e.errors()]
    return model.model_dump(exclude_unset=True), []


def validate(payload: Any, schema: Type[BaseModel]) -> List[str]:
    """Return the violation messages for a payload; empty when it is accepted."""
    _, violations = parse(payload, schema)
    return violations
