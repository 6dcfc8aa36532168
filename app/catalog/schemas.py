"""
Pydantic schema definitions for the catalog module.

``BookRecord`` is the stored unit of the catalog. ``BookFormData`` and
``BookUpdate`` carry what a contributor submits when creating or
editing a record; the store fills in ``id``, ``added_date`` and
``created_by`` itself. The remaining models are results handed back to
callers: validation reports, aggregates and the dashboard snapshot.
"""

import re
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, List, Optional, Union

from pydantic import BaseModel, Field, ValidationInfo, field_validator
from typing_extensions import Literal


class BookRecord(BaseModel):
    """A single book entry.

    ``id`` and ``added_date`` are assigned once when the record is
    created and never change afterwards. ``created_by`` holds the name
    of the contributor who created the record; it is ``None`` only for
    legacy data, and such records cannot be edited by anyone.
    ``cover_image`` is optional; display code falls back to a generated
    placeholder (see ``covers.book_cover_url``) which is never stored.
    """

    id: str
    title: str
    author: str
    isbn: str
    published_year: int
    genre: str
    description: str
    cover_image: Optional[str] = None
    added_date: datetime
    created_by: Optional[str] = None

    @field_validator("added_date")
    @classmethod
    def _assume_utc(cls, value: datetime) -> datetime:
        # Older blobs may carry naive timestamps; they were written in UTC
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value


TEXT_FIELDS = ("title", "author", "isbn", "genre", "description", "cover_image")

_WHOLE_NUMBER = re.compile(r"^[+-]?\d+$")


def _as_text(value: Any) -> Any:
    if value is None or isinstance(value, str):
        return value
    return str(value)


def _as_year(value: Any) -> Any:
    """Coerce whatever the form sent for the year into an int where possible.

    Anything that is not a whole number is kept as text so that
    ``validate_book`` can report it next to the other failing fields.
    """
    if value is None or isinstance(value, bool):
        return None if value is None else str(value)
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return int(value) if value.is_integer() else str(value)
    text = str(value).strip()
    if not text:
        return None
    if _WHOLE_NUMBER.match(text):
        return int(text)
    return text


class BookFormData(BaseModel):
    """Fields supplied by a contributor for a new record.

    Values are taken as entered; the store validates them and reports
    every problem at once instead of rejecting on construction. A year
    that is not a whole number is therefore kept as its text.
    """

    title: str = ""
    author: str = ""
    isbn: str = ""
    published_year: Optional[Union[int, str]] = None
    genre: str = ""
    description: str = ""
    cover_image: Optional[str] = None

    @field_validator(*TEXT_FIELDS, mode="before")
    @classmethod
    def _loose_text(cls, value: Any, info: ValidationInfo) -> Any:
        if value is None and info.field_name != "cover_image":
            return ""
        return _as_text(value)

    @field_validator("published_year", mode="before")
    @classmethod
    def _loose_year(cls, value: Any) -> Any:
        return _as_year(value)


class BookUpdate(BaseModel):
    """Partial edit of an existing record. Omitted fields are left as they are."""

    title: Optional[str] = None
    author: Optional[str] = None
    isbn: Optional[str] = None
    published_year: Optional[Union[int, str]] = None
    genre: Optional[str] = None
    description: Optional[str] = None
    cover_image: Optional[str] = None

    @field_validator(*TEXT_FIELDS, mode="before")
    @classmethod
    def _loose_text(cls, value: Any) -> Any:
        return _as_text(value)

    @field_validator("published_year", mode="before")
    @classmethod
    def _loose_year(cls, value: Any) -> Any:
        # A cleared year is an edit, not "unchanged"; the merge reports it missing
        if isinstance(value, str) and not value.strip():
            return ""
        return _as_year(value)


class ValidationReport(BaseModel):
    """Field-keyed validation messages, one per failing field."""

    errors: Dict[str, str] = Field(default_factory=dict)


class MutationFailure(str, Enum):
    """Why an update or delete was refused."""

    NOT_FOUND = "not_found"
    NOT_OWNER = "not_owner"


class UserIdentity(BaseModel):
    name: str
    role: Literal["admin", "contributor"] = "contributor"


class LoginRequest(BaseModel):
    username: str = ""
    password: str = ""


class GenreCount(BaseModel):
    genre: str
    count: int


class CatalogStats(BaseModel):
    """Snapshot of the catalog used by the contributor dashboard."""

    total_books: int
    total_authors: int
    books_by_genre: List[GenreCount]
    recent_books: List[BookRecord]


class BookView(BookRecord):
    """A record as shown to clients, with its resolved cover URL."""

    cover_url: str = ""
