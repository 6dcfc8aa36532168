"""
Validation rules for book records.

The same rules apply to a new record and to the merged result of an
edit. Every failing field gets its own message so a form can show all
problems at once.
"""

from __future__ import annotations

import re
from typing import Dict, Optional

from .schemas import BookFormData

MIN_YEAR = 1000
MIN_DESCRIPTION_LENGTH = 10

_ISBN_HYPHENATED = re.compile(r"^\d{3}-\d-\d{2}-\d{6}-\d$")
_ISBN_DIGITS = re.compile(r"^\d{13}$")


def _blank(s: Optional[str]) -> bool:
    return not (s or "").strip()


def is_valid_isbn(isbn: Optional[str]) -> bool:
    """Accept ``NNN-N-NN-NNNNNN-N`` or exactly 13 digits."""
    value = isbn or ""
    return bool(_ISBN_HYPHENATED.match(value) or _ISBN_DIGITS.match(value))


def validate_book(candidate: BookFormData, current_year: int) -> Dict[str, str]:
    """Return a mapping of field name to error message.

    Parameters
    ----------
    candidate : BookFormData
        The full set of fields the record would have after the change.
    current_year : int
        Upper bound for ``published_year``.

    Returns
    -------
    Dict[str, str]
        Empty when the candidate is valid.
    """
    errors: Dict[str, str] = {}

    if _blank(candidate.title):
        errors["title"] = "Title is required"

    if _blank(candidate.author):
        errors["author"] = "Author is required"

    if _blank(candidate.isbn):
        errors["isbn"] = "ISBN is required"
    elif not is_valid_isbn(candidate.isbn):
        errors["isbn"] = "ISBN must be in format XXX-X-XX-XXXXXX-X or 13 digits"

    year = candidate.published_year
    if year is None:
        errors["published_year"] = "Published year is required"
    elif not isinstance(year, int):
        errors["published_year"] = "Published year must be a whole number"
    elif year < MIN_YEAR or year > current_year:
        errors["published_year"] = f"Year must be between {MIN_YEAR} and {current_year}"

    if _blank(candidate.genre):
        errors["genre"] = "Genre is required"

    description = (candidate.description or "").strip()
    if not description:
        errors["description"] = "Description is required"
    elif len(description) < MIN_DESCRIPTION_LENGTH:
        errors["description"] = (
            f"Description must be at least {MIN_DESCRIPTION_LENGTH} characters"
        )

    return errors
