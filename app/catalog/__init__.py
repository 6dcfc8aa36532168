"""
Catalog package for the library.

This package owns the book records: the ``CatalogStore`` that holds and
mutates them under validation and ownership rules, the query functions
that compute what a search box and genre picker should show, and the
cover fallback used for display. The HTTP routes in ``router`` are a
thin adapter over these and are imported separately by ``app.main``.
"""

from .covers import book_cover_url  # noqa: F401
from .query import filter_by_genre, match_text, search_books  # noqa: F401
from .schemas import (  # noqa: F401
    BookFormData,
    BookRecord,
    BookUpdate,
    MutationFailure,
    UserIdentity,
    ValidationReport,
)
from .store import CatalogStore  # noqa: F401
