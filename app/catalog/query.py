"""
Search and filtering over a catalog snapshot.

These functions never mutate their input and never touch storage. They
keep the relative order of the records they are given, so the visible
list follows catalog order (most recently added first).
"""

from __future__ import annotations

from typing import List, Optional, Sequence

from .schemas import BookRecord

ALL_GENRES = "all"


def _norm(s: Optional[str]) -> str:
    """Lowercase ``s`` for case-insensitive comparison (``None`` -> ``""``)."""
    return (s or "").lower()


def _matches_text(book: BookRecord, text: str) -> bool:
    # ISBNs are compared verbatim; they are digits and hyphens
    needle = _norm(text)
    return (
        needle in _norm(book.title)
        or needle in _norm(book.author)
        or needle in _norm(book.genre)
        or text in (book.isbn or "")
    )


def _is_all(genre: Optional[str]) -> bool:
    return not genre or genre == ALL_GENRES


def match_text(books: Sequence[BookRecord], text: str) -> List[BookRecord]:
    """Return the books whose title, author, genre or ISBN contain ``text``.

    A blank ``text`` matches everything.
    """
    if not (text or "").strip():
        return list(books)
    return [b for b in books if _matches_text(b, text)]


def filter_by_genre(books: Sequence[BookRecord], genre: Optional[str]) -> List[BookRecord]:
    """Return the books whose genre equals ``genre`` exactly.

    ``"all"`` (or an empty value) disables the filter.
    """
    if _is_all(genre):
        return list(books)
    return [b for b in books if b.genre == genre]


def search_books(
    books: Sequence[BookRecord],
    search_text: Optional[str] = "",
    genre: Optional[str] = ALL_GENRES,
) -> List[BookRecord]:
    """Compute the visible subset of ``books`` for a search box and genre picker.

    Parameters
    ----------
    books : Sequence[BookRecord]
        The catalog snapshot, in catalog order.
    search_text : Optional[str]
        Free text. Matched case-insensitively against title, author and
        genre, and verbatim against the ISBN. Blank means no text filter.
    genre : Optional[str]
        Exact genre to keep, or ``"all"``.

    Returns
    -------
    List[BookRecord]
        Matching books in their original relative order.
    """
    text = search_text or ""
    if not text.strip() and _is_all(genre):
        return list(books)

    results = match_text(books, text)
    return filter_by_genre(results, genre)
