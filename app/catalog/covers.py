"""Cover image resolution for display."""

from __future__ import annotations

import urllib.parse
from typing import List

from .schemas import BookRecord

PLACEHOLDER_COLORS: List[str] = ["6366f1", "8b5cf6", "ec4899", "3b82f6", "10b981", "f59e0b"]


def _utf16_units(title: str) -> bytes:
    return title.encode("utf-16-le", errors="surrogatepass")


def _build_placeholder_url(title: str) -> str:
    # Length and cut point are counted in UTF-16 code units, as browsers count them
    units = _utf16_units(title)
    color = PLACEHOLDER_COLORS[(len(units) // 2) % len(PLACEHOLDER_COLORS)]
    label = units[:40].decode("utf-16-le", errors="ignore")
    text = urllib.parse.quote(label, safe="!*'()")
    return f"https://placehold.co/300x450/{color}/ffffff?text={text}"


def book_cover_url(book: BookRecord) -> str:
    """Return the record's own cover, or a placeholder derived from its title."""
    if book.cover_image and book.cover_image.strip():
        return book.cover_image
    return _build_placeholder_url(book.title)
