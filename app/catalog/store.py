"""
Catalog store: the single owner of the list of book records.

A ``CatalogStore`` is built explicitly by whoever boots the session and
handed to the query and presentation layers. It hydrates itself from a
blob store, falls back to the bundled sample dataset when nothing
usable is stored, and writes the whole catalog back after every
successful mutation.

Expected failures are returned, not raised:

* ``add``/``update`` return a ``ValidationReport`` when fields are bad;
* ``update`` returns a ``MutationFailure`` for unknown ids or when the
  requester does not own the record;
* ``delete`` returns ``False`` in both of those cases.

Only ``StorageError`` propagates. A mutation whose write fails is rolled
back so callers never see a half-applied change.
"""

from __future__ import annotations

import json
import logging
import uuid
from datetime import datetime, timezone
from pathlib import Path
from typing import Callable, Dict, List, Optional, Union

from pydantic import TypeAdapter

from ..storage import BOOKS_KEY, BlobStore
from .schemas import (
    BookFormData,
    BookRecord,
    BookUpdate,
    CatalogStats,
    GenreCount,
    MutationFailure,
    ValidationReport,
)
from .validation import validate_book

logger = logging.getLogger(__name__)

# Built-in dataset used when the blob store holds no usable catalog
DATA_FILE = Path(__file__).resolve().parents[1] / "data" / "sample_books.json"

_BOOK_LIST = TypeAdapter(List[BookRecord])

Clock = Callable[[], datetime]
IdFactory = Callable[[], str]


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


def _new_id() -> str:
    return uuid.uuid4().hex


def load_sample_books() -> List[BookRecord]:
    """Load the bundled sample books.

    Returns
    -------
    List[BookRecord]
        The six seed records, each created by ``"Admin"``.
    """
    with DATA_FILE.open("r", encoding="utf-8") as f:
        return _BOOK_LIST.validate_python(json.load(f))


class CatalogStore:
    """Authoritative, ownership-checked list of book records.

    Parameters
    ----------
    blob_store : BlobStore
        Where the serialized catalog lives between sessions.
    clock : Callable[[], datetime], optional
        Source of the current UTC time for ``added_date`` and the
        published-year upper bound.
    id_factory : Callable[[], str], optional
        Produces candidate record ids. Candidates already in use are
        discarded and a new one is requested.
    """

    def __init__(
        self,
        blob_store: BlobStore,
        clock: Optional[Clock] = None,
        id_factory: Optional[IdFactory] = None,
    ) -> None:
        self._blob_store = blob_store
        self._clock = clock or _utc_now
        self._id_factory = id_factory or _new_id
        self._books: List[BookRecord] = []

    # ── Persistence ───────────────────────────────────────────────────────

    def initialize(self) -> None:
        """Hydrate the catalog from the blob store, seeding it if needed."""
        raw = self._blob_store.get(BOOKS_KEY)
        books = self._parse(raw) if raw is not None else None
        if books is not None:
            self._books = books
            logger.debug("Books loaded from storage (count=%d)", len(books))
            return

        self._books = load_sample_books()
        logger.info("Initialized with sample data (count=%d)", len(self._books))
        self._persist()

    @staticmethod
    def _parse(raw: str) -> Optional[List[BookRecord]]:
        try:
            books = _BOOK_LIST.validate_json(raw)
        except ValueError as exc:
            logger.warning("Stored catalog is unreadable, using sample data: %s", exc)
            return None
        ids = [b.id for b in books]
        if len(set(ids)) != len(ids):
            logger.warning("Stored catalog has duplicate ids, using sample data")
            return None
        return books

    def _persist(self) -> None:
        payload = _BOOK_LIST.dump_json(self._books).decode("utf-8")
        self._blob_store.set(BOOKS_KEY, payload)

    def _commit(self, previous: List[BookRecord]) -> None:
        """Persist the current list, restoring ``previous`` if the write fails."""
        try:
            self._persist()
        except Exception:
            self._books = previous
            logger.error("Catalog write failed; change rolled back")
            raise

    # ── Reads ─────────────────────────────────────────────────────────────

    def list(self) -> List[BookRecord]:
        """Return a copy of every record in catalog order (newest first)."""
        return [b.model_copy() for b in self._books]

    def get_by_id(self, book_id: str) -> Optional[BookRecord]:
        book = self._find(book_id)
        return book.model_copy() if book is not None else None

    def __len__(self) -> int:
        return len(self._books)

    def _find(self, book_id: str) -> Optional[BookRecord]:
        return next((b for b in self._books if b.id == book_id), None)

    def _index_of(self, book_id: str) -> int:
        for i, b in enumerate(self._books):
            if b.id == book_id:
                return i
        return -1

    # ── Mutations ─────────────────────────────────────────────────────────

    def add(self, form: BookFormData, author: str) -> Union[BookRecord, ValidationReport]:
        """Create a record owned by ``author`` and put it at the top of the catalog.

        Returns the new record, or a ``ValidationReport`` when any field
        is invalid (nothing is stored in that case).
        """
        now = self._clock()
        errors = validate_book(form, now.year)
        if errors:
            logger.debug("Book rejected: %s", sorted(errors))
            return ValidationReport(errors=errors)

        book = BookRecord(
            **form.model_dump(),
            id=self._generate_id(),
            added_date=now,
            created_by=author,
        )
        previous = list(self._books)
        self._books.insert(0, book)
        self._commit(previous)
        logger.info("Book added (id=%s, title=%r)", book.id, book.title)
        return book.model_copy()

    def update(
        self, book_id: str, changes: BookUpdate, requester: Optional[str]
    ) -> Union[BookRecord, ValidationReport, MutationFailure]:
        """Apply ``changes`` to a record owned by ``requester``.

        ``id``, ``added_date`` and ``created_by`` are never touched. The
        merged record is validated with the same rules as ``add``.
        """
        index = self._index_of(book_id)
        if index == -1:
            logger.warning("Book update failed: book not found (id=%s)", book_id)
            return MutationFailure.NOT_FOUND
        current = self._books[index]
        if not self.can_edit(current, requester):
            logger.warning(
                "Book update refused: %r does not own id=%s", requester, book_id
            )
            return MutationFailure.NOT_OWNER

        # An explicit None only clears the optional cover; elsewhere it means "unchanged"
        updates = {
            k: v
            for k, v in changes.model_dump(exclude_unset=True).items()
            if v is not None or k == "cover_image"
        }
        candidate = BookFormData(
            **{**current.model_dump(include=set(BookFormData.model_fields)), **updates}
        )
        errors = validate_book(candidate, self._clock().year)
        if errors:
            return ValidationReport(errors=errors)
        merged = current.model_copy(update=updates)

        previous = list(self._books)
        self._books[index] = merged
        self._commit(previous)
        logger.info("Book updated (id=%s, title=%r)", book_id, merged.title)
        return merged.model_copy()

    def delete(self, book_id: str, requester: Optional[str]) -> bool:
        """Remove a record owned by ``requester``. Returns ``False`` when refused."""
        index = self._index_of(book_id)
        if index == -1:
            logger.warning("Book deletion failed: book not found (id=%s)", book_id)
            return False
        book = self._books[index]
        if not self.can_edit(book, requester):
            logger.warning(
                "Book deletion refused: %r does not own id=%s", requester, book_id
            )
            return False

        previous = list(self._books)
        del self._books[index]
        self._commit(previous)
        logger.info("Book deleted (id=%s, title=%r)", book_id, book.title)
        return True

    @staticmethod
    def can_edit(book: BookRecord, requester: Optional[str]) -> bool:
        """Only the creator may change a record; legacy records belong to nobody."""
        if not requester or book.created_by is None:
            return False
        return book.created_by == requester

    def _generate_id(self) -> str:
        taken = {b.id for b in self._books}
        candidate = self._id_factory()
        while candidate in taken:
            candidate = self._id_factory()
        return candidate

    # ── Aggregates ────────────────────────────────────────────────────────

    def genres(self) -> List[str]:
        return sorted({b.genre for b in self._books})

    def genre_counts(self) -> List[GenreCount]:
        """Books per genre, largest first; ties keep first-appearance order."""
        counts: Dict[str, int] = {}
        for book in self._books:
            counts[book.genre] = counts.get(book.genre, 0) + 1
        ordered = sorted(counts.items(), key=lambda item: item[1], reverse=True)
        return [GenreCount(genre=g, count=c) for g, c in ordered]

    def distinct_author_count(self) -> int:
        return len({b.author for b in self._books})

    def recent(self, n: int = 5) -> List[BookRecord]:
        """The ``n`` most recently added records; ties keep catalog order."""
        ordered = sorted(self._books, key=lambda b: b.added_date, reverse=True)
        return [b.model_copy() for b in ordered[: max(0, n)]]

    def featured(self, n: int = 4) -> List[BookRecord]:
        return self.recent(n)

    def stats(self) -> CatalogStats:
        return CatalogStats(
            total_books=len(self._books),
            total_authors=self.distinct_author_count(),
            books_by_genre=self.genre_counts(),
            recent_books=self.recent(),
        )
