"""Shared fixtures for the catalog tests."""

from datetime import datetime, timedelta, timezone

import pytest

from app.catalog.schemas import BookFormData
from app.catalog.store import CatalogStore
from app.storage import MemoryBlobStore


FIXED_NOW = datetime(2026, 3, 1, 12, 0, tzinfo=timezone.utc)


class FakeClock:
    """Callable clock that only moves when told to."""

    def __init__(self, now: datetime = FIXED_NOW) -> None:
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now = self.now + timedelta(**kwargs)


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def blobs():
    return MemoryBlobStore()


@pytest.fixture
def store(blobs, clock):
    """A CatalogStore hydrated with the sample dataset."""
    s = CatalogStore(blobs, clock=clock)
    s.initialize()
    return s


def make_form(**overrides) -> BookFormData:
    data = dict(
        title="Neuromancer",
        author="William Gibson",
        isbn="978-0-441-56959-5",
        published_year=1984,
        genre="Science Fiction",
        description="A hacker is hired for one last job in cyberspace.",
    )
    data.update(overrides)
    return BookFormData(**data)


@pytest.fixture
def form():
    """Factory for valid form data; keyword arguments override fields."""
    return make_form
