"""Tests for the search and genre filtering functions."""

from app.catalog.query import filter_by_genre, match_text, search_books


def _titles(books):
    return [b.title for b in books]


def test_blank_search_and_all_genres_returns_everything(store):
    books = store.list()
    assert search_books(books, "   ", "all") == books


def test_search_dune_matches_only_dune(store):
    assert _titles(search_books(store.list(), "dune")) == ["Dune"]


def test_search_is_case_insensitive_on_author_and_genre(store):
    assert _titles(search_books(store.list(), "ORWELL")) == ["1984"]
    assert _titles(search_books(store.list(), "fantasy")) == ["The Hobbit"]


def test_full_isbn_matches_through_isbn_branch(store):
    assert _titles(search_books(store.list(), "978-0-441-17271-9")) == ["Dune"]


def test_isbn_fragment_matches_several(store):
    assert _titles(search_books(store.list(), "978-0-4")) == ["Dune", "1984"]


def test_genre_only_filter(store):
    result = search_books(store.list(), "", "Classic")
    assert _titles(result) == ["The Great Gatsby", "To Kill a Mockingbird"]


def test_genre_filter_is_exact(store):
    assert search_books(store.list(), "", "classic") == []


def test_text_and_genre_are_intersected(store):
    assert _titles(search_books(store.list(), "the", "Classic")) == ["The Great Gatsby"]
    assert search_books(store.list(), "dune", "Classic") == []


def test_results_keep_catalog_order(store, form):
    store.add(form(title="Dune Messiah", isbn="9780441172696"), "alice")
    assert _titles(search_books(store.list(), "dune")) == ["Dune Messiah", "Dune"]


def test_search_does_not_mutate_input(store):
    books = store.list()
    snapshot = list(books)
    search_books(books, "dune", "Science Fiction")
    assert books == snapshot


def test_match_text_blank_matches_all(store):
    assert len(match_text(store.list(), "")) == 6


def test_filter_by_genre_all_and_empty(store):
    assert len(filter_by_genre(store.list(), "all")) == 6
    assert len(filter_by_genre(store.list(), "")) == 6
    assert _titles(filter_by_genre(store.list(), "Romance")) == ["Pride and Prejudice"]
