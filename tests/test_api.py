"""Tests for the HTTP adapter over the catalog."""

import pytest
from fastapi.testclient import TestClient

from app.config import Config
from app.errors import StorageError
from app.main import create_app
from app.storage import MemoryBlobStore


API = "/api/catalog"

NEW_BOOK = {
    "title": "Neuromancer",
    "author": "William Gibson",
    "isbn": "978-0-441-56959-5",
    "published_year": 1984,
    "genre": "Science Fiction",
    "description": "A hacker is hired for one last job in cyberspace.",
}


class SwitchableBlobStore(MemoryBlobStore):
    def __init__(self) -> None:
        super().__init__()
        self.broken = False

    def set(self, key, value):
        if self.broken:
            raise StorageError("read-only filesystem", key=key)
        super().set(key, value)


@pytest.fixture
def blob_store():
    return SwitchableBlobStore()


@pytest.fixture
def client(blob_store):
    app = create_app(Config(), blob_store=blob_store)
    return TestClient(app)


def login(client, username="alice"):
    resp = client.post(f"{API}/auth/login", json={"username": username, "password": "pw"})
    assert resp.status_code == 200
    return resp.json()


def test_health_check(client):
    resp = client.get("/")
    assert resp.json() == {"status": "ok", "books": 6}


def test_list_books_with_search_and_genre(client):
    assert len(client.get(f"{API}/books").json()) == 6
    titles = [b["title"] for b in client.get(f"{API}/books", params={"q": "dune"}).json()]
    assert titles == ["Dune"]
    classics = client.get(f"{API}/books", params={"genre": "Classic"}).json()
    assert [b["title"] for b in classics] == ["The Great Gatsby", "To Kill a Mockingbird"]


def test_books_carry_cover_url(client):
    dune = client.get(f"{API}/books/3").json()
    assert dune["cover_url"] == "https://placehold.co/300x450/10b981/ffffff?text=Dune"
    assert dune["cover_image"] is None


def test_get_unknown_book_is_404(client):
    assert client.get(f"{API}/books/missing").status_code == 404


def test_add_requires_login(client):
    assert client.post(f"{API}/books", json=NEW_BOOK).status_code == 401


def test_add_book(client):
    login(client)
    resp = client.post(f"{API}/books", json=NEW_BOOK)
    assert resp.status_code == 201
    body = resp.json()
    assert body["created_by"] == "alice"
    assert client.get(f"{API}/books").json()[0]["id"] == body["id"]


def test_add_book_reports_every_invalid_field(client):
    login(client)
    bad = dict(NEW_BOOK, title=" ", isbn="12345", description="short")
    resp = client.post(f"{API}/books", json=bad)
    assert resp.status_code == 422
    assert set(resp.json()["detail"]) == {"title", "isbn", "description"}


def test_update_and_delete_require_ownership(client):
    login(client, "alice")
    book_id = client.post(f"{API}/books", json=NEW_BOOK).json()["id"]

    login(client, "bob")
    assert client.put(f"{API}/books/{book_id}", json={"title": "Mine now"}).status_code == 403
    assert client.delete(f"{API}/books/{book_id}").status_code == 403

    login(client, "alice")
    resp = client.put(f"{API}/books/{book_id}", json={"title": "Count Zero"})
    assert resp.status_code == 200
    assert resp.json()["title"] == "Count Zero"
    assert client.delete(f"{API}/books/{book_id}").status_code == 204
    assert client.get(f"{API}/books/{book_id}").status_code == 404


def test_update_unknown_book_is_404(client):
    login(client)
    assert client.put(f"{API}/books/missing", json={"title": "X"}).status_code == 404
    assert client.delete(f"{API}/books/missing").status_code == 404


def test_update_validation_failure_is_422(client):
    login(client, "Admin")
    resp = client.put(f"{API}/books/3", json={"published_year": 3000})
    assert resp.status_code == 422
    assert "published_year" in resp.json()["detail"]


def test_genres_featured_and_stats(client):
    assert client.get(f"{API}/genres").json() == [
        "Classic", "Dystopian", "Fantasy", "Romance", "Science Fiction",
    ]
    featured = client.get(f"{API}/featured").json()
    assert [b["title"] for b in featured] == [
        "Pride and Prejudice", "1984", "The Hobbit", "Dune",
    ]
    stats = client.get(f"{API}/stats").json()
    assert stats["total_books"] == 6
    assert stats["books_by_genre"][0] == {"genre": "Classic", "count": 2}


def test_login_logout_and_me(client):
    assert client.get(f"{API}/auth/me").status_code == 401
    resp = client.post(f"{API}/auth/login", json={"username": "", "password": "pw"})
    assert resp.status_code == 401
    assert login(client) == {"name": "alice", "role": "admin"}
    assert client.get(f"{API}/auth/me").json()["name"] == "alice"
    client.post(f"{API}/auth/logout")
    assert client.get(f"{API}/auth/me").status_code == 401


def test_storage_failure_is_503_and_nothing_changes(client, blob_store):
    login(client)
    blob_store.broken = True
    resp = client.post(f"{API}/books", json=NEW_BOOK)
    assert resp.status_code == 503
    assert len(client.get(f"{API}/books").json()) == 6


def test_wrong_types_still_get_field_keyed_errors(client):
    login(client)
    bad = dict(NEW_BOOK, title="", published_year="nineteen")
    resp = client.post(f"{API}/books", json=bad)
    assert resp.status_code == 422
    assert resp.json()["detail"] == {
        "title": "Title is required",
        "published_year": "Published year must be a whole number",
    }

    numeric_text = dict(NEW_BOOK, published_year="1984", title=None, author=None)
    detail = client.post(f"{API}/books", json=numeric_text).json()["detail"]
    assert set(detail) == {"title", "author"}


def test_update_with_wrong_year_type_is_field_keyed(client):
    login(client, "Admin")
    resp = client.put(f"{API}/books/3", json={"published_year": "soon", "genre": ""})
    assert resp.status_code == 422
    assert set(resp.json()["detail"]) == {"published_year", "genre"}


def test_login_storage_failure_does_not_start_session(client, blob_store):
    blob_store.broken = True
    resp = client.post(f"{API}/auth/login", json={"username": "alice", "password": "pw"})
    assert resp.status_code == 503
    blob_store.broken = False
    assert client.get(f"{API}/auth/me").status_code == 401


def test_factory_without_data_file_keeps_everything_in_memory(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    config = Config()
    config.DATA_FILE = ""
    app = create_app(config)
    assert isinstance(app.state.store._blob_store, MemoryBlobStore)
    assert TestClient(app).get("/").json() == {"status": "ok", "books": 6}
    assert list(tmp_path.iterdir()) == []
