"""
Route definitions for the catalogue API.

Endpoints (mounted under the configured prefix, ``/api/catalog`` by default):
- GET    /books            : search/filter the catalog
- GET    /books/{book_id}  : get one book
- POST   /books            : add a book (logged-in contributors)
- PUT    /books/{book_id}  : edit a book you created
- DELETE /books/{book_id}  : delete a book you created
- GET    /genres           : distinct genres
- GET    /featured         : most recently added books
- GET    /stats            : dashboard aggregates
- POST   /auth/login, POST /auth/logout, GET /auth/me

The routes only translate HTTP into calls on the ``CatalogStore``, the
query functions and the ``AuthService`` found on ``app.state``.
"""

from __future__ import annotations

from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Request, Response

from ..auth import AuthService
from .covers import book_cover_url
from .query import ALL_GENRES, search_books
from .schemas import (
    BookFormData,
    BookRecord,
    BookUpdate,
    BookView,
    CatalogStats,
    LoginRequest,
    MutationFailure,
    UserIdentity,
    ValidationReport,
)
from .store import CatalogStore


router = APIRouter(tags=["catalog"])


def get_store(request: Request) -> CatalogStore:
    return request.app.state.store


def get_auth(request: Request) -> AuthService:
    return request.app.state.auth


def require_identity(auth: AuthService = Depends(get_auth)) -> UserIdentity:
    identity = auth.current_identity()
    if identity is None:
        raise HTTPException(status_code=401, detail="Login required")
    return identity


def _view(book: BookRecord) -> BookView:
    return BookView(**book.model_dump(), cover_url=book_cover_url(book))


@router.get("/books", response_model=List[BookView])
def list_books(
    q: Optional[str] = Query(default=None, description="Search title, author, genre or ISBN"),
    genre: str = Query(default=ALL_GENRES, description="Exact genre, or 'all'"),
    store: CatalogStore = Depends(get_store),
) -> List[BookView]:
    return [_view(b) for b in search_books(store.list(), q or "", genre)]


@router.get("/books/{book_id}", response_model=BookView)
def get_book(book_id: str, store: CatalogStore = Depends(get_store)) -> BookView:
    book = store.get_by_id(book_id)
    if book is None:
        raise HTTPException(status_code=404, detail="Book not found")
    return _view(book)


@router.post("/books", response_model=BookView, status_code=201)
def add_book(
    form: BookFormData,
    store: CatalogStore = Depends(get_store),
    identity: UserIdentity = Depends(require_identity),
) -> BookView:
    result = store.add(form, identity.name)
    if isinstance(result, ValidationReport):
        raise HTTPException(status_code=422, detail=result.errors)
    return _view(result)


@router.put("/books/{book_id}", response_model=BookView)
def update_book(
    book_id: str,
    changes: BookUpdate,
    store: CatalogStore = Depends(get_store),
    identity: UserIdentity = Depends(require_identity),
) -> BookView:
    result = store.update(book_id, changes, identity.name)
    if result is MutationFailure.NOT_FOUND:
        raise HTTPException(status_code=404, detail="Book not found")
    if result is MutationFailure.NOT_OWNER:
        raise HTTPException(status_code=403, detail="Only the creator can edit this book")
    if isinstance(result, ValidationReport):
        raise HTTPException(status_code=422, detail=result.errors)
    return _view(result)


@router.delete("/books/{book_id}", status_code=204)
def delete_book(
    book_id: str,
    store: CatalogStore = Depends(get_store),
    identity: UserIdentity = Depends(require_identity),
) -> Response:
    book = store.get_by_id(book_id)
    if book is None:
        raise HTTPException(status_code=404, detail="Book not found")
    if not store.can_edit(book, identity.name):
        raise HTTPException(status_code=403, detail="Only the creator can delete this book")
    store.delete(book_id, identity.name)
    return Response(status_code=204)


@router.get("/genres", response_model=List[str])
def list_genres(store: CatalogStore = Depends(get_store)) -> List[str]:
    return store.genres()


@router.get("/featured", response_model=List[BookView])
def featured_books(store: CatalogStore = Depends(get_store)) -> List[BookView]:
    return [_view(b) for b in store.featured()]


@router.get("/stats", response_model=CatalogStats)
def catalog_stats(store: CatalogStore = Depends(get_store)) -> CatalogStats:
    return store.stats()


# ---------------------------------------------------------------------------
# Session endpoints
#
# Identity is session-wide: one contributor is logged in at a time, as in
# the single-user desktop/browser setting this catalog targets.

@router.post("/auth/login", response_model=UserIdentity)
def login(req: LoginRequest, auth: AuthService = Depends(get_auth)) -> UserIdentity:
    if not auth.login(req.username, req.password):
        raise HTTPException(status_code=401, detail="Please enter both username and password")
    return auth.current_identity()


@router.post("/auth/logout")
def logout(auth: AuthService = Depends(get_auth)):
    auth.logout()
    return {"status": "ok"}


@router.get("/auth/me", response_model=UserIdentity)
def whoami(identity: UserIdentity = Depends(require_identity)) -> UserIdentity:
    return identity
