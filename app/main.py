# app/main.py
"""
Application factory for the catalog service.

There is no module-level ``app``: building one reads (and may seed) the
configured blob file, which importing this module must not do. Serve it
through the factory instead:

    uvicorn app.main:create_app --factory --reload

Set ``LIBRARY_DATA_FILE`` to an empty value to keep everything in memory.
"""
import logging
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from .auth import AuthService
from .catalog.router import router as catalog_router
from .catalog.store import CatalogStore
from .config import Config
from .errors import StorageError
from .storage import BlobStore, JsonFileBlobStore, MemoryBlobStore


logger = logging.getLogger(__name__)


def configure_logging(level: str = "INFO") -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s - %(levelname)s - %(name)s - %(message)s",
    )


def build_blob_store(config: Config) -> BlobStore:
    if config.use_memory_store:
        logger.info("Using in-memory blob store")
        return MemoryBlobStore()
    logger.info("Using blob file %s", config.DATA_FILE)
    return JsonFileBlobStore(config.DATA_FILE)


def create_app(
    config: Optional[Config] = None,
    blob_store: Optional[BlobStore] = None,
) -> FastAPI:
    """Build the catalog app with its own store and session.

    ``blob_store`` overrides the one derived from ``config``.
    """
    config = config or Config()
    configure_logging(config.LOG_LEVEL)

    blobs = blob_store if blob_store is not None else build_blob_store(config)
    store = CatalogStore(blobs)
    store.initialize()

    app = FastAPI(
        title="Library Catalog",
        description="Catalog of books: anyone can search, contributors manage their own entries.",
        version="1.0.0",
    )
    app.state.store = store
    app.state.auth = AuthService(blobs)

    @app.exception_handler(StorageError)
    async def storage_error_handler(request: Request, exc: StorageError):
        logger.error("Storage failure on %s: %s", request.url.path, exc)
        return JSONResponse(
            status_code=503,
            content={"detail": "Changes could not be saved. Please try again."},
        )

    # Basic route for a quick liveness check
    @app.get("/")
    def health_check():
        return {"status": "ok", "books": len(store)}

    app.include_router(catalog_router, prefix=config.API_PREFIX)
    return app
