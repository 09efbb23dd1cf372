"""TagWiki FastAPI application."""

import logging
import time
from contextlib import asynccontextmanager

from fastapi import FastAPI, HTTPException, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import FileResponse
from fastapi.staticfiles import StaticFiles

from tagwiki.config import settings
from tagwiki.core.models import PageWrite
from tagwiki.core.storage import FileStorage, InvalidSlugError, StorageError
from tagwiki.core.tags import TagIndex

logger = logging.getLogger(__name__)

PAGE_NOT_FOUND = "Page does not exist."
PAGE_NOT_WRITTEN = "Could not write page."
PAGES_NOT_READ = "Could not read pages."


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan: configure logging and report the data directory."""
    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    logger.info("Serving pages from %s", settings.data_dir.resolve())
    yield


# Initialize app
app = FastAPI(
    title=settings.app_title,
    debug=settings.debug,
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.middleware("http")
async def log_requests(request: Request, call_next):
    """Log method, path, status and duration of every request."""
    start = time.perf_counter()
    response = await call_next(request)
    elapsed_ms = (time.perf_counter() - start) * 1000
    logger.info(
        "%s %s -> %d (%.1f ms)",
        request.method,
        request.url.path,
        response.status_code,
        elapsed_ms,
    )
    return response


# Built frontend assets; the catch-all route below serves its index.html
frontend_path = settings.frontend_dir
if (frontend_path / "static").is_dir():
    app.mount(
        "/static",
        StaticFiles(directory=str(frontend_path / "static")),
        name="static",
    )

# Initialize storage
storage = FileStorage(settings.data_dir, extension=settings.page_extension)


def ok(**kwargs) -> dict:
    return {"status": "ok", **kwargs}


def error(message: str) -> dict:
    return {"status": "error", "message": message}


# ========== Pages API ==========


@app.get("/api/page/{slug}")
async def read_page(slug: str):
    """Return a page's raw body."""
    try:
        page = await storage.get_page(slug)
    except InvalidSlugError:
        logger.warning("Rejected read of invalid slug %r", slug)
        return error(PAGE_NOT_FOUND)
    except StorageError:
        logger.exception("Failed to read page %r", slug)
        return error(PAGE_NOT_FOUND)

    if page is None:
        return error(PAGE_NOT_FOUND)
    return ok(body=page.body)


@app.post("/api/page/{slug}")
async def write_page(slug: str, payload: PageWrite):
    """Overwrite a page's body, creating the page if needed."""
    if not isinstance(payload.body, str):
        logger.warning("Rejected write of %r with non-string body", slug)
        return error(PAGE_NOT_WRITTEN)
    try:
        await storage.save_page(slug, payload.body)
    except InvalidSlugError:
        logger.warning("Rejected write of invalid slug %r", slug)
        return error(PAGE_NOT_WRITTEN)
    except StorageError:
        logger.exception("Failed to write page %r", slug)
        return error(PAGE_NOT_WRITTEN)
    return ok()


@app.get("/api/pages/all")
async def all_pages():
    """List every page slug."""
    try:
        pages = await storage.list_pages()
    except StorageError:
        logger.exception("Failed to list pages")
        return error(PAGES_NOT_READ)
    return ok(pages=pages)


# ========== Tags API ==========


@app.get("/api/tags")
async def tag_index():
    """Map every tag to the pages that contain it."""
    try:
        index = await TagIndex.scan(storage)
    except StorageError:
        logger.exception("Failed to scan pages for tags")
        return error(PAGES_NOT_READ)
    return ok(tags=index.reverse_index())


@app.get("/api/tags/all")
async def all_tags():
    """List every distinct tag name."""
    try:
        index = await TagIndex.scan(storage)
    except StorageError:
        logger.exception("Failed to scan pages for tags")
        return error(PAGES_NOT_READ)
    return ok(tags=index.tags)


@app.get("/api/tags/{tag}")
async def tagged_pages(tag: str):
    """List pages carrying a tag, once per matching occurrence."""
    try:
        index = await TagIndex.scan(storage)
    except StorageError:
        logger.exception("Failed to scan pages for tag %r", tag)
        return error(PAGES_NOT_READ)
    return ok(tag=tag, pages=index.pages_with_tag(tag, settings.tag_match))


# ========== Frontend ==========


@app.get("/{full_path:path}", include_in_schema=False)
async def frontend(full_path: str):
    """Serve the frontend entry document so it can route unknown paths."""
    index = frontend_path / "index.html"
    if not index.is_file():
        raise HTTPException(status_code=404, detail="Frontend not built")
    return FileResponse(index)
