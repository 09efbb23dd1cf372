"""Storage abstraction for wiki pages."""

import logging
import re
from abc import ABC, abstractmethod
from collections.abc import AsyncIterator
from pathlib import Path

from tagwiki.core.models import Page

logger = logging.getLogger(__name__)


class StorageError(Exception):
    """Base class for page store failures."""


class PageReadError(StorageError):
    """A page exists but could not be read."""


class PageWriteError(StorageError):
    """A page could not be written."""


class InvalidSlugError(ValueError):
    """A slug cannot be mapped to a file inside the data directory."""

    def __init__(self, slug: str):
        super().__init__(f"Invalid page slug: {slug!r}")
        self.slug = slug


class Storage(ABC):
    """Abstract base class for page storage."""

    @abstractmethod
    async def get_page(self, slug: str) -> Page | None:
        """Get a page by slug. Returns None if not found."""
        ...

    @abstractmethod
    async def save_page(self, slug: str, body: str) -> Page:
        """Save a page. Creates if doesn't exist, overwrites otherwise."""
        ...

    @abstractmethod
    async def list_pages(self) -> list[str]:
        """List all page slugs."""
        ...

    async def iter_pages(self) -> AsyncIterator[Page]:
        """Yield every page, reading one at a time in slug order.

        Pages removed or redirected outside the store between listing and
        reading are skipped.
        """
        for slug in await self.list_pages():
            try:
                page = await self.get_page(slug)
            except InvalidSlugError:
                logger.warning("Page %r no longer resolves inside the store, skipping", slug)
                continue
            if page is None:
                logger.warning("Page %r vanished during scan, skipping", slug)
                continue
            yield page


class FileStorage(Storage):
    """File-based storage implementation.

    Pages are stored as plain text files named ``<slug><extension>``
    directly inside ``base_path``.
    """

    SLUG_PATTERN = re.compile(r"[^./\\\x00-\x1f][^/\\\x00-\x1f]*")
    # Longest filename most filesystems accept, in bytes
    MAX_FILENAME_BYTES = 255

    def __init__(self, base_path: Path, extension: str = ".md"):
        self.base_path = base_path
        self.extension = extension
        self.base_path.mkdir(parents=True, exist_ok=True)

    def _slug_to_filename(self, slug: str) -> str:
        """Convert page slug to filename."""
        if not self.SLUG_PATTERN.fullmatch(slug):
            raise InvalidSlugError(slug)
        filename = slug + self.extension
        if len(filename.encode("utf-8")) > self.MAX_FILENAME_BYTES:
            raise InvalidSlugError(slug)
        return filename

    def _filename_to_slug(self, filename: str) -> str:
        """Convert filename to page slug."""
        return filename.removesuffix(self.extension)

    def _is_contained(self, path: Path) -> bool:
        """Check that a page path resolves directly inside base_path."""
        return path.resolve().parent == self.base_path.resolve()

    def _get_path(self, slug: str) -> Path:
        """Get full path for a page, refusing anything outside base_path."""
        path = self.base_path / self._slug_to_filename(slug)
        if not self._is_contained(path):
            raise InvalidSlugError(slug)
        return path

    async def get_page(self, slug: str) -> Page | None:
        """Get a page by slug."""
        path = self._get_path(slug)
        try:
            if not path.is_file():
                return None
            body = path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return None
        except (OSError, UnicodeDecodeError) as e:
            raise PageReadError(f"Could not read page {slug!r}") from e
        return Page(slug=slug, body=body)

    async def save_page(self, slug: str, body: str) -> Page:
        """Save a page."""
        path = self._get_path(slug)
        try:
            path.write_text(body, encoding="utf-8")
        except OSError as e:
            raise PageWriteError(f"Could not write page {slug!r}") from e
        logger.debug("Saved page %r (%d chars)", slug, len(body))
        return Page(slug=slug, body=body)

    def _is_page_file(self, path: Path) -> bool:
        if not path.name.endswith(self.extension):
            return False
        # Hidden files and stray names are not addressable as pages
        if not self.SLUG_PATTERN.fullmatch(self._filename_to_slug(path.name)):
            return False
        try:
            return path.is_file() and self._is_contained(path)
        except OSError:
            return False

    async def list_pages(self) -> list[str]:
        """List all page slugs."""
        try:
            entries = list(self.base_path.iterdir())
        except OSError as e:
            raise StorageError(f"Could not list {self.base_path}") from e
        pages = [
            self._filename_to_slug(path.name)
            for path in entries
            if self._is_page_file(path)
        ]
        return sorted(pages)
