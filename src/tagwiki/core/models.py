"""Data models for TagWiki."""

from enum import Enum
from typing import Any

from pydantic import BaseModel


class TagMatch(str, Enum):
    """How a tag query is compared against extracted tag names."""

    SUBSTRING = "substring"
    EXACT = "exact"


class Page(BaseModel):
    """Represents a wiki page."""

    slug: str
    body: str


class TagOccurrence(BaseModel):
    """One tag found in one page's text."""

    name: str
    slug: str


class PageWrite(BaseModel):
    """Request body for overwriting a page.

    ``body`` is left untyped so a missing or non-string body reaches the
    route and gets the write-failure envelope instead of a 422.
    """

    body: Any = None
