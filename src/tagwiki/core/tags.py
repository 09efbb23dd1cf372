"""Hashtag extraction and cross-page tag indexing.

Tags are never stored. Every query rescans the page store, so results
always reflect the current page bodies.
"""

import logging
import re

from tagwiki.core.models import Page, TagMatch, TagOccurrence
from tagwiki.core.storage import Storage

logger = logging.getLogger(__name__)

TAG_MARKER = "#"

# Marker followed by a maximal run of ASCII word characters
TAG_PATTERN = re.compile(re.escape(TAG_MARKER) + r"(\w+)", re.ASCII)


def extract_tags(text: str) -> list[str]:
    """Return tag names in ``text`` in order of appearance, duplicates kept.

    The marker is stripped from each name. ``"#a#b"`` yields ``["a", "b"]``
    since the marker is not a word character.
    """
    return TAG_PATTERN.findall(text)


def extract_occurrences(page: Page) -> list[TagOccurrence]:
    """Pair every tag in a page body with the page's slug."""
    return [TagOccurrence(name=name, slug=page.slug) for name in extract_tags(page.body)]


def tag_matches(name: str, query: str, match: TagMatch = TagMatch.SUBSTRING) -> bool:
    """Check an extracted tag name against a query under the given policy."""
    if match == TagMatch.EXACT:
        return name == query
    return query in name


class TagIndex:
    """Tag occurrences gathered from one scan of the page store."""

    def __init__(self, occurrences: list[TagOccurrence]):
        self.occurrences = occurrences

    @classmethod
    async def scan(cls, storage: Storage) -> "TagIndex":
        """Read every page sequentially and collect its tag occurrences."""
        occurrences: list[TagOccurrence] = []
        pages = 0
        async for page in storage.iter_pages():
            occurrences.extend(extract_occurrences(page))
            pages += 1
        logger.debug("Scanned %d pages, found %d tag occurrences", pages, len(occurrences))
        return cls(occurrences)

    @property
    def tags(self) -> list[str]:
        """Distinct tag names. Order is first-seen but not part of the contract."""
        return list(dict.fromkeys(o.name for o in self.occurrences))

    def pages_with_tag(self, query: str, match: TagMatch = TagMatch.SUBSTRING) -> list[str]:
        """Slugs of pages with a matching tag, once per matching occurrence."""
        return [o.slug for o in self.occurrences if tag_matches(o.name, query, match)]

    def reverse_index(self) -> dict[str, list[str]]:
        """Map each tag name to the distinct slugs containing it."""
        index: dict[str, dict[str, None]] = {}
        for o in self.occurrences:
            index.setdefault(o.name, {})[o.slug] = None
        return {name: list(slugs) for name, slugs in index.items()}


async def list_all_tags(storage: Storage) -> list[str]:
    """All distinct tag names across the store."""
    index = await TagIndex.scan(storage)
    return index.tags


async def pages_with_tag(
    storage: Storage, tag: str, match: TagMatch = TagMatch.SUBSTRING
) -> list[str]:
    """Slugs of pages containing ``tag``, substring-matched by default."""
    index = await TagIndex.scan(storage)
    return index.pages_with_tag(tag, match)
