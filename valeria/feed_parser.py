"""
Feed Parser - Parse RSS/Atom documents into normalized entries.

Handles:
- RSS 0.9x/1.0/2.0 and Atom 0.3/1.0 (format detected by feedparser)
- CDATA sections and HTML entities in titles
- Plain-text summaries stripped of markup
- Stable entry IDs hashed from guid/link/title
"""

import calendar
from dataclasses import dataclass
from datetime import datetime, timezone
from urllib.parse import urlparse

import feedparser
from bs4 import BeautifulSoup

SUMMARY_MAX_LENGTH = 300

_HASH_MASK = (1 << 64) - 1
_BASE36 = "0123456789abcdefghijklmnopqrstuvwxyz"


@dataclass
class FeedEntry:
    """A single item/entry from a feed."""
    key: str  # guid, link or title; whichever is present first
    title: str
    url: str
    summary: str | None
    content: str | None
    author: str | None
    published: datetime


@dataclass
class Feed:
    """A parsed feed document."""
    url: str
    title: str
    format: str  # feedparser version string, e.g. "rss20", "atom10"
    entries: list[FeedEntry]


def hash_string(value: str) -> str:
    """
    Deterministic non-cryptographic hash of a string, base36 encoded.

    Multiplicative rolling hash (h * 31 + c) kept to 64 bits.
    """
    h = 0
    for char in value:
        h = (h * 31 + ord(char)) & _HASH_MASK
    if h == 0:
        return "0"
    digits = []
    while h:
        h, rem = divmod(h, 36)
        digits.append(_BASE36[rem])
    return "".join(reversed(digits))


def strip_html(html: str | None) -> str:
    """Convert an HTML fragment to whitespace-normalized plain text."""
    if not html:
        return ""
    text = BeautifulSoup(html, "html.parser").get_text(separator=" ", strip=True)
    return " ".join(text.split())


def _entry_datetime(entry) -> datetime | None:
    """Published (or updated) time of an entry as an aware UTC datetime."""
    for attr in ("published_parsed", "updated_parsed"):
        parsed = entry.get(attr)
        if parsed:
            try:
                return datetime.fromtimestamp(calendar.timegm(parsed), tz=timezone.utc)
            except (TypeError, ValueError, OverflowError):
                continue
    return None


def _entry_content(entry) -> str | None:
    if entry.get("content"):
        return entry.content[0].get("value")
    return entry.get("summary") or None


def parse_feed(content: str | bytes, url: str = "", fetched_at: datetime | None = None) -> Feed:
    """
    Parse a feed document.

    Entries without a recognizable publish date are stamped with fetched_at
    (defaults to the current time).

    Raises:
        ValueError: If the document cannot be parsed as a feed
    """
    fetched_at = fetched_at or datetime.now(timezone.utc)
    parsed = feedparser.parse(content)

    if parsed.bozo and not parsed.entries:
        raise ValueError(f"Failed to parse feed: {parsed.get('bozo_exception')}")

    entries = []
    for entry in parsed.entries:
        title = entry.get("title") or ""
        link = entry.get("link") or ""
        body = _entry_content(entry)
        snippet = strip_html(entry.get("summary") or body)

        entries.append(FeedEntry(
            key=entry.get("id") or link or title,
            title=title or "Untitled",
            url=link or url,
            summary=snippet[:SUMMARY_MAX_LENGTH] if snippet else None,
            content=body,
            author=entry.get("author"),
            published=_entry_datetime(entry) or fetched_at,
        ))

    feed_title = parsed.feed.get("title") or urlparse(url).hostname or url

    return Feed(
        url=url,
        title=feed_title,
        format=parsed.get("version") or "unknown",
        entries=entries,
    )
