"""Parsing of RSS and Atom documents into RawItem records."""

import io
from datetime import datetime, timezone
from typing import Any, List, Optional, Union

import feedparser

from jobfeed.domain.models import RawItem
from jobfeed.logging import get_logger
from jobfeed.utils.text import clean_html, collapse_whitespace
from jobfeed.utils.timestamps import parse_timestamp

from .exceptions import ParseError

logger = get_logger(__name__, component="feeds")


class FeedParser:
    """Turns raw feed content into RawItem records.

    feedparser handles RSS 0.9x/1.0/2.0 and Atom, including the creator and
    content extensions. Text fields are stripped of markup and entities here;
    missing fields are left as None.
    """

    def parse(self, content: Union[bytes, str, None]) -> List[RawItem]:
        """Parse feed content, returning an empty list for malformed input.

        Args:
            content: Raw feed document

        Returns:
            List of RawItem, empty if the content is not a usable feed
        """
        try:
            return self.parse_feed(content)
        except ParseError as e:
            logger.warning(
                f"Discarding unparseable feed: {e}",
                extra={"event": "feed.parse.error", "error": str(e)},
            )
            return []

    def parse_feed(self, content: Union[bytes, str, None]) -> List[RawItem]:
        """Parse feed content.

        A well-formed feed without items yields an empty list. Recoverable
        markup problems in a feed that still produced entries are logged and
        tolerated.

        Args:
            content: Raw feed document

        Returns:
            List of RawItem in document order

        Raises:
            ParseError: If the content is empty, not a feed, or too malformed
                to yield any entries
        """
        if content is None:
            raise ParseError("Feed content is empty")
        if isinstance(content, str):
            content = content.encode("utf-8")
        if not content.strip():
            raise ParseError("Feed content is empty")

        # A file-like object stops feedparser from treating content as a URL or path
        document = feedparser.parse(io.BytesIO(content))
        entries = document.get("entries") or []

        if document.get("bozo") and not entries:
            raise ParseError(f"Malformed feed: {document.get('bozo_exception')}")
        if not document.get("version") and not entries:
            raise ParseError("Content is not an RSS or Atom feed")

        if document.get("bozo"):
            logger.warning(
                "Feed has markup errors; using recovered entries",
                extra={
                    "event": "feed.parse.recovered",
                    "error": str(document.get("bozo_exception")),
                    "count": len(entries),
                },
            )

        items = []
        for index, entry in enumerate(entries):
            try:
                items.append(self._to_raw_item(entry))
            except (ValueError, TypeError, AttributeError) as e:
                logger.warning(
                    "Skipping unreadable feed entry",
                    extra={"event": "feed.parse.entry_skipped", "index": index, "error": str(e)},
                )

        logger.debug(
            f"Parsed {len(items)} feed items",
            extra={"event": "feed.parse.completed", "count": len(items)},
        )
        return items

    def _to_raw_item(self, entry: Any) -> RawItem:
        """Map a feedparser entry to a RawItem."""
        title = collapse_whitespace(clean_html(entry.get("title"))) or None
        link = (entry.get("link") or "").strip() or None
        description = clean_html(self._entry_body(entry)) or None
        author = collapse_whitespace(clean_html(entry.get("author"))) or None

        return RawItem(
            title=title,
            link=link,
            description=description,
            author=author,
            published_at=self._entry_date(entry),
        )

    @staticmethod
    def _entry_body(entry: Any) -> Optional[str]:
        """Prefer the summary; fall back to the first content block."""
        summary = entry.get("summary")
        if summary:
            return summary
        for block in entry.get("content") or []:
            value = block.get("value")
            if value:
                return value
        return None

    @staticmethod
    def _entry_date(entry: Any) -> Optional[datetime]:
        """Publish date, falling back to the update date.

        feedparser's *_parsed values are UTC struct_times; the raw strings
        are tried when feedparser could not interpret them.
        """
        for key in ("published", "updated"):
            parsed = entry.get(f"{key}_parsed")
            if parsed:
                return datetime(*parsed[:6], tzinfo=timezone.utc)
            raw = parse_timestamp(entry.get(key))
            if raw is not None:
                return raw
        return None
