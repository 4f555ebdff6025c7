"""News feed entries and RSS retrieval."""

from __future__ import annotations

import hashlib
from dataclasses import dataclass
from datetime import datetime, timezone
from email.utils import parsedate_to_datetime
from xml.etree.ElementTree import Element, ParseError

import requests
from defusedxml import DefusedXmlException
from defusedxml.ElementTree import fromstring

REQUEST_TIMEOUT = 10.0


class FeedError(Exception):
    """Raised when the news feed cannot be fetched or understood."""


@dataclass(frozen=True)
class Entry:
    """A single news item."""

    title: str
    body: str
    timestamp: datetime

    def __post_init__(self) -> None:
        ts = self.timestamp
        ts = ts.replace(tzinfo=timezone.utc) if ts.tzinfo is None else ts.astimezone(timezone.utc)
        object.__setattr__(self, "timestamp", ts)

    def __str__(self) -> str:
        return f"{self.title}\n{self.timestamp:%Y-%m-%d %H:%M:%S} UTC\n{self.body}"

    @classmethod
    def from_rss_item(cls, item: Element) -> Entry:
        """Build an entry from an RSS <item> element."""
        fields = {}
        for tag, what in (("title", "title"), ("description", "body"), ("pubDate", "date")):
            element = item.find(tag)
            if element is None:
                raise FeedError(f"Cannot get {what}")
            fields[what] = element.text or ""
        try:
            timestamp = parsedate_to_datetime(fields["date"].strip())
        except (TypeError, ValueError) as exc:
            raise FeedError(f"invalid date {fields['date']!r}") from exc
        return cls(fields["title"], fields["body"], timestamp)

    def digest(self) -> bytes:
        """Return the 16-byte MD5 digest identifying this entry."""
        return hashlib.md5((self.title + self.timestamp.isoformat()).encode("utf-8")).digest()


def parse_feed(data: bytes | str) -> list[Entry]:
    """Parse an RSS document into entries, in document order."""
    try:
        root = fromstring(data)
    except (ParseError, DefusedXmlException) as exc:
        raise FeedError(f"invalid feed: {exc}") from exc
    channel = root if root.tag == "channel" else root.find("channel")
    if channel is None:
        raise FeedError("invalid feed: no channel element")
    return [Entry.from_rss_item(item) for item in channel.findall("item")]


def entries(url: str) -> list[Entry]:
    """Fetch the feed at ``url`` and return its entries."""
    try:
        response = requests.get(url, timeout=REQUEST_TIMEOUT)
        response.raise_for_status()
    except requests.RequestException as exc:
        raise FeedError(str(exc)) from exc
    return parse_feed(response.content)