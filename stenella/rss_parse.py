# stenella/rss_parse.py
from __future__ import annotations

import logging
import xml.etree.ElementTree as ET
from urllib.parse import urljoin, urlsplit

from stenella.dates import parse_pub_date
from stenella.logging_utils import log_event
from stenella.schemas import FeedItem


class RSSParseError(ValueError):
    """Raised when RSS XML cannot be decoded."""


def text_of(elem: ET.Element, path: str) -> str:
    found = elem.find(path)
    if found is None:
        return ""
    return "".join(found.itertext()).strip()


def resolve_link(link: str, feed_url: str) -> str:
    """Resolve a relative item link against the feed's own URL."""
    try:
        if not link or urlsplit(link).scheme:
            return link
        return urljoin(feed_url, link)
    except ValueError:
        # Unparseable links pass through untouched
        return link


def parse_rss(xml: str | bytes, *, feed_url: str) -> list[FeedItem]:
    """
    Convert an RSS 2.0 document into FeedItem objects.

    Rules:
    - Every <item> becomes a FeedItem; missing fields become ""
    - Strings are trimmed, relative links resolved against feed_url
    - Unparseable pubDate -> "now" (logged)
    - source is the channel <title>
    - Preserve order
    - Malformed XML or unknown declared encoding -> raise RSSParseError
    - No <channel> -> empty list
    """
    try:
        root = ET.fromstring(xml)
    except ET.ParseError as exc:
        raise RSSParseError(f"decode XML {feed_url}: {exc}") from exc
    # encoding="bogus" in the declaration raises LookupError before any parsing happens
    except (LookupError, ValueError) as exc:
        raise RSSParseError(f"decode XML {feed_url}: {exc}") from exc

    # <rss><channel>...; anything else (Atom, RDF) has nothing for us
    channel = root.find("channel")
    if channel is None:
        return []

    # Channel title tags every item so the UI can show where it came from
    source = text_of(channel, "title")
    out: list[FeedItem] = []

    for it in channel.findall("item"):
        # A bad date never drops the item; it just sorts as "now"
        pub_raw = text_of(it, "pubDate")
        published, ok = parse_pub_date(pub_raw)
        if not ok:
            log_event("pub_date_unparseable", level=logging.WARNING, feed_url=feed_url, value=pub_raw)

        out.append(
            FeedItem(
                title=text_of(it, "title"),
                link=resolve_link(text_of(it, "link"), feed_url),
                description=text_of(it, "description"),
                published=published,
                source=source,
            )
        )

    return out
