# stenella/aggregator.py
from __future__ import annotations

import logging
import time
from typing import Callable

from stenella.logging_utils import log_event
from stenella.registry import SourceRegistry
from stenella.rss_fetch import fetch_feed
from stenella.schemas import FeedItem


FeedFetcher = Callable[..., list[FeedItem]]


def sort_newest_first(items: list[FeedItem]) -> list[FeedItem]:
    """Stable: items with equal timestamps keep their relative order."""
    return sorted(items, key=lambda it: it.published, reverse=True)


def aggregate_feeds(
    registry: SourceRegistry,
    *,
    fetch: FeedFetcher = fetch_feed,
    timeout_s: float = 10.0,
    request_id: str | None = None,
) -> list[FeedItem]:
    """
    Fetch every registered source one after another and merge the results.

    A source that fails to fetch or parse is logged and left out; the
    remaining items are always returned.
    """
    sources = registry.list()
    started = time.monotonic()

    all_items: list[FeedItem] = []
    failed = 0
    for src in sources:
        try:
            items = fetch(src, timeout_s=timeout_s)
        except Exception as exc:
            # RSSFetchError / RSSParseError normally, but one broken source
            # never costs the others their items whatever it raises
            failed += 1
            log_event(
                "feed_fetch_failed",
                level=logging.WARNING,
                request_id=request_id,
                message=f"could not fetch {src}",
                error=str(exc),
                error_type=type(exc).__name__,
            )
            continue
        all_items.extend(items)

    merged = sort_newest_first(all_items)

    log_event(
        "aggregate_finished",
        request_id=request_id,
        sources=len(sources),
        failed=failed,
        items=len(merged),
        duration_ms=round((time.monotonic() - started) * 1000, 1),
    )
    return merged
