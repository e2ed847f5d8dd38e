# tests/conftest.py
from __future__ import annotations

from datetime import datetime, timezone

import pytest
from fastapi.testclient import TestClient

from stenella.config import Settings
from stenella.main import create_app
from stenella.registry import SourceRegistry
from stenella.rss_fetch import RSSFetchError
from stenella.schemas import FeedItem


FEED_A = "https://a.example.com/rss"
FEED_B = "https://b.example.com/rss"


def make_item(title: str, hour: int, source: str = "Feed") -> FeedItem:
    return FeedItem(
        title=title,
        link=f"https://example.com/{title.lower().replace(' ', '-')}",
        description=f"About {title}",
        published=datetime(2026, 1, 10, hour, 0, tzinfo=timezone.utc),
        source=source,
    )


class FakeFetcher:
    """Stands in for fetch_feed: returns canned items or raises per URL."""

    def __init__(self, responses: dict):
        self.responses = responses
        self.calls: list[str] = []

    def __call__(self, url, *, timeout_s):
        self.calls.append(url)
        result = self.responses.get(url, RSSFetchError(f"GET {url}: HTTP 404"))
        if isinstance(result, Exception):
            raise result
        return list(result)


@pytest.fixture(autouse=True)
def _isolate_env(monkeypatch):
    # A stray .env in the working directory must not leak into settings
    monkeypatch.setattr("stenella.config.load_dotenv", lambda *args, **kwargs: False)
    for name in (
        "STENELLA_HOST",
        "STENELLA_PORT",
        "STENELLA_FETCH_TIMEOUT_S",
        "STENELLA_DEFAULT_SOURCES",
        "STENELLA_REFRESH_MS",
        "STENELLA_LOG_LEVEL",
    ):
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def registry() -> SourceRegistry:
    return SourceRegistry([FEED_A, FEED_B])


@pytest.fixture
def fetcher() -> FakeFetcher:
    return FakeFetcher({
        FEED_A: [make_item("A old", 9, "Feed A"), make_item("A new", 11, "Feed A")],
        FEED_B: [make_item("B newest", 13, "Feed B")],
    })


@pytest.fixture
def client(registry, fetcher) -> TestClient:
    app = create_app(registry, settings=Settings(), fetch=fetcher)
    return TestClient(app)
