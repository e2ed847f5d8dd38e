import urllib.error

import pytest

from stenella.rss_fetch import RSSFetchError, fetch_feed, fetch_rss

FEED_URL = "https://example.com/feed.xml"


# ---------- helpers ----------

class FakeResponse:
    def __init__(self, *, status: int, body: bytes):
        self.status = status
        self._body = body

    def read(self) -> bytes:
        return self._body

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        return False


def install_urlopen(monkeypatch, fn):
    monkeypatch.setattr("urllib.request.urlopen", fn)


# ---------- tests ----------

def test_fetch_rss_success(monkeypatch):
    seen = {}

    def fake_urlopen(req, timeout):
        seen["ua"] = req.get_header("User-agent")
        seen["timeout"] = timeout
        return FakeResponse(status=200, body=b"<rss>ok</rss>")

    install_urlopen(monkeypatch, fake_urlopen)

    assert fetch_rss(FEED_URL, timeout_s=3.0) == b"<rss>ok</rss>"
    assert seen["ua"].startswith("stenella/")
    assert seen["timeout"] == 3.0


def test_fetch_rss_non_200_raises(monkeypatch):
    install_urlopen(monkeypatch, lambda req, timeout: FakeResponse(status=204, body=b""))

    with pytest.raises(RSSFetchError, match="HTTP 204"):
        fetch_rss(FEED_URL)


def test_fetch_rss_http_error_raises(monkeypatch):
    def fake_urlopen(req, timeout):
        raise urllib.error.HTTPError(FEED_URL, 503, "Service Unavailable", hdrs=None, fp=None)

    install_urlopen(monkeypatch, fake_urlopen)

    with pytest.raises(RSSFetchError, match="HTTP 503"):
        fetch_rss(FEED_URL)


def test_fetch_rss_network_error_raises(monkeypatch):
    def fake_urlopen(req, timeout):
        raise urllib.error.URLError("connection refused")

    install_urlopen(monkeypatch, fake_urlopen)

    with pytest.raises(RSSFetchError, match="connection refused"):
        fetch_rss(FEED_URL)


def test_fetch_rss_timeout_raises(monkeypatch):
    def fake_urlopen(req, timeout):
        raise TimeoutError()

    install_urlopen(monkeypatch, fake_urlopen)

    with pytest.raises(RSSFetchError, match="timeout"):
        fetch_rss(FEED_URL, timeout_s=0.5)


@pytest.mark.parametrize("url", ["file:///etc/passwd", "ftp://example.com/rss"])
def test_fetch_rss_rejects_non_http_schemes(monkeypatch, url):
    def fake_urlopen(req, timeout):
        raise AssertionError("urlopen must not be called")

    install_urlopen(monkeypatch, fake_urlopen)

    with pytest.raises(RSSFetchError, match="unsupported scheme"):
        fetch_rss(url)


def test_fetch_feed_parses_response(monkeypatch):
    body = b"""<rss><channel><title>Remote</title>
      <item><title>Hello</title><link>/hello</link>
      <pubDate>Fri, 10 Jan 2026 12:00:00 GMT</pubDate></item>
    </channel></rss>"""
    install_urlopen(monkeypatch, lambda req, timeout: FakeResponse(status=200, body=body))

    items = fetch_feed(FEED_URL)

    assert len(items) == 1
    assert items[0].link == "https://example.com/hello"
    assert items[0].source == "Remote"


def test_fetch_rss_malformed_host_raises_fetch_error(monkeypatch):
    def fake_urlopen(req, timeout):
        # what getaddrinfo's IDNA step raises for "foo..com"
        raise UnicodeError("encoding with 'idna' codec failed (label empty or too long)")

    install_urlopen(monkeypatch, fake_urlopen)

    with pytest.raises(RSSFetchError, match="invalid URL"):
        fetch_rss("http://foo..com/rss")


def test_fetch_rss_unparseable_url_raises_fetch_error():
    with pytest.raises(RSSFetchError):
        fetch_rss("http://[bad/rss")
