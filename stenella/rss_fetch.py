# stenella/rss_fetch.py
from __future__ import annotations

import http.client
import urllib.error
import urllib.request
from urllib.parse import urlsplit

from stenella.rss_parse import parse_rss
from stenella.schemas import FeedItem


USER_AGENT = "stenella/0.1 (+rss)"


# Single error type for every way a GET can go wrong; the aggregator skips on it
class RSSFetchError(Exception):
    """Raised when a feed cannot be retrieved."""


def fetch_rss(url: str, *, timeout_s: float = 10.0) -> bytes:
    """Fetch RSS XML from a URL and return the raw response body."""
    try:
        # urllib would happily read file:// and ftp:// sources; feeds are HTTP only
        scheme = urlsplit(url).scheme.lower()
        if scheme not in ("http", "https"):
            raise RSSFetchError(f"GET {url}: unsupported scheme {scheme!r}")

        # Identify ourselves; some feed hosts reject the default urllib agent
        req = urllib.request.Request(url, headers={"User-Agent": USER_AGENT})

        # Bounded timeout so one hung upstream can't stall the whole aggregation
        with urllib.request.urlopen(req, timeout=timeout_s) as resp:
            status = getattr(resp, "status", None)
            # Keep raw bytes: the XML declaration decides the encoding, not us
            body = resp.read()

            # Redirects are followed by urllib; anything but a final 200 is a failure
            if status != 200:
                raise RSSFetchError(f"GET {url}: HTTP {status}")

            return body

    # 4xx/5xx surface as HTTPError (must come before URLError, its parent)
    except urllib.error.HTTPError as exc:
        raise RSSFetchError(f"GET {url}: HTTP {exc.code}") from exc
    # DNS failure, connection refused, TLS errors
    except urllib.error.URLError as exc:
        raise RSSFetchError(f"GET {url}: {exc.reason}") from exc
    except TimeoutError as exc:
        raise RSSFetchError(f"GET {url}: timeout after {timeout_s}s") from exc
    # Connection resets mid-body, truncated responses
    except (OSError, http.client.HTTPException) as exc:
        raise RSSFetchError(f"GET {url}: {exc}") from exc
    # Malformed hosts (e.g. "foo..com" fails IDNA encoding with UnicodeError) and bad URLs
    except ValueError as exc:
        raise RSSFetchError(f"GET {url}: invalid URL: {exc}") from exc


def fetch_feed(url: str, *, timeout_s: float = 10.0) -> list[FeedItem]:
    """Fetch one feed and normalize its items. Raises RSSFetchError or RSSParseError."""
    xml = fetch_rss(url, timeout_s=timeout_s)
    return parse_rss(xml, feed_url=url)
