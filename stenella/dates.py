# stenella/dates.py
"""
Publish-date parsing for RSS items.

Feeds in the wild use a handful of RFC 822 variants plus the occasional
RFC 3339 timestamp. Layouts are tried in a fixed order and the first match
wins. Every returned datetime is timezone-aware.
"""
from __future__ import annotations

from datetime import datetime, timedelta, timezone


# RFC 822 named zones. Other alphabetic abbreviations are taken as UTC.
ZONE_OFFSETS = {
    "GMT": 0, "UT": 0, "UTC": 0, "Z": 0,
    "EST": -5, "EDT": -4,
    "CST": -6, "CDT": -5,
    "MST": -7, "MDT": -6,
    "PST": -8, "PDT": -7,
}

RFC1123Z = "%a, %d %b %Y %H:%M:%S %z"
RFC1123 = "%a, %d %b %Y %H:%M:%S"   # + named zone
RFC822Z = "%d %b %y %H:%M %z"
RFC822 = "%d %b %y %H:%M"           # + named zone
NO_ZONE = "%a, %d %b %Y %H:%M:%S"


def _with_numeric_zone(value: str, fmt: str) -> datetime:
    return datetime.strptime(value, fmt)


def _with_named_zone(value: str, fmt: str) -> datetime:
    head, sep, zone = value.rpartition(" ")
    if not sep or not zone.isalpha():
        raise ValueError(f"no zone name in {value!r}")
    dt = datetime.strptime(head, fmt)
    hours = ZONE_OFFSETS.get(zone.upper(), 0)
    return dt.replace(tzinfo=timezone(timedelta(hours=hours)))


def _rfc3339(value: str) -> datetime:
    text = value.upper()
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    dt = datetime.fromisoformat(text)
    if dt.tzinfo is None:
        raise ValueError(f"RFC 3339 requires an offset: {value!r}")
    return dt


def _no_zone(value: str) -> datetime:
    return datetime.strptime(value, NO_ZONE).replace(tzinfo=timezone.utc)


LAYOUTS = [
    ("RFC1123Z", lambda v: _with_numeric_zone(v, RFC1123Z)),
    ("RFC1123", lambda v: _with_named_zone(v, RFC1123)),
    ("RFC822Z", lambda v: _with_numeric_zone(v, RFC822Z)),
    ("RFC822", lambda v: _with_named_zone(v, RFC822)),
    ("RFC3339", _rfc3339),
    ("no-zone", _no_zone),
]


def parse_pub_date(value: str) -> tuple[datetime, bool]:
    """
    Parse an RSS pubDate.

    Returns (datetime, True) for the first layout that matches. When none
    match, returns (now in UTC, False) so the item still sorts somewhere;
    callers decide whether to log the miss.
    """
    text = (value or "").strip()
    for _name, parse in LAYOUTS:
        try:
            return parse(text), True
        except ValueError:
            continue
    return datetime.now(timezone.utc), False
