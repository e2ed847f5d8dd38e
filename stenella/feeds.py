# stenella/feeds.py
"""Feed URLs the registry starts with. Override with STENELLA_DEFAULT_SOURCES."""

DEFAULT_SOURCES = [
    "https://news.ycombinator.com/rss",
    "https://www.reddit.com/r/golang/.rss",
]
