"""订阅源抓取与解析模块."""

from feedvault.fetcher.http import FeedFetcher, FetchError
from feedvault.fetcher.parser import FeedItem, ParsedFeed, ParseError, parse_feed

__all__ = [
    "FeedFetcher",
    "FeedItem",
    "FetchError",
    "ParseError",
    "ParsedFeed",
    "parse_feed",
]
