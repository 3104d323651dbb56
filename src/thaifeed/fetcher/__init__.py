"""远程内容抓取模块."""

from thaifeed.fetcher.feed_parser import FeedItem, ParsedFeed, parse_feed
from thaifeed.fetcher.http import FetchError, ServerError, fetch_with_retry
from thaifeed.fetcher.image_optimizer import ImageOptimizer

__all__ = [
    "FeedItem",
    "FetchError",
    "ImageOptimizer",
    "ParsedFeed",
    "ServerError",
    "fetch_with_retry",
    "parse_feed",
]
