"""数据模型."""

from thaifeed.models.article import NewsArticle
from thaifeed.models.database import get_session, init_db
from thaifeed.models.feed import RssFeed
from thaifeed.models.history import RssProcessingHistory

__all__ = [
    "NewsArticle",
    "RssFeed",
    "RssProcessingHistory",
    "get_session",
    "init_db",
]
