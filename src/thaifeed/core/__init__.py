"""核心业务逻辑."""

from thaifeed.core.dedupe import DuplicateDetector
from thaifeed.core.images import ImagePolicy, ImageResolver
from thaifeed.core.processor import FeedProcessor, FeedRunResult
from thaifeed.core.storage import ArticleStore, FeedStore, HistoryStore

__all__ = [
    "ArticleStore",
    "DuplicateDetector",
    "FeedProcessor",
    "FeedRunResult",
    "FeedStore",
    "HistoryStore",
    "ImagePolicy",
    "ImageResolver",
]
