"""采集流水线使用的存储接口."""

import logging
from datetime import datetime

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker
from sqlmodel import select

from thaifeed.core.dedupe import ArticleRef
from thaifeed.models.article import NewsArticle
from thaifeed.models.feed import RssFeed
from thaifeed.models.history import RssProcessingHistory

logger = logging.getLogger(__name__)


class FeedStore:
    """Feed 配置存储."""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self._session_factory = session_factory

    async def list_active(self) -> list[RssFeed]:
        """获取所有启用的 Feed."""
        async with self._session_factory() as session:
            stmt = (
                select(RssFeed)
                .where(RssFeed.is_active == True)  # noqa: E712
                .order_by(RssFeed.id)
            )
            result = await session.execute(stmt)
            return list(result.scalars().all())

    async def update_last_processed(self, feed_id: int, timestamp: datetime) -> bool:
        """更新最近处理时间，Feed 不存在时返回 False."""
        async with self._session_factory() as session:
            feed = await session.get(RssFeed, feed_id)
            if not feed:
                return False
            feed.last_processed = timestamp
            await session.commit()
            return True


class ArticleStore:
    """新闻文章存储."""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self._session_factory = session_factory

    async def list_all(self) -> list[ArticleRef]:
        """获取全部文章的去重快照（只读取标题和原文链接）."""
        async with self._session_factory() as session:
            stmt = select(NewsArticle.title, NewsArticle.source_url)
            result = await session.execute(stmt)
            return [
                ArticleRef(title=title, source_url=source_url)
                for title, source_url in result.all()
            ]

    async def insert(self, article: NewsArticle) -> NewsArticle | None:
        """
        插入文章.

        原文链接违反唯一约束时回滚并返回 None（并发采集时的兜底）。
        """
        async with self._session_factory() as session:
            session.add(article)
            try:
                await session.commit()
            except IntegrityError:
                await session.rollback()
                logger.info(f"文章已存在（唯一约束）: {article.source_url}")
                return None
            await session.refresh(article)
            return article


class HistoryStore:
    """处理历史存储（只追加）."""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self._session_factory = session_factory

    async def append(self, entry: RssProcessingHistory) -> RssProcessingHistory:
        async with self._session_factory() as session:
            session.add(entry)
            await session.commit()
            await session.refresh(entry)
            return entry
