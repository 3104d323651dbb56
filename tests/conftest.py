"""测试配置和 fixtures."""

from collections.abc import AsyncGenerator
from pathlib import Path

import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlmodel import SQLModel

from thaifeed.core.storage import ArticleStore, FeedStore, HistoryStore
from thaifeed.models.article import NewsArticle
from thaifeed.models.database import enable_sqlite_foreign_keys
from thaifeed.models.feed import RssFeed


@pytest_asyncio.fixture
async def session_factory(
    tmp_path: Path,
) -> AsyncGenerator[async_sessionmaker[AsyncSession], None]:
    """创建测试用的临时数据库（文件库，便于多个会话并发访问）."""
    engine = create_async_engine(
        f"sqlite+aiosqlite:///{tmp_path / 'test.db'}",
        echo=False,
    )
    enable_sqlite_foreign_keys(engine)

    async with engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)

    yield async_sessionmaker(
        engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )

    await engine.dispose()


@pytest_asyncio.fixture
async def async_session(
    session_factory: async_sessionmaker[AsyncSession],
) -> AsyncGenerator[AsyncSession, None]:
    """单个测试会话."""
    async with session_factory() as session:
        yield session


@pytest.fixture
def feed_store(session_factory: async_sessionmaker[AsyncSession]) -> FeedStore:
    return FeedStore(session_factory)


@pytest.fixture
def article_store(session_factory: async_sessionmaker[AsyncSession]) -> ArticleStore:
    return ArticleStore(session_factory)


@pytest.fixture
def history_store(session_factory: async_sessionmaker[AsyncSession]) -> HistoryStore:
    return HistoryStore(session_factory)


@pytest_asyncio.fixture
async def sample_feed(async_session: AsyncSession) -> RssFeed:
    """创建测试用的 Feed."""
    feed = RssFeed(
        title="Test Feed",
        url="https://example.com/rss.xml",
        category="ข่าวท้องถิ่น",
    )
    async_session.add(feed)
    await async_session.commit()
    await async_session.refresh(feed)
    return feed


@pytest_asyncio.fixture
async def existing_article(
    async_session: AsyncSession, sample_feed: RssFeed
) -> NewsArticle:
    """库中已有的一篇文章."""
    article = NewsArticle(
        title="ผู้ว่าฯ ลงพื้นที่ตรวจน้ำท่วมอำเภอเมือง",
        summary="summary",
        content="content",
        category="ข่าวท้องถิ่น",
        source_url="https://example.com/news/2",
        rss_feed_id=sample_feed.id,
    )
    async_session.add(article)
    await async_session.commit()
    await async_session.refresh(article)
    return article
