"""采集组件装配."""

import logging

import httpx
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from thaifeed.config import Settings
from thaifeed.core.images import ImagePolicy, ImageResolver
from thaifeed.core.processor import FeedProcessor
from thaifeed.core.storage import ArticleStore, FeedStore, HistoryStore
from thaifeed.fetcher.image_optimizer import ImageOptimizer
from thaifeed.scheduler.orchestrator import RSSOrchestrator

logger = logging.getLogger(__name__)


def build_orchestrator(
    settings: Settings,
    session_factory: async_sessionmaker[AsyncSession],
    client: httpx.AsyncClient,
) -> RSSOrchestrator:
    """根据配置创建采集调度器及其依赖."""
    feeds = FeedStore(session_factory)

    optimizer = ImageOptimizer(
        settings.upload_dir,
        url_prefix=settings.upload_url_prefix,
        max_width=settings.image_max_width,
        quality=settings.image_quality,
    )
    resolver = ImageResolver(
        client,
        optimizer=optimizer,
        policy=ImagePolicy(settings.image_policy),
        page_timeout=settings.page_timeout_seconds,
    )

    processor = FeedProcessor(
        client,
        feeds,
        ArticleStore(session_factory),
        HistoryStore(session_factory),
        resolver,
        attempts=settings.rss_fetch_attempts,
        base_timeout=settings.rss_base_timeout_seconds,
        timeout_step=settings.rss_timeout_step_seconds,
        backoff_base=settings.rss_backoff_base_seconds,
    )

    logger.info(f"图片策略: {settings.image_policy}")
    return RSSOrchestrator(
        processor,
        feeds,
        interval_minutes=settings.rss_interval_minutes,
        stagger_seconds=settings.rss_feed_stagger_seconds,
    )
