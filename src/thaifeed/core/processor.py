"""单个 RSS Feed 的处理流程."""

import json
import logging
from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import StrEnum

import httpx

from thaifeed.core.classifier import determine_category, is_breaking_news
from thaifeed.core.content import EMPTY_CONTENT, clean_content, generate_summary
from thaifeed.core.dedupe import DuplicateDetector
from thaifeed.core.images import ImageResolver
from thaifeed.core.storage import ArticleStore, FeedStore, HistoryStore
from thaifeed.fetcher.feed_parser import FeedItem, ParsedFeed, parse_feed
from thaifeed.fetcher.http import (
    DEFAULT_ATTEMPTS,
    DEFAULT_BACKOFF_BASE,
    DEFAULT_BASE_TIMEOUT,
    DEFAULT_TIMEOUT_STEP,
    fetch_with_retry,
)
from thaifeed.models.article import NewsArticle
from thaifeed.models.history import RssProcessingHistory

logger = logging.getLogger(__name__)

RSS_HEADERS = {
    "User-Agent": "Mozilla/5.0 (compatible; ThaiFeedBot/1.0; +RSS reader)",
    "Accept": (
        "application/rss+xml, application/atom+xml, application/xml;q=0.9, "
        "text/xml;q=0.8, */*;q=0.5"
    ),
    "Accept-Language": "th-TH,th;q=0.9,en;q=0.8",
    "Cache-Control": "no-cache",
}

MIN_FEED_BODY_LENGTH = 100
NO_ITEMS_MESSAGE = "No items found in feed"
JSON_PREVIEW_LENGTH = 200


class FeedStage(StrEnum):
    """Feed 处理阶段."""

    IDLE = "idle"
    FETCHING = "fetching"
    PARSING = "parsing"
    PROCESSING = "processing"
    RECORDING = "recording"


class ItemOutcome(StrEnum):
    """单个条目的处理结果."""

    ADDED = "added"
    DUPLICATE = "duplicate"
    SKIPPED = "skipped"  # 缺少标题或链接
    FAILED = "failed"


@dataclass
class ItemResult:
    """单个条目处理结果."""

    outcome: ItemOutcome
    title: str = ""
    error: str | None = None
    article_id: int | None = None


@dataclass
class FeedRunResult:
    """单次 Feed 处理结果."""

    feed_id: int
    success: bool
    items_seen: int = 0
    items_added: int = 0
    error: str | None = None
    stage: FeedStage = FeedStage.IDLE
    items: list[ItemResult] = field(default_factory=list)
    processed_at: datetime = field(default_factory=lambda: datetime.now(UTC))


class FeedFetchFailed(Exception):
    """Feed 内容不可用（非 2xx、内容过短、JSON 等）."""


class FeedProcessor:
    """抓取 -> 解析 -> 逐条处理 -> 记录历史."""

    def __init__(
        self,
        client: httpx.AsyncClient,
        feeds: FeedStore,
        articles: ArticleStore,
        history: HistoryStore,
        image_resolver: ImageResolver,
        duplicate_detector: DuplicateDetector | None = None,
        *,
        attempts: int = DEFAULT_ATTEMPTS,
        base_timeout: float = DEFAULT_BASE_TIMEOUT,
        timeout_step: float = DEFAULT_TIMEOUT_STEP,
        backoff_base: float = DEFAULT_BACKOFF_BASE,
    ) -> None:
        self.client = client
        self.feeds = feeds
        self.articles = articles
        self.history = history
        self.image_resolver = image_resolver
        self.duplicate_detector = duplicate_detector or DuplicateDetector()
        self.attempts = attempts
        self.base_timeout = base_timeout
        self.timeout_step = timeout_step
        self.backoff_base = backoff_base

    async def process_feed(self, feed_id: int, feed_url: str, category: str) -> int:
        """处理单个 Feed，返回新增文章数."""
        result = await self.run_feed(feed_id, feed_url, category)
        return result.items_added

    async def run_feed(
        self, feed_id: int, feed_url: str, category: str
    ) -> FeedRunResult:
        """
        处理单个 Feed 并返回完整结果.

        抓取或解析失败不会抛出，而是记录到历史表并返回 success=False。
        """
        result = FeedRunResult(feed_id=feed_id, success=False)
        logger.info(f"开始处理 RSS Feed: {feed_url}")

        try:
            result.stage = FeedStage.FETCHING
            response = await self._fetch_feed(feed_url)

            result.stage = FeedStage.PARSING
            parsed = self._parse(feed_url, response)
            result.items_seen = len(parsed.items)

            if not parsed.items:
                logger.info(f"Feed 中没有条目: {feed_url}")
                result.success = True
                result.error = NO_ITEMS_MESSAGE
            else:
                result.stage = FeedStage.PROCESSING
                for item in parsed.items:
                    item_result = await self._process_item_safely(
                        item, category, feed_id
                    )
                    result.items.append(item_result)
                    if item_result.outcome is ItemOutcome.ADDED:
                        result.items_added += 1
                result.success = True
                logger.info(
                    f"Feed 处理完成 {feed_url}: "
                    f"条目={result.items_seen}, 新增={result.items_added}"
                )

        except Exception as e:
            result.success = False
            result.error = str(e) or type(e).__name__
            logger.error(
                f"Feed 处理失败 {feed_url} (阶段={result.stage}): "
                f"{type(e).__name__}: {e}"
            )

        await self._record(result)
        return result

    async def _fetch_feed(self, feed_url: str) -> httpx.Response:
        """抓取 Feed 原文，返回 2xx 且内容足够长的响应."""
        response = await fetch_with_retry(
            self.client,
            feed_url,
            headers=RSS_HEADERS,
            attempts=self.attempts,
            base_timeout=self.base_timeout,
            timeout_step=self.timeout_step,
            backoff_base=self.backoff_base,
        )
        if not response.is_success:
            msg = f"HTTP {response.status_code}: {response.reason_phrase}"
            raise FeedFetchFailed(msg)

        body = response.text
        if len(body.strip()) < MIN_FEED_BODY_LENGTH:
            msg = f"Feed 内容过短 ({len(body.strip())} 字符)，可能为空或格式错误"
            raise FeedFetchFailed(msg)
        return response

    def _parse(self, feed_url: str, response: httpx.Response) -> ParsedFeed:
        """
        解析 Feed，检测返回 JSON 而非 XML 的情况.

        解析器拿到原始字节，编码以 XML 声明为准。
        """
        body = response.text
        if self._looks_like_json(body):
            preview = body.strip()[:JSON_PREVIEW_LENGTH]
            logger.warning(f"Feed 返回了 JSON 而不是 XML {feed_url}: {preview}")
            msg = "Feed returned JSON instead of XML"
            raise FeedFetchFailed(msg)

        parsed = parse_feed(response.content)
        if parsed.error and not parsed.items:
            msg = f"无法解析 Feed: {parsed.error}"
            raise FeedFetchFailed(msg)
        if parsed.error:
            logger.debug(f"Feed 格式不规范但可解析 {feed_url}: {parsed.error}")
        return parsed

    @staticmethod
    def _looks_like_json(body: str) -> bool:
        stripped = body.lstrip()
        if not stripped.startswith(("{", "[")):
            return False
        try:
            json.loads(stripped)
        except ValueError:
            return False
        return True

    async def _process_item_safely(
        self, item: FeedItem, category: str, feed_id: int
    ) -> ItemResult:
        """处理单个条目，异常只影响当前条目."""
        try:
            return await self.process_item(item, category, feed_id)
        except Exception as e:
            logger.exception(f"处理 RSS 条目失败: {item.title or item.link}")
            return ItemResult(
                outcome=ItemOutcome.FAILED, title=item.title, error=str(e)
            )

    async def process_item(
        self, item: FeedItem, feed_category: str, feed_id: int
    ) -> ItemResult:
        """处理单个条目: 去重 -> 清洗 -> 摘要 -> 配图 -> 分类 -> 入库."""
        if not item.title or not item.link:
            return ItemResult(outcome=ItemOutcome.SKIPPED, title=item.title)

        existing = await self.articles.list_all()
        if self.duplicate_detector.is_duplicate(item.title, item.link, existing):
            logger.debug(f"跳过重复文章: {item.title}")
            return ItemResult(outcome=ItemOutcome.DUPLICATE, title=item.title)

        content = clean_content(item.content, item.content_encoded)
        summary = generate_summary(content)
        image_url = await self.image_resolver.resolve(item)

        article = NewsArticle(
            title=item.title.strip(),
            summary=summary,
            content=content or EMPTY_CONTENT,
            category=determine_category(feed_category, item.categories),
            image_url=image_url,
            source_url=item.link,
            rss_feed_id=feed_id,
            is_breaking=is_breaking_news(item.title),
        )

        saved = await self.articles.insert(article)
        if saved is None:
            return ItemResult(outcome=ItemOutcome.DUPLICATE, title=item.title)

        return ItemResult(
            outcome=ItemOutcome.ADDED, title=item.title, article_id=saved.id
        )

    async def _record(self, result: FeedRunResult) -> None:
        """更新最近处理时间并写入一条处理历史."""
        result.stage = FeedStage.RECORDING
        result.processed_at = datetime.now(UTC)

        try:
            await self.feeds.update_last_processed(
                result.feed_id, result.processed_at
            )
            await self.history.append(
                RssProcessingHistory(
                    rss_feed_id=result.feed_id,
                    articles_processed=result.items_seen,
                    articles_added=result.items_added,
                    success=result.success,
                    error_message=result.error,
                    processed_at=result.processed_at,
                )
            )
        except Exception:
            logger.exception(f"写入处理历史失败: feed_id={result.feed_id}")
        finally:
            result.stage = FeedStage.IDLE
