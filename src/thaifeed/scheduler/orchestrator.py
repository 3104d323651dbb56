"""RSS 采集调度器."""

import asyncio
import logging
from dataclasses import asdict, dataclass
from datetime import UTC, datetime
from typing import Any

from apscheduler.schedulers.asyncio import AsyncIOScheduler

from thaifeed.core.processor import FeedProcessor, FeedRunResult
from thaifeed.core.storage import FeedStore

logger = logging.getLogger(__name__)

AUTO_JOB_ID = "rss_auto_processing"


@dataclass
class FeedStatus:
    """单个 Feed 的运行状态（仅内存，重启后丢失）."""

    is_processing: bool = False
    last_error: str | None = None
    last_processed: datetime | None = None
    items_processed: int = 0


class RSSOrchestrator:
    """
    管理全部 Feed 的采集.

    应用启动时创建一次，保存在 app.state 上。is_processing 标志只防止两次全量
    采集重叠，不阻止手动触发的单个 Feed 与全量采集并发，重复写入由去重和
    原文链接唯一约束兜底。
    """

    def __init__(
        self,
        processor: FeedProcessor,
        feeds: FeedStore,
        *,
        interval_minutes: int = 15,
        stagger_seconds: float = 0.5,
    ) -> None:
        self.processor = processor
        self.feeds = feeds
        self.interval_minutes = interval_minutes
        self.stagger_seconds = stagger_seconds

        self._is_processing = False
        self._scheduler: AsyncIOScheduler | None = None
        self._feed_status: dict[int, FeedStatus] = {}
        self._last_processed: dict[int, datetime] = {}

    @property
    def is_processing(self) -> bool:
        """是否有全量采集在运行."""
        return self._is_processing

    @property
    def auto_processing_enabled(self) -> bool:
        return self._scheduler is not None

    async def process_feed(self, feed_id: int, feed_url: str, category: str) -> int:
        """处理单个 Feed 并更新内存状态，返回新增文章数."""
        status = self._feed_status.setdefault(feed_id, FeedStatus())
        status.is_processing = True
        try:
            result = await self.processor.run_feed(feed_id, feed_url, category)
        except Exception as e:
            # run_feed 自己处理了预期内的失败，这里只兜底意外异常
            logger.exception(f"Feed 处理异常: feed_id={feed_id}")
            status.is_processing = False
            status.last_error = str(e)
            raise

        self._apply_result(status, result)
        return result.items_added

    def _apply_result(self, status: FeedStatus, result: FeedRunResult) -> None:
        status.is_processing = False
        status.last_error = None if result.success else result.error
        status.last_processed = result.processed_at
        status.items_processed = result.items_seen
        self._last_processed[result.feed_id] = result.processed_at

    async def process_all_feeds(self) -> int:
        """
        处理所有启用的 Feed.

        各 Feed 并发执行，第 i 个延迟 i * stagger_seconds 秒启动；
        单个 Feed 失败不影响其他 Feed。

        Returns:
            新增文章总数；已有全量采集在运行时直接返回 0
        """
        if self._is_processing:
            logger.info("RSS 采集正在进行，跳过本次触发")
            return 0

        self._is_processing = True
        logger.info("开始 RSS 全量采集...")

        try:
            feeds = [f for f in await self.feeds.list_active() if f.id is not None]
            if not feeds:
                logger.info("没有启用的 RSS Feed")
                return 0

            async def run(index: int, feed_id: int, url: str, category: str) -> int:
                await asyncio.sleep(index * self.stagger_seconds)
                return await self.process_feed(feed_id, url, category)

            tasks = [
                run(index, feed.id, feed.url, feed.category)  # type: ignore[arg-type]
                for index, feed in enumerate(feeds)
            ]
            results = await asyncio.gather(*tasks, return_exceptions=True)

            total = 0
            for feed, outcome in zip(feeds, results, strict=True):
                if isinstance(outcome, BaseException):
                    logger.error(f"Feed 处理失败 {feed.title}: {outcome}")
                    continue
                total += outcome

            logger.info(f"RSS 采集完成，共 {len(feeds)} 个 Feed，新增 {total} 篇文章")
            return total

        except Exception:
            logger.exception("RSS 全量采集出错")
            return 0
        finally:
            self._is_processing = False

    async def _scheduled_run(self) -> None:
        """定时任务入口."""
        await self.process_all_feeds()

    def start_auto_processing(self) -> None:
        """启动定时采集，启动时立即执行一次；重复调用无效果."""
        if self._scheduler is not None:
            logger.info("自动采集已在运行")
            return

        scheduler = AsyncIOScheduler()
        scheduler.add_job(
            self._scheduled_run,
            "interval",
            minutes=self.interval_minutes,
            id=AUTO_JOB_ID,
            name="RSS 自动采集",
            next_run_time=datetime.now(UTC),
            max_instances=1,
            coalesce=True,
            replace_existing=True,
        )
        scheduler.start()
        self._scheduler = scheduler
        logger.info(f"自动采集已启动，间隔: {self.interval_minutes} 分钟")

    def stop_auto_processing(self) -> None:
        """停止定时采集，可重复调用."""
        if self._scheduler is None:
            return
        self._scheduler.shutdown(wait=False)
        self._scheduler = None
        logger.info("自动采集已停止")

    def get_status(self) -> dict[str, Any]:
        """返回全局与各 Feed 状态快照."""
        return {
            "is_processing": self._is_processing,
            "auto_processing_enabled": self.auto_processing_enabled,
            "interval_minutes": self.interval_minutes,
            "last_processed": {
                feed_id: ts.isoformat() for feed_id, ts in self._last_processed.items()
            },
            "feeds": {
                feed_id: {
                    **asdict(status),
                    "last_processed": (
                        status.last_processed.isoformat()
                        if status.last_processed
                        else None
                    ),
                }
                for feed_id, status in self._feed_status.items()
            },
        }
