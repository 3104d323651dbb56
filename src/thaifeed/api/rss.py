"""RSS 采集触发 API."""

from typing import Any

from fastapi import APIRouter, BackgroundTasks, Depends, HTTPException, Query, Response
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from thaifeed.api.deps import get_orchestrator
from thaifeed.models.database import get_session
from thaifeed.models.feed import RssFeed
from thaifeed.models.history import RssProcessingHistory
from thaifeed.scheduler.orchestrator import RSSOrchestrator

router = APIRouter(prefix="/api/rss", tags=["rss"])

NO_CACHE_HEADERS = {
    "Cache-Control": "no-cache, no-store, must-revalidate",
    "Pragma": "no-cache",
    "Expires": "0",
}


def _history_to_dict(entry: RssProcessingHistory) -> dict[str, Any]:
    return {
        "id": entry.id,
        "rss_feed_id": entry.rss_feed_id,
        "articles_processed": entry.articles_processed,
        "articles_added": entry.articles_added,
        "success": entry.success,
        "error_message": entry.error_message,
        "processed_at": entry.processed_at.isoformat(),
    }


@router.post("/process")
async def process_all(
    response: Response,
    background_tasks: BackgroundTasks,
    orchestrator: RSSOrchestrator = Depends(get_orchestrator),
) -> dict[str, str]:
    """后台触发全量采集."""
    response.headers.update(NO_CACHE_HEADERS)

    if orchestrator.is_processing:
        return {"message": "RSS 采集正在进行中", "status": "running"}

    background_tasks.add_task(orchestrator.process_all_feeds)
    return {"message": "RSS 采集已启动", "status": "started"}


@router.post("/process/{feed_id}")
async def process_one(
    feed_id: int,
    session: AsyncSession = Depends(get_session),
    orchestrator: RSSOrchestrator = Depends(get_orchestrator),
) -> dict[str, Any]:
    """立即处理单个 Feed."""
    feed = await session.get(RssFeed, feed_id)
    if not feed:
        raise HTTPException(status_code=404, detail="RSS Feed 不存在")

    count = await orchestrator.process_feed(feed_id, feed.url, feed.category)
    return {
        "feed_id": feed_id,
        "articles_added": count,
        "message": f"已从 {feed.title} 新增 {count} 篇文章",
    }


@router.get("/status")
async def get_status(
    orchestrator: RSSOrchestrator = Depends(get_orchestrator),
) -> dict[str, Any]:
    """获取采集状态."""
    return orchestrator.get_status()


@router.get("/auto-processing/status")
async def get_auto_status(
    orchestrator: RSSOrchestrator = Depends(get_orchestrator),
) -> dict[str, Any]:
    """获取自动采集状态."""
    status = orchestrator.get_status()
    return {
        "is_running": status["auto_processing_enabled"],
        "is_processing": status["is_processing"],
        "last_processed": status["last_processed"],
        "interval_minutes": status["interval_minutes"],
    }


@router.post("/auto/start")
async def start_auto(
    orchestrator: RSSOrchestrator = Depends(get_orchestrator),
) -> dict[str, str]:
    """启动自动采集."""
    orchestrator.start_auto_processing()
    return {
        "message": f"自动采集已启动（每 {orchestrator.interval_minutes} 分钟）",
        "status": "running",
    }


@router.post("/auto/stop")
async def stop_auto(
    orchestrator: RSSOrchestrator = Depends(get_orchestrator),
) -> dict[str, str]:
    """停止自动采集."""
    orchestrator.stop_auto_processing()
    return {"message": "自动采集已停止", "status": "stopped"}


@router.get("/history")
async def list_history(
    limit: int = Query(50, ge=1, le=500, description="返回条数"),
    session: AsyncSession = Depends(get_session),
) -> dict[str, Any]:
    """获取最近的处理历史."""
    stmt = (
        select(RssProcessingHistory)
        .order_by(RssProcessingHistory.processed_at.desc())  # type: ignore[attr-defined]
        .limit(limit)
    )
    result = await session.execute(stmt)
    return {"items": [_history_to_dict(h) for h in result.scalars().all()]}


@router.get("/history/{feed_id}")
async def list_feed_history(
    feed_id: int,
    session: AsyncSession = Depends(get_session),
) -> dict[str, Any]:
    """获取单个 Feed 的处理历史."""
    stmt = (
        select(RssProcessingHistory)
        .where(RssProcessingHistory.rss_feed_id == feed_id)
        .order_by(RssProcessingHistory.processed_at.desc())  # type: ignore[attr-defined]
    )
    result = await session.execute(stmt)
    return {
        "feed_id": feed_id,
        "items": [_history_to_dict(h) for h in result.scalars().all()],
    }
