"""API 依赖."""

from fastapi import HTTPException, Request

from thaifeed.scheduler.orchestrator import RSSOrchestrator


def get_orchestrator(request: Request) -> RSSOrchestrator:
    """从 app.state 获取采集调度器."""
    orchestrator: RSSOrchestrator | None = getattr(
        request.app.state, "rss_orchestrator", None
    )
    if orchestrator is None:
        raise HTTPException(status_code=503, detail="RSS 采集服务未初始化")
    return orchestrator
