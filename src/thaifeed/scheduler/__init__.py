"""定时采集调度."""

from thaifeed.scheduler.orchestrator import FeedStatus, RSSOrchestrator
from thaifeed.scheduler.tasks import build_orchestrator

__all__ = [
    "FeedStatus",
    "RSSOrchestrator",
    "build_orchestrator",
]
