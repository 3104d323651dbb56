"""ThaiFeed 主应用入口."""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

import httpx
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from thaifeed import __version__
from thaifeed.api import feeds, news, rss
from thaifeed.config import get_settings
from thaifeed.models.database import async_session_maker, close_db, init_db
from thaifeed.scheduler import build_orchestrator

# 配置日志
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """应用生命周期管理."""
    app_settings = get_settings()

    # 启动时初始化
    logger.info("正在初始化数据库...")
    await init_db(app_settings.database_url)

    client = httpx.AsyncClient()
    orchestrator = build_orchestrator(app_settings, async_session_maker(), client)
    app.state.rss_orchestrator = orchestrator

    # 数据库就绪后再启动自动采集
    if app_settings.rss_auto_start:
        logger.info("正在启动 RSS 自动采集...")
        orchestrator.start_auto_processing()

    logger.info("ThaiFeed 启动完成！")
    yield

    # 关闭时清理
    logger.info("正在关闭...")
    orchestrator.stop_auto_processing()
    optimizer = orchestrator.processor.image_resolver.optimizer
    if optimizer is not None:
        optimizer.close()
    await client.aclose()
    await close_db()
    logger.info("ThaiFeed 已关闭")


app = FastAPI(
    title="ThaiFeed",
    description="泰文地方新闻 RSS 采集与去重服务",
    version=__version__,
    lifespan=lifespan,
)

# 管理后台跨域访问
app.add_middleware(
    CORSMiddleware,
    allow_origins=get_settings().cors_origins,
    allow_methods=["GET", "POST", "PATCH", "DELETE"],
    allow_headers=["*"],
)

# 注册路由
app.include_router(rss.router)
app.include_router(feeds.router)
app.include_router(news.router)


@app.get("/")
async def root() -> dict:
    """根路径."""
    return {
        "name": "ThaiFeed",
        "version": __version__,
        "description": "泰文地方新闻 RSS 采集服务",
    }


@app.get("/health")
async def health() -> dict:
    """健康检查."""
    return {"status": "ok"}


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "thaifeed.main:app",
        host="0.0.0.0",
        port=8000,
        reload=True,
    )
