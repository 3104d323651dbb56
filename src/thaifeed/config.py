"""应用配置管理."""

from functools import lru_cache
from typing import Literal

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """应用配置（环境变量）."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # 数据库
    database_url: str = "sqlite+aiosqlite:///./thaifeed.db"

    # 管理后台允许的跨域来源（JSON 列表）
    cors_origins: list[str] = ["*"]

    # RSS 采集调度
    rss_interval_minutes: int = 15
    rss_auto_start: bool = True
    rss_feed_stagger_seconds: float = 0.5

    # 抓取重试
    rss_fetch_attempts: int = 3
    rss_base_timeout_seconds: float = 20.0
    rss_timeout_step_seconds: float = 15.0
    rss_backoff_base_seconds: float = 0.5

    # 图片策略: hotlink 直接使用远程地址, verify 先探测可用性
    image_policy: Literal["hotlink", "verify"] = "hotlink"
    page_timeout_seconds: float = 10.0

    # 本地图片存储
    upload_dir: str = "./public/uploads"
    upload_url_prefix: str = "/uploads"
    image_max_width: int = 1200
    image_quality: int = 80


@lru_cache
def get_settings() -> Settings:
    """获取应用配置（带缓存）."""
    return Settings()
