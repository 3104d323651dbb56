"""RssFeed 订阅源模型."""

from datetime import UTC, datetime

from sqlmodel import Field, SQLModel


class RssFeed(SQLModel, table=True):
    """RSS 订阅源配置."""

    __tablename__ = "rss_feeds"  # type: ignore[assignment]

    id: int | None = Field(default=None, primary_key=True)
    title: str = Field(description="显示名称")
    url: str = Field(unique=True, description="Feed URL")
    description: str | None = Field(default=None, description="描述")
    category: str = Field(description="默认分类")
    is_active: bool = Field(default=True, description="是否启用")
    last_processed: datetime | None = Field(default=None, description="最近处理时间")
    created_at: datetime = Field(default_factory=lambda: datetime.now(UTC))
