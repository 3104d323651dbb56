"""NewsArticle 新闻文章模型."""

from datetime import UTC, datetime

from sqlmodel import Field, SQLModel


class NewsArticle(SQLModel, table=True):
    """已入库的新闻文章."""

    __tablename__ = "news_articles"  # type: ignore[assignment]

    id: int | None = Field(default=None, primary_key=True)
    title: str = Field(description="标题")
    summary: str = Field(description="摘要")
    content: str = Field(description="纯文本内容")
    category: str = Field(index=True, description="分类")
    image_url: str | None = Field(default=None, description="图片地址")
    source_url: str | None = Field(
        default=None, unique=True, description="原文链接（RSS item link）"
    )
    rss_feed_id: int | None = Field(
        default=None, foreign_key="rss_feeds.id", description="来源 Feed"
    )
    is_breaking: bool = Field(default=False, description="是否突发新闻")
    created_at: datetime = Field(default_factory=lambda: datetime.now(UTC))
    updated_at: datetime = Field(default_factory=lambda: datetime.now(UTC))
