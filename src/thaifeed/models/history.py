"""RssProcessingHistory 处理历史模型."""

from datetime import UTC, datetime

from sqlmodel import Field, SQLModel


class RssProcessingHistory(SQLModel, table=True):
    """单次 Feed 处理记录（只追加）."""

    __tablename__ = "rss_processing_history"  # type: ignore[assignment]

    id: int | None = Field(default=None, primary_key=True)
    rss_feed_id: int = Field(index=True, description="Feed ID")
    articles_processed: int = Field(default=0, description="读取的条目数")
    articles_added: int = Field(default=0, description="新增文章数")
    success: bool = Field(description="是否成功")
    error_message: str | None = Field(default=None, description="错误信息")
    processed_at: datetime = Field(default_factory=lambda: datetime.now(UTC))
