"""新闻文章 API."""

from typing import Any

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy import func
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from thaifeed.models.article import NewsArticle
from thaifeed.models.database import get_session

router = APIRouter(prefix="/api/news", tags=["news"])


def _article_to_dict(article: NewsArticle, with_content: bool = False) -> dict[str, Any]:
    data: dict[str, Any] = {
        "id": article.id,
        "title": article.title,
        "summary": article.summary,
        "category": article.category,
        "image_url": article.image_url,
        "source_url": article.source_url,
        "rss_feed_id": article.rss_feed_id,
        "is_breaking": article.is_breaking,
        "created_at": article.created_at.isoformat(),
    }
    if with_content:
        data["content"] = article.content
    return data


@router.get("")
async def list_news(
    category: str | None = Query(None, description="按分类筛选"),
    breaking: bool | None = Query(None, description="只看突发新闻"),
    page: int = Query(1, ge=1, description="页码"),
    limit: int = Query(20, ge=1, le=100, description="每页数量"),
    session: AsyncSession = Depends(get_session),
) -> dict[str, Any]:
    """获取最新新闻列表."""
    stmt = select(NewsArticle)
    count_stmt = select(func.count()).select_from(NewsArticle)
    if category:
        stmt = stmt.where(NewsArticle.category == category)
        count_stmt = count_stmt.where(NewsArticle.category == category)
    if breaking is not None:
        stmt = stmt.where(NewsArticle.is_breaking == breaking)
        count_stmt = count_stmt.where(NewsArticle.is_breaking == breaking)

    total = (await session.execute(count_stmt)).scalar_one()

    stmt = (
        stmt.order_by(NewsArticle.created_at.desc())  # type: ignore[attr-defined]
        .offset((page - 1) * limit)
        .limit(limit)
    )
    result = await session.execute(stmt)

    return {
        "total": total,
        "page": page,
        "limit": limit,
        "items": [_article_to_dict(a) for a in result.scalars().all()],
    }


@router.get("/{article_id}")
async def get_news(
    article_id: int,
    session: AsyncSession = Depends(get_session),
) -> dict[str, Any]:
    """获取新闻详情."""
    article = await session.get(NewsArticle, article_id)
    if not article:
        raise HTTPException(status_code=404, detail="新闻不存在")
    return _article_to_dict(article, with_content=True)
