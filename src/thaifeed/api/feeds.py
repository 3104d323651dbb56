"""RSS Feed 配置 API."""

from typing import Any

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, Field
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from thaifeed.models.database import get_session
from thaifeed.models.feed import RssFeed

router = APIRouter(prefix="/api/rss-feeds", tags=["feeds"])


class FeedCreate(BaseModel):
    """新建 Feed 请求."""

    title: str = Field(min_length=1)
    url: str = Field(min_length=1)
    description: str | None = None
    category: str = Field(min_length=1)
    is_active: bool = True


class FeedUpdate(BaseModel):
    """更新 Feed 请求（部分字段）."""

    title: str | None = None
    url: str | None = None
    description: str | None = None
    category: str | None = None
    is_active: bool | None = None


def _feed_to_dict(feed: RssFeed) -> dict[str, Any]:
    return {
        "id": feed.id,
        "title": feed.title,
        "url": feed.url,
        "description": feed.description,
        "category": feed.category,
        "is_active": feed.is_active,
        "last_processed": (
            feed.last_processed.isoformat() if feed.last_processed else None
        ),
        "created_at": feed.created_at.isoformat(),
    }


@router.get("")
async def list_feeds(
    session: AsyncSession = Depends(get_session),
) -> dict[str, Any]:
    """获取 Feed 列表."""
    result = await session.execute(select(RssFeed).order_by(RssFeed.id))
    feeds = result.scalars().all()
    return {"total": len(feeds), "items": [_feed_to_dict(f) for f in feeds]}


@router.get("/{feed_id}")
async def get_feed(
    feed_id: int,
    session: AsyncSession = Depends(get_session),
) -> dict[str, Any]:
    """获取 Feed 详情."""
    feed = await session.get(RssFeed, feed_id)
    if not feed:
        raise HTTPException(status_code=404, detail="RSS Feed 不存在")
    return _feed_to_dict(feed)


@router.post("", status_code=201)
async def create_feed(
    payload: FeedCreate,
    session: AsyncSession = Depends(get_session),
) -> dict[str, Any]:
    """新建 Feed."""
    feed = RssFeed(**payload.model_dump())
    session.add(feed)
    try:
        await session.commit()
    except IntegrityError as e:
        await session.rollback()
        raise HTTPException(status_code=409, detail="Feed URL 已存在") from e
    await session.refresh(feed)
    return _feed_to_dict(feed)


@router.patch("/{feed_id}")
async def update_feed(
    feed_id: int,
    payload: FeedUpdate,
    session: AsyncSession = Depends(get_session),
) -> dict[str, Any]:
    """更新 Feed."""
    feed = await session.get(RssFeed, feed_id)
    if not feed:
        raise HTTPException(status_code=404, detail="RSS Feed 不存在")

    for key, value in payload.model_dump(exclude_unset=True).items():
        setattr(feed, key, value)
    try:
        await session.commit()
    except IntegrityError as e:
        await session.rollback()
        raise HTTPException(status_code=409, detail="Feed URL 已存在") from e
    await session.refresh(feed)
    return _feed_to_dict(feed)


@router.delete("/{feed_id}")
async def delete_feed(
    feed_id: int,
    session: AsyncSession = Depends(get_session),
) -> dict[str, Any]:
    """删除 Feed."""
    feed = await session.get(RssFeed, feed_id)
    if not feed:
        raise HTTPException(status_code=404, detail="RSS Feed 不存在")

    await session.delete(feed)
    try:
        await session.commit()
    except IntegrityError as e:
        await session.rollback()
        raise HTTPException(status_code=409, detail="Feed 仍有关联文章，无法删除") from e
    return {"id": feed_id, "deleted": True}
