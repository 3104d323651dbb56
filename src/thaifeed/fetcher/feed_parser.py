"""RSS/Atom 解析与条目规范化."""

import calendar
import re
import time
from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Any

import feedparser

# feedparser 的媒体字段可能是列表，也可能是单个字典
MediaField = list[Mapping[str, Any]] | Mapping[str, Any] | str | None

# Python 未注册的编码名 -> 实际编解码器
ENCODING_ALIASES = {
    "windows-874": "cp874",
    "x-windows-874": "cp874",
}

_XML_ENCODING = re.compile(rb"^\s*<\?xml[^>]*?encoding=[\"']([A-Za-z0-9._-]+)[\"']")


@dataclass
class FeedItem:
    """规范化后的 RSS 条目，只在一次处理过程中存在."""

    title: str = ""
    link: str = ""
    published_at: datetime | None = None
    content: str = ""  # 普通内容 / 摘要片段
    content_encoded: str = ""  # content:encoded 全文
    categories: list[str] = field(default_factory=list)
    enclosure_url: str | None = None
    media_urls: list[str] = field(default_factory=list)


@dataclass
class ParsedFeed:
    """解析结果."""

    title: str = ""
    items: list[FeedItem] = field(default_factory=list)
    error: str | None = None  # 解析器报告的格式问题


def as_list(value: MediaField) -> list[Mapping[str, Any]]:
    """把单个对象 / 列表 / 空值统一成字典列表."""
    if value is None:
        return []
    if isinstance(value, str):
        return [{"url": value}]
    if isinstance(value, Mapping):
        return [value]
    return [v for v in value if isinstance(v, Mapping)]


def media_url(obj: Mapping[str, Any]) -> str | None:
    """读取媒体对象的地址（url / href 两种写法）."""
    url = obj.get("url") or obj.get("href")
    return str(url).strip() if url else None


def _first_enclosure(entry: Mapping[str, Any]) -> str | None:
    """取第一个图片类型（或未声明类型）的 enclosure."""
    for enc in as_list(entry.get("enclosures")):
        enc_type = str(enc.get("type") or "")
        if enc_type and not enc_type.startswith("image/"):
            continue
        url = media_url(enc)
        if url:
            return url
    return None


def _media_urls(entry: Mapping[str, Any]) -> list[str]:
    """合并 media:content 与 media:thumbnail 中的地址."""
    urls: list[str] = []
    for key in ("media_content", "media_thumbnail"):
        for obj in as_list(entry.get(key)):
            medium = str(obj.get("medium") or obj.get("type") or "")
            if medium and not medium.startswith("image"):
                continue
            url = media_url(obj)
            if url and url not in urls:
                urls.append(url)
    return urls


def _published_at(entry: Mapping[str, Any]) -> datetime | None:
    parsed: time.struct_time | None = entry.get("published_parsed") or entry.get(
        "updated_parsed"
    )
    if not parsed:
        return None
    return datetime.fromtimestamp(calendar.timegm(parsed), tz=UTC)


def _categories(entry: Mapping[str, Any]) -> list[str]:
    terms: list[str] = []
    for tag in as_list(entry.get("tags")):
        term = tag.get("term") or tag.get("label")
        if term:
            terms.append(str(term).strip())
    return terms


def normalize_entry(entry: Mapping[str, Any]) -> FeedItem:
    """将 feedparser 条目转换为 FeedItem."""
    contents = as_list(entry.get("content"))
    content_encoded = str(contents[0].get("value") or "") if contents else ""

    return FeedItem(
        title=str(entry.get("title") or "").strip(),
        link=str(entry.get("link") or "").strip(),
        published_at=_published_at(entry),
        content=str(entry.get("summary") or entry.get("description") or ""),
        content_encoded=content_encoded,
        categories=_categories(entry),
        enclosure_url=_first_enclosure(entry),
        media_urls=_media_urls(entry),
    )


def normalize_encoding(data: bytes) -> bytes:
    """
    把 XML 声明里 Python 不认识的编码名转成 UTF-8 文档.

    其它编码原样返回，交给 feedparser 按声明解码。
    """
    match = _XML_ENCODING.match(data)
    if not match:
        return data
    codec = ENCODING_ALIASES.get(match.group(1).decode("ascii").lower())
    if codec is None:
        return data
    start, end = match.span(1)
    text = (
        data[:start].decode("ascii")
        + "utf-8"
        + data[end:].decode(codec, errors="replace")
    )
    return text.encode("utf-8")


def parse_feed(content: str | bytes) -> ParsedFeed:
    """
    解析 RSS/Atom 文档.

    传入原始字节时由 feedparser 根据 XML 声明确定编码；
    feedparser 对格式问题很宽容，能解析出条目时只记录 bozo 信息，不视为失败。
    """
    if isinstance(content, bytes):
        content = normalize_encoding(content)
    parsed = feedparser.parse(content)
    error = None
    if parsed.get("bozo"):
        error = str(parsed.get("bozo_exception") or "malformed feed")

    return ParsedFeed(
        title=str(parsed.feed.get("title") or ""),
        items=[normalize_entry(entry) for entry in parsed.entries],
        error=error,
    )
