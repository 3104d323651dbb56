"""文章配图解析."""

import logging
from enum import StrEnum
from pathlib import PurePosixPath
from urllib.parse import urlparse

import httpx

from thaifeed.fetcher.feed_parser import FeedItem
from thaifeed.fetcher.image_optimizer import ImageOptimizer
from thaifeed.utils.html_parser import (
    extract_image_urls,
    extract_meta_image,
    normalize_image_url,
)

logger = logging.getLogger(__name__)

MAX_EXTRA_CANDIDATES = 5

BROWSER_HEADERS = {
    "User-Agent": (
        "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
        "(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36"
    ),
    "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8",
    "Accept-Language": "th-TH,th;q=0.9,en;q=0.8",
}


class ImagePolicy(StrEnum):
    """图片选择策略."""

    HOTLINK = "hotlink"  # 直接使用第一个候选，不做网络探测
    VERIFY = "verify"  # 逐个探测候选可用性


def collect_image_candidates(item: FeedItem) -> list[str]:
    """
    汇总条目的候选图片.

    enclosure 排在最前，其后是 media 字段和 HTML <img> 中的地址，
    后者去重后最多 5 个。
    """
    candidates: list[str] = []

    enclosure = normalize_image_url(item.enclosure_url)
    if enclosure:
        candidates.append(enclosure)

    extra: list[str] = []
    sources = [normalize_image_url(url) for url in item.media_urls]
    for html in (item.content_encoded, item.content):
        sources.extend(extract_image_urls(html, limit=MAX_EXTRA_CANDIDATES))

    for url in sources:
        if len(extra) >= MAX_EXTRA_CANDIDATES:
            break
        if url and url not in extra and url not in candidates:
            extra.append(url)

    return candidates + extra


class ImageResolver:
    """为文章选择一张配图."""

    def __init__(
        self,
        client: httpx.AsyncClient,
        optimizer: ImageOptimizer | None = None,
        policy: ImagePolicy = ImagePolicy.HOTLINK,
        page_timeout: float = 10.0,
    ) -> None:
        self.client = client
        self.optimizer = optimizer
        self.policy = ImagePolicy(policy)
        self.page_timeout = page_timeout

    async def resolve(self, item: FeedItem) -> str | None:
        """
        解析配图地址.

        顺序：候选图片 -> 文章页 og:image -> 下载候选图片并本地存储。
        """
        candidates = collect_image_candidates(item)

        if candidates and self.policy is ImagePolicy.HOTLINK:
            return candidates[0]

        if self.policy is ImagePolicy.VERIFY:
            for url in candidates:
                if await self.is_available(url):
                    return url

        scraped = await self.scrape_page_image(item.link) if item.link else None
        if scraped and (
            self.policy is ImagePolicy.HOTLINK or await self.is_available(scraped)
        ):
            return scraped

        # 远程地址都不可用时，尝试下载后本地存储
        fallbacks = candidates + ([scraped] if scraped else [])
        for url in fallbacks:
            local = await self.download_and_store(url)
            if local:
                return local

        return None

    async def scrape_page_image(self, page_url: str) -> str | None:
        """抓取文章页并读取 og:image / twitter:image."""
        try:
            response = await self.client.get(
                page_url,
                headers=BROWSER_HEADERS,
                timeout=self.page_timeout,
                follow_redirects=True,
            )
        except httpx.HTTPError as e:
            logger.debug(f"文章页抓取失败 {page_url}: {type(e).__name__}")
            return None

        if response.status_code != 200:
            return None
        return extract_meta_image(response.text)

    async def is_available(self, url: str) -> bool:
        """HEAD 探测，服务器不支持 HEAD 时退回 GET."""
        for method in ("HEAD", "GET"):
            try:
                response = await self.client.request(
                    method,
                    url,
                    headers=BROWSER_HEADERS,
                    timeout=self.page_timeout,
                    follow_redirects=True,
                )
            except httpx.HTTPError:
                return False

            if response.status_code in (405, 501) and method == "HEAD":
                continue
            content_type = response.headers.get("content-type", "")
            return response.is_success and content_type.startswith("image/")

        return False

    async def download_and_store(self, url: str) -> str | None:
        """下载图片并交给 ImageOptimizer 重新编码保存."""
        if self.optimizer is None:
            return None

        try:
            response = await self.client.get(
                url,
                headers=BROWSER_HEADERS,
                timeout=self.page_timeout,
                follow_redirects=True,
            )
        except httpx.HTTPError as e:
            logger.debug(f"图片下载失败 {url}: {type(e).__name__}")
            return None

        if not response.is_success or not response.content:
            return None

        filename = PurePosixPath(urlparse(url).path).name or "image"
        try:
            return await self.optimizer.optimize_and_store(
                response.content, filename, format="webp"
            )
        except Exception:
            logger.warning(f"图片处理失败: {url}", exc_info=True)
            return None
