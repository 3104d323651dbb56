"""HTML 解析工具."""

import re

from bs4 import BeautifulSoup

# 懒加载图片常用的属性名
LAZY_SRC_ATTRS = ("data-src", "data-original")

META_IMAGE_KEYS = ("og:image", "og:image:url", "og:image:secure_url", "twitter:image")


def html_to_text(html: str) -> str:
    """
    将 HTML 转换为纯文本.

    Args:
        html: HTML 内容

    Returns:
        提取的纯文本内容（空白未压缩）
    """
    if not html:
        return ""

    soup = BeautifulSoup(html, "lxml")

    # 移除 script 和 style 标签
    for element in soup(["script", "style"]):
        element.decompose()

    return soup.get_text(separator=" ")


def strip_tags(html: str) -> str:
    """解析失败时的兜底方案：直接用正则去掉标签."""
    return re.sub(r"<[^>]*>", " ", html or "")


def normalize_image_url(url: str | None) -> str | None:
    """规范化图片地址，协议相对地址补全为 https."""
    if not url:
        return None
    url = url.strip()
    if url.startswith("//"):
        return f"https:{url}"
    if url.startswith(("http://", "https://")):
        return url
    return None


def first_srcset_url(srcset: str) -> str | None:
    """取 srcset 中的第一个地址."""
    for part in srcset.split(","):
        part = part.strip()
        if part:
            return part.split()[0]
    return None


def extract_image_urls(html: str, limit: int = 5) -> list[str]:
    """
    提取 HTML 中 <img> 标签的图片地址.

    依次检查 src、懒加载属性和 srcset 的第一个地址。
    """
    if not html:
        return []

    soup = BeautifulSoup(html, "lxml")
    urls: list[str] = []

    for img in soup.find_all("img"):
        raw: list[str | None] = [img.get("src")]
        raw.extend(img.get(attr) for attr in LAZY_SRC_ATTRS)
        srcset = img.get("srcset")
        if srcset:
            raw.append(first_srcset_url(str(srcset)))

        for value in raw:
            url = normalize_image_url(str(value) if value else None)
            if url and url not in urls:
                urls.append(url)
            if len(urls) >= limit:
                return urls

    return urls


def extract_meta_image(html: str) -> str | None:
    """
    提取页面的 og:image / twitter:image.

    Args:
        html: 文章页面 HTML

    Returns:
        图片 URL 或 None
    """
    if not html:
        return None

    soup = BeautifulSoup(html, "lxml")
    for key in META_IMAGE_KEYS:
        tag = soup.find("meta", attrs={"property": key}) or soup.find(
            "meta", attrs={"name": key}
        )
        if tag and tag.get("content"):
            url = normalize_image_url(str(tag["content"]))
            if url:
                return url

    return None
