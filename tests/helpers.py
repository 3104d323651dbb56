"""测试辅助函数."""

from collections.abc import Callable

import httpx

from thaifeed.core.images import ImagePolicy, ImageResolver
from thaifeed.core.processor import FeedProcessor
from thaifeed.core.storage import ArticleStore, FeedStore, HistoryStore

Handler = Callable[[httpx.Request], httpx.Response]


def make_client(handler: Handler) -> httpx.AsyncClient:
    """用 MockTransport 构造 httpx 客户端."""
    return httpx.AsyncClient(transport=httpx.MockTransport(handler))


def make_processor(
    client: httpx.AsyncClient,
    feed_store: FeedStore,
    article_store: ArticleStore,
    history_store: HistoryStore,
) -> FeedProcessor:
    """构造不等待退避的 FeedProcessor."""
    return FeedProcessor(
        client,
        feed_store,
        article_store,
        history_store,
        ImageResolver(client, policy=ImagePolicy.HOTLINK),
        backoff_base=0,
    )


RSS_TEMPLATE = """<?xml version="1.0" encoding="UTF-8"?>
<rss version="2.0"
     xmlns:media="http://search.yahoo.com/mrss/"
     xmlns:content="http://purl.org/rss/1.0/modules/content/">
  <channel>
    <title>ข่าวอุดรธานี</title>
    <link>https://example.com/</link>
    <description>Test feed</description>
    {items}
  </channel>
</rss>
"""


def rss_item(
    title: str,
    link: str,
    description: str = "",
    category: str | None = None,
    extra: str = "",
) -> str:
    """生成一个 RSS item 片段."""
    parts = ["<item>"]
    if title:
        parts.append(f"<title>{title}</title>")
    if link:
        parts.append(f"<link>{link}</link>")
    if description:
        parts.append(f"<description><![CDATA[{description}]]></description>")
    if category:
        parts.append(f"<category>{category}</category>")
    parts.append(extra)
    parts.append("</item>")
    return "".join(parts)


def rss_document(*items: str) -> str:
    return RSS_TEMPLATE.format(items="\n".join(items))
