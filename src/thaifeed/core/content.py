"""RSS 条目内容清洗与摘要."""

import logging
import re

from thaifeed.utils.html_parser import html_to_text, strip_tags

logger = logging.getLogger(__name__)

EMPTY_SUMMARY = "สรุปข่าวจาก RSS Feed"
EMPTY_CONTENT = "เนื้อหาจาก RSS Feed"

SHORT_TEXT_LENGTH = 50
MIN_SENTENCE_LENGTH = 10
MAX_SENTENCES = 3
MAX_SUMMARY_LENGTH = 300
ELLIPSIS = "..."

# 解析后仍可能残留（双重转义）的实体
ENTITY_REPLACEMENTS: list[tuple[str, str]] = [
    ("&nbsp;", " "),
    ("&lt;", "<"),
    ("&gt;", ">"),
    ("&quot;", '"'),
    ("&#39;", "'"),
    ("&#039;", "'"),
    ("&apos;", "'"),
    ("&ldquo;", "“"),
    ("&rdquo;", "”"),
    ("&lsquo;", "‘"),
    ("&rsquo;", "’"),
    ("&hellip;", "…"),
    # &amp; 最后处理，避免 "&amp;lt;" 被解码两次
    ("&amp;", "&"),
]

_SENTENCE_SPLIT = re.compile(r"[.!?。]")
_WHITESPACE = re.compile(r"\s+")


def decode_entities(text: str) -> str:
    """解码常见 HTML 实体."""
    for entity, value in ENTITY_REPLACEMENTS:
        text = text.replace(entity, value)
    return text


def clean_content(content: str | None, content_encoded: str | None = None) -> str:
    """
    将 RSS 条目内容转换为纯文本.

    Args:
        content: 普通内容或摘要片段
        content_encoded: content:encoded 全文（优先使用）

    Returns:
        去除标签、解码实体并压缩空白后的文本
    """
    raw = content_encoded or content or ""
    if not raw:
        return ""

    try:
        text = html_to_text(raw)
    except Exception:
        logger.debug("HTML 解析失败，改用正则去除标签", exc_info=True)
        text = strip_tags(raw)

    text = decode_entities(text)
    return _WHITESPACE.sub(" ", text).strip()


def generate_summary(text: str) -> str:
    """
    从清洗后的正文生成摘要.

    取前三个有效句子（不少于 10 个字符），总长超过 300 时截断。
    """
    text = (text or "").strip()
    if not text:
        return EMPTY_SUMMARY
    if len(text) < SHORT_TEXT_LENGTH:
        return text

    sentences = [
        s.strip()
        for s in _SENTENCE_SPLIT.split(text)
        if len(s.strip()) >= MIN_SENTENCE_LENGTH
    ]
    summary = ". ".join(sentences[:MAX_SENTENCES]) if sentences else text

    if len(summary) > MAX_SUMMARY_LENGTH:
        return summary[:MAX_SUMMARY_LENGTH].rstrip() + ELLIPSIS
    if not summary.endswith("."):
        summary += ELLIPSIS
    return summary
