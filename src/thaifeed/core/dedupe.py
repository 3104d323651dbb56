"""重复文章检测."""

from collections.abc import Iterable
from dataclasses import dataclass

DEFAULT_SIMILARITY_THRESHOLD = 0.85


@dataclass(frozen=True)
class ArticleRef:
    """去重所需的文章快照（标题 + 原文链接）."""

    title: str
    source_url: str | None = None


def levenshtein_distance(a: str, b: str) -> int:
    """计算编辑距离（两行滚动数组）."""
    if a == b:
        return 0
    if len(a) < len(b):
        a, b = b, a
    if not b:
        return len(a)

    previous = list(range(len(b) + 1))
    for i, ca in enumerate(a, 1):
        current = [i]
        for j, cb in enumerate(b, 1):
            cost = 0 if ca == cb else 1
            current.append(
                min(
                    previous[j] + 1,  # 删除
                    current[j - 1] + 1,  # 插入
                    previous[j - 1] + cost,  # 替换
                )
            )
        previous = current
    return previous[-1]


def title_similarity(a: str, b: str) -> float:
    """
    标题相似度 (0-1)，忽略大小写和首尾空白.

    1 - 编辑距离 / 较长标题长度。
    """
    a = (a or "").strip().lower()
    b = (b or "").strip().lower()
    longest = max(len(a), len(b))
    if longest == 0:
        return 1.0
    return 1.0 - levenshtein_distance(a, b) / longest


class DuplicateDetector:
    """根据链接和标题相似度判断文章是否已存在."""

    def __init__(self, threshold: float = DEFAULT_SIMILARITY_THRESHOLD) -> None:
        self.threshold = threshold

    def find_duplicate(
        self, title: str, link: str, existing: Iterable[ArticleRef]
    ) -> ArticleRef | None:
        """返回第一个重复的已有文章，没有则返回 None."""
        candidates = list(existing)

        # 链接完全相同
        if link:
            for ref in candidates:
                if ref.source_url and ref.source_url == link:
                    return ref

        # 标题模糊匹配
        for ref in candidates:
            if not self._length_compatible(title, ref.title):
                continue
            if title_similarity(title, ref.title) > self.threshold:
                return ref

        return None

    def _length_compatible(self, a: str, b: str) -> bool:
        """编辑距离不小于长度差，长度差过大时相似度不可能超过阈值."""
        la, lb = len((a or "").strip().lower()), len((b or "").strip().lower())
        longest = max(la, lb)
        if longest == 0:
            return True
        return 1.0 - abs(la - lb) / longest > self.threshold

    def is_duplicate(
        self, title: str, link: str, existing: Iterable[ArticleRef]
    ) -> bool:
        return self.find_duplicate(title, link, existing) is not None


def is_duplicate(
    title: str,
    link: str,
    existing: Iterable[ArticleRef],
    threshold: float = DEFAULT_SIMILARITY_THRESHOLD,
) -> bool:
    """判断候选文章是否与已有文章重复."""
    return DuplicateDetector(threshold).is_duplicate(title, link, existing)
