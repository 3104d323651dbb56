"""测试重复文章检测."""

import pytest

from thaifeed.core.dedupe import (
    ArticleRef,
    DuplicateDetector,
    is_duplicate,
    levenshtein_distance,
    title_similarity,
)

EXISTING = [
    ArticleRef("ผู้ว่าฯ ลงพื้นที่ตรวจน้ำท่วมอำเภอเมือง", "https://example.com/news/2"),
    ArticleRef("Market prices rise in the city", "https://example.com/news/3"),
]


class TestLevenshtein:
    """测试编辑距离."""

    def test_classic_example(self) -> None:
        assert levenshtein_distance("kitten", "sitting") == 3

    def test_empty_strings(self) -> None:
        assert levenshtein_distance("", "abc") == 3
        assert levenshtein_distance("abc", "") == 3
        assert levenshtein_distance("", "") == 0

    def test_symmetric(self) -> None:
        assert levenshtein_distance("flaw", "lawn") == levenshtein_distance(
            "lawn", "flaw"
        )

    def test_thai_characters(self) -> None:
        assert levenshtein_distance("ข่าว", "ข่าวด่วน") == 4


class TestTitleSimilarity:
    """测试标题相似度."""

    def test_case_and_whitespace_ignored(self) -> None:
        assert title_similarity("  Hello World ", "hello world") == 1.0

    def test_ratio(self) -> None:
        assert title_similarity("abcdefghij", "abcdefghxy") == pytest.approx(0.8)


class TestDuplicateDetector:
    """测试 DuplicateDetector."""

    def test_same_link_is_duplicate(self) -> None:
        """链接相同即重复，与标题无关."""
        link = "https://example.com/news/3"
        assert is_duplicate("Completely new title", link, EXISTING)

    def test_similar_title_is_duplicate(self) -> None:
        """标题只差一个字符视为重复."""
        title = "ผู้ว่าฯ ลงพื้นที่ตรวจน้ำท่วมอำเภอเมือง!"
        assert is_duplicate(title, "https://other.example.com/a", EXISTING)

    def test_title_case_insensitive(self) -> None:
        assert is_duplicate("MARKET PRICES RISE IN THE CITY", "", EXISTING)

    def test_different_title_is_not_duplicate(self) -> None:
        link = "https://example.com/news/9"
        assert not is_duplicate("ประชุมสภาเทศบาล", link, EXISTING)

    def test_threshold_boundary(self) -> None:
        """相似度 0.9 重复，0.8 不重复."""
        base = "abcdefghijklmnopqrst"
        existing = [ArticleRef(base)]
        assert is_duplicate("abcdefghijklmnopqrXY", "", existing)
        assert not is_duplicate("abcdefghijklmnopWXYZ", "", existing)

    def test_custom_threshold(self) -> None:
        existing = [ArticleRef("abcdefghij")]
        loose = DuplicateDetector(threshold=0.7)
        assert loose.is_duplicate("abcdefghxy", "", existing)
        assert not DuplicateDetector(threshold=0.9).is_duplicate(
            "abcdefghxy", "", existing
        )

    def test_length_prefilter_skips_distant_titles(self) -> None:
        detector = DuplicateDetector()
        assert detector._length_compatible("short", "short!") is False
        assert detector._length_compatible("a" * 40, "a" * 42) is True
        assert detector.find_duplicate("short", "", [ArticleRef("short" * 10)]) is None

    def test_find_duplicate_returns_match(self) -> None:
        match = DuplicateDetector().find_duplicate(
            "x", "https://example.com/news/2", EXISTING
        )
        assert match is EXISTING[0]

    def test_empty_history(self) -> None:
        assert not is_duplicate("อะไรก็ได้", "https://example.com/x", [])
