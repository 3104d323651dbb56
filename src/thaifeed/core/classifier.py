"""新闻分类与突发新闻判断."""

from typing import ClassVar

POLITICS = "การเมือง"
SPORTS = "กีฬา"
ECONOMY = "เศรษฐกิจ"
TECHNOLOGY = "เทคโนโลยี"
HEALTH = "สุขภาพ"
EDUCATION = "การศึกษา"
ENTERTAINMENT = "บันเทิง"
LOCAL = "ข่าวท้องถิ่น"


class CategoryClassifier:
    """根据条目标签把新闻映射到固定的泰文分类."""

    # 顺序即优先级，先命中者胜出
    KEYWORDS: ClassVar[list[tuple[str, tuple[str, ...]]]] = [
        (POLITICS, ("politics", "government", "การเมือง", "รัฐบาล")),
        (SPORTS, ("sport", "football", "soccer", "กีฬา", "ฟุตบอล")),
        (ECONOMY, ("business", "economy", "ธุรกิจ", "เศรษฐกิจ")),
        (TECHNOLOGY, ("technology", "tech", "เทคโนโลยี", "ไอที")),
        (HEALTH, ("health", "medical", "สุขภาพ", "การแพทย์")),
        (EDUCATION, ("education", "school", "การศึกษา", "โรงเรียน")),
        (ENTERTAINMENT, ("entertainment", "celebrity", "บันเทิง", "ดารา")),
        (LOCAL, ("local", "ท้องถิ่น", "จังหวัด", "อุดรธานี")),
    ]

    def classify(self, tag: str) -> str | None:
        """匹配单个标签，未命中返回 None."""
        tag = tag.lower()
        for category, keywords in self.KEYWORDS:
            if any(keyword in tag for keyword in keywords):
                return category
        return None

    def determine_category(
        self, feed_category: str, item_categories: list[str] | None = None
    ) -> str:
        """
        确定文章分类.

        只看条目的第一个标签；未命中或没有标签时使用 Feed 配置的分类。
        """
        if item_categories:
            matched = self.classify(item_categories[0])
            if matched:
                return matched
        return feed_category


class BreakingNewsDetector:
    """根据标题关键词判断是否为突发新闻."""

    KEYWORDS: ClassVar[list[str]] = [
        "ด่วน",
        "เร่งด่วน",
        "แบบเร่งด่วน",
        "เหตุการณ์ด่วน",
        "ข่าวด่วน",
        "สำคัญ",
        "เหตุการณ์สำคัญ",
        "ประกาศ",
        "แจ้งข่าว",
        "breaking",
        "เกิดเหตุ",
        "อุบัติเหตุ",
        "เพลิงไหม้",
        "น้ำท่วม",
        "แผ่นดินไหว",
        "วิกฤต",
        "ฉุกเฉิน",
        "เตือน",
        "อันตราย",
        "urgent",
        "ลาออก",
        "ตาย",
        "เสียชีวิต",
        "จับกุม",
        "ตร.",
        "ชนเผ่า",
    ]

    def is_breaking(self, title: str) -> bool:
        title = (title or "").lower()
        return any(keyword.lower() in title for keyword in self.KEYWORDS)


_classifier = CategoryClassifier()
_breaking = BreakingNewsDetector()


def determine_category(
    feed_category: str, item_categories: list[str] | None = None
) -> str:
    """确定文章分类（模块级快捷方式）."""
    return _classifier.determine_category(feed_category, item_categories)


def is_breaking_news(title: str) -> bool:
    """判断标题是否含突发关键词."""
    return _breaking.is_breaking(title)
