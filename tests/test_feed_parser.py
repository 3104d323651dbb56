"""测试 RSS 解析与条目规范化."""

from helpers import rss_document, rss_item

from thaifeed.fetcher.feed_parser import (
    as_list,
    normalize_encoding,
    normalize_entry,
    parse_feed,
)


class TestAsList:
    """测试媒体字段形状统一."""

    def test_none(self) -> None:
        assert as_list(None) == []

    def test_single_dict(self) -> None:
        assert as_list({"url": "https://a/1.jpg"}) == [{"url": "https://a/1.jpg"}]

    def test_list_drops_non_dicts(self) -> None:
        assert as_list([{"url": "x"}, "junk", None]) == [{"url": "x"}]  # type: ignore[list-item]

    def test_plain_string(self) -> None:
        assert as_list("https://a/1.jpg") == [{"url": "https://a/1.jpg"}]


class TestNormalizeEntry:
    """测试 normalize_entry."""

    def test_handles_single_object_media_fields(self) -> None:
        """media 字段为单个对象时也能读取."""
        entry = {
            "title": " ข่าว ",
            "link": "https://example.com/a",
            "media_content": {"url": "https://img.example.com/1.jpg"},
            "media_thumbnail": {"href": "https://img.example.com/2.jpg"},
            "enclosures": {"href": "https://img.example.com/enc.jpg"},
        }
        item = normalize_entry(entry)

        assert item.title == "ข่าว"
        assert item.enclosure_url == "https://img.example.com/enc.jpg"
        assert item.media_urls == [
            "https://img.example.com/1.jpg",
            "https://img.example.com/2.jpg",
        ]

    def test_skips_non_image_media(self) -> None:
        """视频等非图片媒体不作为候选."""
        entry = {
            "media_content": [
                {"url": "https://v.example.com/clip.mp4", "medium": "video"},
                {"url": "https://img.example.com/ok.jpg", "type": "image/jpeg"},
            ],
            "enclosures": [
                {"href": "https://a.example.com/podcast.mp3", "type": "audio/mpeg"},
            ],
        }
        item = normalize_entry(entry)

        assert item.media_urls == ["https://img.example.com/ok.jpg"]
        assert item.enclosure_url is None

    def test_missing_fields_default_to_empty(self) -> None:
        item = normalize_entry({})
        assert item.title == ""
        assert item.link == ""
        assert item.categories == []
        assert item.published_at is None


class TestParseFeed:
    """测试 parse_feed."""

    def test_parses_custom_fields(self) -> None:
        """解析 media:content、media:thumbnail、content:encoded 和分类."""
        xml = rss_document(
            rss_item(
                "ข่าวการเมืองวันนี้",
                "https://example.com/news/1",
                description="<p>สรุปข่าว</p>",
                category="Politics",
                extra=(
                    '<media:content url="https://img.example.com/m.jpg" '
                    'medium="image" />'
                    '<media:thumbnail url="https://img.example.com/t.jpg" />'
                    '<enclosure url="https://img.example.com/e.jpg" '
                    'type="image/jpeg" length="100" />'
                    "<content:encoded><![CDATA[<p>เนื้อหาเต็ม</p>]]></content:encoded>"
                    "<pubDate>Mon, 01 Jan 2024 08:00:00 GMT</pubDate>"
                ),
            )
        )

        parsed = parse_feed(xml)

        assert parsed.title == "ข่าวอุดรธานี"
        assert len(parsed.items) == 1
        item = parsed.items[0]
        assert item.title == "ข่าวการเมืองวันนี้"
        assert item.link == "https://example.com/news/1"
        assert item.categories == ["Politics"]
        assert item.enclosure_url == "https://img.example.com/e.jpg"
        assert "https://img.example.com/m.jpg" in item.media_urls
        assert "https://img.example.com/t.jpg" in item.media_urls
        assert "เนื้อหาเต็ม" in item.content_encoded
        assert item.published_at is not None
        assert item.published_at.year == 2024

    def test_preserves_item_order(self) -> None:
        xml = rss_document(
            rss_item("หนึ่ง", "https://example.com/1"),
            rss_item("สอง", "https://example.com/2"),
            rss_item("สาม", "https://example.com/3"),
        )
        parsed = parse_feed(xml)
        assert [i.link for i in parsed.items] == [
            "https://example.com/1",
            "https://example.com/2",
            "https://example.com/3",
        ]

    def test_garbage_reports_error_without_items(self) -> None:
        parsed = parse_feed("this is not a feed at all " * 10)
        assert parsed.items == []
        assert parsed.error is not None

    def test_windows_874_bytes_decode_to_thai(self) -> None:
        title = "ข่าวด่วน น้ำท่วมอุดรธานี"
        data = (
            rss_document(rss_item(title, "https://example.com/news/th"))
            .replace('encoding="UTF-8"', 'encoding="windows-874"')
            .encode("cp874")
        )
        parsed = parse_feed(data)
        assert parsed.title == "ข่าวอุดรธานี"
        assert [i.title for i in parsed.items] == [title]

    def test_utf8_bytes(self) -> None:
        data = rss_document(rss_item("สวัสดี", "https://example.com/1")).encode()
        parsed = parse_feed(data)
        assert [i.title for i in parsed.items] == ["สวัสดี"]


class TestNormalizeEncoding:
    """测试 normalize_encoding."""

    def test_known_encoding_is_untouched(self) -> None:
        data = '<?xml version="1.0" encoding="TIS-620"?><rss/>'.encode("tis-620")
        assert normalize_encoding(data) == data

    def test_windows_874_is_rewritten_to_utf8(self) -> None:
        data = "<?xml version='1.0' encoding='Windows-874'?><t>ไทย</t>".encode("cp874")
        assert normalize_encoding(data) == (
            "<?xml version='1.0' encoding='utf-8'?><t>ไทย</t>".encode()
        )

    def test_without_declaration(self) -> None:
        assert normalize_encoding(b"<rss/>") == b"<rss/>"
