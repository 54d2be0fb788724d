"""测试订阅源解析."""

from datetime import datetime

import pytest

from feedvault.fetcher.parser import ParseError, parse_feed
from helpers import rss_feed

ATOM = b"""<?xml version="1.0" encoding="utf-8"?>
<feed xmlns="http://www.w3.org/2005/Atom">
  <title>Atom Feed</title>
  <id>urn:uuid:feed</id>
  <updated>2024-02-01T00:00:00Z</updated>
  <entry>
    <title>Atom Entry</title>
    <link href="https://example.com/atom-entry"/>
    <id>urn:uuid:1</id>
    <updated>2024-02-01T10:30:00+08:00</updated>
  </entry>
</feed>
"""


class TestParseFeed:
    """测试 parse_feed."""

    def test_rss_items_keep_order(self) -> None:
        """RSS 条目保持原顺序，pubDate 解析为 UTC."""
        feed = parse_feed(
            rss_feed(
                [
                    ("https://example.com/2", "Second", datetime(2024, 1, 2, 8, 0)),
                    ("https://example.com/1", "First", datetime(2024, 1, 1, 8, 0)),
                ]
            )
        )

        assert feed.title == "Test Feed"
        assert [item.link for item in feed.items] == [
            "https://example.com/2",
            "https://example.com/1",
        ]
        assert feed.items[0].title == "Second"
        assert feed.items[0].published_at == datetime(2024, 1, 2, 8, 0)

    def test_atom_iso_timestamp_normalized_to_utc(self) -> None:
        """Atom 的 ISO 时间转换为 naive UTC."""
        feed = parse_feed(ATOM)

        assert len(feed.items) == 1
        item = feed.items[0]
        assert item.link == "https://example.com/atom-entry"
        assert item.published_at == datetime(2024, 2, 1, 2, 30)

    def test_rfc822_with_offset(self) -> None:
        """带时区偏移的 RFC-822 日期."""
        raw = (
            b'<rss version="2.0"><channel><title>T</title><item>'
            b"<title>X</title><link>https://example.com/x</link>"
            b"<pubDate>Tue, 02 Jan 2024 08:00:00 +0800</pubDate>"
            b"</item></channel></rss>"
        )
        feed = parse_feed(raw)

        assert feed.items[0].published_at == datetime(2024, 1, 2, 0, 0)

    def test_missing_date_falls_back_to_now(self) -> None:
        """没有发布时间时使用当前时间."""
        now = datetime(2030, 1, 1)
        feed = parse_feed(rss_feed([("https://example.com/a", "A", None)]), now=now)

        assert feed.items[0].published_at == now

    def test_missing_link_and_title(self) -> None:
        """缺少链接时 link 为 None；缺少标题时使用链接."""
        raw = (
            b'<rss version="2.0"><channel><title>T</title>'
            b"<item><title>No link</title></item>"
            b"<item><link>https://example.com/untitled</link></item>"
            b"</channel></rss>"
        )
        feed = parse_feed(raw)

        assert feed.items[0].link is None
        assert feed.items[1].title == "https://example.com/untitled"

    def test_empty_channel(self) -> None:
        """合法但没有条目的订阅源."""
        feed = parse_feed(rss_feed([]))
        assert feed.items == []

    def test_not_a_feed(self) -> None:
        """非订阅源内容抛出 ParseError."""
        with pytest.raises(ParseError):
            parse_feed(b"<html><body>hello</body></html>")

        with pytest.raises(ParseError):
            parse_feed(b"plain text")

    def test_body_naming_local_file_is_not_read(self, tmp_path) -> None:
        """响应体恰好是本地文件路径时按内容解析，不读取该文件."""
        path = tmp_path / "local.xml"
        path.write_bytes(rss_feed([("https://internal.example/local", "Local", None)]))

        with pytest.raises(ParseError):
            parse_feed(str(path).encode())
