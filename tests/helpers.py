"""测试辅助：假抓取器、固定容量检查与 RSS 文档生成."""

from datetime import UTC, datetime
from email.utils import format_datetime
from xml.sax.saxutils import escape

FEED_URL = "https://example.com/feed.xml"


class FakeFetcher:
    """按 URL 返回预设内容或抛出预设异常的抓取器."""

    def __init__(self, feeds: dict[str, bytes | Exception] | None = None) -> None:
        self.feeds = feeds or {}
        self.calls: list[str] = []

    async def fetch(self, url: str) -> bytes:
        self.calls.append(url)
        value = self.feeds[url]
        if isinstance(value, Exception):
            raise value
        return value

    async def close(self) -> None:
        pass


class StaticGate:
    """固定返回结果的容量检查."""

    def __init__(self, exceeded: bool) -> None:
        self.exceeded = exceeded
        self.calls: list[tuple[int, int]] = []

    async def would_exceed_limit(self, owner_id: int, candidate_count: int) -> bool:
        self.calls.append((owner_id, candidate_count))
        return self.exceeded


def rss_feed(items: list[tuple[str | None, str, datetime | None]]) -> bytes:
    """生成 RSS 2.0 文档，items 为 (link, title, published) 列表."""
    entries = []
    for link, title, published in items:
        parts = [f"<title>{escape(title)}</title>"]
        if link:
            parts.append(f"<link>{escape(link)}</link>")
        if published:
            pub_date = format_datetime(published.replace(tzinfo=UTC))
            parts.append(f"<pubDate>{pub_date}</pubDate>")
        entries.append(f"<item>{''.join(parts)}</item>")

    return (
        '<?xml version="1.0" encoding="UTF-8"?>'
        '<rss version="2.0"><channel><title>Test Feed</title>'
        "<link>https://example.com</link><description>test</description>"
        f"{''.join(entries)}</channel></rss>"
    ).encode()
