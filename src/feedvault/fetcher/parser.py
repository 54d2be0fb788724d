"""RSS/Atom 解析（基于 feedparser）."""

import calendar
import io
import logging
from dataclasses import dataclass, field
from datetime import UTC, datetime
from email.utils import parsedate_to_datetime
from time import struct_time
from typing import Any

import feedparser

logger = logging.getLogger(__name__)


class ParseError(Exception):
    """内容不是可解析的订阅源."""


@dataclass
class FeedItem:
    """订阅源中的单个条目（只在一次导入过程中存在）."""

    link: str | None
    title: str
    published_at: datetime  # naive UTC


@dataclass
class ParsedFeed:
    """解析结果，条目保持订阅源中的顺序."""

    title: str
    items: list[FeedItem] = field(default_factory=list)


def parse_feed(raw: bytes, now: datetime | None = None) -> ParsedFeed:
    """
    把原始字节解析为条目列表.

    Args:
        raw: 订阅源响应体
        now: 条目缺少发布时间时使用的时间，默认为当前 UTC 时间

    Raises:
        ParseError: 内容既不是 RSS 也不是 Atom
    """
    # 以流传入，避免 feedparser 把字节内容当作本地路径或 URL 打开
    parsed = feedparser.parse(io.BytesIO(raw))

    if not parsed.get("version") and not parsed.entries:
        reason = parsed.get("bozo_exception") or "未识别的订阅源格式"
        msg = f"无法解析订阅源: {reason}"
        raise ParseError(msg)

    if parsed.bozo:
        logger.warning(f"订阅源格式不规范，继续解析: {parsed.bozo_exception}")

    fallback = now or _utcnow()
    items = [_to_item(entry, fallback) for entry in parsed.entries]

    return ParsedFeed(title=parsed.feed.get("title", ""), items=items)


def _to_item(entry: Any, fallback: datetime) -> FeedItem:
    link = (entry.get("link") or "").strip() or None
    title = (entry.get("title") or "").strip() or link or ""
    return FeedItem(
        link=link,
        title=title,
        published_at=_published_at(entry) or fallback,
    )


def _published_at(entry: Any) -> datetime | None:
    """发布时间：ISO 时间戳 → RFC-822 日期 → feedparser 规范化结果."""
    for key in ("published", "updated"):
        raw = entry.get(key)
        if not raw:
            continue
        parsed = _parse_iso(raw) or _parse_rfc822(raw)
        if parsed:
            return parsed

    for key in ("published_parsed", "updated_parsed"):
        value = entry.get(key)
        if isinstance(value, struct_time):
            return datetime.fromtimestamp(calendar.timegm(value), UTC).replace(
                tzinfo=None
            )

    return None


def _parse_iso(raw: str) -> datetime | None:
    try:
        return _to_naive_utc(datetime.fromisoformat(raw.strip()))
    except ValueError:
        return None


def _parse_rfc822(raw: str) -> datetime | None:
    try:
        return _to_naive_utc(parsedate_to_datetime(raw.strip()))
    except (TypeError, ValueError, IndexError):
        return None


def _to_naive_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value
    return value.astimezone(UTC).replace(tzinfo=None)


def _utcnow() -> datetime:
    return datetime.now(UTC).replace(tzinfo=None)
