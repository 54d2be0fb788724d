"""RSS 导入引擎 - 单个订阅的抓取、去重、容量检查与写入."""

import asyncio
import logging
from dataclasses import asdict, dataclass
from typing import Any

from feedvault.core.capacity import LinkCapacityGate
from feedvault.core.store import PersistenceError, Store
from feedvault.core.watermark import IngestedAt, watermark_of
from feedvault.fetcher.http import FeedFetcher, FetchError
from feedvault.fetcher.parser import FeedItem, ParseError, parse_feed
from feedvault.models.subscription import RssSubscription

logger = logging.getLogger(__name__)


class IngestStatus:
    """导入结果状态."""

    SUCCESS = "success"
    SKIPPED = "skipped"
    ERROR = "error"


class ErrorKind:
    """导入错误分类，只有 connectivity 会作为“不可达”单独展示给用户."""

    CONNECTIVITY = "connectivity"
    HTTP = "http"
    PARSE = "parse"
    PERSISTENCE = "persistence"


@dataclass
class IngestOutcome:
    """单个订阅一次导入的结果."""

    subscription: str
    subscription_id: int | None
    status: str
    new_items: int = 0
    failed_items: int = 0
    reason: str | None = None
    error: str | None = None
    error_kind: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {key: value for key, value in asdict(self).items() if value is not None}


class RssIngestor:
    """RSS 导入引擎."""

    def __init__(
        self,
        store: Store,
        fetcher: FeedFetcher,
        capacity_gate: LinkCapacityGate,
    ) -> None:
        self.store = store
        self.fetcher = fetcher
        self.capacity_gate = capacity_gate

    async def ingest(self, subscription: RssSubscription) -> IngestOutcome:
        """
        导入一个订阅.

        首次导入（集合中还没有任何匹配链接）时全部条目都视为新条目；
        之后只考虑发布时间晚于水位线且 URL 尚不存在的条目。
        超出容量时不创建链接也不推进水位线，下次轮询重新考虑同一批条目。
        """
        name = subscription.name

        try:
            raw = await self.fetcher.fetch(subscription.url)
        except FetchError as e:
            logger.warning(f"抓取订阅源失败 {subscription.url}: {e}")
            kind = ErrorKind.CONNECTIVITY if e.connectivity else ErrorKind.HTTP
            return self._error(subscription, e, kind)

        try:
            feed = await asyncio.to_thread(parse_feed, raw)
        except ParseError as e:
            logger.warning(f"解析订阅源失败 {subscription.url}: {e}")
            return self._error(subscription, e, ErrorKind.PARSE)

        items = _linked_items(feed.items)
        if not items:
            logger.info(f"[{name}] 订阅源中没有可导入的条目")
            return IngestOutcome(name, subscription.id, IngestStatus.SUCCESS)

        try:
            existing = await self.store.existing_urls(
                subscription.collection_id, [item.link for item in items]
            )
        except PersistenceError as e:
            logger.exception(f"[{name}] 查询已有链接失败: {e}")
            return self._error(subscription, e, ErrorKind.PERSISTENCE)

        watermark = watermark_of(subscription)
        if existing:
            candidates = [item for item in items if watermark.admits(item.published_at)]
        else:
            logger.info(f"[{name}] 集合中没有该订阅的链接，导入全部 {len(items)} 个条目")
            candidates = items

        new_items = [item for item in candidates if item.link not in existing]
        if not new_items:
            logger.info(f"[{name}] 没有新条目")
            return IngestOutcome(name, subscription.id, IngestStatus.SUCCESS)

        try:
            exceeded = await self.capacity_gate.would_exceed_limit(
                subscription.owner_id, len(new_items)
            )
        except PersistenceError as e:
            logger.exception(f"[{name}] 容量检查失败: {e}")
            return self._error(subscription, e, ErrorKind.PERSISTENCE)

        if exceeded:
            logger.info(
                f"用户 {subscription.owner_id} 的链接数已达上限，"
                f"跳过 [{name}] 的 {len(new_items)} 个新条目"
            )
            return IngestOutcome(
                name, subscription.id, IngestStatus.SKIPPED, reason="capacity"
            )

        results = await asyncio.gather(
            *(self._create_link(subscription, item) for item in new_items),
            return_exceptions=True,
        )
        created = [
            item
            for item, result in zip(new_items, results, strict=True)
            if not isinstance(result, BaseException)
        ]
        failed = len(new_items) - len(created)

        if not created:
            logger.error(f"[{name}] {failed} 个新条目全部写入失败")
            return IngestOutcome(
                name,
                subscription.id,
                IngestStatus.ERROR,
                failed_items=failed,
                error="创建链接失败",
                error_kind=ErrorKind.PERSISTENCE,
            )

        await self._advance_watermark(subscription, created)

        logger.info(f"[{name}] 导入完成: 新增={len(created)}, 失败={failed}")
        return IngestOutcome(
            name,
            subscription.id,
            IngestStatus.SUCCESS,
            new_items=len(created),
            failed_items=failed,
        )

    async def _create_link(self, subscription: RssSubscription, item: FeedItem) -> None:
        """创建单个链接，失败只影响该条目."""
        try:
            await self.store.create_link(
                name=item.title,
                url=item.link or "",
                owner_id=subscription.owner_id,
                collection_id=subscription.collection_id,
            )
        except PersistenceError as e:
            logger.warning(f"[{subscription.name}] 创建链接失败 {item.link}: {e}")
            raise

    async def _advance_watermark(
        self, subscription: RssSubscription, created: list[FeedItem]
    ) -> None:
        advanced = watermark_of(subscription).advance(
            item.published_at for item in created
        )
        if not isinstance(advanced, IngestedAt):
            return
        timestamp = advanced.timestamp
        if timestamp == subscription.last_build_date:
            return

        try:
            await self.store.advance_watermark(subscription.id, timestamp)
        except PersistenceError as e:
            # 链接已写入；下次导入按 URL 去重，不会重复创建
            logger.warning(f"[{subscription.name}] 更新水位线失败: {e}")
            return

        logger.info(f"[{subscription.name}] 水位线更新为 {timestamp.isoformat()}")

    def _error(
        self, subscription: RssSubscription, error: Exception, kind: str
    ) -> IngestOutcome:
        return IngestOutcome(
            subscription.name,
            subscription.id,
            IngestStatus.ERROR,
            error=str(error),
            error_kind=kind,
        )


def _linked_items(items: list[FeedItem]) -> list[FeedItem]:
    """丢弃没有链接的条目，同一订阅源内重复的链接只保留第一个."""
    seen: set[str] = set()
    linked: list[FeedItem] = []
    for item in items:
        if not item.link or item.link in seen:
            continue
        seen.add(item.link)
        linked.append(item)
    return linked
