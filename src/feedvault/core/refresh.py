"""手动刷新 - 对单个用户的全部订阅执行一次导入."""

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Any

from feedvault.core.ingestion import ErrorKind, IngestOutcome, IngestStatus, RssIngestor
from feedvault.core.store import Store

logger = logging.getLogger(__name__)


@dataclass
class RefreshResult:
    """手动刷新汇总."""

    new_items: int = 0
    unreachable_feeds: int = 0
    details: list[dict[str, Any]] = field(default_factory=list)


async def refresh_owner_feeds(
    ingestor: RssIngestor,
    store: Store,
    owner_id: int,
) -> RefreshResult:
    """
    并发导入用户的所有订阅并汇总结果.

    每个订阅的结果标记为 fulfilled/rejected；连接类错误计入不可达数量，
    其他错误只记录日志。
    """
    subscriptions = await store.list_subscriptions(owner_id=owner_id)
    logger.info(f"用户 {owner_id} 手动刷新 {len(subscriptions)} 个订阅")

    results = await asyncio.gather(
        *(ingestor.ingest(subscription) for subscription in subscriptions),
        return_exceptions=True,
    )

    summary = RefreshResult()
    for subscription, result in zip(subscriptions, results, strict=True):
        if isinstance(result, BaseException):
            logger.error(f"刷新订阅 {subscription.url} 异常: {result!r}")
            summary.unreachable_feeds += 1
            summary.details.append({"status": "rejected", "reason": str(result)})
            continue

        _tally(summary, result)
        summary.details.append({"status": "fulfilled", "value": result.to_dict()})

    return summary


def _tally(summary: RefreshResult, outcome: IngestOutcome) -> None:
    if outcome.status == IngestStatus.SUCCESS:
        summary.new_items += outcome.new_items
    elif outcome.status == IngestStatus.SKIPPED:
        logger.info(f"订阅 {outcome.subscription} 已跳过: {outcome.reason}")
    elif outcome.error_kind == ErrorKind.CONNECTIVITY:
        summary.unreachable_feeds += 1
    else:
        logger.warning(
            f"订阅 {outcome.subscription} 刷新失败 ({outcome.error_kind}): {outcome.error}"
        )
