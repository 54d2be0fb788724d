"""后台任务：RSS 导入周期与归档周期."""

import asyncio
import logging

from feedvault.core.archive import ArchiveBatchSelector, ArchiveWorker
from feedvault.core.ingestion import IngestOutcome, IngestStatus, RssIngestor
from feedvault.core.store import Store

logger = logging.getLogger(__name__)


async def run_rss_cycle(ingestor: RssIngestor, store: Store) -> list[IngestOutcome]:
    """并发导入全部订阅（不按用户过滤），单个订阅失败只记录日志."""
    subscriptions = await store.list_subscriptions()
    logger.info(f"开始 RSS 导入，共 {len(subscriptions)} 个订阅")

    results = await asyncio.gather(
        *(ingestor.ingest(subscription) for subscription in subscriptions),
        return_exceptions=True,
    )

    outcomes: list[IngestOutcome] = []
    new_items = 0
    for subscription, result in zip(subscriptions, results, strict=True):
        if isinstance(result, BaseException):
            logger.error(f"处理订阅 {subscription.url} 异常: {result!r}")
            continue
        if result.status == IngestStatus.ERROR:
            logger.warning(f"订阅 {subscription.url} 导入失败: {result.error}")
        new_items += result.new_items
        outcomes.append(result)

    logger.info(f"RSS 导入完成: 订阅={len(subscriptions)}, 新增链接={new_items}")
    return outcomes


async def run_archive_cycle(
    selector: ArchiveBatchSelector,
    worker: ArchiveWorker,
    half_size: int,
) -> int:
    """选出一批待归档链接并发处理，返回成功数量."""
    batch = await selector.select_batch(half_size)
    if not batch:
        logger.debug("没有待归档的链接")
        return 0

    succeeded = await worker.archive_batch(batch)
    logger.info(f"归档批次完成: 成功={succeeded}, 失败={len(batch) - succeeded}")
    return succeeded
