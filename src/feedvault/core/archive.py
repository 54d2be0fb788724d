"""归档批次选择与执行."""

import asyncio
import logging
from typing import Protocol

from feedvault.core.store import ArchiveTarget, Store

logger = logging.getLogger(__name__)


class Archiver(Protocol):
    """归档产物生成器（截图、PDF、可读文本、整页存档）."""

    async def archive(self, target: ArchiveTarget) -> None: ...


class ArchiveBatchSelector:
    """从待归档队列两端取链接，新旧链接都能持续推进."""

    def __init__(self, store: Store) -> None:
        self.store = store

    async def select_batch(self, half_size: int) -> list[ArchiveTarget]:
        """
        选出最多 2 * half_size 个待归档链接.

        最旧的 half_size 个在前，最新的 half_size 个在后；
        剩余链接不足 2 * half_size 时两端会重叠，按 id 去重。
        """
        oldest = await self.store.find_unarchived_links(half_size, newest_first=False)
        newest = await self.store.find_unarchived_links(half_size, newest_first=True)

        seen: set[int] = set()
        batch: list[ArchiveTarget] = []
        for target in [*oldest, *newest]:
            if target.link_id in seen:
                continue
            seen.add(target.link_id)
            batch.append(target)
        return batch


class ArchiveWorker:
    """调用归档器处理链接，单个链接失败不影响其他链接."""

    def __init__(self, archiver: Archiver) -> None:
        self.archiver = archiver

    async def archive_one(self, target: ArchiveTarget) -> bool:
        """归档单个链接，返回是否成功；异常只记录日志."""
        logger.info(f"开始归档 {target.url} (用户 {target.owner_id})")
        try:
            await self.archiver.archive(target)
        except Exception as e:
            logger.warning(f"归档失败 {target.url} (用户 {target.owner_id}): {e}")
            return False

        logger.info(f"归档完成 {target.url} (用户 {target.owner_id})")
        return True

    async def archive_batch(self, targets: list[ArchiveTarget]) -> int:
        """并发归档一批链接，等待全部结束后返回成功数量."""
        results = await asyncio.gather(*(self.archive_one(t) for t in targets))
        return sum(results)
