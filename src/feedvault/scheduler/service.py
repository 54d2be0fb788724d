"""后台任务服务 - 持有抓取客户端与两个轮询循环."""

import asyncio
import logging

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from feedvault.archiver.page import PageArchiver
from feedvault.config import Settings
from feedvault.core.archive import ArchiveBatchSelector, ArchiveWorker, Archiver
from feedvault.core.capacity import LinkCapacityGate
from feedvault.core.ingestion import RssIngestor
from feedvault.core.store import Store
from feedvault.fetcher.http import FeedFetcher
from feedvault.scheduler.loop import PollingLoop
from feedvault.scheduler.tasks import run_archive_cycle, run_rss_cycle

logger = logging.getLogger(__name__)


class WorkerService:
    """RSS 轮询与归档轮询，两者独立运行，只共享存储和抓取配置."""

    def __init__(
        self,
        settings: Settings,
        session_factory: async_sessionmaker[AsyncSession],
        archiver: Archiver | None = None,
        fetcher: FeedFetcher | None = None,
    ) -> None:
        self.settings = settings
        self.store = Store(session_factory)
        self.fetcher = fetcher or FeedFetcher(settings)
        self.ingestor = RssIngestor(
            self.store,
            self.fetcher,
            LinkCapacityGate(self.store, settings.max_links_per_user),
        )
        self.selector = ArchiveBatchSelector(self.store)
        self.archiver = archiver or PageArchiver(
            self.fetcher, self.store, settings.storage_folder
        )
        self.worker = ArchiveWorker(self.archiver)

        self._scheduler = AsyncIOScheduler()
        self.rss_loop = PollingLoop(
            "rss_polling",
            self.run_rss,
            settings.rss_polling_interval_seconds,
            self._scheduler,
        )
        self.archive_loop = PollingLoop(
            "archive_processing",
            self.run_archive,
            settings.archive_script_interval,
            self._scheduler,
        )

    async def run_rss(self) -> None:
        await run_rss_cycle(self.ingestor, self.store)

    async def run_archive(self) -> None:
        await run_archive_cycle(
            self.selector, self.worker, self.settings.archive_take_count
        )

    def start(self) -> None:
        """启动调度器和两个循环（需在事件循环中调用）."""
        self._scheduler.start()
        self.rss_loop.start()
        self.archive_loop.start()
        logger.info(
            f"后台任务已启动: RSS 间隔 {self.settings.rss_polling_interval_minutes} 分钟, "
            f"归档间隔 {self.settings.archive_script_interval} 秒"
        )

    async def stop(self) -> None:
        """停止循环并释放抓取客户端."""
        self.rss_loop.stop()
        self.archive_loop.stop()
        if self._scheduler.running:
            self._scheduler.shutdown(wait=False)
            # AsyncIOScheduler 的关闭在事件循环的下一轮才生效
            await asyncio.sleep(0)
        if isinstance(self.archiver, PageArchiver):
            self.archiver.close()
        await self.fetcher.close()
        logger.info("后台任务已关闭")


_worker: WorkerService | None = None


def start_worker(
    settings: Settings, session_factory: async_sessionmaker[AsyncSession]
) -> WorkerService:
    """在当前进程内启动后台任务."""
    global _worker

    _worker = WorkerService(settings, session_factory)
    _worker.start()
    return _worker


async def shutdown_worker() -> None:
    """关闭进程内的后台任务."""
    global _worker
    if _worker:
        await _worker.stop()
        _worker = None
