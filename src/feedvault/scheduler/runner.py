"""独立后台进程入口：feedvault-worker."""

import asyncio
import logging
import signal

from feedvault.config import get_settings
from feedvault.models.database import async_session_maker, close_db, init_db
from feedvault.scheduler.service import WorkerService

logger = logging.getLogger(__name__)


async def run_worker() -> None:
    """运行两个轮询循环，直到收到 SIGINT/SIGTERM."""
    settings = get_settings()

    logger.info("正在初始化数据库...")
    await init_db(settings.database_url)

    service = WorkerService(settings, async_session_maker())
    stop_event = asyncio.Event()

    loop = asyncio.get_running_loop()
    for sig in (signal.SIGINT, signal.SIGTERM):
        loop.add_signal_handler(sig, stop_event.set)

    service.start()
    try:
        await stop_event.wait()
    finally:
        logger.info("正在关闭...")
        await service.stop()
        await close_db()


def main() -> None:
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
    asyncio.run(run_worker())


if __name__ == "__main__":
    main()
