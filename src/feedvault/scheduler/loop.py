"""固定间隔轮询循环."""

import asyncio
import logging
from collections.abc import Awaitable, Callable
from datetime import UTC, datetime, timedelta
from typing import Any

from apscheduler.jobstores.base import JobLookupError
from apscheduler.schedulers.asyncio import AsyncIOScheduler

logger = logging.getLogger(__name__)


class PollingLoop:
    """
    执行 → 无条件等待 interval 秒 → 重复.

    每轮结束后（无论成功失败）向调度器登记下一次一次性任务，
    因此两轮之间的间隔从上一轮结束时开始计算，各轮不会重叠。
    stop() 之后不再登记，正在执行的一轮被取消。
    """

    def __init__(
        self,
        name: str,
        work: Callable[[], Awaitable[Any]],
        interval_seconds: float,
        scheduler: AsyncIOScheduler,
    ) -> None:
        self.name = name
        self.interval_seconds = interval_seconds
        self.cycles = 0
        self._work = work
        self._scheduler = scheduler
        self._stopped = False
        self._task: asyncio.Task[Any] | None = None

    @property
    def is_running(self) -> bool:
        return not self._stopped

    def start(self) -> None:
        """立即执行第一轮."""
        self._stopped = False
        logger.info(f"启动 {self.name}，间隔 {self.interval_seconds} 秒")
        self._schedule(0)

    def stop(self) -> None:
        """停止循环并取消正在执行的一轮."""
        self._stopped = True
        try:
            self._scheduler.remove_job(self.name)
        except JobLookupError:
            pass
        if self._task and not self._task.done():
            self._task.cancel()
        logger.info(f"{self.name} 已停止")

    async def run_once(self) -> None:
        """执行一轮，结束后登记下一轮."""
        self._task = asyncio.current_task()
        try:
            await self._work()
        except asyncio.CancelledError:
            logger.info(f"{self.name} 本轮被取消")
            raise
        except Exception as e:
            logger.exception(f"{self.name} 本轮执行失败: {e}")
        finally:
            self._task = None
            self.cycles += 1
            self._schedule(self.interval_seconds)

    def _schedule(self, delay: float) -> None:
        if self._stopped:
            return

        self._scheduler.add_job(
            self.run_once,
            "date",
            run_date=datetime.now(UTC) + timedelta(seconds=delay),
            id=self.name,
            name=self.name,
            replace_existing=True,
            misfire_grace_time=None,
        )
