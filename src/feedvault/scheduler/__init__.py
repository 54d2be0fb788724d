"""后台轮询任务."""

from feedvault.scheduler.service import WorkerService, shutdown_worker, start_worker

__all__ = ["WorkerService", "shutdown_worker", "start_worker"]
