"""手动刷新客户端 - 在本地记录上次刷新时间并执行冷却检查.

冷却只在客户端生效，服务端不对刷新接口限流。
"""

import json
import logging
import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import httpx

from feedvault.config import get_settings

logger = logging.getLogger(__name__)

LAST_REFRESH_KEY = "last_rss_refresh"


class RefreshError(Exception):
    """刷新请求失败."""


class RefreshCooldownError(RefreshError):
    """仍在冷却时间内."""

    def __init__(self, wait_seconds: float) -> None:
        minutes = max(1, -(-int(wait_seconds) // 60))
        super().__init__(f"请再等待 {minutes} 分钟后刷新")
        self.wait_seconds = wait_seconds


@dataclass
class RefreshSummary:
    """一次手动刷新的结果."""

    new_items: int = 0
    unreachable_feeds: int = 0
    skipped: list[str] = field(default_factory=list)


class RefreshClient:
    """调用 POST /api/v1/rss/refresh 的客户端."""

    def __init__(
        self,
        base_url: str,
        token: str,
        state_path: str | Path,
        cooldown_minutes: int | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        if cooldown_minutes is None:
            cooldown_minutes = get_settings().manual_rss_refresh_minutes
        self.cooldown_seconds = cooldown_minutes * 60
        self.state_path = Path(state_path)
        self.is_refreshing = False
        self._client = httpx.AsyncClient(
            base_url=base_url,
            headers={"Authorization": f"Bearer {token}"},
            timeout=120.0,
            transport=transport,
        )

    async def close(self) -> None:
        """关闭客户端."""
        await self._client.aclose()

    def last_refresh_time(self) -> float:
        """上次成功刷新的时间戳，从未刷新为 0."""
        try:
            state = json.loads(self.state_path.read_text(encoding="utf-8"))
        except (FileNotFoundError, json.JSONDecodeError):
            return 0.0
        return float(state.get(LAST_REFRESH_KEY, 0))

    def seconds_until_next_refresh(self, now: float | None = None) -> float:
        """距离下次允许刷新的秒数."""
        now = time.time() if now is None else now
        elapsed = now - self.last_refresh_time()
        return max(0.0, self.cooldown_seconds - elapsed)

    def can_refresh(self, now: float | None = None) -> bool:
        """是否允许刷新."""
        if self.is_refreshing:
            return False
        return self.seconds_until_next_refresh(now) == 0

    async def refresh_feeds(self) -> RefreshSummary:
        """
        触发手动刷新.

        Raises:
            RefreshCooldownError: 冷却时间未到
            RefreshError: 请求失败
        """
        if not self.can_refresh():
            raise RefreshCooldownError(self.seconds_until_next_refresh())

        self.is_refreshing = True
        try:
            try:
                response = await self._client.post("/api/v1/rss/refresh")
                response.raise_for_status()
                data = response.json()
            except (httpx.HTTPError, ValueError) as e:
                msg = f"刷新订阅失败: {e}"
                raise RefreshError(msg) from e

            summary = summarize(data.get("details", []))
            self._record_refresh()
            return summary
        finally:
            self.is_refreshing = False

    def _record_refresh(self) -> None:
        self.state_path.parent.mkdir(parents=True, exist_ok=True)
        self.state_path.write_text(
            json.dumps({LAST_REFRESH_KEY: time.time()}), encoding="utf-8"
        )


def summarize(details: list[dict[str, Any]]) -> RefreshSummary:
    """按订阅结果统计新增条目与不可达订阅源."""
    summary = RefreshSummary()
    for result in details:
        if result.get("status") == "rejected":
            summary.unreachable_feeds += 1
            logger.error(f"刷新订阅异常: {result.get('reason')}")
            continue

        value = result.get("value", {})
        status = value.get("status")
        if status == "success":
            summary.new_items += value.get("new_items", 0)
        elif status == "skipped":
            summary.skipped.append(value.get("subscription", ""))
            logger.info(f"订阅 {value.get('subscription')} 已跳过: {value.get('reason')}")
        elif status == "error" and value.get("error_kind") == "connectivity":
            summary.unreachable_feeds += 1
            logger.warning(
                f"订阅 {value.get('subscription')} 无法连接: {value.get('error')}"
            )
    return summary
