"""订阅水位线.

水位线是已导入条目的最新发布时间。用显式的两种状态代替可空时间戳，
让“从未导入”和“已导入到某时刻”两个分支各自成型。
"""

from collections.abc import Iterable
from dataclasses import dataclass
from datetime import datetime

from feedvault.models.subscription import RssSubscription


@dataclass(frozen=True)
class NeverIngested:
    """订阅从未成功导入过条目."""

    def admits(self, published_at: datetime) -> bool:
        return True

    def advance(self, timestamps: Iterable[datetime]) -> "Watermark":
        latest = max(timestamps, default=None)
        return IngestedAt(latest) if latest is not None else self


@dataclass(frozen=True)
class IngestedAt:
    """已导入到 timestamp（含）为止的条目."""

    timestamp: datetime

    def admits(self, published_at: datetime) -> bool:
        return published_at > self.timestamp

    def advance(self, timestamps: Iterable[datetime]) -> "Watermark":
        latest = max(timestamps, default=self.timestamp)
        return IngestedAt(max(latest, self.timestamp))


Watermark = NeverIngested | IngestedAt


def watermark_of(subscription: RssSubscription) -> Watermark:
    """读取订阅当前的水位线状态."""
    if subscription.last_build_date is None:
        return NeverIngested()
    return IngestedAt(subscription.last_build_date)
