"""RssSubscription RSS 订阅模型."""

from datetime import datetime

from sqlmodel import Field, SQLModel


class RssSubscription(SQLModel, table=True):
    """RSS 订阅：把一个订阅源导入到指定集合."""

    __tablename__ = "rss_subscriptions"  # type: ignore[assignment]

    id: int | None = Field(default=None, primary_key=True)
    name: str = Field(description="显示名称")
    url: str = Field(description="订阅源 URL")
    owner_id: int = Field(foreign_key="users.id", index=True, description="所属用户")
    collection_id: int = Field(foreign_key="collections.id", description="目标集合")
    last_build_date: datetime | None = Field(
        default=None, description="水位线：已导入条目的最新发布时间 (UTC)"
    )
    created_at: datetime = Field(default_factory=datetime.utcnow)
