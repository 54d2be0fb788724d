"""书签库存储接口 - 后台任务与 API 共用的查询/更新操作."""

import logging
from collections.abc import AsyncIterator, Iterable
from contextlib import asynccontextmanager
from dataclasses import dataclass
from datetime import datetime

from sqlalchemy import ColumnElement, func, or_, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker
from sqlmodel import col, select

from feedvault.models.collection import Collection
from feedvault.models.link import ARTIFACT_FIELDS, Link
from feedvault.models.subscription import RssSubscription
from feedvault.models.user import User

logger = logging.getLogger(__name__)


class PersistenceError(Exception):
    """存储不可用或写入失败."""


@dataclass(frozen=True)
class ArchiveTarget:
    """待归档的链接及其集合所有者."""

    link_id: int
    url: str
    name: str
    collection_id: int
    owner_id: int


def _missing_artifact() -> ColumnElement[bool]:
    return or_(*(col(getattr(Link, name)).is_(None) for name in ARTIFACT_FIELDS))


class Store:
    """
    每个操作使用独立的会话和事务.

    不同订阅、不同链接的并发处理因此互不共享会话状态。
    """

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self._session_factory = session_factory

    @asynccontextmanager
    async def _session(self) -> AsyncIterator[AsyncSession]:
        try:
            async with self._session_factory() as session:
                yield session
        except SQLAlchemyError as e:
            raise PersistenceError(str(e)) from e

    # 用户与集合

    async def get_user_by_token(self, token: str) -> User | None:
        """按 API 令牌查找用户."""
        async with self._session() as session:
            result = await session.execute(select(User).where(User.api_token == token))
            return result.scalar_one_or_none()

    async def get_collection(self, collection_id: int) -> Collection | None:
        """获取集合."""
        async with self._session() as session:
            return await session.get(Collection, collection_id)

    # 订阅

    async def list_subscriptions(
        self, owner_id: int | None = None
    ) -> list[RssSubscription]:
        """列出订阅，可按所属用户过滤."""
        stmt = select(RssSubscription).order_by(col(RssSubscription.id))
        if owner_id is not None:
            stmt = stmt.where(RssSubscription.owner_id == owner_id)

        async with self._session() as session:
            result = await session.execute(stmt)
            return list(result.scalars().all())

    async def get_subscription(self, subscription_id: int) -> RssSubscription | None:
        """获取订阅（含当前水位线）."""
        async with self._session() as session:
            return await session.get(RssSubscription, subscription_id)

    async def create_subscription(
        self, name: str, url: str, owner_id: int, collection_id: int
    ) -> RssSubscription:
        """新建订阅，水位线为空."""
        subscription = RssSubscription(
            name=name,
            url=url,
            owner_id=owner_id,
            collection_id=collection_id,
        )
        async with self._session() as session:
            session.add(subscription)
            await session.commit()
            await session.refresh(subscription)
        return subscription

    async def delete_subscription(self, subscription_id: int, owner_id: int) -> bool:
        """删除用户自己的订阅，已导入的链接保留."""
        async with self._session() as session:
            subscription = await session.get(RssSubscription, subscription_id)
            if not subscription or subscription.owner_id != owner_id:
                return False
            await session.delete(subscription)
            await session.commit()
        return True

    async def advance_watermark(self, subscription_id: int, timestamp: datetime) -> bool:
        """
        推进订阅水位线.

        单条带条件的 UPDATE，只允许向后移动；并发写入时较大的值胜出。
        """
        stmt = (
            update(RssSubscription)
            .where(col(RssSubscription.id) == subscription_id)
            .where(
                or_(
                    col(RssSubscription.last_build_date).is_(None),
                    col(RssSubscription.last_build_date) < timestamp,
                )
            )
            .values(last_build_date=timestamp)
        )
        async with self._session() as session:
            result = await session.execute(stmt)
            await session.commit()
            return result.rowcount > 0

    # 链接

    async def existing_urls(self, collection_id: int, urls: Iterable[str]) -> set[str]:
        """批量检查集合中已存在的链接 URL（一次查询）."""
        candidates = list(dict.fromkeys(urls))
        if not candidates:
            return set()

        stmt = (
            select(Link.url)
            .where(Link.collection_id == collection_id)
            .where(col(Link.url).in_(candidates))
        )
        async with self._session() as session:
            result = await session.execute(stmt)
            return {url for url in result.scalars().all() if url}

    async def create_link(
        self, name: str, url: str, owner_id: int, collection_id: int
    ) -> Link:
        """创建 type=link、归档产物全部为空的书签."""
        link = Link(
            name=name,
            url=url,
            type="link",
            owner_id=owner_id,
            collection_id=collection_id,
        )
        async with self._session() as session:
            session.add(link)
            await session.commit()
            await session.refresh(link)
        return link

    async def count_links(self, owner_id: int) -> int:
        """统计用户集合中的链接总数."""
        stmt = (
            select(func.count(col(Link.id)))
            .join(Collection, col(Collection.id) == col(Link.collection_id))
            .where(Collection.owner_id == owner_id)
        )
        async with self._session() as session:
            result = await session.execute(stmt)
            return int(result.scalar_one())

    async def find_unarchived_links(
        self, limit: int, newest_first: bool = False
    ) -> list[ArchiveTarget]:
        """按 id 排序取出至少缺少一种归档产物的链接."""
        order = col(Link.id).desc() if newest_first else col(Link.id).asc()
        stmt = (
            select(Link, Collection.owner_id)
            .join(Collection, col(Collection.id) == col(Link.collection_id))
            .where(col(Link.url).is_not(None))
            .where(_missing_artifact())
            .order_by(order)
            .limit(limit)
        )
        async with self._session() as session:
            result = await session.execute(stmt)
            return [
                ArchiveTarget(
                    link_id=link.id,
                    url=link.url,
                    name=link.name,
                    collection_id=link.collection_id,
                    owner_id=owner_id,
                )
                for link, owner_id in result.all()
            ]

    async def count_unarchived(self, owner_id: int | None = None) -> int:
        """待归档链接数量."""
        stmt = (
            select(func.count(col(Link.id)))
            .join(Collection, col(Collection.id) == col(Link.collection_id))
            .where(col(Link.url).is_not(None))
            .where(_missing_artifact())
        )
        if owner_id is not None:
            stmt = stmt.where(Collection.owner_id == owner_id)

        async with self._session() as session:
            result = await session.execute(stmt)
            return int(result.scalar_one())

    async def update_artifacts(self, link_id: int, artifacts: dict[str, str]) -> None:
        """写入归档产物路径，已有值的槽位保持不变."""
        values: dict = {
            name: func.coalesce(getattr(Link, name), artifacts[name])
            for name in ARTIFACT_FIELDS
            if artifacts.get(name)
        }
        if not values:
            return
        values["updated_at"] = datetime.utcnow()

        stmt = update(Link).where(col(Link.id) == link_id).values(**values)
        async with self._session() as session:
            await session.execute(stmt)
            await session.commit()
