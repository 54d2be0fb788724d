"""测试配置和 fixtures."""

from collections.abc import AsyncGenerator

import pytest
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlmodel import SQLModel

from feedvault.core.store import Store
from feedvault.models import Collection, RssSubscription, User
from helpers import FEED_URL


@pytest.fixture
async def session_factory(
    tmp_path,
) -> AsyncGenerator[async_sessionmaker[AsyncSession], None]:
    """创建测试用的文件数据库（多个会话共享同一个库）."""
    engine = create_async_engine(
        f"sqlite+aiosqlite:///{tmp_path / 'test.db'}",
        echo=False,
    )

    async with engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)

    yield async_sessionmaker(
        engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )

    await engine.dispose()


@pytest.fixture
def store(session_factory: async_sessionmaker[AsyncSession]) -> Store:
    return Store(session_factory)


@pytest.fixture
async def owner(session_factory: async_sessionmaker[AsyncSession]) -> User:
    """创建测试用户."""
    user = User(name="alice", api_token="alice-token")
    async with session_factory() as session:
        session.add(user)
        await session.commit()
        await session.refresh(user)
    return user


@pytest.fixture
async def collection(
    session_factory: async_sessionmaker[AsyncSession], owner: User
) -> Collection:
    """创建测试集合."""
    item = Collection(name="Reading", owner_id=owner.id)
    async with session_factory() as session:
        session.add(item)
        await session.commit()
        await session.refresh(item)
    return item


@pytest.fixture
async def subscription(
    store: Store, owner: User, collection: Collection
) -> RssSubscription:
    """创建从未导入过的订阅."""
    return await store.create_subscription(
        name="Example",
        url=FEED_URL,
        owner_id=owner.id,
        collection_id=collection.id,
    )
