"""测试存储操作."""

from datetime import datetime, timedelta

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from feedvault.core.store import Store
from feedvault.models import Collection, Link, RssSubscription, User


async def add_collection(
    session_factory: async_sessionmaker[AsyncSession], owner_id: int
) -> Collection:
    collection = Collection(name="Other", owner_id=owner_id)
    async with session_factory() as session:
        session.add(collection)
        await session.commit()
        await session.refresh(collection)
    return collection


def make_link(
    owner: User, collection: Collection, name: str, url: str | None, **artifacts: str
) -> Link:
    return Link(
        name=name,
        url=url,
        owner_id=owner.id,
        collection_id=collection.id,
        **artifacts,
    )


class TestExistingUrls:
    """测试批量存在性检查."""

    async def test_scoped_to_collection(
        self, store: Store, session_factory, owner: User, collection: Collection
    ) -> None:
        """只匹配目标集合中的链接."""
        other = await add_collection(session_factory, owner.id)
        await store.create_link("A", "https://example.com/a", owner.id, collection.id)
        await store.create_link("B", "https://example.com/b", owner.id, other.id)

        found = await store.existing_urls(
            collection.id,
            ["https://example.com/a", "https://example.com/b", "https://example.com/c"],
        )

        assert found == {"https://example.com/a"}

    async def test_empty_candidates(self, store: Store, collection: Collection) -> None:
        """没有候选 URL 时直接返回空集合."""
        assert await store.existing_urls(collection.id, []) == set()


class TestWatermark:
    """测试水位线更新."""

    async def test_only_moves_forward(
        self, store: Store, subscription: RssSubscription
    ) -> None:
        """较早的时间不会覆盖较晚的水位线."""
        t = datetime(2024, 5, 1)

        assert await store.advance_watermark(subscription.id, t) is True
        earlier = t - timedelta(days=1)
        assert await store.advance_watermark(subscription.id, earlier) is False
        assert await store.advance_watermark(subscription.id, t) is False

        refreshed = await store.get_subscription(subscription.id)
        assert refreshed.last_build_date == t

    async def test_naive_utc_round_trip(
        self, store: Store, owner: User, collection: Collection
    ) -> None:
        """时间统一以不带时区的 UTC 存取."""
        created = await store.create_subscription(
            "Feed", "https://example.com/naive.xml", owner.id, collection.id
        )
        t = datetime(2024, 6, 1, 8, 30)
        await store.advance_watermark(created.id, t)

        refreshed = await store.get_subscription(created.id)
        assert refreshed.last_build_date == t
        assert refreshed.last_build_date.tzinfo is None
        assert refreshed.created_at.tzinfo is None


class TestSubscriptions:
    """测试订阅管理."""

    async def test_list_filters_by_owner(
        self,
        store: Store,
        session_factory,
        subscription: RssSubscription,
    ) -> None:
        """按用户过滤订阅，不过滤时返回全部."""
        bob = User(name="bob", api_token="bob-token")
        async with session_factory() as session:
            session.add(bob)
            await session.commit()
            await session.refresh(bob)
        bobs = await add_collection(session_factory, bob.id)
        await store.create_subscription(
            "Bob", "https://bob.example/rss", bob.id, bobs.id
        )

        assert len(await store.list_subscriptions()) == 2
        mine = await store.list_subscriptions(owner_id=subscription.owner_id)
        assert [s.id for s in mine] == [subscription.id]

    async def test_delete_requires_owner(
        self, store: Store, subscription: RssSubscription
    ) -> None:
        """只能删除自己的订阅."""
        assert await store.delete_subscription(subscription.id, owner_id=999) is False
        assert await store.delete_subscription(subscription.id, subscription.owner_id)
        assert await store.get_subscription(subscription.id) is None


class TestUnarchivedLinks:
    """测试待归档链接查询."""

    async def test_order_and_filter(
        self,
        store: Store,
        session_factory,
        owner: User,
        collection: Collection,
    ) -> None:
        """只返回缺少产物且有 URL 的链接，可按 id 正序或倒序."""
        async with session_factory() as session:
            session.add_all(
                [
                    make_link(owner, collection, "1", "https://e.com/1"),
                    make_link(
                        owner, collection, "done", "https://e.com/done",
                        image="i", pdf="p", readable="r", monolith="m",
                    ),
                    make_link(owner, collection, "no url", None),
                    make_link(
                        owner, collection, "partial", "https://e.com/partial",
                        image="i", pdf="p", readable="r",
                    ),
                ]
            )
            await session.commit()

        oldest = await store.find_unarchived_links(10)
        newest = await store.find_unarchived_links(10, newest_first=True)

        assert [t.name for t in oldest] == ["1", "partial"]
        assert [t.name for t in newest] == ["partial", "1"]
        assert all(t.owner_id == owner.id for t in oldest)
        assert await store.count_unarchived() == 2
        assert await store.count_unarchived(owner_id=owner.id + 1) == 0

    async def test_update_artifacts_keeps_existing(
        self, store: Store, session_factory, owner: User, collection: Collection
    ) -> None:
        """已有值的产物槽位不会被覆盖."""
        link = await store.create_link("A", "https://e.com/a", owner.id, collection.id)
        await store.update_artifacts(link.id, {"image": "first.png"})
        await store.update_artifacts(
            link.id,
            {
                "image": "second.png",
                "pdf": "a.pdf",
                "readable": "a.txt",
                "monolith": "a.html",
            },
        )

        async with session_factory() as session:
            stored = await session.get(Link, link.id)

        assert stored.image == "first.png"
        assert stored.pdf == "a.pdf"
        assert stored.readable == "a.txt"
        assert stored.monolith == "a.html"
        assert await store.find_unarchived_links(5) == []

    async def test_count_links_for_capacity(
        self, store: Store, owner: User, collection: Collection
    ) -> None:
        """统计用户集合中的链接数."""
        for i in range(3):
            url = f"https://e.com/{i}"
            await store.create_link(str(i), url, owner.id, collection.id)

        assert await store.count_links(owner.id) == 3
        assert await store.count_links(owner.id + 1) == 0
