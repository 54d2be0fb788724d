"""用户链接容量检查."""

from feedvault.core.store import Store


class LinkCapacityGate:
    """新增链接后是否超出用户配额."""

    def __init__(self, store: Store, max_links: int) -> None:
        self.store = store
        self.max_links = max_links

    async def would_exceed_limit(self, owner_id: int, candidate_count: int) -> bool:
        """当前链接数加上候选数量超过上限时返回 True."""
        current = await self.store.count_links(owner_id)
        return current + candidate_count > self.max_links
