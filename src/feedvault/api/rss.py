"""RSS 订阅 API."""

import logging

from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field

from feedvault.api.deps import get_current_user, get_fetcher, get_store
from feedvault.config import get_settings
from feedvault.core.capacity import LinkCapacityGate
from feedvault.core.ingestion import RssIngestor
from feedvault.core.refresh import refresh_owner_feeds
from feedvault.core.store import Store
from feedvault.fetcher.http import FeedFetcher
from feedvault.models.user import User

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1/rss", tags=["rss"])


class SubscriptionCreate(BaseModel):
    """新建订阅请求."""

    name: str = Field(min_length=1)
    url: str = Field(pattern=r"^https?://")
    collection_id: int


@router.post("/refresh", response_model=None)
async def refresh_feeds(
    user: User = Depends(get_current_user),
    store: Store = Depends(get_store),
    fetcher: FeedFetcher = Depends(get_fetcher),
) -> dict | JSONResponse:
    """
    立即刷新当前用户的全部订阅.

    服务端不做限流，冷却时间由客户端控制。
    """
    ingestor = RssIngestor(
        store, fetcher, LinkCapacityGate(store, get_settings().max_links_per_user)
    )
    try:
        result = await refresh_owner_feeds(ingestor, store, user.id)
    except Exception as e:
        logger.exception(f"刷新 RSS 订阅失败: {e}")
        return JSONResponse(
            status_code=500,
            content={"response": "刷新 RSS 订阅失败", "error": str(e)},
        )

    return {
        "response": "RSS 订阅已刷新",
        "summary": {
            "new_items": result.new_items,
            "unreachable_feeds": result.unreachable_feeds,
        },
        "details": result.details,
    }


@router.get("/subscriptions")
async def list_subscriptions(
    user: User = Depends(get_current_user),
    store: Store = Depends(get_store),
) -> dict:
    """获取当前用户的订阅列表."""
    subscriptions = await store.list_subscriptions(owner_id=user.id)
    return {
        "total": len(subscriptions),
        "items": [
            {
                "id": s.id,
                "name": s.name,
                "url": s.url,
                "collection_id": s.collection_id,
                "last_build_date": (
                    s.last_build_date.isoformat() if s.last_build_date else None
                ),
            }
            for s in subscriptions
        ],
    }


@router.post("/subscriptions", status_code=201)
async def create_subscription(
    body: SubscriptionCreate,
    user: User = Depends(get_current_user),
    store: Store = Depends(get_store),
) -> dict:
    """新建订阅，目标集合必须属于当前用户."""
    collection = await store.get_collection(body.collection_id)
    if not collection or collection.owner_id != user.id:
        raise HTTPException(status_code=404, detail="集合不存在")

    subscription = await store.create_subscription(
        name=body.name,
        url=body.url,
        owner_id=user.id,
        collection_id=body.collection_id,
    )
    return {
        "id": subscription.id,
        "name": subscription.name,
        "url": subscription.url,
        "collection_id": subscription.collection_id,
    }


@router.delete("/subscriptions/{subscription_id}")
async def delete_subscription(
    subscription_id: int,
    user: User = Depends(get_current_user),
    store: Store = Depends(get_store),
) -> dict:
    """删除订阅."""
    if not await store.delete_subscription(subscription_id, user.id):
        raise HTTPException(status_code=404, detail="订阅不存在")
    return {"id": subscription_id, "deleted": True}
