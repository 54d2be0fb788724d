"""API 公共依赖."""

from collections.abc import AsyncIterator

from fastapi import Depends, Header, HTTPException

from feedvault.config import get_settings
from feedvault.core.store import Store
from feedvault.fetcher.http import FeedFetcher
from feedvault.models.database import async_session_maker
from feedvault.models.user import User


def get_store() -> Store:
    """基于全局会话工厂的存储."""
    return Store(async_session_maker())


async def get_fetcher() -> AsyncIterator[FeedFetcher]:
    """每个请求一个抓取客户端，请求结束后关闭."""
    fetcher = FeedFetcher(get_settings())
    try:
        yield fetcher
    finally:
        await fetcher.close()


async def get_current_user(
    authorization: str | None = Header(default=None),
    store: Store = Depends(get_store),
) -> User:
    """校验 Bearer 令牌，未登录返回 401."""
    scheme, _, token = (authorization or "").partition(" ")
    user = None
    if scheme.lower() == "bearer" and token.strip():
        user = await store.get_user_by_token(token.strip())

    if not user:
        raise HTTPException(
            status_code=401,
            detail="请先登录",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return user
