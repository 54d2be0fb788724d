"""FeedVault 主应用入口."""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI

from feedvault.api import archive, rss
from feedvault.config import get_settings
from feedvault.models.database import async_session_maker, close_db, init_db
from feedvault.scheduler import shutdown_worker, start_worker

# 配置日志
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """应用生命周期管理."""
    app_settings = get_settings()

    logger.info("正在初始化数据库...")
    await init_db(app_settings.database_url)

    if app_settings.embedded_worker:
        logger.info("正在启动后台任务...")
        start_worker(app_settings, async_session_maker())

    logger.info("FeedVault 启动完成！")
    yield

    logger.info("正在关闭...")
    await shutdown_worker()
    await close_db()
    logger.info("FeedVault 已关闭")


app = FastAPI(
    title="FeedVault",
    description="书签库 - RSS 订阅导入与网页后台归档",
    version="0.1.0",
    lifespan=lifespan,
)

app.include_router(rss.router)
app.include_router(archive.router)


@app.get("/")
async def root() -> dict:
    """根路径."""
    return {
        "name": "FeedVault",
        "version": "0.1.0",
        "description": "书签库后台服务",
    }


@app.get("/health")
async def health() -> dict:
    """健康检查."""
    return {"status": "ok"}


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "feedvault.main:app",
        host="0.0.0.0",
        port=8000,
        reload=True,
    )
