"""应用配置管理."""

from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """应用配置（环境变量，启动时读取一次，只读）."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        frozen=True,
    )

    # 数据库配置
    database_url: str = "sqlite+aiosqlite:///./feedvault.db"

    # RSS 轮询配置
    rss_polling_interval_minutes: int = Field(default=60, gt=0)
    manual_rss_refresh_minutes: int = Field(default=20, gt=0)

    # 归档配置
    archive_script_interval: int = Field(default=10, gt=0, description="秒")
    archive_take_count: int = Field(default=5, gt=0, description="每端取出的链接数")
    storage_folder: str = "./data"

    # 抓取配置
    fetch_timeout_seconds: float = Field(default=10.0, gt=0)
    # 自托管订阅源可能使用自签名证书，必须显式开启
    ignore_unauthorized_ca: bool = False

    # 容量限制
    max_links_per_user: int = Field(default=30000, gt=0)

    # 是否在 Web 进程内运行后台任务
    embedded_worker: bool = False

    @property
    def rss_polling_interval_seconds(self) -> int:
        """RSS 轮询间隔（秒）."""
        return self.rss_polling_interval_minutes * 60


@lru_cache
def get_settings() -> Settings:
    """获取应用配置（带缓存）."""
    return Settings()
