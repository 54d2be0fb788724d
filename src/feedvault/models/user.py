"""User 用户模型."""

from datetime import datetime

from sqlmodel import Field, SQLModel


class User(SQLModel, table=True):
    """书签库用户."""

    __tablename__ = "users"  # type: ignore[assignment]

    id: int | None = Field(default=None, primary_key=True)
    name: str = Field(description="用户名")
    api_token: str = Field(unique=True, index=True, description="API 访问令牌")
    created_at: datetime = Field(default_factory=datetime.utcnow)
