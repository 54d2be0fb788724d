"""Collection 书签集合模型."""

from datetime import datetime

from sqlmodel import Field, SQLModel


class Collection(SQLModel, table=True):
    """书签集合."""

    __tablename__ = "collections"  # type: ignore[assignment]

    id: int | None = Field(default=None, primary_key=True)
    name: str = Field(description="集合名称")
    owner_id: int = Field(foreign_key="users.id", index=True, description="所属用户")
    created_at: datetime = Field(default_factory=datetime.utcnow)
