"""Link 书签模型."""

from datetime import datetime

from sqlmodel import Field, SQLModel

# 归档器无法生成某类产物时写入的占位值，链接随之离开待归档队列
UNAVAILABLE = "unavailable"

ARTIFACT_FIELDS = ("image", "pdf", "readable", "monolith")


class Link(SQLModel, table=True):
    """书签."""

    __tablename__ = "links"  # type: ignore[assignment]

    id: int | None = Field(default=None, primary_key=True)
    name: str = Field(default="", description="显示名称")
    url: str | None = Field(default=None, index=True, description="链接地址")
    type: str = Field(default="link", description="类型: link|pdf|image")
    owner_id: int = Field(foreign_key="users.id", description="创建者")
    collection_id: int = Field(
        foreign_key="collections.id", index=True, description="所属集合"
    )
    image: str | None = Field(default=None, description="截图路径")
    pdf: str | None = Field(default=None, description="PDF 路径")
    readable: str | None = Field(default=None, description="可读文本路径")
    monolith: str | None = Field(default=None, description="整页存档路径")
    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: datetime = Field(default_factory=datetime.utcnow)
