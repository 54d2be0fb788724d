"""数据模型."""

from feedvault.models.collection import Collection
from feedvault.models.database import init_db
from feedvault.models.link import Link
from feedvault.models.subscription import RssSubscription
from feedvault.models.user import User

__all__ = [
    "Collection",
    "Link",
    "RssSubscription",
    "User",
    "init_db",
]
