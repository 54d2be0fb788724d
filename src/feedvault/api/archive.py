"""归档状态 API."""

from fastapi import APIRouter, Depends

from feedvault.api.deps import get_current_user, get_store
from feedvault.core.store import Store
from feedvault.models.user import User

router = APIRouter(prefix="/api/v1/archive", tags=["archive"])


@router.get("/stats")
async def get_archive_stats(
    user: User = Depends(get_current_user),
    store: Store = Depends(get_store),
) -> dict[str, int]:
    """当前用户待归档链接数量."""
    return {"pending": await store.count_unarchived(owner_id=user.id)}
