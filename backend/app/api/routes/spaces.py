"""
Space catalog endpoints. The public listing is cached in Redis;
single-space reads are not (activation must take effect immediately).
"""

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.db.session import get_db
from app.schemas.space import SpaceActiveUpdate, SpaceCreate, SpaceListResponse, SpaceResponse
from app.services.space_service import create_space, get_space, list_spaces, set_space_active
from app.services.cache_service import get_cached_spaces, set_cached_spaces, invalidate_space_cache
from app.core.security import Actor, require_owner
from app.core.logging import get_logger

logger = get_logger(__name__)
router = APIRouter(prefix="/spaces", tags=["Spaces"])


@router.post("/", response_model=SpaceResponse, status_code=status.HTTP_201_CREATED)
async def create_space_endpoint(
    space_data: SpaceCreate,
    actor: Actor = Depends(require_owner),
    db: AsyncSession = Depends(get_db),
):
    """List a new space. Requires an owner account."""
    space = await create_space(db, space_data, actor.id)
    await db.commit()
    await invalidate_space_cache()
    return space


@router.get("/", response_model=SpaceListResponse)
async def list_spaces_endpoint(
    page: int = Query(1, ge=1),
    page_size: int = Query(20, ge=1, le=100),
    db: AsyncSession = Depends(get_db),
):
    """
    Active spaces, newest first.
    Cached for REDIS_CACHE_TTL seconds; invalidated on create and activation change.
    """
    cached = await get_cached_spaces(page, page_size)
    if cached:
        logger.info("spaces_list_cache_hit", page=page)
        cached["cached"] = True
        return SpaceListResponse(**cached)

    spaces, total = await list_spaces(db, page, page_size)
    response_data = {
        "spaces": [SpaceResponse.model_validate(s).model_dump(mode="json") for s in spaces],
        "total": total,
        "page": page,
        "page_size": page_size,
        "cached": False,
    }
    await set_cached_spaces(page, page_size, response_data)
    return SpaceListResponse(**response_data)


@router.get("/{space_id}", response_model=SpaceResponse)
async def get_space_endpoint(space_id: int, db: AsyncSession = Depends(get_db)):
    return await get_space(db, space_id)


@router.patch("/{space_id}/active", response_model=SpaceResponse)
async def set_space_active_endpoint(
    space_id: int,
    update: SpaceActiveUpdate,
    actor: Actor = Depends(require_owner),
    db: AsyncSession = Depends(get_db),
):
    """Activate or deactivate a space. Inactive spaces cannot be booked."""
    space = await set_space_active(db, space_id, actor.id, update.is_active)
    await db.commit()
    await invalidate_space_cache()
    return space
