"""
Space catalog: owner-managed listings and the bookable-space lookup
consumed by the booking core.
"""

from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.space import Space
from app.schemas.space import SpaceCreate
from app.core.exceptions import NotFoundError, UnauthorizedError
from app.core.logging import get_logger

logger = get_logger(__name__)


async def create_space(db: AsyncSession, space_data: SpaceCreate, owner_id: int) -> Space:
    space = Space(
        owner_id=owner_id,
        name=space_data.name,
        description=space_data.description,
        address=space_data.address,
        capacity=space_data.capacity,
        price_amount=space_data.price.amount,
        price_unit=space_data.price.unit.value,
        is_active=True,
    )
    db.add(space)
    await db.flush()
    await db.refresh(space)

    logger.info(
        "space_created",
        space_id=space.id,
        owner_id=owner_id,
        price_amount=str(space.price_amount),
        price_unit=space.price_unit,
    )
    return space


async def get_space(db: AsyncSession, space_id: int) -> Space:
    result = await db.execute(select(Space).where(Space.id == space_id))
    space = result.scalar_one_or_none()

    if not space:
        raise NotFoundError(f"No space found with id {space_id}", details={"space_id": space_id})
    return space


async def find_bookable_space(db: AsyncSession, space_id: int) -> Space:
    """
    Return the space only if it exists and is active.
    Missing and inactive spaces raise the same NotFoundError.
    """
    result = await db.execute(
        select(Space).where(Space.id == space_id, Space.is_active.is_(True))
    )
    space = result.scalar_one_or_none()

    if not space:
        raise NotFoundError(f"No space found with id {space_id}", details={"space_id": space_id})
    return space


async def list_spaces(
    db: AsyncSession,
    page: int = 1,
    page_size: int = 20,
) -> tuple[list[Space], int]:
    """List active spaces, newest first. Uses ix_spaces_active_created."""
    query = select(Space).where(Space.is_active.is_(True))

    count_query = select(func.count()).select_from(query.subquery())
    total = (await db.execute(count_query)).scalar()

    spaces_query = (
        query
        .order_by(Space.created_at.desc(), Space.id.desc())
        .offset((page - 1) * page_size)
        .limit(page_size)
    )
    result = await db.execute(spaces_query)
    return list(result.scalars().all()), total


async def set_space_active(db: AsyncSession, space_id: int, owner_id: int, is_active: bool) -> Space:
    space = await get_space(db, space_id)
    if space.owner_id != owner_id:
        raise UnauthorizedError("Not authorized to modify this space", details={"space_id": space_id})

    space.is_active = is_active
    await db.flush()
    await db.refresh(space)

    logger.info("space_activation_changed", space_id=space_id, is_active=is_active)
    return space
