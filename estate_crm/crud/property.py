# crud/property.py
from typing import List, Optional
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, delete, func, or_
from uuid import UUID

from estate_crm.db.base_class import utcnow
from estate_crm.models import Property

SORT_ORDERS = {
    "newest": Property.created_at.desc(),
    "price-asc": Property.price.asc(),
    "price-desc": Property.price.desc(),
}


async def search_published(
    db: AsyncSession,
    purpose: Optional[str] = None,
    property_type: Optional[str] = None,
    location: Optional[str] = None,
    min_price: Optional[int] = None,
    max_price: Optional[int] = None,
    sort: str = "newest",
) -> List[Property]:
    stmt = select(Property).where(Property.status == "published")

    if purpose:
        stmt = stmt.where(Property.purpose == purpose)
    if property_type:
        stmt = stmt.where(Property.type == property_type)
    if location:
        term = location.lower()
        stmt = stmt.where(
            or_(
                func.lower(Property.location).contains(term),
                func.lower(func.coalesce(Property.block, "")).contains(term),
            )
        )
    if min_price is not None:
        stmt = stmt.where(Property.price >= min_price)
    if max_price is not None:
        stmt = stmt.where(Property.price <= max_price)

    stmt = stmt.order_by(SORT_ORDERS.get(sort, SORT_ORDERS["newest"]))
    result = await db.execute(stmt)
    return list(result.scalars().all())


async def get_featured(db: AsyncSession, limit: int = 6) -> List[Property]:
    result = await db.execute(
        select(Property)
        .where(Property.status == "published", Property.featured.is_(True))
        .order_by(Property.created_at.desc())
        .limit(limit)
    )
    return list(result.scalars().all())


async def get_property(db: AsyncSession, property_id: UUID, published_only: bool = False) -> Property | None:
    stmt = select(Property).where(Property.property_id == property_id)
    if published_only:
        stmt = stmt.where(Property.status == "published")
    result = await db.execute(stmt)
    return result.scalar_one_or_none()


async def get_similar(db: AsyncSession, prop: Property, limit: int = 3) -> List[Property]:
    result = await db.execute(
        select(Property)
        .where(
            Property.type == prop.type,
            Property.status == "published",
            Property.property_id != prop.property_id,
        )
        .order_by(Property.created_at.desc())
        .limit(limit)
    )
    return list(result.scalars().all())


# --- Admin inventory ---
async def list_inventory(db: AsyncSession, status: Optional[str] = None, search: Optional[str] = None) -> List[Property]:
    stmt = select(Property)
    if status:
        stmt = stmt.where(Property.status == status)
    if search:
        term = search.lower()
        stmt = stmt.where(
            or_(
                func.lower(Property.title).contains(term),
                func.lower(Property.location).contains(term),
            )
        )
    result = await db.execute(stmt.order_by(Property.created_at.desc()))
    return list(result.scalars().all())


async def count_by_status(db: AsyncSession) -> dict[str, int]:
    result = await db.execute(
        select(Property.status, func.count(Property.property_id)).group_by(Property.status)
    )
    return {status: count for status, count in result.all()}


async def create_property(db: AsyncSession, data: dict) -> Property:
    prop = Property(**data)
    db.add(prop)
    await db.flush()
    return prop


def apply_property_fields(prop: Property, fields: dict) -> Property:
    for key, value in fields.items():
        setattr(prop, key, value)
    prop.updated_at = utcnow()
    return prop


async def delete_property(db: AsyncSession, property_id: UUID) -> bool:
    result = await db.execute(delete(Property).where(Property.property_id == property_id))
    return result.rowcount > 0
