from uuid import UUID
from typing import List, Optional, Tuple
from sqlalchemy.ext.asyncio import AsyncSession
import logging

from estate_crm.core.errors import AuthError, NotFoundError, ValidationError
from estate_crm.crud import agent as crud_agent
from estate_crm.crud import property as crud_property
from estate_crm.models.property import PROPERTY_STATUSES
from estate_crm.schemas.auth import SessionContext
from estate_crm.schemas.property import (
    InventoryParams,
    InventoryResponse,
    PropertyCreateRequest,
    PropertyDetailResponse,
    PropertyResponse,
    PropertySearchParams,
    PropertyUpdateRequest,
)

logger = logging.getLogger(__name__)


def parse_price_range(raw: Optional[str]) -> Tuple[Optional[int], Optional[int]]:
    """'5000000-20000000' -> (5000000, 20000000); either side may be empty."""
    if not raw:
        return None, None
    low, sep, high = raw.partition("-")
    if not sep:
        raise ValidationError("price must look like 'min-max'")
    try:
        min_price = int(low) if low.strip() else None
        max_price = int(high) if high.strip() else None
    except ValueError:
        raise ValidationError("price bounds must be whole numbers")
    if min_price is not None and max_price is not None and min_price > max_price:
        raise ValidationError("price minimum cannot exceed maximum")
    return min_price, max_price


class PropertyServices:

    # --- Public listings ---
    @staticmethod
    async def search_service(params: PropertySearchParams, db: AsyncSession) -> List[PropertyResponse]:
        """
        Published listings only, filtered by purpose, type, location and price.

        Location matches case-insensitively anywhere in the location or the block.
        """
        min_price, max_price = parse_price_range(params.price)
        rows = await crud_property.search_published(
            db,
            purpose=params.purpose,
            property_type=params.type,
            location=params.location.strip() if params.location else None,
            min_price=min_price,
            max_price=max_price,
            sort=params.sort,
        )
        return [PropertyResponse.model_validate(p) for p in rows]

    @staticmethod
    async def featured_service(db: AsyncSession) -> List[PropertyResponse]:
        return [PropertyResponse.model_validate(p) for p in await crud_property.get_featured(db)]

    @staticmethod
    async def detail_service(property_id: UUID, db: AsyncSession) -> PropertyDetailResponse:
        prop = await crud_property.get_property(db, property_id, published_only=True)
        if not prop:
            raise NotFoundError("Property not found")
        similar = await crud_property.get_similar(db, prop)
        return PropertyDetailResponse(
            property=PropertyResponse.model_validate(prop),
            similar=[PropertyResponse.model_validate(p) for p in similar],
        )

    # --- Admin inventory ---
    @staticmethod
    async def inventory_service(params: InventoryParams, db: AsyncSession) -> InventoryResponse:
        rows = await crud_property.list_inventory(db, status=params.status, search=params.search)
        counts = await crud_property.count_by_status(db)
        return InventoryResponse(
            counts={status: counts.get(status, 0) for status in PROPERTY_STATUSES},
            properties=[PropertyResponse.model_validate(p) for p in rows],
        )

    @staticmethod
    async def _check_agent(db: AsyncSession, agent_id: Optional[UUID]) -> None:
        if agent_id and not await crud_agent.get_agent_by_id(db, agent_id):
            raise NotFoundError("Agent not found")

    @staticmethod
    async def create_service(request: PropertyCreateRequest, db: AsyncSession, ctx: SessionContext) -> PropertyResponse:
        data = request.model_dump()
        if not data["title"].strip() or not data["location"].strip():
            raise ValidationError("title and location are required")
        if data["agent_id"] is None:
            data["agent_id"] = ctx.agent_id
        await PropertyServices._check_agent(db, data["agent_id"])

        prop = await crud_property.create_property(db, data)
        await db.commit()
        logger.info("Property %s created by %s (status=%s)", prop.property_id, ctx.user_id, prop.status)
        return PropertyResponse.model_validate(prop)

    @staticmethod
    async def update_service(property_id: UUID, request: PropertyUpdateRequest, db: AsyncSession) -> PropertyResponse:
        prop = await crud_property.get_property(db, property_id)
        if not prop:
            raise NotFoundError("Property not found")

        fields = request.model_dump(exclude_unset=True)
        for required in ("title", "type", "purpose", "price", "area", "area_unit", "city", "location", "status", "featured"):
            if required in fields and fields[required] is None:
                raise ValidationError(f"{required} cannot be empty")
        for list_field in ("images", "features"):
            if list_field in fields and fields[list_field] is None:
                fields[list_field] = []
        if "agent_id" in fields:
            await PropertyServices._check_agent(db, fields["agent_id"])

        crud_property.apply_property_fields(prop, fields)
        await db.commit()
        return PropertyResponse.model_validate(prop)

    @staticmethod
    async def delete_service(property_id: UUID, db: AsyncSession, ctx: SessionContext) -> None:
        if not ctx.is_admin:
            raise AuthError("Only admins can delete listings")
        if not await crud_property.delete_property(db, property_id):
            raise NotFoundError("Property not found")
        await db.commit()
        logger.info("Property %s deleted by %s", property_id, ctx.user_id)
