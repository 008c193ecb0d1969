from fastapi import APIRouter, Depends, HTTPException, Response
from sqlalchemy.ext.asyncio import AsyncSession
from typing import List
from uuid import UUID
import logging
import traceback

from estate_crm.core.errors import AuthError
from estate_crm.core.security import require_staff
from estate_crm.db.session import get_db
from estate_crm.schemas.auth import SessionContext
from estate_crm.schemas.lead import InquiryResponse, PropertyInquiryRequest
from estate_crm.schemas.property import (
    InventoryParams,
    InventoryResponse,
    PropertyCreateRequest,
    PropertyDetailResponse,
    PropertyResponse,
    PropertySearchParams,
    PropertyUpdateRequest,
)
from estate_crm.services.lead_services import LeadServices
from estate_crm.services.property_services import PropertyServices

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1/properties", tags=["Properties"])
admin_router = APIRouter(prefix="/api/v1/admin/properties", tags=["Inventory"])


# --- Public listings ---
@router.get(
    "",
    response_model=List[PropertyResponse],
    summary="Search published listings",
    description="Filters: purpose, type, location (matches location or block), price as 'min-max'."
)
async def search_properties(
    params: PropertySearchParams = Depends(),
    db: AsyncSession = Depends(get_db),
):
    try:
        return await PropertyServices.search_service(params, db)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except Exception as e:
        logger.error("Error in search_properties: %s\n%s", e, traceback.format_exc())
        raise HTTPException(status_code=500, detail="Internal Server Error")


@router.get("/featured", response_model=List[PropertyResponse])
async def featured_properties(db: AsyncSession = Depends(get_db)):
    try:
        return await PropertyServices.featured_service(db)
    except Exception as e:
        logger.error("Error in featured_properties: %s\n%s", e, traceback.format_exc())
        raise HTTPException(status_code=500, detail="Internal Server Error")


@router.get("/{property_id}", response_model=PropertyDetailResponse)
async def property_detail(property_id: UUID, db: AsyncSession = Depends(get_db)):
    try:
        return await PropertyServices.detail_service(property_id, db)
    except LookupError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except Exception as e:
        logger.error("Error in property_detail: %s\n%s", e, traceback.format_exc())
        raise HTTPException(status_code=500, detail="Internal Server Error")


@router.post(
    "/{property_id}/inquiry",
    response_model=InquiryResponse,
    status_code=201,
    summary="Request a call back about a listing",
)
async def property_inquiry(
    property_id: UUID,
    request: PropertyInquiryRequest,
    db: AsyncSession = Depends(get_db),
):
    try:
        lead = await LeadServices.capture_property_inquiry_service(property_id, request, db)
        return InquiryResponse(
            success=True,
            lead_id=lead.lead_id,
            message="Thank you! An agent will call you shortly about this property.",
        )
    except LookupError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except Exception as e:
        logger.error("Error in property_inquiry: %s\n%s", e, traceback.format_exc())
        raise HTTPException(status_code=500, detail="Internal Server Error")


# --- Admin inventory ---
@admin_router.get("", response_model=InventoryResponse)
async def list_inventory(
    params: InventoryParams = Depends(),
    db: AsyncSession = Depends(get_db),
    ctx: SessionContext = Depends(require_staff),
):
    try:
        return await PropertyServices.inventory_service(params, db)
    except Exception as e:
        logger.error("Error in list_inventory: %s\n%s", e, traceback.format_exc())
        raise HTTPException(status_code=500, detail="Internal Server Error")


@admin_router.post("", response_model=PropertyResponse, status_code=201)
async def create_property(
    request: PropertyCreateRequest,
    db: AsyncSession = Depends(get_db),
    ctx: SessionContext = Depends(require_staff),
):
    try:
        return await PropertyServices.create_service(request, db, ctx)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except LookupError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except Exception as e:
        logger.error("Error in create_property: %s\n%s", e, traceback.format_exc())
        raise HTTPException(status_code=500, detail="Internal Server Error")


@admin_router.patch("/{property_id}", response_model=PropertyResponse)
async def update_property(
    property_id: UUID,
    request: PropertyUpdateRequest,
    db: AsyncSession = Depends(get_db),
    ctx: SessionContext = Depends(require_staff),
):
    try:
        return await PropertyServices.update_service(property_id, request, db)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except LookupError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except Exception as e:
        logger.error("Error in update_property: %s\n%s", e, traceback.format_exc())
        raise HTTPException(status_code=500, detail="Internal Server Error")


@admin_router.delete("/{property_id}", status_code=204, response_class=Response)
async def delete_property(
    property_id: UUID,
    db: AsyncSession = Depends(get_db),
    ctx: SessionContext = Depends(require_staff),
):
    try:
        await PropertyServices.delete_service(property_id, db, ctx)
    except LookupError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except AuthError as e:
        raise HTTPException(status_code=e.status_code, detail=str(e))
    except Exception as e:
        logger.error("Error in delete_property: %s\n%s", e, traceback.format_exc())
        raise HTTPException(status_code=500, detail="Internal Server Error")
    return Response(status_code=204)
