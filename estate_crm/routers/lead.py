from fastapi import APIRouter, Depends, HTTPException, Query, Response
from sqlalchemy.ext.asyncio import AsyncSession
from typing import List, Optional
from uuid import UUID
import logging
import traceback

from estate_crm.core.errors import AuthError
from estate_crm.core.security import require_staff
from estate_crm.db.session import get_db
from estate_crm.schemas.auth import SessionContext
from estate_crm.schemas.lead import (
    InquiryRequest,
    InquiryResponse,
    LeadCreateRequest,
    LeadListResponse,
    LeadResponse,
)
from estate_crm.schemas.lead_update import (
    LeadActivityCreate,
    LeadActivityResponse,
    LeadAssignRequest,
    LeadStatusUpdateRequest,
    LeadUpdateRequest,
)
from estate_crm.services.lead_services import LeadServices

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1/leads", tags=["Leads"])


@router.post(
    "/inquiry",
    response_model=InquiryResponse,
    status_code=201,
    summary="Public contact-form inquiry",
    description="Creates a `new` lead from the public contact form. Mobile must be a Pakistani mobile number."
)
async def submit_inquiry(
    request: InquiryRequest,
    db: AsyncSession = Depends(get_db),
):
    try:
        lead = await LeadServices.capture_inquiry_service(request, db)
        return InquiryResponse(
            success=True,
            lead_id=lead.lead_id,
            message="Thank you! Our team will reach you within 30 minutes during business hours.",
        )
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except Exception as e:
        logger.error("Error in submit_inquiry: %s\n%s", e, traceback.format_exc())
        raise HTTPException(status_code=500, detail="Internal Server Error")


@router.post(
    "",
    response_model=LeadResponse,
    status_code=201,
    summary="Create a lead (admin CRM)",
)
async def create_lead(
    request: LeadCreateRequest,
    db: AsyncSession = Depends(get_db),
    ctx: SessionContext = Depends(require_staff),
):
    try:
        return await LeadServices.create_lead_service(request, db, ctx)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except LookupError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except AuthError as e:
        raise HTTPException(status_code=e.status_code, detail=str(e))
    except Exception as e:
        logger.error("Error in create_lead: %s\n%s", e, traceback.format_exc())
        raise HTTPException(status_code=500, detail="Internal Server Error")


@router.get(
    "",
    response_model=LeadListResponse,
    summary="List leads",
    description="Search by name or mobile, filter by pipeline stage. Agents only see leads assigned to them."
)
async def list_leads(
    search: Optional[str] = Query(None, description="Name or mobile fragment"),
    status: Optional[str] = Query(None, description="Pipeline stage"),
    db: AsyncSession = Depends(get_db),
    ctx: SessionContext = Depends(require_staff),
):
    try:
        return await LeadServices.list_leads_service(db, ctx, search=search, status=status)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except AuthError as e:
        raise HTTPException(status_code=e.status_code, detail=str(e))
    except Exception as e:
        logger.error("Error in list_leads: %s\n%s", e, traceback.format_exc())
        raise HTTPException(status_code=500, detail="Internal Server Error")


@router.get(
    "/export",
    summary="Export leads as CSV",
    description="Same filters as the list endpoint; one CSV row per matching lead.",
    response_class=Response,
)
async def export_leads(
    search: Optional[str] = Query(None),
    status: Optional[str] = Query(None),
    db: AsyncSession = Depends(get_db),
    ctx: SessionContext = Depends(require_staff),
):
    try:
        content = await LeadServices.export_csv_service(db, ctx, search=search, status=status)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except AuthError as e:
        raise HTTPException(status_code=e.status_code, detail=str(e))
    except Exception as e:
        logger.error("Error in export_leads: %s\n%s", e, traceback.format_exc())
        raise HTTPException(status_code=500, detail="Internal Server Error")

    return Response(
        content=content,
        media_type="text/csv",
        headers={"Content-Disposition": 'attachment; filename="leads.csv"'},
    )


@router.get("/{lead_id}", response_model=LeadResponse)
async def get_lead(
    lead_id: UUID,
    db: AsyncSession = Depends(get_db),
    ctx: SessionContext = Depends(require_staff),
):
    try:
        return LeadResponse.model_validate(await LeadServices.get_lead_service(lead_id, db, ctx))
    except LookupError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except AuthError as e:
        raise HTTPException(status_code=e.status_code, detail=str(e))
    except Exception as e:
        logger.error("Error in get_lead: %s\n%s", e, traceback.format_exc())
        raise HTTPException(status_code=500, detail="Internal Server Error")


@router.patch(
    "/{lead_id}",
    response_model=LeadResponse,
    summary="Edit lead details",
)
async def update_lead(
    lead_id: UUID,
    request: LeadUpdateRequest,
    db: AsyncSession = Depends(get_db),
    ctx: SessionContext = Depends(require_staff),
):
    try:
        return await LeadServices.update_lead_service(lead_id, request, db, ctx)
    except LookupError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except AuthError as e:
        raise HTTPException(status_code=e.status_code, detail=str(e))
    except Exception as e:
        logger.error("Error in update_lead: %s\n%s", e, traceback.format_exc())
        raise HTTPException(status_code=500, detail="Internal Server Error")


@router.put(
    "/{lead_id}/status",
    response_model=LeadResponse,
    summary="Move a lead to a pipeline stage",
    description="Any stage may be set from any other. Each real change is logged as a status_change activity."
)
async def update_lead_status(
    lead_id: UUID,
    request: LeadStatusUpdateRequest,
    db: AsyncSession = Depends(get_db),
    ctx: SessionContext = Depends(require_staff),
):
    try:
        return await LeadServices.update_status_service(lead_id, request.status, db, ctx)
    except LookupError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except AuthError as e:
        raise HTTPException(status_code=e.status_code, detail=str(e))
    except Exception as e:
        logger.error("Error in update_lead_status: %s\n%s", e, traceback.format_exc())
        raise HTTPException(status_code=500, detail="Internal Server Error")


@router.put(
    "/{lead_id}/assign",
    response_model=LeadResponse,
    summary="Assign a lead to an agent (admin)",
)
async def assign_lead(
    lead_id: UUID,
    request: LeadAssignRequest,
    db: AsyncSession = Depends(get_db),
    ctx: SessionContext = Depends(require_staff),
):
    try:
        return await LeadServices.assign_agent_service(lead_id, request.agent_id, db, ctx)
    except LookupError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except AuthError as e:
        raise HTTPException(status_code=e.status_code, detail=str(e))
    except Exception as e:
        logger.error("Error in assign_lead: %s\n%s", e, traceback.format_exc())
        raise HTTPException(status_code=500, detail="Internal Server Error")


@router.get("/{lead_id}/activities", response_model=List[LeadActivityResponse])
async def list_activities(
    lead_id: UUID,
    db: AsyncSession = Depends(get_db),
    ctx: SessionContext = Depends(require_staff),
):
    try:
        return await LeadServices.list_activities_service(lead_id, db, ctx)
    except LookupError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except AuthError as e:
        raise HTTPException(status_code=e.status_code, detail=str(e))
    except Exception as e:
        logger.error("Error in list_activities: %s\n%s", e, traceback.format_exc())
        raise HTTPException(status_code=500, detail="Internal Server Error")


@router.post(
    "/{lead_id}/activities",
    response_model=LeadActivityResponse,
    status_code=201,
    summary="Add a note to a lead",
)
async def add_activity(
    lead_id: UUID,
    request: LeadActivityCreate,
    db: AsyncSession = Depends(get_db),
    ctx: SessionContext = Depends(require_staff),
):
    try:
        return await LeadServices.add_activity_service(lead_id, request.description, db, ctx)
    except LookupError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except AuthError as e:
        raise HTTPException(status_code=e.status_code, detail=str(e))
    except Exception as e:
        logger.error("Error in add_activity: %s\n%s", e, traceback.format_exc())
        raise HTTPException(status_code=500, detail="Internal Server Error")


@router.delete("/{lead_id}", status_code=204, response_class=Response)
async def delete_lead(
    lead_id: UUID,
    db: AsyncSession = Depends(get_db),
    ctx: SessionContext = Depends(require_staff),
):
    try:
        await LeadServices.delete_lead_service(lead_id, db, ctx)
    except LookupError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except AuthError as e:
        raise HTTPException(status_code=e.status_code, detail=str(e))
    except Exception as e:
        logger.error("Error in delete_lead: %s\n%s", e, traceback.format_exc())
        raise HTTPException(status_code=500, detail="Internal Server Error")
    return Response(status_code=204)
