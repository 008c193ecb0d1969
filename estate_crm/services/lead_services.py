from uuid import UUID
from typing import List, Optional
from sqlalchemy.ext.asyncio import AsyncSession
import logging

from estate_crm.core.errors import NotFoundError, AuthError, ValidationError
from estate_crm.core.security import agent_scope
from estate_crm.crud import lead as crud_lead
from estate_crm.crud import lead_activities as crud_activities
from estate_crm.crud import agent as crud_agent
from estate_crm.crud import property as crud_property
from estate_crm.models import Lead
from estate_crm.schemas.auth import SessionContext
from estate_crm.schemas.lead import (
    LeadCreateRequest,
    LeadResponse,
    LeadListResponse,
    InquiryRequest,
    PropertyInquiryRequest,
)
from estate_crm.schemas.lead_update import LeadUpdateRequest, LeadActivityResponse
from estate_crm.services import lead_pipeline
from estate_crm.services.lead_export import export_leads_csv

logger = logging.getLogger(__name__)


class LeadServices:

    @staticmethod
    async def persist_lead(db: AsyncSession, lead_data: dict) -> Lead:
        """
        Validate and insert a lead. Every entry point (admin form, public
        inquiry, listing inquiry, chat capture) goes through here.

        Rules:
        - name must be non-blank
        - mobile must be a Pakistani mobile number once spaces/dashes are stripped;
          the stripped form is what gets stored
        - budget_min may not exceed budget_max
        - status always starts at "new"

        Raises:
            ValidationError: on any of the rules above.
        """
        data = dict(lead_data)
        data["name"] = lead_pipeline.require_name(data.get("name"))
        data["mobile"] = lead_pipeline.normalize_mobile(data.get("mobile"))
        lead_pipeline.validate_budget(data.get("budget_min"), data.get("budget_max"))
        data["status"] = "new"
        data.setdefault("source", "website")

        lead = await crud_lead.create_lead(db, data)
        await db.commit()
        logger.info("Lead %s created (source=%s)", lead.lead_id, lead.source)
        return lead

    @staticmethod
    async def create_lead_service(request: LeadCreateRequest, db: AsyncSession, ctx: SessionContext) -> LeadResponse:
        """Manual entry from the admin CRM. Agents' own entries are assigned to themselves."""
        data = request.model_dump()

        if ctx.is_admin:
            if data.get("assigned_agent_id") and not await crud_agent.get_agent_by_id(db, data["assigned_agent_id"]):
                raise NotFoundError("Agent not found")
        else:
            data["assigned_agent_id"] = agent_scope(ctx)

        lead = await LeadServices.persist_lead(db, data)
        return LeadResponse.model_validate(lead)

    @staticmethod
    async def capture_inquiry_service(request: InquiryRequest, db: AsyncSession) -> Lead:
        """Public contact form."""
        notes = "\n\n".join(part for part in (request.subject, request.message) if part) or None
        return await LeadServices.persist_lead(db, {
            "name": request.name,
            "mobile": request.mobile,
            "email": request.email,
            "notes": notes,
            "source": "website",
        })

    @staticmethod
    async def capture_property_inquiry_service(property_id: UUID, request: PropertyInquiryRequest, db: AsyncSession) -> Lead:
        """Listing detail page inquiry; the lead remembers which listing prompted it."""
        prop = await crud_property.get_property(db, property_id, published_only=True)
        if not prop:
            raise NotFoundError("Property not found")

        return await LeadServices.persist_lead(db, {
            "name": request.name,
            "mobile": request.mobile,
            "notes": f"{request.message or ''}\n\nInterested in: {prop.title}",
            "source": "website",
            "interest_types": [prop.type],
            "locations": [prop.location],
            "intentions": [],
        })

    @staticmethod
    async def get_lead_service(lead_id: UUID, db: AsyncSession, ctx: SessionContext) -> Lead:
        lead = await crud_lead.get_lead_by_id(db, lead_id, agent_scope(ctx))
        if not lead:
            raise NotFoundError("Lead not found")
        return lead

    @staticmethod
    async def list_leads_service(
        db: AsyncSession,
        ctx: SessionContext,
        search: Optional[str] = None,
        status: Optional[str] = None,
    ) -> LeadListResponse:
        if status:
            lead_pipeline.validate_status(status)

        scope = agent_scope(ctx)
        leads = await crud_lead.list_leads(db, search=search, status=status, agent_scope=scope)
        counts = await crud_lead.count_by_status(db, agent_scope=scope)

        return LeadListResponse(
            total=sum(counts.values()),
            pipeline=lead_pipeline.pipeline_counts(counts),
            leads=[LeadResponse.model_validate(lead) for lead in leads],
        )

    @staticmethod
    async def update_lead_service(lead_id: UUID, request: LeadUpdateRequest, db: AsyncSession, ctx: SessionContext) -> LeadResponse:
        """Partial edit. A changed mobile is re-validated like on create."""
        lead = await LeadServices.get_lead_service(lead_id, db, ctx)
        fields = request.model_dump(exclude_unset=True)

        for required in ("whatsapp_opt_in", "budget_flexible", "source"):
            if required in fields and fields[required] is None:
                raise ValidationError(f"{required} cannot be empty")
        if "name" in fields:
            fields["name"] = lead_pipeline.require_name(fields["name"])
        if "mobile" in fields:
            fields["mobile"] = lead_pipeline.normalize_mobile(fields["mobile"])
        lead_pipeline.validate_budget(
            fields.get("budget_min", lead.budget_min),
            fields.get("budget_max", lead.budget_max),
        )
        for list_field in ("interest_types", "locations", "intentions"):
            if list_field in fields and fields[list_field] is None:
                fields[list_field] = []

        crud_lead.apply_lead_fields(lead, fields)
        await db.commit()
        return LeadResponse.model_validate(lead)

    @staticmethod
    async def update_status_service(lead_id: UUID, new_status: str, db: AsyncSession, ctx: SessionContext) -> LeadResponse:
        """
        Move a lead to another pipeline stage.

        Any stage may follow any other. A real change is written together with a
        `status_change` activity in the same commit; setting the current status
        again changes nothing and logs nothing.

        Raises:
            ValidationError: unknown status.
            NotFoundError: lead missing or not visible to the caller.
        """
        lead_pipeline.validate_status(new_status)
        lead = await LeadServices.get_lead_service(lead_id, db, ctx)

        previous = lead.status
        if previous == new_status:
            return LeadResponse.model_validate(lead)

        crud_lead.update_lead_status(lead, new_status)
        await crud_activities.create_activity(
            db,
            lead_id=lead.lead_id,
            activity_type="status_change",
            description=f"Status changed from {previous} to {new_status}",
            agent_id=ctx.agent_id,
        )
        await db.commit()
        logger.info("Lead %s moved %s -> %s", lead.lead_id, previous, new_status)
        return LeadResponse.model_validate(lead)

    @staticmethod
    async def add_activity_service(lead_id: UUID, text: str, db: AsyncSession, ctx: SessionContext) -> LeadActivityResponse:
        description = (text or "").strip()
        if not description:
            raise ValidationError("Activity text is required")

        lead = await LeadServices.get_lead_service(lead_id, db, ctx)
        activity = await crud_activities.create_activity(
            db,
            lead_id=lead.lead_id,
            activity_type="note",
            description=description,
            agent_id=ctx.agent_id,
        )
        await db.commit()
        return LeadActivityResponse.model_validate(activity)

    @staticmethod
    async def list_activities_service(lead_id: UUID, db: AsyncSession, ctx: SessionContext) -> List[LeadActivityResponse]:
        lead = await LeadServices.get_lead_service(lead_id, db, ctx)
        activities = await crud_activities.get_activities_by_lead(db, lead.lead_id)
        return [LeadActivityResponse.model_validate(a) for a in activities]

    @staticmethod
    async def assign_agent_service(lead_id: UUID, agent_id: Optional[UUID], db: AsyncSession, ctx: SessionContext) -> LeadResponse:
        """Admin only: hand a lead to an agent (or clear the assignment)."""
        if not ctx.is_admin:
            raise AuthError("Only admins can assign leads")

        lead = await LeadServices.get_lead_service(lead_id, db, ctx)

        if agent_id is None:
            description = "Assignment cleared"
        else:
            agent = await crud_agent.get_agent_by_id(db, agent_id)
            if not agent:
                raise NotFoundError("Agent not found")
            description = f"Assigned to {agent.name}"

        if lead.assigned_agent_id == agent_id:
            return LeadResponse.model_validate(lead)

        crud_lead.apply_lead_fields(lead, {"assigned_agent_id": agent_id})
        await crud_activities.create_activity(
            db,
            lead_id=lead.lead_id,
            activity_type="assignment",
            description=description,
            agent_id=ctx.agent_id,
        )
        await db.commit()
        return LeadResponse.model_validate(lead)

    @staticmethod
    async def delete_lead_service(lead_id: UUID, db: AsyncSession, ctx: SessionContext) -> None:
        if not ctx.is_admin:
            raise AuthError("Only admins can delete leads")
        deleted = await crud_lead.delete_lead(db, lead_id)
        if not deleted:
            raise NotFoundError("Lead not found")
        await db.commit()

    @staticmethod
    async def export_csv_service(
        db: AsyncSession,
        ctx: SessionContext,
        search: Optional[str] = None,
        status: Optional[str] = None,
    ) -> str:
        """CSV of exactly the leads the list view would show for the same filters."""
        if status:
            lead_pipeline.validate_status(status)

        leads = await crud_lead.list_leads(db, search=search, status=status, agent_scope=agent_scope(ctx))
        agent_names = {agent.agent_id: agent.name for agent in await crud_agent.list_agents(db)}
        return export_leads_csv(leads, agent_names)
