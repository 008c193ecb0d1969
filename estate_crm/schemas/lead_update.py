from typing import List, Optional
from pydantic import BaseModel, EmailStr, Field
from uuid import UUID
from datetime import datetime

from estate_crm.schemas.lead import LeadSource


# --- Partial edit from the admin form; unset fields are left alone ---
class LeadUpdateRequest(BaseModel):
    name: Optional[str] = None
    mobile: Optional[str] = None
    email: Optional[EmailStr] = None
    whatsapp_opt_in: Optional[bool] = None
    preferred_contact_time: Optional[str] = None
    interest_types: Optional[List[str]] = None
    locations: Optional[List[str]] = None
    intentions: Optional[List[str]] = None
    budget_min: Optional[int] = Field(default=None, ge=0)
    budget_max: Optional[int] = Field(default=None, ge=0)
    budget_flexible: Optional[bool] = None
    source: Optional[LeadSource] = None
    notes: Optional[str] = None


class LeadStatusUpdateRequest(BaseModel):
    status: str


class LeadAssignRequest(BaseModel):
    agent_id: Optional[UUID] = None  # None clears the assignment


# --- Activity sub-schemas ---
class LeadActivityCreate(BaseModel):
    description: str


class LeadActivityResponse(BaseModel):
    activity_id: UUID
    lead_id: UUID
    agent_id: Optional[UUID] = None
    activity_type: str
    description: str
    created_at: datetime

    model_config = {"from_attributes": True}
