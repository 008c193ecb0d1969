from typing import List, Optional, Literal
from pydantic import BaseModel, EmailStr, Field
from uuid import UUID
from datetime import datetime

LeadSource = Literal["website", "call", "whatsapp", "walk-in", "referral", "social"]


# --- Admin manual entry ---
class LeadCreateRequest(BaseModel):
    name: str
    mobile: str
    email: Optional[EmailStr] = None
    whatsapp_opt_in: bool = False
    preferred_contact_time: Optional[str] = None
    interest_types: List[str] = Field(default_factory=list)
    locations: List[str] = Field(default_factory=list)
    intentions: List[str] = Field(default_factory=list)
    budget_min: Optional[int] = Field(default=None, ge=0)
    budget_max: Optional[int] = Field(default=None, ge=0)
    budget_flexible: bool = False
    source: LeadSource = "website"
    notes: Optional[str] = None
    assigned_agent_id: Optional[UUID] = None


# --- Public contact form ---
class InquiryRequest(BaseModel):
    name: str
    mobile: str
    email: Optional[EmailStr] = None
    subject: Optional[str] = None
    message: Optional[str] = None


# --- Listing detail "request a call" form ---
class PropertyInquiryRequest(BaseModel):
    name: str
    mobile: str
    message: Optional[str] = None


class InquiryResponse(BaseModel):
    success: bool
    lead_id: UUID
    message: str


class LeadResponse(BaseModel):
    lead_id: UUID
    name: str
    mobile: str
    email: Optional[str] = None
    whatsapp_opt_in: bool
    preferred_contact_time: Optional[str] = None
    interest_types: List[str]
    locations: List[str]
    intentions: List[str]
    budget_min: Optional[int] = None
    budget_max: Optional[int] = None
    budget_flexible: bool
    source: str
    status: str
    assigned_agent_id: Optional[UUID] = None
    notes: Optional[str] = None
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


# --- Query params ---
class LeadListParams(BaseModel):
    search: Optional[str] = None
    status: Optional[str] = None


class PipelineStageCount(BaseModel):
    stage: str
    count: int


class LeadListResponse(BaseModel):
    total: int
    pipeline: List[PipelineStageCount]
    leads: List[LeadResponse]
