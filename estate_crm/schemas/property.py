from typing import List, Optional, Literal
from pydantic import BaseModel, Field
from uuid import UUID
from datetime import datetime

PropertyType = Literal["house", "apartment", "office", "plot"]
PropertyPurpose = Literal["buy", "rent"]
PropertyStatus = Literal["draft", "review", "published"]
AreaUnit = Literal["sqft", "sqyd", "marla", "kanal"]


class PropertyCreateRequest(BaseModel):
    title: str
    type: PropertyType
    purpose: PropertyPurpose
    price: int = Field(ge=0)
    price_label: Optional[str] = None
    area: float = Field(gt=0)
    area_unit: AreaUnit = "sqft"
    bedrooms: Optional[int] = Field(default=None, ge=0)
    bathrooms: Optional[int] = Field(default=None, ge=0)
    parking: Optional[int] = Field(default=None, ge=0)
    furnished: Optional[bool] = None
    city: str = "Karachi"
    location: str
    block: Optional[str] = None
    description: Optional[str] = None
    images: List[str] = Field(default_factory=list)
    features: List[str] = Field(default_factory=list)
    status: PropertyStatus = "draft"
    featured: bool = False
    whatsapp: Optional[str] = None
    video_link: Optional[str] = None
    agent_id: Optional[UUID] = None


class PropertyUpdateRequest(BaseModel):
    title: Optional[str] = None
    type: Optional[PropertyType] = None
    purpose: Optional[PropertyPurpose] = None
    price: Optional[int] = Field(default=None, ge=0)
    price_label: Optional[str] = None
    area: Optional[float] = Field(default=None, gt=0)
    area_unit: Optional[AreaUnit] = None
    bedrooms: Optional[int] = Field(default=None, ge=0)
    bathrooms: Optional[int] = Field(default=None, ge=0)
    parking: Optional[int] = Field(default=None, ge=0)
    furnished: Optional[bool] = None
    city: Optional[str] = None
    location: Optional[str] = None
    block: Optional[str] = None
    description: Optional[str] = None
    images: Optional[List[str]] = None
    features: Optional[List[str]] = None
    status: Optional[PropertyStatus] = None
    featured: Optional[bool] = None
    whatsapp: Optional[str] = None
    video_link: Optional[str] = None
    agent_id: Optional[UUID] = None


class PropertyResponse(BaseModel):
    property_id: UUID
    title: str
    type: str
    purpose: str
    price: int
    price_label: Optional[str] = None
    area: float
    area_unit: str
    bedrooms: Optional[int] = None
    bathrooms: Optional[int] = None
    parking: Optional[int] = None
    furnished: Optional[bool] = None
    city: str
    location: str
    block: Optional[str] = None
    description: Optional[str] = None
    images: List[str]
    features: List[str]
    status: str
    featured: bool
    whatsapp: Optional[str] = None
    video_link: Optional[str] = None
    agent_id: Optional[UUID] = None
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class PropertyDetailResponse(BaseModel):
    property: PropertyResponse
    similar: List[PropertyResponse]


# --- Query params ---
class PropertySearchParams(BaseModel):
    purpose: Optional[PropertyPurpose] = None
    type: Optional[PropertyType] = None
    location: Optional[str] = None
    price: Optional[str] = None  # "min-max", either side may be empty
    sort: Literal["newest", "price-asc", "price-desc"] = "newest"


class InventoryParams(BaseModel):
    status: Optional[PropertyStatus] = None
    search: Optional[str] = None


class InventoryResponse(BaseModel):
    counts: dict[str, int]
    properties: List[PropertyResponse]
