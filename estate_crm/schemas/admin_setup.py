from typing import Optional
from pydantic import BaseModel, Field
from uuid import UUID


# --- create-admin function payloads (camelCase on the wire) ---
class CreateAdminRequest(BaseModel):
    # Optional so that missing fields become a 400 {error}, not a 422
    email: Optional[str] = None
    password: Optional[str] = None
    name: Optional[str] = None
    phone: Optional[str] = None
    setup_key: Optional[str] = Field(default=None, alias="setupKey")

    model_config = {"populate_by_name": True}


class CreateAdminResponse(BaseModel):
    success: bool
    message: str
    user_id: UUID = Field(serialization_alias="userId")
    agent_id: UUID = Field(serialization_alias="agentId")


# --- Admin-managed agent accounts ---
class AgentCreateRequest(BaseModel):
    email: str
    password: str
    name: str
    phone: Optional[str] = None


class AgentResponse(BaseModel):
    agent_id: UUID
    user_id: UUID
    name: str
    phone: Optional[str] = None
    email: Optional[str] = None
    avatar_url: Optional[str] = None

    model_config = {"from_attributes": True}
