from typing import Optional, Literal
from pydantic import BaseModel
from uuid import UUID


class LoginRequest(BaseModel):
    email: str
    password: str


class SessionContext(BaseModel):
    """
    Authenticated caller for the duration of one request.

    Built from the bearer token on every request (role and agent profile are
    looked up fresh), and torn down by logout, which revokes `token_id`.
    """
    user_id: UUID
    email: str
    agent_id: Optional[UUID] = None
    agent_name: Optional[str] = None
    role: Optional[Literal["admin", "agent"]] = None
    token_id: Optional[str] = None

    @property
    def is_admin(self) -> bool:
        return self.role == "admin"

    @property
    def is_staff(self) -> bool:
        return self.role is not None


class LoginResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"
    session: SessionContext


class LogoutResponse(BaseModel):
    success: bool
