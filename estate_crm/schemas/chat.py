from typing import List, Optional, Literal
from pydantic import BaseModel
from uuid import UUID


# --- ai-chat function ---
class ChatMessage(BaseModel):
    role: Literal["user", "assistant"]
    content: str


class AIChatRequest(BaseModel):
    messages: List[ChatMessage]


class AIChatResponse(BaseModel):
    reply: str


# --- Lead-capture widget ---
class ChatTurnRequest(BaseModel):
    session_id: Optional[str] = None
    message: str


class ChatTurnResponse(BaseModel):
    session_id: str
    phase: str
    reply: str
    lead_id: Optional[UUID] = None
    whatsapp_url: Optional[str] = None
