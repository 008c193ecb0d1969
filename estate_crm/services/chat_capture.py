"""
Scripted lead capture for the website chat widget.

    chat --(wants agent)--> capture_name --(name)--> capture_mobile --(valid mobile)--> done

Anything else in `chat` is answered by the AI responder. An unusable name or mobile keeps
the conversation in the same phase. Once `done`, messages only point to WhatsApp.
Conversation state is kept in Redis per session id.
"""
import enum
import json
import logging
from dataclasses import dataclass, field, asdict
from typing import List, Optional
from urllib.parse import quote
from uuid import uuid4

from sqlalchemy.ext.asyncio import AsyncSession

from estate_crm.core import config
from estate_crm.core.errors import ValidationError
from estate_crm.schemas.chat import ChatTurnRequest, ChatTurnResponse
from estate_crm.services import lead_pipeline
from estate_crm.services.ai_chat import AIChatService
from estate_crm.services.lead_services import LeadServices

logger = logging.getLogger(__name__)

SESSION_KEY = "chat:session:{}"
HISTORY_LIMIT = 20
AGENT_KEYWORDS = ("agent", "human", "speak", "call me")
WHATSAPP_GREETING = "Hello, I need help finding a property."


class CapturePhase(str, enum.Enum):
    CHAT = "chat"
    CAPTURE_NAME = "capture_name"
    CAPTURE_MOBILE = "capture_mobile"
    DONE = "done"


class CaptureEvent(str, enum.Enum):
    MESSAGE = "message"
    WANTS_AGENT = "wants_agent"
    NAME_GIVEN = "name_given"
    NAME_INVALID = "name_invalid"
    MOBILE_VALID = "mobile_valid"
    MOBILE_INVALID = "mobile_invalid"


TRANSITIONS = {
    (CapturePhase.CHAT, CaptureEvent.MESSAGE): CapturePhase.CHAT,
    (CapturePhase.CHAT, CaptureEvent.WANTS_AGENT): CapturePhase.CAPTURE_NAME,
    (CapturePhase.CAPTURE_NAME, CaptureEvent.NAME_GIVEN): CapturePhase.CAPTURE_MOBILE,
    (CapturePhase.CAPTURE_NAME, CaptureEvent.NAME_INVALID): CapturePhase.CAPTURE_NAME,
    (CapturePhase.CAPTURE_MOBILE, CaptureEvent.MOBILE_VALID): CapturePhase.DONE,
    (CapturePhase.CAPTURE_MOBILE, CaptureEvent.MOBILE_INVALID): CapturePhase.CAPTURE_MOBILE,
    (CapturePhase.DONE, CaptureEvent.MESSAGE): CapturePhase.DONE,
}


def wants_agent(text: str) -> bool:
    lower = text.lower()
    return any(keyword in lower for keyword in AGENT_KEYWORDS)


def whatsapp_url() -> str:
    return f"https://wa.me/{config.WHATSAPP_NUMBER}?text={quote(WHATSAPP_GREETING)}"


@dataclass
class CaptureState:
    phase: CapturePhase = CapturePhase.CHAT
    name: Optional[str] = None
    lead_id: Optional[str] = None
    history: List[dict] = field(default_factory=list)

    def to_json(self) -> str:
        data = asdict(self)
        data["phase"] = self.phase.value
        return json.dumps(data)

    @classmethod
    def from_json(cls, raw: str) -> "CaptureState":
        data = json.loads(raw)
        data["phase"] = CapturePhase(data["phase"])
        return cls(**data)


class LeadCaptureFlow:
    """The pure part: classify a message and look up the next phase."""

    @staticmethod
    def classify(phase: CapturePhase, text: str) -> CaptureEvent:
        if phase == CapturePhase.CHAT:
            return CaptureEvent.WANTS_AGENT if wants_agent(text) else CaptureEvent.MESSAGE
        if phase == CapturePhase.CAPTURE_NAME:
            return CaptureEvent.NAME_GIVEN if lead_pipeline.is_valid_name(text) else CaptureEvent.NAME_INVALID
        if phase == CapturePhase.CAPTURE_MOBILE:
            return CaptureEvent.MOBILE_VALID if lead_pipeline.is_valid_mobile(text) else CaptureEvent.MOBILE_INVALID
        return CaptureEvent.MESSAGE

    @staticmethod
    def advance(phase: CapturePhase, event: CaptureEvent) -> CapturePhase:
        try:
            return TRANSITIONS[(phase, event)]
        except KeyError:
            raise ValueError(f"No transition from {phase.value} on {event.value}")


class ChatCaptureService:

    @staticmethod
    async def load_state(redis, session_id: str) -> CaptureState:
        raw = await redis.get(SESSION_KEY.format(session_id))
        return CaptureState.from_json(raw) if raw else CaptureState()

    @staticmethod
    async def save_state(redis, session_id: str, state: CaptureState) -> None:
        state.history = state.history[-HISTORY_LIMIT:]
        await redis.set(SESSION_KEY.format(session_id), state.to_json(), ex=config.CHAT_SESSION_TTL_SECONDS)

    @staticmethod
    async def handle_message(request: ChatTurnRequest, db: AsyncSession, redis, ai_client) -> ChatTurnResponse:
        text = request.message.strip()
        if not text:
            raise ValidationError("Message is required")

        session_id = request.session_id or uuid4().hex
        state = await ChatCaptureService.load_state(redis, session_id)

        event = LeadCaptureFlow.classify(state.phase, text)
        next_phase = LeadCaptureFlow.advance(state.phase, event)
        link = None

        if event == CaptureEvent.WANTS_AGENT:
            reply = "I'll have an agent contact you shortly! Could you please share your full name first?"
        elif event == CaptureEvent.NAME_GIVEN:
            state.name = text
            reply = (
                f"Nice to meet you, {text}! Please share your mobile number "
                f"(WhatsApp preferred) so an agent can follow up with you."
            )
        elif event == CaptureEvent.NAME_INVALID:
            reply = "That name is a bit long for our records. Could you send just your full name?"
        elif event == CaptureEvent.MOBILE_INVALID:
            reply = "That doesn't look like a Pakistani mobile number. Please send it like 0300-1234567 or +92 300 1234567."
        elif event == CaptureEvent.MOBILE_VALID:
            lead = await LeadServices.persist_lead(db, {
                "name": state.name,
                "mobile": text,
                "source": "website",
                "notes": "Captured by the website chat assistant",
            })
            state.lead_id = str(lead.lead_id)
            link = whatsapp_url()
            reply = (
                f"Perfect! Your inquiry has been registered. An agent will contact you at "
                f"{lead.mobile} within the next 30 minutes.\n\n"
                f"You can also reach us directly at {config.OFFICE_PHONE} or on WhatsApp {config.WHATSAPP_DISPLAY}."
            )
            logger.info("Chat session %s captured lead %s", session_id, lead.lead_id)
        elif state.phase == CapturePhase.DONE:
            link = whatsapp_url()
            reply = "Your inquiry is already with our team. Continue on WhatsApp for anything else."
        else:
            messages = [*state.history, {"role": "user", "content": text}]
            reply = await AIChatService.reply_or_fallback(messages, ai_client)

        state.phase = next_phase
        state.history.extend([
            {"role": "user", "content": text},
            {"role": "assistant", "content": reply},
        ])
        await ChatCaptureService.save_state(redis, session_id, state)

        return ChatTurnResponse(
            session_id=session_id,
            phase=state.phase.value,
            reply=reply,
            lead_id=state.lead_id,
            whatsapp_url=link,
        )
