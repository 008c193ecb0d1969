import logging
from typing import List

from openai import AsyncOpenAI, OpenAIError

from estate_crm.core import config
from estate_crm.core.errors import UpstreamError

logger = logging.getLogger(__name__)

SYSTEM_PROMPT = f"""You are the property assistant for Estate Bnk, a real estate agency in Karachi, Pakistan.
The agency works mainly in DHA, Clifton, Bahria Town, PECHS and Gulshan-e-Iqbal.

You help visitors to:
1. Find houses, apartments, offices and plots to buy or rent
2. Understand areas, price ranges and the buying/renting process in Pakistan
3. Understand documentation, legal due diligence and transfer procedures
4. Reach an agent: when someone wants one, ask for their name and mobile number

Agency details:
- Office: DHA Phase 5, Main Gizri Road, Karachi
- Phone: {config.OFFICE_PHONE}
- WhatsApp: {config.WHATSAPP_DISPLAY}
- Hours: Mon-Sat 9AM-7PM, Sunday 11AM-4PM

Typical prices (PKR): apartments for rent 50K-200K/month, houses for rent 80K-500K/month,
apartments for sale 1-5 Crore, houses for sale 3-20+ Crore, commercial plots 5-50+ Crore.

Be concise and professional, and answer in the language the visitor writes in (Urdu or English)."""

EMPTY_REPLY = (
    f"I'm sorry, I couldn't process your request. "
    f"Please contact us directly at {config.OFFICE_PHONE}."
)
FALLBACK_REPLY = (
    f"I'm having trouble connecting right now. "
    f"Please call us at {config.OFFICE_PHONE} or WhatsApp {config.WHATSAPP_DISPLAY}."
)

_client = None


def get_ai_client() -> AsyncOpenAI:
    """Dependency returning the shared gateway client (OpenAI-compatible API)."""
    global _client
    if _client is None:
        _client = AsyncOpenAI(
            base_url=config.AI_GATEWAY_BASE_URL,
            api_key=config.AI_GATEWAY_API_KEY or "unset",
        )
    return _client


class AIChatService:

    @staticmethod
    async def generate_reply(messages: List[dict], client) -> str:
        """
        One request/response round trip to the gateway: system prompt + the
        caller's messages. No streaming and no retries.

        Raises:
            UpstreamError: gateway not configured or the call failed.
        """
        if not config.AI_GATEWAY_API_KEY:
            raise UpstreamError("AI gateway key is not configured")

        try:
            completion = await client.chat.completions.create(
                model=config.AI_MODEL,
                messages=[{"role": "system", "content": SYSTEM_PROMPT}, *messages],
                max_tokens=500,
                temperature=0.7,
            )
        except OpenAIError as e:
            raise UpstreamError(f"AI gateway error: {e}") from e

        content = completion.choices[0].message.content if completion.choices else None
        return content or EMPTY_REPLY

    @staticmethod
    async def reply_or_fallback(messages: List[dict], client) -> str:
        """Like generate_reply, but upstream failures become the canned contact reply."""
        try:
            return await AIChatService.generate_reply(messages, client)
        except UpstreamError as e:
            logger.warning("AI chat falling back: %s", e)
            return FALLBACK_REPLY
