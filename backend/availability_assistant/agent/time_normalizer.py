from datetime import datetime
from typing import Any, List, Optional
import json

from langchain_core.language_models.chat_models import BaseChatModel
from langchain_core.messages import BaseMessage, HumanMessage, SystemMessage
from pydantic import BaseModel

from .prompts import BOOKING_INPUT_PROMPT, TIME_FORMAT_PROMPT
from ..models import NormalizedBooking
from ..utils.config import settings
from ..utils.logger import logger
from ..tools.timezone import TimezoneManager
from ..tools.validation import BookingValidator


class NormalizationError(Exception):
    """The language model reply could not be turned into a booking."""


def extract_json_payload(text: str) -> Any:
    """
    Decode the first JSON object or array in a model reply.
    Surrounding prose and code fences are ignored.
    """
    text = text.strip()
    positions = [index for index in (text.find("{"), text.find("[")) if index != -1]
    if not positions:
        raise NormalizationError("Could not find JSON in the language model response")

    try:
        value, _ = json.JSONDecoder().raw_decode(text[min(positions):])
    except json.JSONDecodeError as e:
        raise NormalizationError(f"Invalid JSON in the language model response: {e}") from e

    return value


def format_current_date(now: datetime) -> str:
    """e.g. "Monday, May 12, 2025, 02:30 PM" """
    return now.strftime("%A, %B %d, %Y, %I:%M %p")


def _response_text(content: Any) -> str:
    if isinstance(content, str):
        return content
    if isinstance(content, list):
        parts = []
        for part in content:
            if isinstance(part, str):
                parts.append(part)
            elif isinstance(part, dict) and part.get("type") == "text":
                parts.append(part.get("text", ""))
        return "".join(parts)
    return str(content)


class TimeNormalizer:
    def __init__(self, llm: BaseChatModel, timezone: Optional[str] = None):
        self.llm = llm
        self.timezone = timezone or settings.business_timezone
        self.validator = BookingValidator(self.timezone)

    def build_messages(self, payload: Any, now: Optional[datetime] = None) -> List[BaseMessage]:
        if now is None:
            now = datetime.now(TimezoneManager.get_timezone(self.timezone))

        if isinstance(payload, BaseModel):
            payload = payload.model_dump()
        elif isinstance(payload, list):
            payload = [item.model_dump() if isinstance(item, BaseModel) else item for item in payload]

        system_prompt = TIME_FORMAT_PROMPT.format(
            business_name=settings.business_name,
            business_city=settings.business_city,
            timezone=self.timezone,
            current_date=format_current_date(now),
        )
        user_prompt = BOOKING_INPUT_PROMPT.format(booking_json=json.dumps(payload))

        return [SystemMessage(content=system_prompt), HumanMessage(content=user_prompt)]

    async def normalize(self, payload: Any, now: Optional[datetime] = None) -> NormalizedBooking:
        messages = self.build_messages(payload, now)

        try:
            response = await self.llm.ainvoke(messages)
        except Exception as e:
            logger.error(f"Language model call failed: {e}")
            raise NormalizationError(f"Language model call failed: {e}") from e

        completion = _response_text(response.content)

        try:
            parsed = extract_json_payload(completion)
        except NormalizationError:
            logger.error(f"Raw model output: {completion[:500]}")
            raise

        if isinstance(parsed, list):
            if not parsed:
                raise NormalizationError("Language model returned an empty booking list")
            if len(parsed) > 1:
                logger.warning(f"Received {len(parsed)} bookings, only the first one is checked")
            parsed = parsed[0]

        result = self.validator.validate_record(parsed)
        if not result.is_valid:
            logger.error(f"Normalized booking rejected ({result.error_type}): {result.message}")
            raise NormalizationError(result.message)

        booking = result.booking
        logger.info(f"Normalized booking: {booking.start_time.isoformat()} -> {booking.end_time.isoformat()} ({booking.duration} min)")
        return booking
