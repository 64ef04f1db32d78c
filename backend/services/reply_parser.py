"""
Assistant reply parsing

Turns the free text of an assistant reply into either
- Ready: a ```json fenced block with `"ready": true` and a valid `ticketData`
- NeedsMoreInfo: the reply with any ```json fence removed

Nothing here raises on model output; anything unusable is "not ready".
"""
import json
import re
from typing import Literal, Union

from pydantic import BaseModel, ValidationError

from backend.models.schemas import ExtractionResult
from backend.utils.logger import get_logger

logger = get_logger(__name__)

JSON_FENCE = re.compile(r"```json\s*([\s\S]*?)\s*```")
JSON_FENCE_BLOCK = re.compile(r"```json[\s\S]*?```")


class Ready(BaseModel):
    """Reply carries a complete ticket payload"""
    kind: Literal["ready"] = "ready"
    payload: ExtractionResult
    text: str = ""


class NeedsMoreInfo(BaseModel):
    """Reply is a clarifying question or other conversational text"""
    kind: Literal["needs_more_info"] = "needs_more_info"
    text: str


ParsedReply = Union[Ready, NeedsMoreInfo]


def strip_json_blocks(content: str) -> str:
    """Remove every ```json fenced block and trim"""
    return JSON_FENCE_BLOCK.sub("", content).strip()


def parse_reply(content: str) -> ParsedReply:
    """
    Classify an assistant reply

    Args:
        content: Raw assistant reply text

    Returns:
        Ready with the validated extraction, or NeedsMoreInfo with the
        conversational text
    """
    text = strip_json_blocks(content)
    match = JSON_FENCE.search(content)
    if not match:
        return NeedsMoreInfo(text=text)

    try:
        parsed = json.loads(match.group(1))
    except json.JSONDecodeError as e:
        logger.warning(f"Failed to parse AI JSON: {e}")
        return NeedsMoreInfo(text=text)

    if not isinstance(parsed, dict) or not parsed.get("ready"):
        return NeedsMoreInfo(text=text)

    ticket_data = parsed.get("ticketData")
    if not isinstance(ticket_data, dict) or not ticket_data:
        logger.warning("AI JSON marked ready without ticketData")
        return NeedsMoreInfo(text=text)

    try:
        payload = ExtractionResult.model_validate(ticket_data)
    except ValidationError as e:
        logger.warning(f"AI ticketData failed validation: {e.error_count()} errors")
        return NeedsMoreInfo(text=text)

    return Ready(payload=payload, text=text)
