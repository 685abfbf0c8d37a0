"""
Cleanup of Gemini text before JSON parsing.
"""

import json
import logging
import re
from typing import Any, List

from fastapi import HTTPException

from app.modules.generation.models import MAX_KEY_POINTS

logger = logging.getLogger(__name__)

FENCE_OPEN = re.compile(r"^```(?:json)?\s*", re.IGNORECASE)
FENCE_CLOSE = re.compile(r"\s*```$")
TRAILING_COMMA = re.compile(r",(\s*[}\]])")
# Control characters other than tab, newline and carriage return
CONTROL_CHARS = re.compile(r"[\x00-\x08\x0b\x0c\x0e-\x1f\x7f]")


def strip_code_fences(text: str) -> str:
    text = FENCE_OPEN.sub("", text.strip())
    return FENCE_CLOSE.sub("", text).strip()


def repair_json(text: str) -> str:
    """Drop trailing commas and stray control characters"""
    return CONTROL_CHARS.sub("", TRAILING_COMMA.sub(r"\1", text))


def parse_json_response(text: str, repair: bool = False) -> Any:
    """Parse a JSON reply, unwrapping code fences; 502 when it is not JSON.

    Literal newlines inside strings are accepted (strict=False).
    """
    cleaned = strip_code_fences(text)
    if repair:
        cleaned = repair_json(cleaned)
    try:
        return json.loads(cleaned, strict=False)
    except ValueError:
        logger.error(f"Unparseable AI response: {cleaned[:500]}")
        raise HTTPException(status_code=502, detail="AI returned invalid JSON")


def fallback_key_points(text: str) -> List[str]:
    return [line.strip() for line in text.splitlines() if line.strip()][:MAX_KEY_POINTS]


def parse_key_points(text: str, crafted: str) -> List[str]:
    """JSON array of strings from the reply, else the first lines of the crafted text"""
    try:
        points = json.loads(strip_code_fences(text), strict=False)
    except ValueError:
        return fallback_key_points(crafted)
    if not isinstance(points, list):
        return fallback_key_points(crafted)
    return [str(point).strip() for point in points if str(point).strip()]
