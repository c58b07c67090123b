"""Locating the JSON object inside an extraction service reply"""
import json
import logging
import re
from typing import Any, Optional

logger = logging.getLogger(__name__)

_CODE_FENCE_START = re.compile(r"^```(?:json)?", re.IGNORECASE)
_CODE_FENCE_END = re.compile(r"```$")
_OBJECT_SPAN = re.compile(r"\{[\s\S]*\}")


def extract_json_object(text: str) -> Optional[Any]:
    """
    Decode the JSON value embedded in a free-form model reply.

    The reply may be wrapped in a markdown code fence or surrounded by
    prose. The whole text is tried first, then the widest `{...}` span.

    Args:
        text: Raw reply text

    Returns:
        Decoded value, or None if nothing parses
    """
    text = text.strip()
    if text.startswith("```"):
        text = _CODE_FENCE_START.sub("", text).strip()
        text = _CODE_FENCE_END.sub("", text).strip()

    decoded = _loads(text)
    if decoded is not None:
        return decoded

    match = _OBJECT_SPAN.search(text)
    if not match:
        logger.info("No JSON object found in extraction reply")
        return None
    return _loads(match.group(0))


def _loads(text: str) -> Optional[Any]:
    try:
        return json.loads(text)
    except (ValueError, RecursionError):
        return None
