"""
Turns completion outcomes into task results.

JSON tasks expect the assistant content to be a JSON object; text tasks use
the content as-is after trimming. Any failure yields the task's fallback.
"""
import json
import logging
import re
from typing import Any, Dict

from .errors import ParseError
from .schemas import CompletionOutcome, TaskFailure, TaskSuccess

logger = logging.getLogger(__name__)

_FENCE_RE = re.compile(r"^```(?:json)?\s*([\s\S]*?)\s*```$", re.IGNORECASE)


def parse_json_object(text: str) -> Dict[str, Any]:
    """Decode assistant content as a JSON object, tolerating one code fence."""
    candidate = text.strip()
    fence = _FENCE_RE.match(candidate)
    if fence:
        candidate = fence.group(1)
    try:
        value = json.loads(candidate)
    except (ValueError, RecursionError) as e:
        # oversized integers raise ValueError, deep nesting RecursionError
        reason = e.msg if isinstance(e, json.JSONDecodeError) else (str(e) or type(e).__name__)
        raise ParseError(f"Response is not valid JSON: {reason}", details=text) from e
    if not isinstance(value, dict):
        raise ParseError(f"Expected a JSON object, got {type(value).__name__}", details=text)
    return value


def interpret_json(task: str, outcome: CompletionOutcome, fallback: Dict[str, Any]):
    if not outcome.success:
        logger.error(f"{task} failed: {outcome.error}")
        return TaskFailure[Dict[str, Any]](error=outcome.error, error_type=outcome.error_type, fallback=fallback)
    try:
        data = parse_json_object(outcome.content)
    except ParseError as e:
        logger.error(f"{task} returned unparseable content: {e.message}")
        return TaskFailure[Dict[str, Any]](error=e.message, error_type=e.error_type, fallback=fallback)
    return TaskSuccess[Dict[str, Any]](data=data, raw_text=outcome.content)


def interpret_text(task: str, outcome: CompletionOutcome, fallback: str):
    if not outcome.success:
        logger.error(f"{task} failed: {outcome.error}")
        return TaskFailure[str](error=outcome.error, error_type=outcome.error_type, fallback=fallback)
    text = outcome.content.strip()
    if not text:
        logger.error(f"{task} returned empty content")
        return TaskFailure[str](error="Model returned empty content", error_type="upstream_shape", fallback=fallback)
    return TaskSuccess[str](data=text, raw_text=outcome.content)
