"""
Utilities to robustly extract and parse JSON from LLM responses.

Model output often arrives wrapped in markdown fences, surrounded by prose,
or with comments and trailing commas. parse_json_from_ai() tries three
increasingly aggressive strategies before giving up.
"""
import json
import logging
import re
from typing import Any, Optional

from core.errors import JsonParseError

logger = logging.getLogger(__name__)

PREVIEW_CHARS = 500

FENCED_BLOCK_RE = re.compile(r'```(?:json)?\s*([\s\S]*?)\s*```', re.IGNORECASE)
FENCE_MARKER_RE = re.compile(r'```(?:json)?', re.IGNORECASE)
FENCE_OPEN_RE = re.compile(r'```(?:json)?\s*', re.IGNORECASE)
FENCE_CLOSE_RE = re.compile(r'\s*```')
OBJECT_RE = re.compile(r'\{[\s\S]*\}')
# `//` not preceded by ':' so URLs inside string values survive
LINE_COMMENT_RE = re.compile(r'(?<!:)//[^\n]*')
TRAILING_COMMA_RE = re.compile(r',\s*([\]}])')


def clean_json_response(response: Optional[str]) -> str:
    """Remove code fences and slice out the most likely JSON object."""
    cleaned = (response or '').strip()

    # BOM and unicode line/paragraph separators
    if cleaned.startswith('\ufeff'):
        cleaned = cleaned[1:]
    cleaned = cleaned.replace('\u2028', '').replace('\u2029', '')

    if '```' in cleaned:
        match = FENCED_BLOCK_RE.search(cleaned)
        if match and match.group(1):
            cleaned = match.group(1).strip()
        else:
            cleaned = FENCE_MARKER_RE.sub('', cleaned).strip()

    first_brace = cleaned.find('{')
    last_brace = cleaned.rfind('}')
    if first_brace != -1 and last_brace > first_brace:
        cleaned = cleaned[first_brace:last_brace + 1]

    return cleaned.strip()


def try_fix_json(text: Optional[str]) -> str:
    """Apply heuristic repairs: fences, comments, trailing commas."""
    fixed = (text or '').strip()

    fixed = FENCE_OPEN_RE.sub('', fixed)
    fixed = FENCE_CLOSE_RE.sub('', fixed)

    match = OBJECT_RE.search(fixed)
    if match:
        fixed = match.group(0)

    fixed = LINE_COMMENT_RE.sub('', fixed)
    fixed = TRAILING_COMMA_RE.sub(r'\1', fixed)

    return fixed.strip()


def parse_json_from_ai(response: Optional[str]) -> Any:
    """
    Parse JSON from an LLM response with multiple fallbacks.

    Args:
        response: Raw completion text

    Returns:
        The decoded JSON value

    Raises:
        JsonParseError: when direct, cleaned and repaired parses all fail
    """
    original = response if response is not None else ''

    # 1) Direct parse
    try:
        return json.loads(original)
    except json.JSONDecodeError:
        pass

    # 2) Strip fences / slice the object region
    try:
        return json.loads(clean_json_response(original))
    except json.JSONDecodeError:
        pass

    # 3) Heuristic repairs on the original text
    try:
        return json.loads(try_fix_json(original))
    except json.JSONDecodeError as e:
        preview = original[:PREVIEW_CHARS]
        logger.debug(f"[json_utils] All recovery strategies failed: {e}")
        raise JsonParseError(preview=preview, parser_error=str(e)) from e
