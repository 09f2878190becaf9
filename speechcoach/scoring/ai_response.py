"""
AI Response Parser
speechcoach/scoring/ai_response.py

Turns the raw text returned by the language-analysis model into the
analysis mapping consumed by AIResultMapper.

Accepted shapes:
    {"analysis": {"tricolon": {"score": 6, ...}, ...}}
    ```json
    {"analysis": {...}}
    ```
"""

import json
import re
from typing import Any, Dict

import structlog

from speechcoach.core.exceptions import AIResponseParseError

logger = structlog.get_logger(__name__)

_FENCED_BLOCK = re.compile(r"```(?:json)?\s*([\s\S]*?)```", re.IGNORECASE)


def _extract_json_text(text: str) -> str:
    trimmed = text.strip()
    if trimmed.startswith("{"):
        return trimmed
    match = _FENCED_BLOCK.search(trimmed)
    if match and match.group(1).strip():
        return match.group(1).strip()
    raise AIResponseParseError("Response is not in JSON format")


def parse_analysis_response(text: str) -> Dict[str, Any]:
    """
    Parse raw model output and return the analysis mapping.

    Raises:
        AIResponseParseError: empty text, no JSON object, invalid JSON, or a
            top-level value that is not an object.
    """
    if text is None or not text.strip():
        raise AIResponseParseError("Empty response from AI model")

    payload = _extract_json_text(text)
    try:
        data = json.loads(payload)
    except json.JSONDecodeError as e:
        logger.warning("ai_response_invalid_json", error=str(e), length=len(text))
        raise AIResponseParseError(f"Failed to parse AI response as JSON: {e}") from e

    if not isinstance(data, dict):
        raise AIResponseParseError("AI response must be a JSON object")

    analysis = data.get("analysis", data)
    if not isinstance(analysis, dict):
        raise AIResponseParseError("AI response 'analysis' must be a JSON object")

    logger.debug("ai_response_parsed", entries=len(analysis))
    return analysis
