"""
JSON Parser utility for extracting a JSON object from LLM output.

Models asked for JSON still occasionally wrap it in markdown code blocks,
add prose around it, or leave trailing commas. This module tries a fixed
sequence of strategies before giving up.
"""
import json
import re
import logging
from typing import Any, Dict, Optional

from sitesmith.core.exceptions import MalformedResponseError

logger = logging.getLogger(__name__)


def parse_llm_json_object(response: Optional[str]) -> Dict[str, Any]:
    """
    Parse LLM response as a JSON object.

    Strategies, in order:
    1. Direct JSON parse
    2. Extract JSON from markdown code blocks (```json ... ```)
    3. Extract JSON from generic code blocks (``` ... ```)
    4. Outermost {...} span, raw and then with trailing commas removed

    Args:
        response: Raw LLM response string

    Returns:
        The decoded JSON object

    Raises:
        MalformedResponseError: If no strategy yields a JSON object
    """
    if response is not None and not isinstance(response, str):
        raise MalformedResponseError(
            f"Model response content is {type(response).__name__}, not text"
        )
    if response is None or not response.strip():
        raise MalformedResponseError("Model returned an empty response")

    errors = []

    candidates = [("Direct parse", response)]

    json_block_match = re.search(r'```json\s*([\s\S]*?)\s*```', response, re.IGNORECASE)
    if json_block_match:
        candidates.append(("JSON code block", json_block_match.group(1)))

    generic_block_match = re.search(r'```\s*([\s\S]*?)\s*```', response)
    if generic_block_match:
        candidates.append(("Generic code block", generic_block_match.group(1)))

    json_object_match = re.search(r'\{[\s\S]*\}', response)
    if json_object_match:
        json_str = json_object_match.group(0)
        candidates.append(("Extracted object", json_str))
        candidates.append(("Cleaned object", _clean_json_string(json_str)))

    for strategy, text in candidates:
        try:
            data = json.loads(text)
        except json.JSONDecodeError as e:
            errors.append(f"{strategy} failed: {e}")
            continue
        if isinstance(data, dict):
            return data
        errors.append(f"{strategy} yielded {type(data).__name__}, not an object")

    logger.error(f"JSON parsing failed after all strategies. Errors: {errors}")
    logger.debug(f"Original response (first 500 chars): {response[:500]}")

    raise MalformedResponseError("Model response is not a JSON object")


def _clean_json_string(json_str: str) -> str:
    """
    Clean common JSON formatting issues from LLM output.

    Args:
        json_str: Raw JSON string to clean

    Returns:
        Cleaned JSON string
    """
    # Remove trailing commas before ] or }
    cleaned = re.sub(r',\s*([}\]])', r'\1', json_str)
    return cleaned.strip()
