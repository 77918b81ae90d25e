"""
Robust JSON parsing utilities for LLM responses.

Chat models asked for a JSON verdict often wrap it in prose or
markdown, add trailing commas, or report a percentage instead of a
fraction. These helpers recover the document where possible.
"""
from __future__ import annotations

import json
import logging
import re
from typing import Any

logger = logging.getLogger(__name__)


def extract_json_from_text(text: str) -> str:
    """
    Extract JSON from text that may contain markdown or other content.

    Handles:
    - ```json ... ``` code blocks
    - ``` ... ``` code blocks
    - JSON objects embedded in other text

    Returns:
        Extracted JSON string (may still need parsing)
    """
    text = text.strip()

    for pattern in (r"```json\s*([\s\S]*?)\s*```", r"```\s*([\s\S]*?)\s*```"):
        match = re.search(pattern, text, re.IGNORECASE)
        if match:
            return match.group(1).strip()

    match = re.search(r"(\{[\s\S]*\})", text)
    if match:
        return match.group(1)

    return text


def clean_json_string(text: str) -> str:
    """
    Clean common JSON issues from LLM output.

    Removes JavaScript-style comments and trailing commas before
    closing braces or brackets.
    """
    text = re.sub(r"(?<!:)//[^\n]*", "", text)
    text = re.sub(r"/\*[\s\S]*?\*/", "", text)
    text = re.sub(r",\s*([\}\]])", r"\1", text)
    return text.strip()


def parse_json_safely(
    text: str,
    default: dict[str, Any] | None = None,
) -> dict[str, Any]:
    """
    Parse JSON with multiple fallback strategies.

    Tries in order:
    1. Direct JSON parsing
    2. Extract from markdown + parse
    3. Clean common issues + parse
    4. Return default

    Args:
        text: Text to parse as JSON
        default: Default value if parsing fails

    Returns:
        Parsed dict or default
    """
    if default is None:
        default = {}

    if not text or not text.strip():
        return default

    try:
        result = json.loads(text)
        if isinstance(result, dict):
            return result
        logger.warning(f"JSON parsed but not a dict: {type(result)}")
        return default
    except json.JSONDecodeError:
        pass

    extracted = extract_json_from_text(text)
    if extracted != text:
        try:
            result = json.loads(extracted)
            if isinstance(result, dict):
                return result
        except json.JSONDecodeError:
            pass

    cleaned = clean_json_string(extracted)
    try:
        result = json.loads(cleaned)
        if isinstance(result, dict):
            return result
    except json.JSONDecodeError:
        pass

    logger.warning(f"Failed to parse JSON after all strategies: {text[:100]}...")
    return default


def coerce_probability(value: Any) -> float | None:
    """
    Read a probability that may be a fraction, a percentage or a string.

    "85%", 85 and 0.85 all become 0.85. The result is clamped to [0, 1];
    None when the value is not numeric.
    """
    if isinstance(value, bool) or value is None:
        return None
    if isinstance(value, str):
        raw = value.strip()
        percent = raw.endswith("%")
        try:
            number = float(raw.rstrip("%").strip())
        except ValueError:
            return None
        if percent:
            number /= 100
    elif isinstance(value, (int, float)):
        number = float(value)
    else:
        return None

    if number > 1:
        number /= 100
    return min(max(number, 0.0), 1.0)


def parse_detection_json(text: str) -> dict[str, Any]:
    """
    Parse a detection verdict produced by a chat model.

    Returns a dict with probability (float, clamped), assessment (str or
    None) and burstiness (float or None). Raises ValueError when no
    usable probability is found.
    """
    result = parse_json_safely(text)
    probability = coerce_probability(
        result.get("probability", result.get("aiProbability", result.get("ai_probability")))
    )
    if probability is None:
        raise ValueError(f"Detection verdict has no probability: {text[:100]!r}")

    burstiness = result.get("burstiness")
    if isinstance(burstiness, bool) or not isinstance(burstiness, (int, float)):
        burstiness = None
    assessment = result.get("assessment")

    return {
        "probability": probability,
        "assessment": str(assessment) if assessment is not None else None,
        "burstiness": float(burstiness) if burstiness is not None else None,
    }


__all__ = [
    "clean_json_string",
    "coerce_probability",
    "extract_json_from_text",
    "parse_detection_json",
    "parse_json_safely",
]
