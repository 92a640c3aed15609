"""
Text utilities for model responses.

Handles JSON extraction from free-form completions.
"""
import json
import re
from typing import Any


def strip_code_fences(text: str) -> str:
    """
    Remove a surrounding markdown code fence, if any.

    Args:
        text: Response text that may be wrapped in ```json ... ```

    Returns:
        Inner text without the fence
    """
    text = (text or "").strip()
    match = re.match(r'^```(?:json)?\s*\n?(.*?)\n?```$', text, re.DOTALL)
    if match:
        return match.group(1).strip()
    return text


def extract_json(content: str) -> Any:
    """
    Extract a JSON value from a model response.

    This handles common cases like:
    - JSON wrapped in markdown code blocks
    - JSON with extra text before/after

    Args:
        content: Raw response content

    Returns:
        Parsed JSON value

    Raises:
        json.JSONDecodeError: If no valid JSON found
    """
    content = content or ""

    # Try direct JSON parse first
    try:
        return json.loads(strip_code_fences(content))
    except json.JSONDecodeError:
        pass

    # Try to find a JSON object in the content
    json_match = re.search(r'\{.*\}', content, re.DOTALL)
    if json_match:
        try:
            return json.loads(json_match.group(0))
        except json.JSONDecodeError:
            pass

    raise json.JSONDecodeError(
        f"Could not extract valid JSON from content: {content[:200]}...",
        content,
        0
    )
