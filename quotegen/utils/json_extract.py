"""Best-effort JSON extraction from free text returned by the model.

The text-generation service cannot be forced to emit only JSON, so the
reply is treated as untrusted input: take the span from the first opening
bracket to the last closing bracket and parse that. Anything that does not
parse is a hard failure; no repair is attempted.
"""

import json
from typing import Any, Dict, List

from quotegen.config.errors import PlanParseError


def extract_json_object(raw_text: str) -> Dict[str, Any]:
    """Parse the outermost ``{...}`` span of *raw_text*.

    Handles markdown fences and commentary before or after the object.

    Raises:
        PlanParseError: If there is no brace pair, the span is not valid
            JSON, or it does not decode to an object.
    """
    text = raw_text or ""
    start = text.find("{")
    end = text.rfind("}")
    if start == -1 or end == -1 or end < start:
        raise PlanParseError(text, parse_error="no JSON object found in response")

    try:
        parsed = json.loads(text[start:end + 1])
    except json.JSONDecodeError as e:
        raise PlanParseError(text, parse_error=str(e)) from e

    if not isinstance(parsed, dict):
        raise PlanParseError(text, parse_error="response JSON is not an object")
    return parsed


def extract_json_array(raw_text: str) -> List[Any]:
    """Parse the outermost ``[...]`` span of *raw_text*.

    Raises:
        ValueError: If no array can be parsed. Callers decide the fallback.
    """
    text = raw_text or ""
    start = text.find("[")
    end = text.rfind("]")
    if start == -1 or end == -1 or end < start:
        raise ValueError("no JSON array found in response")

    parsed = json.loads(text[start:end + 1])
    if not isinstance(parsed, list):
        raise ValueError("response JSON is not an array")
    return parsed
