"""
Structured extraction of JSON objects from free-form model output.
"""

import json
import re
from typing import Any, Dict, Optional

from news_hooks.errors import StructuredOutputError

FENCE_OPEN_RE = re.compile(r"^```[a-zA-Z]*\s*")
FENCE_CLOSE_RE = re.compile(r"\s*```$")


def strip_code_fences(text: str) -> str:
    """Removes a surrounding Markdown code block, if any."""
    cleaned = text.strip()
    cleaned = FENCE_OPEN_RE.sub("", cleaned)
    cleaned = FENCE_CLOSE_RE.sub("", cleaned)
    return cleaned


def find_json_object(text: str) -> Optional[str]:
    """Returns the first balanced {...} span, ignoring braces in strings."""
    start = text.find("{")
    while start != -1:
        depth = 0
        in_string = False
        escaped = False
        for i in range(start, len(text)):
            ch = text[i]
            if in_string:
                if escaped:
                    escaped = False
                elif ch == "\\":
                    escaped = True
                elif ch == '"':
                    in_string = False
            elif ch == '"':
                in_string = True
            elif ch == "{":
                depth += 1
            elif ch == "}":
                depth -= 1
                if depth == 0:
                    return text[start : i + 1]
        # Unbalanced from this brace; try the next one
        start = text.find("{", start + 1)
    return None


def parse_json_response(text: Optional[str]) -> Dict[str, Any]:
    """
    Parses the first top-level JSON object in LLM output.

    Raises StructuredOutputError when there is no parseable object.
    """
    if not text or not text.strip():
        raise StructuredOutputError("Empty model output")

    cleaned = strip_code_fences(text)
    candidate = find_json_object(cleaned)
    if candidate is None:
        raise StructuredOutputError("No JSON object found in model output")

    try:
        parsed = json.loads(candidate)
    except json.JSONDecodeError as e:
        raise StructuredOutputError(f"Invalid JSON in model output: {e}") from e

    if not isinstance(parsed, dict):
        raise StructuredOutputError("Model output is not a JSON object")
    return parsed
