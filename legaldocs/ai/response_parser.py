import json
from typing import Any

from legaldocs.ai.exceptions import AIResponseValidationError


def parse_json_object(raw: str) -> dict[str, Any]:
    """Parse a model response into a JSON object, tolerating ``` code fences."""
    cleaned = raw.strip()
    if cleaned.startswith("```"):
        lines = cleaned.splitlines()
        if lines and lines[0].startswith("```"):
            lines = lines[1:]
        if lines and lines[-1].strip() == "```":
            lines = lines[:-1]
        cleaned = "\n".join(lines)

    try:
        parsed = json.loads(cleaned)
    except json.JSONDecodeError as exc:
        raise AIResponseValidationError(f"Invalid JSON response: {exc}") from exc

    if not isinstance(parsed, dict):
        raise AIResponseValidationError("JSON response must be an object")
    return parsed
