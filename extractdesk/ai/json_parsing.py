import json

from extractdesk.ai.exceptions import AiResponseError


def strip_code_fences(raw: str) -> str:
    cleaned = raw.strip()
    if cleaned.startswith("```"):
        lines = cleaned.splitlines()
        if lines and lines[0].startswith("```"):
            lines = lines[1:]
        if lines and lines[-1].strip() == "```":
            lines = lines[:-1]
        cleaned = "\n".join(lines)
    return cleaned.strip()


def parse_json_object(raw: str) -> dict[str, object]:
    """Parse a collaborator reply that must be a JSON object.

    Markdown code fences around the payload are tolerated.

    Raises:
        AiResponseError: if the reply is not valid JSON or not an object.
    """
    try:
        parsed = json.loads(strip_code_fences(raw))
    except json.JSONDecodeError as exc:
        raise AiResponseError(f"Invalid JSON response: {exc}") from exc
    if not isinstance(parsed, dict):
        raise AiResponseError("JSON response must be an object")
    return parsed
