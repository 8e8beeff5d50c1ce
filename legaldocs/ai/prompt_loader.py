import json
from pathlib import Path

from legaldocs.ai.exceptions import AIError

_DEFAULT_PROMPT_DIR = Path(__file__).parent / "prompts"


def load_prompt_template(name: str, prompt_dir: Path | None = None) -> str:
    """Load ``{name}_prompt.txt`` from the prompt directory.

    Raises:
        AIError: if the file cannot be read.
    """
    path = (prompt_dir or _DEFAULT_PROMPT_DIR) / f"{name}_prompt.txt"
    try:
        return path.read_text(encoding="utf-8")
    except OSError as exc:
        raise AIError(f"Failed to load prompt template {path.name}: {exc}") from exc


def load_json_schema(name: str, prompt_dir: Path | None = None) -> dict[str, object]:
    """Load and parse ``{name}_schema.json`` from the prompt directory.

    Raises:
        AIError: if the file cannot be read or is not a JSON object.
    """
    path = (prompt_dir or _DEFAULT_PROMPT_DIR) / f"{name}_schema.json"
    try:
        schema = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as exc:
        raise AIError(f"Failed to load JSON schema {path.name}: {exc}") from exc
    if not isinstance(schema, dict):
        raise AIError(f"JSON schema {path.name} must be an object")
    return schema
