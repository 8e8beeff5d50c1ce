import json
from pathlib import Path
from typing import ClassVar

from legaldocs.ai.client_base import BaseChatClient
from legaldocs.ai.exceptions import AIError
from legaldocs.ai.models import EntitySet
from legaldocs.ai.prompt_loader import load_json_schema, load_prompt_template
from legaldocs.ai.response_parser import parse_json_object
from legaldocs.ai.validator import build_entities
from legaldocs.executors.base import StageExecutor
from legaldocs.executors.exceptions import ModelError
from legaldocs.executors.models import ProgressReporter, no_progress


class EntityExtractionExecutor(StageExecutor[str, EntitySet]):
    """Pulls people, organizations, dates, amounts and locations out of text."""

    name: ClassVar[str] = "entity_extraction"

    def __init__(
        self,
        *,
        client: BaseChatClient,
        model: str,
        temperature: float = 0.1,
        max_input_chars: int = 8000,
        prompt_dir: Path | None = None,
    ) -> None:
        self._client = client
        self._model = model
        self._temperature = temperature
        self._max_input_chars = max_input_chars
        self._prompt_template = load_prompt_template("entities", prompt_dir)
        self._json_schema = load_json_schema("entities", prompt_dir)

    def run(self, input_: str, progress: ProgressReporter = no_progress) -> EntitySet:
        if not input_.strip():
            progress(1.0, "No text, no entities")
            return EntitySet()

        prompt = self._prompt_template.format(
            json_schema=json.dumps(self._json_schema, indent=2),
            document_text=input_[: self._max_input_chars],
        )
        progress(0.1, "Extracting entities")
        try:
            raw = self._client.create_chat_completion(
                model=self._model,
                temperature=self._temperature,
                system_prompt="You extract named entities from legal documents. Answer with JSON only.",
                user_prompt=prompt,
                json_schema=self._json_schema,
            )
            entities = build_entities(parse_json_object(raw))
        except AIError as exc:
            raise ModelError(f"Entity extraction failed: {exc}") from exc

        progress(1.0, "Entities extracted")
        return entities
