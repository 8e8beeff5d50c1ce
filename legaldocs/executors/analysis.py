import json
from pathlib import Path
from typing import ClassVar

from legaldocs.ai.client_base import BaseChatClient
from legaldocs.ai.exceptions import AIError
from legaldocs.ai.models import DocumentAnalysis
from legaldocs.ai.prompt_loader import load_json_schema, load_prompt_template
from legaldocs.ai.response_parser import parse_json_object
from legaldocs.ai.validator import build_analysis
from legaldocs.executors.base import StageExecutor
from legaldocs.executors.exceptions import EmptyInputError, ModelError
from legaldocs.executors.models import AnalysisInput, ProgressReporter, no_progress
from legaldocs.logging.logger import Log


class AnalysisExecutor(StageExecutor[AnalysisInput, DocumentAnalysis]):
    """Classifies and summarises a document with a language model."""

    name: ClassVar[str] = "analysis"

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
        self._prompt_template = load_prompt_template("analysis", prompt_dir)
        self._json_schema = load_json_schema("analysis", prompt_dir)

    def run(
        self, input_: AnalysisInput, progress: ProgressReporter = no_progress
    ) -> DocumentAnalysis:
        if not input_.text.strip():
            raise EmptyInputError("No extracted text to analyze")

        text = input_.text[: self._max_input_chars]
        if len(text) < len(input_.text):
            Log.debug(f"Analysis input truncated to {self._max_input_chars} chars")

        prompt = self._prompt_template.format(
            document_type=input_.declared_type or "unknown",
            json_schema=json.dumps(self._json_schema, indent=2),
            document_text=text,
        )
        progress(0.1, "Analyzing document")
        try:
            raw = self._client.create_chat_completion(
                model=self._model,
                temperature=self._temperature,
                system_prompt="You are a legal document analyst. Answer with JSON only.",
                user_prompt=prompt,
                json_schema=self._json_schema,
            )
            progress(0.9, "Validating analysis")
            analysis = build_analysis(parse_json_object(raw))
        except AIError as exc:
            raise ModelError(f"Analysis failed: {exc}") from exc

        progress(1.0, f"Classified as {analysis.document_type}")
        return analysis
