"""Offline chat client.

Returns canned, schema-conforming JSON so the pipeline can run end to end
without an AI provider (local development and tests).
"""

import json
from typing import ClassVar

from legaldocs.ai.client_base import BaseChatClient
from legaldocs.ai.exceptions import AIError


class ExampleClientAdapter(BaseChatClient):
    """Returns a fixed response chosen by the requested schema's title."""

    RESPONSES: ClassVar[dict[str, dict[str, object]]] = {
        "document_analysis": {
            "document_type": "Contract",
            "summary": "Agreement between two parties setting out obligations and payment terms.",
            "key_entities": ["Party A", "Party B"],
            "legal_implications": ["Obligations are binding once signed."],
            "recommended_actions": ["Review termination clauses before signing."],
            "confidence": 0.85,
        },
        "entity_set": {
            "people": [],
            "organizations": ["Party A", "Party B"],
            "dates": [],
            "amounts": [],
            "locations": [],
        },
    }

    def create_chat_completion(
        self,
        *,
        model: str,
        temperature: float,
        system_prompt: str,
        user_prompt: str,
        json_schema: dict[str, object],
    ) -> str:
        _ = model, temperature, system_prompt, user_prompt
        title = str(json_schema.get("title", ""))
        response = self.RESPONSES.get(title)
        if response is None:
            raise AIError(f"No example response for schema '{title}'")
        return json.dumps(response)
