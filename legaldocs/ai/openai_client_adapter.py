import httpx
import openai

from legaldocs.ai.client_base import BaseChatClient
from legaldocs.ai.exceptions import AIError, AIProviderNetworkError


class OpenAIClientAdapter(BaseChatClient):
    """Chat client built on the OpenAI-compatible chat completions API.

    Requests structured output; the schema's ``title`` names the response format.
    """

    def __init__(
        self,
        *,
        api_key: str,
        timeout_seconds: int,
        base_url: str | None = None,
    ) -> None:
        self._client = openai.OpenAI(
            api_key=api_key,
            timeout=timeout_seconds,
            base_url=base_url,
            max_retries=0,
        )

    def create_chat_completion(
        self,
        *,
        model: str,
        temperature: float,
        system_prompt: str,
        user_prompt: str,
        json_schema: dict[str, object],
    ) -> str:
        schema_name = str(json_schema.get("title") or "structured_result")
        schema = {key: value for key, value in json_schema.items() if key != "title"}
        messages = [{"role": "user", "content": user_prompt}]
        if system_prompt:
            messages.insert(0, {"role": "system", "content": system_prompt})
        try:
            response = self._client.chat.completions.create(
                model=model,
                temperature=temperature,
                response_format={
                    "type": "json_schema",
                    "json_schema": {
                        "name": schema_name,
                        "strict": True,
                        "schema": schema,
                    },
                },
                messages=messages,  # type: ignore[arg-type]
            )
        except (openai.APIConnectionError, httpx.ConnectError, httpx.TimeoutException) as exc:
            raise AIProviderNetworkError(f"AI provider network error: {exc}") from exc
        except openai.APIError as exc:
            raise AIProviderNetworkError(f"AI provider API error: {exc}") from exc

        if not response.choices:
            raise AIError("AI returned no choices")
        content = response.choices[0].message.content
        if content is None:
            raise AIError("AI returned empty response")
        return content
