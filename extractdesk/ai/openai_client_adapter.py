import httpx
import openai

from extractdesk.ai.client_base import BaseAiClient
from extractdesk.ai.exceptions import AiNetworkError, AiResponseError


class OpenAIClientAdapter(BaseAiClient):
    """Async client for OpenAI and OpenAI-compatible chat APIs."""

    def __init__(
        self,
        *,
        api_key: str,
        timeout_seconds: int,
        base_url: str | None = None,
    ) -> None:
        self._client = openai.AsyncOpenAI(
            api_key=api_key,
            timeout=timeout_seconds,
            base_url=base_url,
        )

    async def create_chat_completion(
        self,
        *,
        model: str,
        temperature: float,
        system_prompt: str,
        user_prompt: str,
        json_mode: bool,
    ) -> str:
        messages: list[dict[str, str]] = []
        if system_prompt:
            messages.append({"role": "system", "content": system_prompt})
        messages.append({"role": "user", "content": user_prompt})
        extra: dict[str, object] = {}
        if json_mode:
            extra["response_format"] = {"type": "json_object"}

        try:
            response = await self._client.chat.completions.create(
                model=model,
                temperature=temperature,
                messages=messages,  # type: ignore[arg-type]
                **extra,  # type: ignore[arg-type]
            )
        except (openai.APIConnectionError, httpx.ConnectError, httpx.TimeoutException) as exc:
            raise AiNetworkError(f"AI provider network error: {exc}") from exc
        except openai.APIError as exc:
            raise AiNetworkError(f"AI provider API error: {exc}") from exc

        if not response.choices:
            raise AiResponseError("AI returned no choices")
        content = response.choices[0].message.content
        if content is None or not content.strip():
            raise AiResponseError("AI returned empty response")
        return content
