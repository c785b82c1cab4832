from extractdesk.ai.client_base import BaseAiClient
from extractdesk.ai.json_parsing import parse_json_object
from extractdesk.logging.logger import Log

_MAX_TEMPERATURE = 0.2


class AiService:
    """Shared plumbing for one collaborator contract: model, temperature, logging."""

    operation = "ai"

    def __init__(self, *, client: BaseAiClient, model: str, temperature: float = 0.0) -> None:
        self._client = client
        self._model = model
        self._temperature = max(0.0, min(_MAX_TEMPERATURE, temperature))

    @property
    def model(self) -> str:
        return self._model

    async def _complete(
        self,
        user_prompt: str,
        *,
        system_prompt: str = "",
        json_mode: bool = False,
        model: str | None = None,
    ) -> str:
        Log.debug(f"{self.operation} prompt:\n{user_prompt}")
        raw = await self._client.create_chat_completion(
            model=model or self._model,
            temperature=self._temperature,
            system_prompt=system_prompt,
            user_prompt=user_prompt,
            json_mode=json_mode,
        )
        Log.debug(f"{self.operation} raw response:\n{raw}")
        return raw

    async def _complete_json(
        self,
        user_prompt: str,
        *,
        system_prompt: str = "",
        model: str | None = None,
    ) -> dict[str, object]:
        raw = await self._complete(
            user_prompt, system_prompt=system_prompt, json_mode=True, model=model
        )
        return parse_json_object(raw)
