"""Offline AI client.

Answers without network access so the desk can run end to end locally and
in tests. Register new providers in AiServicesFactory the same way.
"""

import json
from typing import ClassVar

from extractdesk.ai.client_base import BaseAiClient


class ExampleClientAdapter(BaseAiClient):
    """Returns fixed replies: ``Unknown`` for text prompts, ``{}`` for JSON ones.

    Pass *json_reply* / *text_reply* to script a different answer.
    """

    DEFAULT_JSON_REPLY: ClassVar[dict[str, object]] = {}
    DEFAULT_TEXT_REPLY: ClassVar[str] = "Unknown"

    def __init__(
        self,
        json_reply: dict[str, object] | None = None,
        text_reply: str | None = None,
    ) -> None:
        self._json_reply = json_reply if json_reply is not None else self.DEFAULT_JSON_REPLY
        self._text_reply = text_reply if text_reply is not None else self.DEFAULT_TEXT_REPLY

    async def create_chat_completion(
        self,
        *,
        model: str,
        temperature: float,
        system_prompt: str,
        user_prompt: str,
        json_mode: bool,
    ) -> str:
        _ = model, temperature, system_prompt, user_prompt
        if json_mode:
            return json.dumps(self._json_reply, ensure_ascii=False)
        return self._text_reply
