import json
from collections.abc import Mapping

from extractdesk.ai.client_base import BaseAiClient
from extractdesk.ai.exceptions import AiResponseError
from extractdesk.ai.prompt_loader import load_prompt_template
from extractdesk.ai.service_base import AiService
from extractdesk.rules.models import ExtractionRule


class InstructionRewriter(AiService):
    """Rewrites a rule's system instruction from one corrected run."""

    operation = "instruction rewrite"

    def __init__(
        self,
        *,
        client: BaseAiClient,
        model: str,
        temperature: float = 0.0,
        sample_chars: int = 2000,
    ) -> None:
        super().__init__(client=client, model=model, temperature=temperature)
        self._sample_chars = sample_chars
        self._template = load_prompt_template("rewrite_prompt")

    async def rewrite(
        self,
        rule: ExtractionRule,
        sample_text: str,
        incorrect: Mapping[str, object],
        corrected: Mapping[str, object],
    ) -> str:
        """Return the new instruction text.

        Raises:
            AiServiceError: on collaborator failure or an empty reply.
        """
        prompt = self._template.format(
            sample_text=sample_text[: self._sample_chars],
            current_instruction=rule.system_instruction,
            incorrect=json.dumps(dict(incorrect), ensure_ascii=False),
            corrected=json.dumps(dict(corrected), ensure_ascii=False),
        )
        reply = (await self._complete(prompt)).strip()
        if not reply:
            raise AiResponseError("AI returned an empty instruction")
        return reply
