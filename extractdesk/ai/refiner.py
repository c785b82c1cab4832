import json
from collections.abc import Mapping, Sequence

from extractdesk.ai.client_base import BaseAiClient
from extractdesk.ai.prompt_loader import load_base_policy, load_prompt_template
from extractdesk.ai.service_base import AiService
from extractdesk.documents.models import DocType
from extractdesk.feedback.models import BadCase, BadCaseType

_TYPE_LABELS: dict[BadCaseType, str] = {
    BadCaseType.MISSED: "漏提 (Missed)",
    BadCaseType.INCORRECT: "错提 (Incorrect)",
}


def format_bad_cases(bad_cases: Sequence[BadCase]) -> str:
    return "\n".join(
        f'{index}. 类型：{_TYPE_LABELS[case.type]}。相关原文："{case.text}"。备注：{case.note or "无"}'
        for index, case in enumerate(bad_cases, start=1)
    )


class FeedbackRefiner(AiService):
    """Second extraction pass driven by flagged bad cases."""

    operation = "refinement"

    def __init__(self, *, client: BaseAiClient, model: str, temperature: float = 0.0) -> None:
        super().__init__(client=client, model=model, temperature=temperature)
        self._template = load_prompt_template("refinement_prompt")

    async def refine(
        self,
        document_text: str,
        current_values: Mapping[str, object],
        bad_cases: Sequence[BadCase],
        doc_type: DocType,
    ) -> dict[str, object]:
        """Return the corrected key -> value object.

        Raises:
            AiServiceError: on any collaborator or parse failure.
        """
        prompt = self._template.format(
            base_policy=load_base_policy(doc_type),
            document_text=document_text,
            current_values=json.dumps(dict(current_values), ensure_ascii=False, indent=2),
            feedback_list=format_bad_cases(bad_cases),
        )
        return await self._complete_json(prompt)
