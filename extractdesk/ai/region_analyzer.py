from collections.abc import Sequence
from dataclasses import dataclass, field

from extractdesk.ai.client_base import BaseAiClient
from extractdesk.ai.prompt_loader import load_base_policy, load_prompt_template
from extractdesk.ai.service_base import AiService
from extractdesk.documents.models import DocType
from extractdesk.logging.logger import Log


@dataclass(frozen=True)
class RegionResult:
    found: bool
    data: dict[str, object] = field(default_factory=dict)

    @classmethod
    def not_found(cls) -> "RegionResult":
        return cls(found=False, data={})


class RegionAnalyzer(AiService):
    """Targeted re-extraction over a user-selected span. Never raises."""

    operation = "region analysis"

    def __init__(self, *, client: BaseAiClient, model: str, temperature: float = 0.0) -> None:
        super().__init__(client=client, model=model, temperature=temperature)
        self._template = load_prompt_template("region_prompt")

    async def analyze(
        self,
        text_region: str,
        target_fields: Sequence[str],
        doc_type: DocType,
    ) -> RegionResult:
        if not target_fields:
            return RegionResult.not_found()
        prompt = self._template.format(
            base_policy=load_base_policy(doc_type),
            target_fields=", ".join(target_fields),
            text_region=text_region,
        )
        try:
            parsed = await self._complete_json(prompt)
        except Exception as exc:
            Log.warning(f"Region analysis failed, treating as not found: {exc}")
            return RegionResult.not_found()

        data = parsed.get("data")
        if not parsed.get("found") or not isinstance(data, dict):
            return RegionResult.not_found()
        return RegionResult(found=True, data=dict(data))
