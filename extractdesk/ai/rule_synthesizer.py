import json
from collections.abc import Mapping

from extractdesk.ai.client_base import BaseAiClient
from extractdesk.ai.prompt_loader import load_prompt_template
from extractdesk.ai.service_base import AiService
from extractdesk.logging.logger import Log
from extractdesk.rules.models import ExtractionSkill, RuleDraft, SkillCategory


def _build_skill(raw: object) -> ExtractionSkill | None:
    if not isinstance(raw, Mapping):
        return None
    name = str(raw.get("name") or "").strip()
    if not name:
        return None
    return ExtractionSkill(
        name=name,
        description=str(raw.get("description") or ""),
        category=SkillCategory.parse(raw.get("category")),
        example=str(raw.get("example") or ""),
        output_example=str(raw.get("outputExample") or ""),
    )


def _schema_text(raw: object) -> str:
    if isinstance(raw, str):
        return raw
    return json.dumps(raw if raw is not None else {}, ensure_ascii=False, indent=2)


class RuleSynthesizer(AiService):
    """Authors rule content from a free-text description."""

    operation = "rule synthesis"

    def __init__(self, *, client: BaseAiClient, model: str, temperature: float = 0.0) -> None:
        super().__init__(client=client, model=model, temperature=temperature)
        self._rule_template = load_prompt_template("rule_synthesis_prompt")
        self._skill_template = load_prompt_template("skill_optimization_prompt")

    async def synthesize(self, description: str) -> RuleDraft:
        """Draft ``{systemInstruction, skills, schema}`` for *description*.

        Raises:
            AiServiceError: on any collaborator or parse failure.
        """
        parsed = await self._complete_json(self._rule_template.format(description=description))
        raw_skills = parsed.get("skills")
        skills: list[ExtractionSkill] = []
        for item in raw_skills if isinstance(raw_skills, list) else []:
            skill = _build_skill(item)
            if skill is not None:
                skills.append(skill)
        draft = RuleDraft(
            system_instruction=str(parsed.get("systemInstruction") or ""),
            schema=_schema_text(parsed.get("schema")),
            skills=tuple(skills),
        )
        Log.info(f"Synthesized rule draft with {len(draft.skills)} skills")
        return draft

    async def optimize_skill_description(self, description: str, example: str = "") -> str:
        """Rewrite one skill description; returns the input unchanged on failure."""
        example_context = f'上下文（文档中的示例文本）： "{example}"' if example else ""
        prompt = self._skill_template.format(description=description, example_context=example_context)
        try:
            reply = await self._complete(prompt)
        except Exception as exc:
            Log.warning(f"Skill optimisation failed, keeping original description: {exc}")
            return description
        return reply.strip() or description
