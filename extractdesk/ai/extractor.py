"""Primary extraction: one rule, full document text, a fresh field map."""

from collections.abc import Mapping

from extractdesk.ai.client_base import BaseAiClient
from extractdesk.ai.instructions import compile_instruction
from extractdesk.ai.prompt_loader import load_prompt_template
from extractdesk.ai.service_base import AiService
from extractdesk.documents.field_map import FieldMap, coerce_value, humanize_label
from extractdesk.documents.models import ExtractionField
from extractdesk.logging.logger import Log
from extractdesk.rules.models import ExtractionRule

DEFAULT_CONFIDENCE = 0.8
NOT_FOUND_CONFIDENCE = 0.0


def coerce_confidence(raw: object) -> float:
    """Collaborator confidence clamped into [0, 1]; 0.8 when not supplied."""
    if isinstance(raw, bool) or not isinstance(raw, (int, float)):
        return DEFAULT_CONFIDENCE
    return max(0.0, min(1.0, float(raw)))


def build_field(key: str, item: object, source_page: int = 1) -> ExtractionField:
    """Turn one top-level reply entry into an ExtractionField.

    The entry is either a bare value or ``{"value": ..., "confidence": ...}``.
    Objects without a ``"value"`` key are values themselves and become JSON text.
    """
    if isinstance(item, Mapping) and "value" in item:
        raw_value = item.get("value")
        confidence = coerce_confidence(item.get("confidence"))
    else:
        raw_value = item
        confidence = DEFAULT_CONFIDENCE
    return ExtractionField(
        key=key,
        label=humanize_label(key),
        value=coerce_value(raw_value),
        confidence=confidence,
        is_edited=False,
        source_page=source_page,
    )


class FieldExtractor(AiService):
    operation = "extraction"

    def __init__(
        self,
        *,
        client: BaseAiClient,
        model: str,
        temperature: float = 0.0,
        model_aliases: Mapping[str, str] | None = None,
    ) -> None:
        super().__init__(client=client, model=model, temperature=temperature)
        self._model_aliases = dict(model_aliases or {})
        self._template = load_prompt_template("extraction_prompt")

    def resolve_model(self, model_id: str | None) -> str:
        """Map a display model id to the provider's model name."""
        if not model_id:
            return self._model
        return self._model_aliases.get(model_id, model_id)

    async def extract(
        self,
        document_text: str,
        rule: ExtractionRule,
        model_id: str | None = None,
    ) -> FieldMap:
        """Run the rule against the document.

        Raises:
            AiServiceError: on any collaborator or parse failure.
        """
        prompt = self._template.format(document_text=document_text, schema=rule.schema)
        parsed = await self._complete_json(
            prompt,
            system_prompt=compile_instruction(rule),
            model=self.resolve_model(model_id),
        )

        fields = [build_field(key, item) for key, item in parsed.items()]
        for key in rule.schema_keys():
            if key not in parsed:
                fields.append(
                    ExtractionField(
                        key=key,
                        label=humanize_label(key),
                        value=None,
                        confidence=NOT_FOUND_CONFIDENCE,
                    )
                )
        field_map = FieldMap.from_extraction(fields)
        Log.info(
            f"Extraction complete with rule '{rule.name}' v{rule.version}: "
            f"{len(field_map)} fields, {len(field_map.missing_keys())} missing"
        )
        return field_map
