"""User-facing actions for reviewing one document.

Each action returns a ``StatusMessage`` instead of raising; orchestration,
document and rule errors become a short message for the reviewer.
"""

from dataclasses import dataclass

from extractdesk.documents.exceptions import DocumentError
from extractdesk.documents.models import FieldValue
from extractdesk.feedback.ledger import BadCaseLedger
from extractdesk.feedback.models import BadCaseType
from extractdesk.logging.logger import Log
from extractdesk.orchestrator.exceptions import OrchestrationError
from extractdesk.orchestrator.orchestrator import ExtractionOrchestrator
from extractdesk.rules.exceptions import RuleError

_HANDLED = (OrchestrationError, DocumentError, RuleError)


@dataclass(frozen=True)
class StatusMessage:
    ok: bool
    text: str


def _failed(action: str, exc: Exception, document_id: str) -> StatusMessage:
    Log.warning(f"{action} failed: {exc}", document_id=document_id)
    return StatusMessage(ok=False, text=str(exc))


class ReviewSession:
    def __init__(self, orchestrator: ExtractionOrchestrator, document_id: str) -> None:
        self._orchestrator = orchestrator
        self._document_id = document_id
        self.ledger = BadCaseLedger()

    @property
    def document_id(self) -> str:
        return self._document_id

    async def select_rule(self, rule_id: str) -> StatusMessage:
        try:
            rule = await self._orchestrator.select_rule(self._document_id, rule_id)
        except _HANDLED as exc:
            return _failed("Rule selection", exc, self._document_id)
        return StatusMessage(ok=True, text=f"Rule '{rule.name}' selected")

    async def run_extraction(self, model_id: str | None = None) -> StatusMessage:
        """Start a fresh extraction; bad cases from the previous run are dropped."""
        self.ledger.clear()
        try:
            fields = await self._orchestrator.extract(self._document_id, model_id)
        except _HANDLED as exc:
            return _failed("Extraction", exc, self._document_id)
        return StatusMessage(ok=True, text=f"Extracted {len(fields)} fields")

    async def edit_field(self, key: str, value: FieldValue) -> StatusMessage:
        try:
            await self._orchestrator.edit_field(self._document_id, key, value)
        except _HANDLED as exc:
            return _failed("Edit", exc, self._document_id)
        return StatusMessage(ok=True, text=f"Field '{key}' updated")

    async def import_fields_text(self, text: str) -> StatusMessage:
        try:
            added = await self._orchestrator.import_fields(self._document_id, text)
        except _HANDLED as exc:
            return _failed("Import", exc, self._document_id)
        if not added:
            return StatusMessage(ok=True, text="No new fields to import")
        return StatusMessage(ok=True, text=f"Imported {len(added)} fields: {', '.join(added)}")

    async def analyze_selection(self, text: str) -> StatusMessage:
        """Fill empty fields from a selected span of source text."""
        try:
            fields = self._orchestrator.document(self._document_id).extracted_data
            if fields is None or not fields.missing_keys():
                return StatusMessage(ok=True, text="All fields are already filled")
            filled = await self._orchestrator.analyze_region(self._document_id, text)
        except _HANDLED as exc:
            return _failed("Region analysis", exc, self._document_id)
        if not filled:
            return StatusMessage(ok=False, text="No matching fields found in the selection")
        return StatusMessage(ok=True, text=f"Filled: {', '.join(filled)}")

    def mark_bad_case(
        self, text: str, type: BadCaseType, note: str | None = None
    ) -> StatusMessage:
        try:
            bad_case = self.ledger.mark(text, type, note)
        except ValueError as exc:
            return StatusMessage(ok=False, text=str(exc))
        return StatusMessage(
            ok=True,
            text=f"Marked as {bad_case.type.label_cn} ({len(self.ledger)} pending)",
        )

    async def run_refinement(self) -> StatusMessage:
        if not self.ledger:
            return StatusMessage(ok=False, text="Mark at least one bad case before refining")
        try:
            changed = await self._orchestrator.refine(self._document_id, self.ledger)
        except _HANDLED as exc:
            return _failed("Refinement", exc, self._document_id)
        return StatusMessage(ok=True, text=f"Refinement updated {len(changed)} fields")

    async def optimize_rule(self) -> StatusMessage:
        """Learn from manual edits and store the next rule version."""
        try:
            rule = await self._orchestrator.evolve_rule(self._document_id)
        except _HANDLED as exc:
            return _failed("Rule optimisation", exc, self._document_id)
        return StatusMessage(ok=True, text=f"Rule '{rule.name}' is now v{rule.version}")

    async def add_skill(self, text: str, description: str, field_name: str = "") -> StatusMessage:
        try:
            skill = await self._orchestrator.add_skill_from_selection(
                self._document_id, text, description, field_name
            )
        except _HANDLED as exc:
            return _failed("Adding skill", exc, self._document_id)
        return StatusMessage(ok=True, text=f"Skill '{skill.name}' added")

    async def sign_off(self) -> StatusMessage:
        try:
            await self._orchestrator.sign_off(self._document_id)
        except _HANDLED as exc:
            return _failed("Sign-off", exc, self._document_id)
        return StatusMessage(ok=True, text="Document completed")
