"""Runs AI collaborators against documents and merges their results.

Operations on one document are serialized by a per-document ``asyncio.Lock``;
different documents run concurrently. Every collaborator await is bounded by
``operation_timeout_seconds`` and a timeout or cancellation leaves the
document in a stable status (never CLASSIFYING or EXTRACTING).
"""

import asyncio
from collections.abc import Awaitable, Iterable
from dataclasses import replace
from typing import TypeVar

from extractdesk.ai.exceptions import AiServiceError
from extractdesk.ai.factory import AiServices
from extractdesk.config.settings import Settings
from extractdesk.documents.document import Document
from extractdesk.documents.exceptions import FieldNotFoundError
from extractdesk.documents.field_map import FieldMap, parse_field_labels
from extractdesk.documents.matching import KeyMatcher, matcher_for
from extractdesk.documents.models import DocType, FieldValue
from extractdesk.documents.state_machine import DocumentEvent
from extractdesk.documents.store import DocumentStore
from extractdesk.feedback.ledger import BadCaseLedger
from extractdesk.logging.logger import Log
from extractdesk.orchestrator.exceptions import (
    EvolutionRefusedError,
    ExtractionFailedError,
    OperationTimeoutError,
    RefinementFailedError,
    RuleEvolutionError,
    RuleNotBoundError,
    RuleSynthesisError,
)
from extractdesk.rules.evolution import correction_snapshots, evolve_rule
from extractdesk.rules.exceptions import SkillNotFoundError
from extractdesk.rules.library import RuleLibrary
from extractdesk.rules.models import ExtractionRule, ExtractionSkill

T = TypeVar("T")


class ExtractionOrchestrator:
    def __init__(
        self,
        *,
        documents: DocumentStore,
        rules: RuleLibrary,
        services: AiServices,
        settings: Settings,
        matcher: KeyMatcher | None = None,
    ) -> None:
        self._documents = documents
        self._rules = rules
        self._services = services
        self._timeout = settings.operation_timeout_seconds
        self._matcher = matcher or matcher_for(settings.field_match_strategy)
        self._locks: dict[str, asyncio.Lock] = {}

    @property
    def rules(self) -> RuleLibrary:
        return self._rules

    def document(self, document_id: str) -> Document:
        return self._documents.get(document_id)

    def bound_rule(self, document_id: str) -> ExtractionRule | None:
        """Rule applied to the document, else the first rule for its type."""
        document = self._documents.get(document_id)
        if document.applied_rule_id and document.applied_rule_id in self._rules:
            return self._rules.get(document.applied_rule_id)
        return self._rules.find_for_doc_type(document.type)

    # ------------------------------------------------------------------
    # Registration and classification
    # ------------------------------------------------------------------

    async def register(self, document: Document) -> Document:
        """Store a freshly uploaded document and classify it."""
        self._documents.add(document)
        await self.classify(document.id)
        return document

    async def register_many(self, documents: Iterable[Document]) -> list[Document]:
        """Register several documents and classify them concurrently."""
        batch = [self._documents.add(document) for document in documents]
        await asyncio.gather(*(self.classify(document.id) for document in batch))
        return batch

    async def classify(self, document_id: str) -> DocType:
        """UPLOADED -> CLASSIFYING -> READY_TO_EXTRACT; failures resolve to UNKNOWN."""
        async with self._lock(document_id):
            document = self._documents.get(document_id)
            document.apply(DocumentEvent.START_CLASSIFICATION)
            doc_type = DocType.UNKNOWN
            try:
                doc_type = await self._bounded(
                    self._services.classifier.classify(document.first_page()),
                    "classification",
                )
            except OperationTimeoutError as exc:
                Log.warning(f"{exc}; type left as Unknown", document_id=document_id)
            finally:
                document.type = doc_type
                document.apply(DocumentEvent.CLASSIFICATION_RESOLVED)
            return doc_type

    async def assign_type(self, document_id: str, doc_type: DocType) -> None:
        """Manual type assignment, bypassing classification."""
        async with self._lock(document_id):
            document = self._documents.get(document_id)
            document.apply(DocumentEvent.ASSIGN_TYPE)
            document.type = doc_type
            Log.info(f"Type manually set to {doc_type.value}", document_id=document_id)

    async def select_rule(self, document_id: str, rule_id: str) -> ExtractionRule:
        """Bind a rule; the document's type follows the rule's declared type."""
        async with self._lock(document_id):
            document = self._documents.get(document_id)
            rule = self._rules.get(rule_id)
            document.applied_rule_id = rule.id
            document.type = rule.doc_type
            Log.info(f"Rule '{rule.name}' selected", document_id=document_id, rule_id=rule.id)
            return rule

    # ------------------------------------------------------------------
    # Extraction
    # ------------------------------------------------------------------

    async def extract(self, document_id: str, model_id: str | None = None) -> FieldMap:
        """Replace the document's field map with a fresh extraction.

        Prior edits are not merged; take ``FieldMap.snapshot()`` first to keep them.

        Raises:
            RuleNotBoundError: no rule is bound; status is unchanged.
            ExtractionFailedError: collaborator failure, status back to READY_TO_EXTRACT.
            OperationTimeoutError: deadline exceeded, status back to READY_TO_EXTRACT.
        """
        async with self._lock(document_id):
            document = self._documents.get(document_id)
            rule = self.bound_rule(document_id)
            if rule is None:
                raise RuleNotBoundError(
                    f"Document {document_id} has no extraction rule; select one first"
                )
            document.apply(DocumentEvent.START_EXTRACTION)
            Log.info(f"Extracting with rule '{rule.name}' v{rule.version}", document_id=document_id)
            try:
                fields = await self._bounded(
                    self._services.extractor.extract(document.full_text(), rule, model_id),
                    "extraction",
                )
            except BaseException as exc:
                document.apply(DocumentEvent.EXTRACTION_FAILED)
                Log.error(f"Extraction failed: {exc}", document_id=document_id)
                if isinstance(exc, AiServiceError):
                    raise ExtractionFailedError(f"Extraction failed: {exc}") from exc
                raise
            document.extracted_data = fields
            document.applied_rule_id = rule.id
            document.apply(DocumentEvent.EXTRACTION_SUCCEEDED)
            return fields

    # ------------------------------------------------------------------
    # Human writers
    # ------------------------------------------------------------------

    async def edit_field(self, document_id: str, key: str, value: FieldValue) -> None:
        async with self._lock(document_id):
            fields = self._fields_of(document_id)
            fields.apply_manual_edit(key, value)

    async def import_fields(self, document_id: str, labels: Iterable[str] | str) -> list[str]:
        """Add empty fields for new labels; returns the keys added.

        A document without a field map gets nothing imported.
        """
        if isinstance(labels, str):
            labels = parse_field_labels(labels)
        async with self._lock(document_id):
            document = self._documents.get(document_id)
            if document.extracted_data is None:
                return []
            added = document.extracted_data.import_labels(labels)
            Log.info(f"Imported {len(added)} new fields", document_id=document_id)
            return added

    # ------------------------------------------------------------------
    # AI-assisted correction
    # ------------------------------------------------------------------

    async def analyze_region(self, document_id: str, text_span: str) -> list[str]:
        """Fill currently empty fields from a selected span; returns keys filled.

        Never raises for collaborator problems: a miss, failure or timeout
        fills nothing.
        """
        async with self._lock(document_id):
            document = self._documents.get(document_id)
            fields = document.extracted_data
            if fields is None:
                return []
            targets = fields.missing_keys()
            if not targets:
                return []
            try:
                result = await self._bounded(
                    self._services.region_analyzer.analyze(text_span, targets, document.type),
                    "region analysis",
                )
            except OperationTimeoutError as exc:
                Log.warning(str(exc), document_id=document_id)
                return []
            if not result.found:
                return []
            filled = fields.apply_region_result(result.data, targets, self._matcher)
            Log.info(f"Region analysis filled {len(filled)} fields", document_id=document_id)
            return filled

    async def refine(self, document_id: str, ledger: BadCaseLedger) -> list[str]:
        """Second pass informed by the ledger; returns the keys that changed.

        An empty ledger makes this a no-op. Otherwise the ledger is cleared
        once the call settles, even when it fails.

        Raises:
            RefinementFailedError: collaborator failure; fields are unchanged.
            OperationTimeoutError: deadline exceeded; fields are unchanged.
            InvalidTransitionError: the document is not in review.
        """
        async with self._lock(document_id):
            document = self._documents.get(document_id)
            fields = document.extracted_data
            if not ledger or fields is None:
                return []
            try:
                document.apply(DocumentEvent.REFINE)
                refined = await self._bounded(
                    self._services.refiner.refine(
                        document.full_text(),
                        fields.values(),
                        ledger.entries(),
                        document.type,
                    ),
                    "refinement",
                )
            except AiServiceError as exc:
                Log.error(f"Refinement failed: {exc}", document_id=document_id)
                raise RefinementFailedError(f"Refinement failed: {exc}") from exc
            finally:
                ledger.clear()
            changed = fields.apply_refinement(refined)
            Log.info(f"Refinement changed {len(changed)} fields", document_id=document_id)
            return changed

    # ------------------------------------------------------------------
    # Rule authoring and evolution
    # ------------------------------------------------------------------

    async def propose_evolution(self, document_id: str) -> str:
        """New instruction text for the bound rule, learned from edited fields.

        Raises:
            RuleNotBoundError: no rule is bound.
            EvolutionRefusedError: no field carries a human edit.
            RuleEvolutionError: the rewrite failed.
        """
        async with self._lock(document_id):
            _, instruction = await self._propose(document_id)
            return instruction

    def accept_evolution(self, rule_id: str, instruction: str) -> ExtractionRule:
        """Store the next version of *rule_id* carrying *instruction*."""
        evolved = evolve_rule(self._rules.get(rule_id), instruction)
        self._rules.save(evolved)
        Log.info(f"Rule '{evolved.name}' evolved to v{evolved.version}", rule_id=rule_id)
        return evolved

    async def evolve_rule(self, document_id: str) -> ExtractionRule:
        """Propose and accept in one step; the stored rule only changes on success."""
        async with self._lock(document_id):
            rule, instruction = await self._propose(document_id)
            return self.accept_evolution(rule.id, instruction)

    async def add_skill_from_selection(
        self,
        document_id: str,
        text: str,
        description: str,
        field_name: str = "",
    ) -> ExtractionSkill:
        """Append a Text skill to the bound rule using the selection as example."""
        async with self._lock(document_id):
            rule = self.bound_rule(document_id)
            if rule is None:
                raise RuleNotBoundError("Select an extraction rule before adding skills")
            return self._rules.add_skill(
                rule.id,
                field_name or "新字段",
                description,
                example=text,
            )

    async def synthesize_rule(
        self,
        description: str,
        doc_type: DocType = DocType.UNKNOWN,
        name: str = "新提取规则",
    ) -> ExtractionRule:
        try:
            draft = await self._bounded(
                self._services.synthesizer.synthesize(description), "rule synthesis"
            )
        except AiServiceError as exc:
            raise RuleSynthesisError(f"Rule synthesis failed: {exc}") from exc
        return self._rules.create_from_draft(draft, doc_type, name)

    async def optimize_skill(self, rule_id: str, skill_id: str) -> ExtractionSkill:
        """Rewrite one skill's description in place; keeps it on failure."""
        rule = self._rules.get(rule_id)
        skill = next((item for item in rule.skills if item.id == skill_id), None)
        if skill is None:
            raise SkillNotFoundError(f"Skill {skill_id} not in rule {rule_id}")
        try:
            description = await self._bounded(
                self._services.synthesizer.optimize_skill_description(
                    skill.description, skill.example
                ),
                "skill optimisation",
            )
        except OperationTimeoutError as exc:
            Log.warning(f"{exc}; keeping original description", rule_id=rule_id)
            return skill
        updated = replace(skill, description=description)
        self._rules.update_skill(rule_id, updated)
        return updated

    async def sign_off(self, document_id: str) -> None:
        """REVIEW -> COMPLETED."""
        async with self._lock(document_id):
            self._documents.get(document_id).apply(DocumentEvent.SIGN_OFF)

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _lock(self, document_id: str) -> asyncio.Lock:
        return self._locks.setdefault(document_id, asyncio.Lock())

    def _fields_of(self, document_id: str) -> FieldMap:
        document = self._documents.get(document_id)
        if document.extracted_data is None:
            raise FieldNotFoundError(f"Document {document_id} has no extracted fields yet")
        return document.extracted_data

    async def _bounded(self, call: Awaitable[T], operation: str) -> T:
        try:
            return await asyncio.wait_for(call, timeout=self._timeout)
        except asyncio.TimeoutError as exc:
            raise OperationTimeoutError(
                f"{operation} did not finish within {self._timeout:g}s"
            ) from exc

    async def _propose(self, document_id: str) -> tuple[ExtractionRule, str]:
        document = self._documents.get(document_id)
        rule = self.bound_rule(document_id)
        if rule is None:
            raise RuleNotBoundError("Select an extraction rule before optimising it")
        fields = document.extracted_data
        if fields is None or not fields.edited_keys():
            raise EvolutionRefusedError("No manual corrections found; nothing to learn from")
        incorrect, corrected = correction_snapshots(fields)
        try:
            instruction = await self._bounded(
                self._services.rewriter.rewrite(rule, document.first_page(), incorrect, corrected),
                "instruction rewrite",
            )
        except (AiServiceError, OperationTimeoutError) as exc:
            Log.error(f"Rule evolution failed: {exc}", rule_id=rule.id)
            raise RuleEvolutionError(f"Rule evolution failed: {exc}") from exc
        return rule, instruction
