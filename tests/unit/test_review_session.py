from unittest.mock import AsyncMock, MagicMock

import pytest

from extractdesk.ai.exceptions import AiNetworkError
from extractdesk.ai.region_analyzer import RegionResult
from extractdesk.documents.document import Document
from extractdesk.documents.models import DocType
from extractdesk.documents.state_machine import ProcessingStatus
from extractdesk.feedback.models import BadCaseType
from extractdesk.orchestrator.orchestrator import ExtractionOrchestrator
from extractdesk.orchestrator.session import ReviewSession, StatusMessage


async def _session(orchestrator: ExtractionOrchestrator, document: Document) -> ReviewSession:
    await orchestrator.register(document)
    return ReviewSession(orchestrator, document.id)


class TestReviewSession:
    @pytest.mark.asyncio
    async def test_run_extraction(
        self, orchestrator: ExtractionOrchestrator, document: Document
    ) -> None:
        session = await _session(orchestrator, document)
        message = await session.run_extraction()
        assert message == StatusMessage(ok=True, text="Extracted 3 fields")
        assert document.status is ProcessingStatus.REVIEW

    @pytest.mark.asyncio
    async def test_extraction_failure_becomes_message(
        self, orchestrator: ExtractionOrchestrator, services: MagicMock, document: Document
    ) -> None:
        session = await _session(orchestrator, document)
        services.extractor.extract = AsyncMock(side_effect=AiNetworkError("AI provider network error"))
        message = await session.run_extraction()
        assert message.ok is False
        assert "network error" in message.text

    @pytest.mark.asyncio
    async def test_missing_rule_becomes_message(
        self, orchestrator: ExtractionOrchestrator, services: MagicMock, document: Document
    ) -> None:
        services.classifier.classify = AsyncMock(return_value=DocType.UNKNOWN)
        session = await _session(orchestrator, document)
        message = await session.run_extraction()
        assert message.ok is False
        assert "no extraction rule" in message.text

    @pytest.mark.asyncio
    async def test_new_extraction_clears_ledger(
        self, orchestrator: ExtractionOrchestrator, document: Document
    ) -> None:
        session = await _session(orchestrator, document)
        await session.run_extraction()
        session.mark_bad_case("保证人：张三", BadCaseType.MISSED)
        await session.run_extraction()
        assert len(session.ledger) == 0

    @pytest.mark.asyncio
    async def test_edit_unknown_field(
        self, orchestrator: ExtractionOrchestrator, document: Document
    ) -> None:
        session = await _session(orchestrator, document)
        await session.run_extraction()
        message = await session.edit_field("不存在", "x")
        assert message.ok is False

    @pytest.mark.asyncio
    async def test_import_fields_text(
        self, orchestrator: ExtractionOrchestrator, document: Document
    ) -> None:
        session = await _session(orchestrator, document)
        await session.run_extraction()
        message = await session.import_fields_text("违约金条款, 借款人名称")
        assert message.text == "Imported 1 fields: 违约金条款"
        again = await session.import_fields_text("违约金条款")
        assert again.text == "No new fields to import"

    @pytest.mark.asyncio
    async def test_analyze_selection_short_circuits_when_complete(
        self, orchestrator: ExtractionOrchestrator, services: MagicMock, document: Document
    ) -> None:
        session = await _session(orchestrator, document)
        await session.run_extraction()
        await session.edit_field("担保人", "张三")
        message = await session.analyze_selection("原文")
        assert message.ok is True
        services.region_analyzer.analyze.assert_not_called()

    @pytest.mark.asyncio
    async def test_analyze_selection_reports_filled(
        self, orchestrator: ExtractionOrchestrator, services: MagicMock, document: Document
    ) -> None:
        session = await _session(orchestrator, document)
        await session.run_extraction()
        services.region_analyzer.analyze = AsyncMock(
            return_value=RegionResult(found=True, data={"担保人": "张三"})
        )
        message = await session.analyze_selection("保证人：张三")
        assert message == StatusMessage(ok=True, text="Filled: 担保人")

    @pytest.mark.asyncio
    async def test_analyze_selection_miss(
        self, orchestrator: ExtractionOrchestrator, document: Document
    ) -> None:
        session = await _session(orchestrator, document)
        await session.run_extraction()
        message = await session.analyze_selection("无关内容")
        assert message.ok is False

    def test_mark_blank_bad_case(self) -> None:
        session = ReviewSession(MagicMock(), "doc")
        message = session.mark_bad_case("  ", BadCaseType.MISSED)
        assert message.ok is False
        assert len(session.ledger) == 0

    @pytest.mark.asyncio
    async def test_refinement_requires_bad_cases(
        self, orchestrator: ExtractionOrchestrator, services: MagicMock, document: Document
    ) -> None:
        session = await _session(orchestrator, document)
        await session.run_extraction()
        message = await session.run_refinement()
        assert message.ok is False
        services.refiner.refine.assert_not_called()

    @pytest.mark.asyncio
    async def test_refinement(
        self, orchestrator: ExtractionOrchestrator, services: MagicMock, document: Document
    ) -> None:
        session = await _session(orchestrator, document)
        await session.run_extraction()
        session.mark_bad_case("保证人：张三", BadCaseType.MISSED)
        services.refiner.refine = AsyncMock(return_value={"担保人": "张三"})
        message = await session.run_refinement()
        assert message == StatusMessage(ok=True, text="Refinement updated 1 fields")
        assert len(session.ledger) == 0

    @pytest.mark.asyncio
    async def test_optimize_rule_without_edits(
        self, orchestrator: ExtractionOrchestrator, document: Document
    ) -> None:
        session = await _session(orchestrator, document)
        await session.run_extraction()
        message = await session.optimize_rule()
        assert message.ok is False
        assert "No manual corrections" in message.text

    @pytest.mark.asyncio
    async def test_optimize_rule(
        self, orchestrator: ExtractionOrchestrator, document: Document
    ) -> None:
        session = await _session(orchestrator, document)
        await session.run_extraction()
        await session.edit_field("担保人", "张三")
        message = await session.optimize_rule()
        assert message.ok is True
        assert message.text.endswith("is now v2")

    @pytest.mark.asyncio
    async def test_select_unknown_rule(
        self, orchestrator: ExtractionOrchestrator, document: Document
    ) -> None:
        session = await _session(orchestrator, document)
        message = await session.select_rule("missing")
        assert message.ok is False

    @pytest.mark.asyncio
    async def test_add_skill_and_sign_off(
        self, orchestrator: ExtractionOrchestrator, document: Document
    ) -> None:
        session = await _session(orchestrator, document)
        assert (await session.sign_off()).ok is False
        await session.run_extraction()
        message = await session.add_skill("违约金为5%", "提取违约金比例", field_name="违约金")
        assert message.text == "Skill '违约金' added"
        assert (await session.sign_off()).ok is True
        assert document.status is ProcessingStatus.COMPLETED
