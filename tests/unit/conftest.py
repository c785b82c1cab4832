from unittest.mock import AsyncMock, MagicMock

import pytest

from extractdesk.ai.region_analyzer import RegionResult
from extractdesk.config.settings import Settings
from extractdesk.documents.document import Document
from extractdesk.documents.field_map import FieldMap
from extractdesk.documents.models import DocType, ExtractionField
from extractdesk.documents.store import DocumentStore
from extractdesk.orchestrator.orchestrator import ExtractionOrchestrator
from extractdesk.rules.defaults import default_rules
from extractdesk.rules.library import RuleLibrary
from extractdesk.rules.models import RuleDraft


def extracted_fields() -> FieldMap:
    return FieldMap.from_extraction(
        [
            ExtractionField(key="借款人名称", label="借款人名称", value="甲公司", confidence=0.9),
            ExtractionField(key="借款本金", label="借款本金", value=50000000, confidence=0.85),
            ExtractionField(key="担保人", label="担保人", value=None, confidence=0.0),
        ]
    )


@pytest.fixture()
def services() -> MagicMock:
    """AiServices double; every collaborator method is an AsyncMock."""
    services = MagicMock()
    services.classifier.classify = AsyncMock(return_value=DocType.LOAN_AGREEMENT)
    services.extractor.extract = AsyncMock(side_effect=lambda *args, **kwargs: extracted_fields())
    services.region_analyzer.analyze = AsyncMock(return_value=RegionResult.not_found())
    services.refiner.refine = AsyncMock(return_value={})
    services.synthesizer.synthesize = AsyncMock(
        return_value=RuleDraft(system_instruction="提取租金。", schema='{"租金": "number"}')
    )
    services.synthesizer.optimize_skill_description = AsyncMock(return_value="优化后的描述")
    services.rewriter.rewrite = AsyncMock(return_value="更稳健的新指令")
    return services


@pytest.fixture()
def orchestrator(services: MagicMock, settings: Settings) -> ExtractionOrchestrator:
    return ExtractionOrchestrator(
        documents=DocumentStore(),
        rules=RuleLibrary(default_rules()),
        services=services,
        settings=settings,
    )


@pytest.fixture()
def document() -> Document:
    return Document(
        name="loan.pdf",
        content=("借款合同 借款人：甲公司", "保证人：张三 提供连带责任保证"),
        project_id="p-1",
    )
