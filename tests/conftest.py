import io
from unittest.mock import AsyncMock, MagicMock

import pytest
from reportlab.lib.pagesizes import letter
from reportlab.pdfgen import canvas

from extractdesk.ai.client_base import BaseAiClient
from extractdesk.config.settings import Settings
from extractdesk.documents.field_map import FieldMap
from extractdesk.documents.models import DocType, ExtractionField
from extractdesk.rules.models import ExtractionRule, ExtractionSkill, SkillCategory


@pytest.fixture()
def sample_pdf_bytes() -> bytes:
    """Generate a minimal single-page PDF with known text content."""
    buf = io.BytesIO()
    c = canvas.Canvas(buf, pagesize=letter)
    c.drawString(72, 720, "Loan Agreement between Borrower and Bank")
    c.save()
    return buf.getvalue()


@pytest.fixture()
def multi_page_pdf_bytes() -> bytes:
    """Generate a two-page PDF with known text on each page."""
    buf = io.BytesIO()
    c = canvas.Canvas(buf, pagesize=letter)
    c.drawString(72, 720, "Page one content")
    c.showPage()
    c.drawString(72, 720, "Page two content")
    c.save()
    return buf.getvalue()


@pytest.fixture()
def empty_pdf_bytes() -> bytes:
    """Generate a valid PDF with no text content (blank page)."""
    buf = io.BytesIO()
    c = canvas.Canvas(buf, pagesize=letter)
    c.showPage()
    c.save()
    return buf.getvalue()


@pytest.fixture()
def settings() -> Settings:
    return Settings(ai_provider="example", operation_timeout_seconds=5.0)


@pytest.fixture()
def ai_client() -> MagicMock:
    """Client double whose chat completion is an AsyncMock."""
    client = MagicMock(spec=BaseAiClient)
    client.create_chat_completion = AsyncMock(return_value="{}")
    return client


@pytest.fixture()
def loan_rule() -> ExtractionRule:
    return ExtractionRule(
        id="rule-test",
        doc_type=DocType.LOAN_AGREEMENT,
        name="借款合同测试规则",
        system_instruction="提取借款人和本金。",
        schema='{"借款人名称": "string", "借款本金": "number"}',
        skills=(
            ExtractionSkill(
                id="sk-a",
                name="借款本金",
                description="提取本金金额。",
                category=SkillCategory.AMOUNT,
                example="伍仟万元整",
                output_example="50000000",
            ),
            ExtractionSkill(id="sk-b", name="借款人", description="提取借款人名称。"),
        ),
    )


@pytest.fixture()
def review_fields() -> FieldMap:
    return FieldMap(
        [
            ExtractionField(key="借款人名称", label="借款人名称", value="甲公司", confidence=0.9),
            ExtractionField(key="借款本金", label="借款本金", value=None, confidence=0.0),
            ExtractionField(key="担保人", label="担保人", value="", confidence=0.0),
        ]
    )
