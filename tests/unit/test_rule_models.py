import pytest

from extractdesk.documents.models import DocType, ExtractionField
from extractdesk.rules.defaults import default_rules
from extractdesk.rules.models import ExtractionRule, ExtractionSkill, SkillCategory


def _rule(schema: str, **kwargs: object) -> ExtractionRule:
    return ExtractionRule(
        id="r", doc_type=DocType.UNKNOWN, name="n", system_instruction="i", schema=schema, **kwargs  # type: ignore[arg-type]
    )


class TestSkillCategory:
    def test_parse_is_lenient(self) -> None:
        assert SkillCategory.parse("date") is SkillCategory.DATE
        assert SkillCategory.parse(" Amount ") is SkillCategory.AMOUNT
        assert SkillCategory.parse("Currency") is SkillCategory.OTHER
        assert SkillCategory.parse(None) is SkillCategory.OTHER

    def test_labels(self) -> None:
        assert SkillCategory.ENTITY.label_cn == "主体/公司"


class TestExtractionRule:
    def test_flat_schema_keys(self) -> None:
        assert _rule('{"案号": "string", "判决日期": "string"}').schema_keys() == ["案号", "判决日期"]

    def test_json_schema_properties(self) -> None:
        schema = '{"type": "object", "properties": {"租金": {"type": "number"}}}'
        assert _rule(schema).schema_keys() == ["租金"]

    def test_unparseable_schema_has_no_keys(self) -> None:
        assert _rule("not json").schema_keys() == []
        assert _rule("[1, 2]").schema_keys() == []

    def test_skills_stored_as_tuple(self) -> None:
        rule = _rule("{}", skills=[ExtractionSkill(name="a", description="b")])
        assert isinstance(rule.skills, tuple)

    def test_version_must_be_positive(self) -> None:
        with pytest.raises(ValueError, match="version must be >= 1"):
            _rule("{}", version=0)


class TestExtractionField:
    def test_confidence_out_of_range(self) -> None:
        with pytest.raises(ValueError, match="confidence"):
            ExtractionField(key="a", label="a", confidence=1.5)

    def test_missing(self) -> None:
        assert ExtractionField(key="a", label="a").is_missing
        assert ExtractionField(key="a", label="a", value="").is_missing
        assert not ExtractionField(key="a", label="a", value=0).is_missing


class TestDefaultRules:
    def test_one_rule_per_business_type(self) -> None:
        rules = default_rules()
        assert [rule.doc_type for rule in rules] == [
            DocType.LOAN_AGREEMENT,
            DocType.COURT_RULING,
            DocType.MORTGAGE_CONTRACT,
            DocType.ASSET_EVALUATION,
            DocType.TRANSFER_AGREEMENT,
        ]

    def test_loan_rule_skills(self) -> None:
        loan = default_rules()[0]
        assert [skill.id for skill in loan.skills] == ["sk-1", "sk-2", "sk-3", "sk-4"]
        assert "借款人名称" in loan.schema_keys()

    def test_all_versions_start_at_one(self) -> None:
        assert {rule.version for rule in default_rules()} == {1}
