from dataclasses import replace

from extractdesk.documents.field_map import FieldMap
from extractdesk.rules.evolution import EVOLVED_NAME_SUFFIX, correction_snapshots, evolve_rule
from extractdesk.rules.models import ExtractionRule


class TestEvolveRule:
    def test_next_version(self, loan_rule: ExtractionRule) -> None:
        evolved = evolve_rule(loan_rule, "新指令")
        assert evolved.id == loan_rule.id
        assert evolved.version == loan_rule.version + 1
        assert evolved.system_instruction == "新指令"
        assert evolved.skills == loan_rule.skills
        assert evolved.schema == loan_rule.schema
        assert evolved.name == loan_rule.name + EVOLVED_NAME_SUFFIX

    def test_suffix_added_once(self, loan_rule: ExtractionRule) -> None:
        twice = evolve_rule(evolve_rule(loan_rule, "a"), "b")
        assert twice.name.count(EVOLVED_NAME_SUFFIX) == 1
        assert twice.version == 3

    def test_original_untouched(self, loan_rule: ExtractionRule) -> None:
        before = replace(loan_rule)
        evolve_rule(loan_rule, "新指令")
        assert loan_rule == before


class TestCorrectionSnapshots:
    def test_names_edited_fields(self, review_fields: FieldMap) -> None:
        review_fields.apply_manual_edit("借款本金", 50000000)
        review_fields.apply_manual_edit("担保人", "张三")
        incorrect, corrected = correction_snapshots(review_fields)
        assert incorrect == {"note": "Previous extraction was inaccurate for fields: 借款本金, 担保人"}
        assert corrected == {"借款人名称": "甲公司", "借款本金": 50000000, "担保人": "张三"}
