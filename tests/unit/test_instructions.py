from dataclasses import replace

from extractdesk.ai.instructions import compile_instruction
from extractdesk.ai.prompt_loader import load_base_policy
from extractdesk.documents.models import DocType
from extractdesk.rules.models import ExtractionRule


class TestCompileInstruction:
    def test_sections_in_order(self, loan_rule: ExtractionRule) -> None:
        text = compile_instruction(loan_rule)
        policy = load_base_policy(DocType.LOAN_AGREEMENT)
        assert text.startswith(policy)
        assert text.index("用户自定义指令：") < text.index(loan_rule.system_instruction)
        assert text.index(loan_rule.system_instruction) < text.index("特定提取技能")

    def test_skills_numbered_with_category(self, loan_rule: ExtractionRule) -> None:
        lines = compile_instruction(loan_rule).splitlines()
        assert "1. [金额] 借款本金: 提取本金金额。" in lines
        assert "2. [文本] 借款人: 提取借款人名称。" in lines

    def test_example_line_only_for_skills_with_examples(self, loan_rule: ExtractionRule) -> None:
        text = compile_instruction(loan_rule)
        assert text.count("参考样例") == 1
        assert '遇到类似 "伍仟万元整" 的表述，应提取为 -> "50000000"' in text

    def test_rule_without_skills(self, loan_rule: ExtractionRule) -> None:
        text = compile_instruction(replace(loan_rule, skills=()))
        assert text.endswith("根据输出 Schema 提取所有相关字段。")

    def test_unknown_type_uses_default_policy(self, loan_rule: ExtractionRule) -> None:
        text = compile_instruction(replace(loan_rule, doc_type=DocType.UNKNOWN))
        assert text.startswith(load_base_policy(DocType.UNKNOWN))
