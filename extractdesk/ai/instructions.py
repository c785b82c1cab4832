from extractdesk.ai.prompt_loader import load_base_policy
from extractdesk.rules.models import ExtractionRule


def compile_instruction(rule: ExtractionRule) -> str:
    """System instruction for an extraction run.

    Base policy for the rule's document type, then the rule's own
    instruction, then the numbered skills with their few-shot pairs.
    """
    lines = [
        load_base_policy(rule.doc_type),
        "",
        "用户自定义指令：",
        rule.system_instruction,
        "",
        "特定提取技能 (Specific Extraction Skills):",
    ]
    if not rule.skills:
        lines.append("根据输出 Schema 提取所有相关字段。")
    for index, skill in enumerate(rule.skills, start=1):
        lines.append(f"{index}. [{skill.category.label_cn}] {skill.name}: {skill.description}")
        if skill.has_example:
            lines.append(
                f'   参考样例: 遇到类似 "{skill.example or "..."}" 的表述，'
                f'应提取为 -> "{skill.output_example or "..."}"'
            )
    return "\n".join(lines)
