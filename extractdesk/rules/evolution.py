"""Deriving the next rule version from human corrections."""

from dataclasses import replace

from extractdesk.documents.field_map import FieldMap
from extractdesk.rules.models import ExtractionRule

EVOLVED_NAME_SUFFIX = " (AI优化版)"


def correction_snapshots(fields: FieldMap) -> tuple[dict[str, object], dict[str, object]]:
    """Build the (incorrect, corrected) pair sent to the instruction rewriter.

    The incorrect side names the fields a human had to fix; the corrected
    side is the full key -> value map after those fixes.
    """
    edited = fields.edited_keys()
    incorrect: dict[str, object] = {
        "note": "Previous extraction was inaccurate for fields: " + ", ".join(edited)
    }
    corrected: dict[str, object] = dict(fields.values())
    return incorrect, corrected


def evolve_rule(rule: ExtractionRule, new_instruction: str) -> ExtractionRule:
    """Next version of *rule* carrying *new_instruction*.

    Same id, version + 1, name marked as machine-revised (once). Skills and
    schema are carried over unchanged.
    """
    name = rule.name if rule.name.endswith(EVOLVED_NAME_SUFFIX) else rule.name + EVOLVED_NAME_SUFFIX
    return replace(
        rule,
        system_instruction=new_instruction,
        version=rule.version + 1,
        name=name,
    )
