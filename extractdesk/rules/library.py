"""In-memory rule library.

Every stored rule is addressed by ``(rule_id, version)``; a latest pointer per
id serves ``get``. Direct edits overwrite the entry for the current version,
evolution adds the next version and moves the pointer. All writes happen under
one lock and publish a complete, immutable ``ExtractionRule``.
"""

import threading
from collections.abc import Iterable
from dataclasses import replace
from uuid import uuid4

from extractdesk.documents.models import DocType
from extractdesk.logging.logger import Log
from extractdesk.rules.exceptions import RuleNotFoundError, RuleVersionError, SkillNotFoundError
from extractdesk.rules.models import ExtractionRule, ExtractionSkill, RuleDraft, SkillCategory


class RuleLibrary:
    def __init__(self, rules: Iterable[ExtractionRule] = ()) -> None:
        self._lock = threading.RLock()
        self._versions: dict[tuple[str, int], ExtractionRule] = {}
        self._latest: dict[str, int] = {}
        for rule in rules:
            self.add(rule)

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def get(self, rule_id: str) -> ExtractionRule:
        """Latest version of *rule_id*; raises RuleNotFoundError."""
        with self._lock:
            version = self._latest.get(rule_id)
            if version is None:
                raise RuleNotFoundError(f"Rule {rule_id} not found")
            return self._versions[(rule_id, version)]

    def get_version(self, rule_id: str, version: int) -> ExtractionRule:
        with self._lock:
            rule = self._versions.get((rule_id, version))
            if rule is None:
                raise RuleNotFoundError(f"Rule {rule_id} v{version} not found")
            return rule

    def history(self, rule_id: str) -> list[ExtractionRule]:
        """All stored versions of a rule, oldest first."""
        with self._lock:
            if rule_id not in self._latest:
                raise RuleNotFoundError(f"Rule {rule_id} not found")
            return sorted(
                (rule for (rid, _), rule in self._versions.items() if rid == rule_id),
                key=lambda rule: rule.version,
            )

    def list_rules(self) -> list[ExtractionRule]:
        with self._lock:
            return [self._versions[(rid, version)] for rid, version in self._latest.items()]

    def find_for_doc_type(self, doc_type: DocType) -> ExtractionRule | None:
        """First rule declared for *doc_type*, in insertion order."""
        for rule in self.list_rules():
            if rule.doc_type is doc_type:
                return rule
        return None

    def __contains__(self, rule_id: object) -> bool:
        with self._lock:
            return rule_id in self._latest

    def __len__(self) -> int:
        with self._lock:
            return len(self._latest)

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    def add(self, rule: ExtractionRule) -> ExtractionRule:
        with self._lock:
            if rule.id in self._latest:
                raise RuleVersionError(f"Rule {rule.id} already exists")
            self._versions[(rule.id, rule.version)] = rule
            self._latest[rule.id] = rule.version
        return rule

    def create(
        self,
        doc_type: DocType = DocType.UNKNOWN,
        name: str = "新提取规则",
        system_instruction: str = "基于以下定义的技能提取字段。",
        schema: str = '{\n  "示例字段": "string"\n}',
        skills: Iterable[ExtractionSkill] = (),
    ) -> ExtractionRule:
        rule = ExtractionRule(
            id=str(uuid4()),
            doc_type=doc_type,
            name=name,
            system_instruction=system_instruction,
            schema=schema,
            skills=tuple(skills),
            version=1,
        )
        Log.info(f"Created rule '{name}' for {doc_type.value}", rule_id=rule.id)
        return self.add(rule)

    def create_from_draft(self, draft: RuleDraft, doc_type: DocType, name: str) -> ExtractionRule:
        return self.create(
            doc_type=doc_type,
            name=name,
            system_instruction=draft.system_instruction,
            schema=draft.schema,
            skills=draft.skills,
        )

    def save(self, rule: ExtractionRule) -> ExtractionRule:
        """Replace the latest version of ``rule.id`` in one step.

        The same version overwrites in place (direct edit); a higher version
        is stored alongside the older ones and becomes the latest.

        Raises:
            RuleNotFoundError: if the id is unknown.
            RuleVersionError: if ``rule.version`` is older than the stored one.
        """
        with self._lock:
            current = self._latest.get(rule.id)
            if current is None:
                raise RuleNotFoundError(f"Rule {rule.id} not found")
            if rule.version < current:
                raise RuleVersionError(
                    f"Rule {rule.id}: version {rule.version} is older than stored {current}"
                )
            self._versions[(rule.id, rule.version)] = rule
            self._latest[rule.id] = rule.version
        return rule

    def delete(self, rule_id: str) -> None:
        with self._lock:
            if self._latest.pop(rule_id, None) is None:
                raise RuleNotFoundError(f"Rule {rule_id} not found")
            for key in [key for key in self._versions if key[0] == rule_id]:
                del self._versions[key]

    def update_instruction(self, rule_id: str, system_instruction: str) -> ExtractionRule:
        with self._lock:
            return self.save(replace(self.get(rule_id), system_instruction=system_instruction))

    def add_skill(
        self,
        rule_id: str,
        name: str,
        description: str,
        *,
        category: SkillCategory = SkillCategory.TEXT,
        example: str = "",
        output_example: str = "",
    ) -> ExtractionSkill:
        """Append a skill to the end of the rule's skill list."""
        skill = ExtractionSkill(
            name=name,
            description=description,
            category=category,
            example=example,
            output_example=output_example,
        )
        with self._lock:
            rule = self.get(rule_id)
            self.save(replace(rule, skills=(*rule.skills, skill)))
        return skill

    def update_skill(self, rule_id: str, skill: ExtractionSkill) -> ExtractionRule:
        """Replace the skill with the same id, keeping its position."""
        with self._lock:
            rule = self.get(rule_id)
            if not any(existing.id == skill.id for existing in rule.skills):
                raise SkillNotFoundError(f"Skill {skill.id} not in rule {rule_id}")
            skills = tuple(skill if existing.id == skill.id else existing for existing in rule.skills)
            return self.save(replace(rule, skills=skills))

    def remove_skill(self, rule_id: str, skill_id: str) -> ExtractionRule:
        """Drop one skill; the others keep their relative order."""
        with self._lock:
            rule = self.get(rule_id)
            skills = tuple(skill for skill in rule.skills if skill.id != skill_id)
            if len(skills) == len(rule.skills):
                raise SkillNotFoundError(f"Skill {skill_id} not in rule {rule_id}")
            return self.save(replace(rule, skills=skills))
