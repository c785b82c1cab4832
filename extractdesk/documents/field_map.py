"""The owned field map of a document and its writers.

Every code path that changes extracted data goes through one ``FieldMap``
method. The confidence and edit-flag contract of each writer lives here:

=================  ==========  =========
writer             confidence  is_edited
=================  ==========  =========
AI extraction      from model  False
manual edit        1.0         True
import             0.0         False
region analysis    0.95        True
refinement         0.99        False
=================  ==========  =========
"""

import json
import re
from collections.abc import Iterable, Iterator, Mapping, Sequence
from dataclasses import replace

from extractdesk.documents.exceptions import FieldNotFoundError
from extractdesk.documents.matching import KeyMatcher
from extractdesk.documents.models import HUMAN_CONFIDENCE, ExtractionField, FieldValue

REGION_CONFIDENCE = 0.95
REFINEMENT_CONFIDENCE = 0.99
IMPORTED_CONFIDENCE = 0.0

_LABEL_SEPARATORS = re.compile(r"[,;\n]+")
_CASE_BOUNDARY = re.compile(r"(?<=[a-z0-9])(?=[A-Z])|(?<=[A-Z])(?=[A-Z][a-z])")


def humanize_label(key: str) -> str:
    """Display label for a field key.

    Non-ASCII keys (e.g. ``借款人名称``) are kept verbatim. ASCII keys are split
    at case boundaries: ``borrowerName`` -> ``borrower Name``,
    ``HTTPStatus`` -> ``HTTP Status``, ``loan_amount`` -> ``loan amount``.
    """
    if not key.isascii():
        return key
    spaced = _CASE_BOUNDARY.sub(" ", key.replace("_", " "))
    return " ".join(spaced.split())


def parse_field_labels(text: str) -> list[str]:
    """Split free-text import input on commas, semicolons and newlines."""
    return [part.strip() for part in _LABEL_SEPARATORS.split(text) if part.strip()]


def coerce_value(raw: object) -> FieldValue:
    """Coerce a collaborator-supplied leaf into a field value."""
    if raw is None or isinstance(raw, str):
        return raw
    if isinstance(raw, bool):
        return "true" if raw else "false"
    if isinstance(raw, (int, float)):
        return raw
    if isinstance(raw, (list, tuple)):
        if all(item is None or isinstance(item, (str, int, float)) for item in raw):
            return ", ".join(str(item) for item in raw if item is not None)
    return json.dumps(raw, ensure_ascii=False)


class FieldMap:
    """Mapping of field key to ExtractionField, with one method per writer."""

    def __init__(self, fields: Iterable[ExtractionField] = ()) -> None:
        self._fields: dict[str, ExtractionField] = {}
        for field in fields:
            self._fields[field.key] = field

    @classmethod
    def from_extraction(cls, fields: Iterable[ExtractionField]) -> "FieldMap":
        """Fresh AI write: replaces everything, no field carries an edit flag."""
        return cls(replace(field, is_edited=False) for field in fields)

    # ------------------------------------------------------------------
    # Read access
    # ------------------------------------------------------------------

    def __getitem__(self, key: str) -> ExtractionField:
        try:
            return self._fields[key]
        except KeyError:
            raise FieldNotFoundError(f"Field '{key}' is not in the field map") from None

    def __contains__(self, key: object) -> bool:
        return key in self._fields

    def __iter__(self) -> Iterator[str]:
        return iter(self._fields)

    def __len__(self) -> int:
        return len(self._fields)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, FieldMap):
            return NotImplemented
        return self._fields == other._fields

    def __repr__(self) -> str:
        return f"FieldMap({list(self._fields.values())!r})"

    def keys(self) -> list[str]:
        return list(self._fields)

    def fields(self) -> list[ExtractionField]:
        return list(self._fields.values())

    def values(self) -> dict[str, FieldValue]:
        """Key -> value snapshot, as sent to refinement and rule evolution."""
        return {key: field.value for key, field in self._fields.items()}

    def missing_keys(self) -> list[str]:
        return [key for key, field in self._fields.items() if field.is_missing]

    def edited_keys(self) -> list[str]:
        return [key for key, field in self._fields.items() if field.is_edited]

    def snapshot(self) -> "FieldMap":
        """Independent copy; callers take one before re-running extraction."""
        return FieldMap(self._fields.values())

    # ------------------------------------------------------------------
    # Writers
    # ------------------------------------------------------------------

    def apply_manual_edit(self, key: str, value: FieldValue) -> ExtractionField:
        """Human override: confidence 1.0 and edit flag set."""
        field = replace(self[key], value=value, confidence=HUMAN_CONFIDENCE, is_edited=True)
        self._fields[key] = field
        return field

    def import_labels(self, labels: Iterable[str]) -> list[str]:
        """Add an empty field for every label not already present.

        The label doubles as the key. Returns the keys that were added.
        """
        added: list[str] = []
        for label in labels:
            if not label or label in self._fields:
                continue
            self._fields[label] = ExtractionField(
                key=label,
                label=label,
                value=None,
                confidence=IMPORTED_CONFIDENCE,
            )
            added.append(label)
        return added

    def apply_region_result(
        self,
        data: Mapping[str, object],
        targets: Sequence[str],
        matcher: KeyMatcher,
    ) -> list[str]:
        """Fill target fields from a region-analysis payload.

        Each returned key is resolved against the targets not yet filled in
        this call; unmatched keys and empty values are dropped. Filled fields
        are treated as semi-manual: confidence 0.95 and edit flag set.
        """
        filled: list[str] = []
        for returned_key, raw in data.items():
            value = coerce_value(raw)
            if value is None or value == "":
                continue
            # First returned key wins; later keys for the same target are dropped.
            remaining = [key for key in targets if key in self._fields and key not in filled]
            target = matcher.match(returned_key, remaining)
            if target is None:
                continue
            self._fields[target] = replace(
                self._fields[target],
                value=value,
                confidence=REGION_CONFIDENCE,
                is_edited=True,
            )
            filled.append(target)
        return filled

    def apply_refinement(self, refined: Mapping[str, object]) -> list[str]:
        """Merge a refinement reply; returns the keys whose value changed.

        Changed values are system-refined: confidence 0.99 and the edit flag
        cleared, even when a human had edited the field before. Unchanged and
        absent keys keep their current state; unknown keys are ignored.
        """
        changed: list[str] = []
        for key, raw in refined.items():
            current = self._fields.get(key)
            if current is None:
                continue
            value = coerce_value(raw)
            if value == current.value:
                continue
            self._fields[key] = replace(
                current,
                value=value,
                confidence=REFINEMENT_CONFIDENCE,
                is_edited=False,
            )
            changed.append(key)
        return changed
