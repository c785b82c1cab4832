from extractdesk.feedback.models import BadCase, BadCaseType
from extractdesk.logging.logger import Log


class BadCaseLedger:
    """Append-only bad-case list for one review session.

    Marking the same span twice keeps both entries. The ledger is emptied in
    bulk once a refinement run settles, whether it succeeded or not.
    """

    def __init__(self) -> None:
        self._entries: list[BadCase] = []

    def mark(self, text: str, type: BadCaseType, note: str | None = None) -> BadCase:
        if not text.strip():
            raise ValueError("Cannot mark an empty text span as a bad case")
        bad_case = BadCase(text=text, type=BadCaseType(type), note=note)
        self._entries.append(bad_case)
        Log.debug(f"Marked {bad_case.type.value} bad case ({len(self._entries)} in ledger)")
        return bad_case

    def entries(self) -> list[BadCase]:
        return list(self._entries)

    def preview(self, limit: int = 3) -> list[BadCase]:
        """First few entries for display; the ledger keeps all of them."""
        return self._entries[:limit]

    def clear(self) -> None:
        self._entries.clear()

    def __len__(self) -> int:
        return len(self._entries)

    def __bool__(self) -> bool:
        return bool(self._entries)
