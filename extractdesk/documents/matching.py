"""Strategies for resolving AI-returned field names to existing field keys."""

from abc import ABC, abstractmethod
from collections.abc import Sequence


class KeyMatcher(ABC):
    """Contract for mapping a returned key onto one of the candidate keys."""

    @abstractmethod
    def match(self, returned_key: str, candidates: Sequence[str]) -> str | None:
        """Return the first candidate matching *returned_key*, or None."""


class ContainmentKeyMatcher(KeyMatcher):
    """Matches when either key contains the other (case-sensitive).

    ``担保人名称`` resolves to ``担保人`` and ``担保人`` resolves to
    ``担保人名称``. Candidates are tried in order; the first hit wins.
    """

    def match(self, returned_key: str, candidates: Sequence[str]) -> str | None:
        if not returned_key:
            return None
        for candidate in candidates:
            if candidate in returned_key or returned_key in candidate:
                return candidate
        return None


class ExactKeyMatcher(KeyMatcher):
    """Matches only identical keys."""

    def match(self, returned_key: str, candidates: Sequence[str]) -> str | None:
        return returned_key if returned_key in candidates else None


_MATCHERS: dict[str, type[KeyMatcher]] = {
    "containment": ContainmentKeyMatcher,
    "exact": ExactKeyMatcher,
}


def matcher_for(strategy: str) -> KeyMatcher:
    """Build the matcher configured by name."""
    matcher_cls = _MATCHERS.get(strategy.lower())
    if matcher_cls is None:
        raise ValueError(
            f"Unknown field match strategy '{strategy}'. Choose from: {list(_MATCHERS)}"
        )
    return matcher_cls()
