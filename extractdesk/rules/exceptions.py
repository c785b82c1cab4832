class RuleError(Exception):
    """Base exception for rule library errors."""


class RuleNotFoundError(RuleError):
    """Raised when a rule id is not in the library."""


class RuleVersionError(RuleError):
    """Raised when a save would move a rule to an older version."""


class SkillNotFoundError(RuleError):
    """Raised when a skill id is not part of a rule."""
