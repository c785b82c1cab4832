class OrchestrationError(Exception):
    """Base exception for orchestrated document operations."""


class RuleNotBoundError(OrchestrationError):
    """Raised when extraction is requested for a document with no rule."""


class ExtractionFailedError(OrchestrationError):
    """Raised after a failed extraction has rolled the document back."""


class RefinementFailedError(OrchestrationError):
    """Raised when refinement fails; the field map is left as it was."""


class EvolutionRefusedError(OrchestrationError):
    """Raised when rule evolution is requested without any human correction."""


class RuleEvolutionError(OrchestrationError):
    """Raised when rewriting the instruction fails; the stored rule is unchanged."""


class OperationTimeoutError(OrchestrationError):
    """Raised when a collaborator call exceeds the operation deadline."""


class RuleSynthesisError(OrchestrationError):
    """Raised when a rule cannot be drafted from a description."""
