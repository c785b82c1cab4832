from functools import lru_cache
from pathlib import Path

from extractdesk.ai.exceptions import AiServiceError
from extractdesk.documents.models import DocType

_PROMPT_DIR = Path(__file__).parent / "prompts"
_POLICY_DIR = _PROMPT_DIR / "policies"

_POLICY_FILES: dict[DocType, str] = {
    DocType.LOAN_AGREEMENT: "loan_agreement.txt",
    DocType.COURT_RULING: "court_ruling.txt",
}


@lru_cache(maxsize=None)
def load_prompt_template(name: str) -> str:
    """Load a bundled prompt template, e.g. ``"extraction_prompt"``.

    Raises:
        AiServiceError: if the template file cannot be read.
    """
    path = _PROMPT_DIR / f"{name}.txt"
    try:
        return path.read_text(encoding="utf-8")
    except OSError as exc:
        raise AiServiceError(f"Failed to load prompt template '{name}': {exc}") from exc


@lru_cache(maxsize=None)
def load_base_policy(doc_type: DocType) -> str:
    """Base extraction policy for a document type; DEFAULT when none is bundled."""
    filename = _POLICY_FILES.get(doc_type, "default.txt")
    try:
        return (_POLICY_DIR / filename).read_text(encoding="utf-8").strip()
    except OSError as exc:
        raise AiServiceError(f"Failed to load policy '{filename}': {exc}") from exc
