from extractdesk.ai.client_base import BaseAiClient
from extractdesk.ai.prompt_loader import load_prompt_template
from extractdesk.ai.service_base import AiService
from extractdesk.documents.models import DocType
from extractdesk.logging.logger import Log

MIN_SAMPLE_CHARS = 1000

# Checked in order; the first keyword found in the reply decides the type.
_KEYWORDS: list[tuple[tuple[str, ...], DocType]] = [
    (("Loan",), DocType.LOAN_AGREEMENT),
    (("Mortgage",), DocType.MORTGAGE_CONTRACT),
    (("Court", "Ruling", "Judgment"), DocType.COURT_RULING),
    (("Evaluation", "Asset"), DocType.ASSET_EVALUATION),
    (("Transfer",), DocType.TRANSFER_AGREEMENT),
]


def label_to_doc_type(label: str) -> DocType:
    for keywords, doc_type in _KEYWORDS:
        if any(keyword in label for keyword in keywords):
            return doc_type
    return DocType.UNKNOWN


class DocumentClassifier(AiService):
    """Assigns a document category from the first page. Never raises."""

    operation = "classification"

    def __init__(
        self,
        *,
        client: BaseAiClient,
        model: str,
        temperature: float = 0.0,
        sample_chars: int = MIN_SAMPLE_CHARS,
    ) -> None:
        super().__init__(client=client, model=model, temperature=temperature)
        self._sample_chars = max(MIN_SAMPLE_CHARS, sample_chars)
        self._template = load_prompt_template("classification_prompt")

    async def classify(self, text: str) -> DocType:
        prompt = self._template.format(sample=text[: self._sample_chars])
        try:
            reply = await self._complete(prompt)
        except Exception as exc:
            Log.warning(f"Classification failed, falling back to Unknown: {exc}")
            return DocType.UNKNOWN
        doc_type = label_to_doc_type(reply.strip())
        Log.info(f"Classified document as {doc_type.value}")
        return doc_type
