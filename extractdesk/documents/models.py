from dataclasses import dataclass
from enum import Enum

FieldValue = str | int | float | None

HUMAN_CONFIDENCE = 1.0


class DocType(str, Enum):
    """Business document categories handled by the desk."""

    LOAN_AGREEMENT = "Loan Agreement"
    MORTGAGE_CONTRACT = "Mortgage Contract"
    COURT_RULING = "Court Ruling"
    ASSET_EVALUATION = "Asset Evaluation"
    TRANSFER_AGREEMENT = "Transfer Agreement"
    UNKNOWN = "Unknown"

    @property
    def label_cn(self) -> str:
        return _DOC_TYPE_CN[self]


_DOC_TYPE_CN: dict[DocType, str] = {
    DocType.LOAN_AGREEMENT: "借款合同",
    DocType.MORTGAGE_CONTRACT: "抵押担保合同",
    DocType.COURT_RULING: "法院判决/裁定书",
    DocType.ASSET_EVALUATION: "资产评估报告",
    DocType.TRANSFER_AGREEMENT: "债权转让协议",
    DocType.UNKNOWN: "未知类型",
}


@dataclass(frozen=True)
class ExtractionField:
    """A single extracted datum.

    ``value`` is None while the field is not found. ``is_edited`` is set by
    manual edits (confidence 1.0) and by region fills (confidence 0.95).
    """

    key: str
    label: str
    value: FieldValue = None
    confidence: float = 0.0
    is_edited: bool = False
    source_page: int | None = 1

    def __post_init__(self) -> None:
        if not 0.0 <= self.confidence <= 1.0:
            raise ValueError(
                f"Field '{self.key}': confidence must be within [0, 1], got {self.confidence}"
            )

    @property
    def is_missing(self) -> bool:
        return self.value is None or self.value == ""
