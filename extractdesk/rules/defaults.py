"""Built-in rules the library is seeded with."""

import json

from extractdesk.documents.models import DocType
from extractdesk.rules.models import ExtractionRule, ExtractionSkill, SkillCategory


def _schema(fields: dict[str, str]) -> str:
    return json.dumps(fields, ensure_ascii=False, indent=2)


def default_rules() -> list[ExtractionRule]:
    return [
        ExtractionRule(
            id="rule-loan-001",
            doc_type=DocType.LOAN_AGREEMENT,
            name="借款合同核心要素提取",
            skills=(
                ExtractionSkill(
                    id="sk-1",
                    name="借款本金",
                    category=SkillCategory.AMOUNT,
                    description="提取合同约定的借款本金金额，统一转换为纯数字格式。",
                    example="伍仟万元整",
                    output_example="50000000",
                ),
                ExtractionSkill(
                    id="sk-2",
                    name="借款期限",
                    category=SkillCategory.DATE,
                    description="提取借款起始日期和到期日期。",
                    example="自2023年1月10日起",
                    output_example="2023-01-10",
                ),
                ExtractionSkill(
                    id="sk-3",
                    name="年利率",
                    category=SkillCategory.AMOUNT,
                    description="提取借款的年化利率（%）。",
                    example="固定利率 6.5%",
                    output_example="6.5%",
                ),
                ExtractionSkill(
                    id="sk-4",
                    name="担保措施",
                    category=SkillCategory.TEXT,
                    description="提取所有的担保方式及担保人/抵押人名称。",
                    example="湖北天诚置业有限公司 提供连带责任保证担保",
                    output_example="连带责任保证: 湖北天诚置业有限公司",
                ),
            ),
            schema=_schema({
                "借款人名称": "string",
                "借款本金": "number",
                "年利率": "string",
                "起始日期": "string",
                "结束日期": "string",
                "担保人列表": "array",
            }),
            system_instruction=(
                "分析借款合同，提取借款人、本金、利率、期限及担保信息。"
                "确保金额为数字，日期格式为YYYY-MM-DD。"
            ),
        ),
        ExtractionRule(
            id="rule-court-001",
            doc_type=DocType.COURT_RULING,
            name="法院判决结果结构化",
            schema=_schema({
                "案号": "string",
                "被告名称": "string",
                "判决本金": "number",
                "判决日期": "string",
                "责任类型": "string",
            }),
            system_instruction=(
                "分析法院判决书。提取案号、被告名称、判决偿还的总金额（本金）、"
                "判决日期以及责任类型（如连带责任）。"
            ),
        ),
        ExtractionRule(
            id="rule-mort-001",
            doc_type=DocType.MORTGAGE_CONTRACT,
            name="抵押物信息提取",
            schema=_schema({
                "抵押人": "string",
                "抵押物名称": "string",
                "坐落位置": "string",
                "最高债权额": "number",
            }),
            system_instruction="从抵押合同中提取抵押人、抵押物名称、坐落位置及最高债权额度。",
        ),
        ExtractionRule(
            id="rule-eval-001",
            doc_type=DocType.ASSET_EVALUATION,
            name="资产评估价值提取",
            schema=_schema({
                "资产名称": "string",
                "评估方法": "string",
                "市场价值": "number",
                "清算价值": "number",
                "评估基准日": "string",
            }),
            system_instruction=(
                "分析资产评估报告，提取资产名称、使用的评估方法、市场评估价值、"
                "清算价值（如有）及评估基准日。"
            ),
        ),
        ExtractionRule(
            id="rule-transfer-001",
            doc_type=DocType.TRANSFER_AGREEMENT,
            name="债权转让条款分析",
            schema=_schema({
                "转让方": "string",
                "受让方": "string",
                "转让价格": "number",
                "债权基准日": "string",
            }),
            system_instruction="提取债权转让协议中的转让方、受让方、转让对价金额及债权基准日。",
        ),
    ]
