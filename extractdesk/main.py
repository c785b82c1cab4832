import argparse
import asyncio
import json
from pathlib import Path

from extractdesk.ai.factory import AiServicesFactory
from extractdesk.config.settings import Settings
from extractdesk.documents.field_map import FieldMap
from extractdesk.documents.ingest import DocumentIngestor
from extractdesk.documents.store import DocumentStore
from extractdesk.logging.logger import Log
from extractdesk.orchestrator.orchestrator import ExtractionOrchestrator
from extractdesk.pdf.factory import PdfExtractorFactory
from extractdesk.rules.defaults import default_rules
from extractdesk.rules.library import RuleLibrary


def build_orchestrator(settings: Settings) -> ExtractionOrchestrator:
    """Wire the orchestrator with the default rule library and configured AI provider."""
    return ExtractionOrchestrator(
        documents=DocumentStore(),
        rules=RuleLibrary(default_rules()),
        services=AiServicesFactory.create(settings),
        settings=settings,
    )


def fields_to_json(fields: FieldMap) -> str:
    payload = [
        {
            "key": field.key,
            "label": field.label,
            "value": field.value,
            "confidence": field.confidence,
        }
        for field in fields.fields()
    ]
    return json.dumps(payload, ensure_ascii=False, indent=2)


async def run(pdf_path: Path, rule_id: str | None, settings: Settings) -> FieldMap:
    ingestor = DocumentIngestor(PdfExtractorFactory.create(settings))
    orchestrator = build_orchestrator(settings)
    document = ingestor.from_pdf(pdf_path.name, pdf_path.read_bytes())
    await orchestrator.register(document)
    if rule_id:
        await orchestrator.select_rule(document.id, rule_id)
    return await orchestrator.extract(document.id)


def main(argv: list[str] | None = None) -> int:
    """Entry point: load settings -> ingest PDF -> classify -> extract -> print JSON."""
    parser = argparse.ArgumentParser(
        prog="extractdesk", description="Extract structured fields from a PDF."
    )
    parser.add_argument("pdf", type=Path, help="path to the PDF document")
    parser.add_argument("--rule", default=None, help="rule id to apply instead of the type default")
    args = parser.parse_args(argv)

    settings = Settings()
    Log.configure(settings.log_level)

    fields = asyncio.run(run(args.pdf, args.rule, settings))
    print(fields_to_json(fields))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
