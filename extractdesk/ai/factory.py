from dataclasses import dataclass
from typing import ClassVar

from extractdesk.ai.classifier import DocumentClassifier
from extractdesk.ai.client_base import BaseAiClient
from extractdesk.ai.example_client_adapter import ExampleClientAdapter
from extractdesk.ai.extractor import FieldExtractor
from extractdesk.ai.instruction_rewriter import InstructionRewriter
from extractdesk.ai.openai_client_adapter import OpenAIClientAdapter
from extractdesk.ai.refiner import FeedbackRefiner
from extractdesk.ai.region_analyzer import RegionAnalyzer
from extractdesk.ai.rule_synthesizer import RuleSynthesizer
from extractdesk.config.settings import Settings


@dataclass(frozen=True)
class AiServices:
    """One service per collaborator contract, sharing a single client."""

    classifier: DocumentClassifier
    extractor: FieldExtractor
    region_analyzer: RegionAnalyzer
    refiner: FeedbackRefiner
    synthesizer: RuleSynthesizer
    rewriter: InstructionRewriter


class AiServicesFactory:
    """Creates the configured client and wires every AI service to it."""

    OPENAI_COMPATIBLE_BASE_URLS: ClassVar[dict[str, str]] = {
        "openrouter": "https://openrouter.ai/api/v1",
        "groq": "https://api.groq.com/openai/v1",
        "together": "https://api.together.xyz/v1",
        "deepseek": "https://api.deepseek.com/v1",
        "ollama": "http://localhost:11434/v1",
    }

    @classmethod
    def create(cls, settings: Settings, client: BaseAiClient | None = None) -> AiServices:
        """Build all services; *client* overrides the provider-derived client."""
        if client is None:
            client = cls.create_client(settings)
        temperature = settings.ai_temperature
        return AiServices(
            classifier=DocumentClassifier(
                client=client,
                model=settings.classification_model,
                temperature=temperature,
                sample_chars=settings.classification_sample_chars,
            ),
            extractor=FieldExtractor(
                client=client,
                model=settings.extraction_model,
                temperature=temperature,
                model_aliases=settings.model_aliases,
            ),
            region_analyzer=RegionAnalyzer(
                client=client, model=settings.region_model, temperature=temperature
            ),
            refiner=FeedbackRefiner(
                client=client, model=settings.refinement_model, temperature=temperature
            ),
            synthesizer=RuleSynthesizer(
                client=client, model=settings.authoring_model, temperature=temperature
            ),
            rewriter=InstructionRewriter(
                client=client,
                model=settings.authoring_model,
                temperature=temperature,
                sample_chars=settings.evolution_sample_chars,
            ),
        )

    @classmethod
    def create_client(cls, settings: Settings) -> BaseAiClient:
        provider = settings.ai_provider.strip().lower()
        if provider == "example":
            return ExampleClientAdapter()
        return OpenAIClientAdapter(
            api_key=settings.ai_api_key,
            timeout_seconds=settings.ai_timeout_seconds,
            base_url=cls._resolve_base_url(provider, settings),
        )

    @classmethod
    def _resolve_base_url(cls, provider: str, settings: Settings) -> str | None:
        if provider == "openai":
            return None
        if provider == "openai_compatible":
            url = settings.ai_base_url.strip()
            if not url:
                raise ValueError("ai_base_url is required for ai_provider=openai_compatible")
            return url
        default_base_url = cls.OPENAI_COMPATIBLE_BASE_URLS.get(provider)
        if default_base_url is not None:
            return settings.ai_base_url.strip() or default_base_url
        supported = ["example", "openai", "openai_compatible", *sorted(cls.OPENAI_COMPATIBLE_BASE_URLS)]
        raise ValueError(f"Unknown AI provider '{provider}'. Choose from: {supported}")
