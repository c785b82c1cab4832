from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application configuration loaded from environment variables."""

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    app_env: str = "dev"
    log_level: str = "INFO"

    pdf_engine: str = "pdfplumber"

    ai_provider: str = "openai"
    ai_api_key: str = ""
    ai_base_url: str = ""
    ai_timeout_seconds: int = 60
    ai_temperature: float = 0.0

    classification_model: str = "gpt-4o-mini"
    extraction_model: str = "gpt-4o"
    refinement_model: str = "gpt-4o"
    region_model: str = "gpt-4o-mini"
    authoring_model: str = "gpt-4o"
    model_aliases: dict[str, str] = Field(default_factory=dict)

    classification_sample_chars: int = Field(default=1000, ge=1000)
    evolution_sample_chars: int = Field(default=2000, gt=0)
    operation_timeout_seconds: float = Field(default=120.0, gt=0)

    field_match_strategy: str = "containment"
