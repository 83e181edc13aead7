"""
Configuration management for the itinerary planner.
Supports two completion providers for extraction: Anthropic and OpenAI.
"""
from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import Optional


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Completion providers (Anthropic wins when both keys are set)
    anthropic_api_key: Optional[str] = None
    openai_api_key: Optional[str] = None
    anthropic_model: str = "claude-3-haiku-20240307"
    openai_vision_model: str = "gpt-4o-mini"
    openai_text_model: str = "gpt-3.5-turbo"
    llm_max_tokens: int = 1024

    # Geocoding
    nominatim_url: str = "https://nominatim.openstreetmap.org/search"
    geocoder_user_agent: str = "I-Got-This-Itinerary/1.0"

    # Page scraping
    scraper_user_agent: str = (
        "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
        "(KHTML, like Gecko) Chrome/91.0.4472.124 Safari/537.36"
    )
    page_content_limit: int = 15000

    # Outbound HTTP
    http_timeout: float = 60.0

    # Local storage for the trip store
    storage_dir: str = ".itinerary_data"

    # Server Configuration
    host: str = "127.0.0.1"
    port: int = 8000
    debug: bool = True
    log_level: str = "INFO"


# Global settings instance
settings = Settings()


def get_provider_name(config: Optional[Settings] = None) -> Optional[str]:
    """Name of the completion provider that will serve extraction requests."""
    config = config or settings
    if config.anthropic_api_key:
        return "anthropic"
    if config.openai_api_key:
        return "openai"
    return None
