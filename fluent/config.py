"""
Configuration management for the Fluent learning pipeline
"""

import logging
from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings with environment variable support"""

    # Application Configuration
    log_level: str = Field(default="INFO")
    debug: bool = Field(default=False)

    # Database Configuration
    database_url: str = Field(default="sqlite:///data/fluent.db")

    # Language Configuration
    default_source_language: str = Field(default="en")
    default_target_language: str = Field(default="ja")

    # Translation Providers
    translation_providers: str = Field(default="lingva,mymemory,libretranslate,openai")
    provider_timeout: float = Field(default=5.0)
    lingva_url: str = Field(default="https://lingva.ml/api/v1")
    mymemory_url: str = Field(default="https://api.mymemory.translated.net/get")
    mymemory_email: str | None = Field(default=None)
    libretranslate_url: str = Field(default="https://libretranslate.com/translate")
    libretranslate_api_key: str | None = Field(default=None)

    # OpenAI Configuration (optional last-resort provider)
    openai_api_key: str | None = Field(default=None)
    openai_model: str = Field(default="gpt-4o-mini")
    openai_max_tokens: int = Field(default=200)
    openai_temperature: float = Field(default=1.0)

    # Translation Cache
    translation_cache_max_entries: int | None = Field(default=None)

    # Vocabulary Classification
    spacy_model: str = Field(default="en_core_web_sm")
    min_word_length: int = Field(default=3)
    max_word_length: int = Field(default=15)
    classifier_cache_max_entries: int | None = Field(default=256)

    # Mixed Content Composition
    immersive_script_ratio: float = Field(default=0.2)
    max_concurrent_translations: int = Field(default=8)

    # Spaced Repetition Configuration
    default_ease_factor: float = Field(default=2.5)
    min_ease_factor: float = Field(default=1.3)
    mature_interval_days: int = Field(default=21)
    default_cards_per_session: int = Field(default=20)

    @property
    def translation_provider_list(self) -> list[str]:
        """Convert translation_providers string to an ordered list of names"""
        if not self.translation_providers.strip():
            return []
        return [
            name.strip().lower()
            for name in self.translation_providers.split(",")
            if name.strip()
        ]

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        env_nested_delimiter="__",
        extra="ignore"
    )


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance"""
    return Settings()


def get_database_path(settings: Settings | None = None) -> str:
    """Get the database file path from URL"""
    settings = settings or get_settings()
    if settings.database_url.startswith("sqlite:///"):
        return settings.database_url.replace("sqlite:///", "")
    return "data/fluent.db"


def setup_logging(settings: Settings | None = None) -> None:
    """Configure root logging from settings"""
    settings = settings or get_settings()
    level = logging.DEBUG if settings.debug else getattr(
        logging, settings.log_level.upper(), logging.INFO
    )
    logging.basicConfig(
        level=level,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )
