"""Centralized configuration via pydantic-settings."""

from enum import Enum

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class PoolMode(str, Enum):
    """How synthesizer handles are handed out."""

    lease = "lease"
    shared = "shared"


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8")

    # Service
    host: str = "0.0.0.0"
    port: int = 3000
    log_level: str = "INFO"

    # Azure Speech (recognition + synthesis)
    azure_speech_key: str = ""
    azure_speech_region: str = ""
    recognition_language: str = "auto"
    recognition_candidate_languages: str = "en-US,es-ES,fr-FR,de-DE"
    synthesis_voice: str = "en-US-JennyMultilingualNeural"

    # Azure Translator
    azure_translator_key: str = ""
    azure_translator_region: str = ""
    azure_translator_endpoint: str = ""
    default_target_lang: str = "en-US"

    # Admission queue
    queue_concurrency: int = Field(default=5, gt=0)
    max_queue_depth: int = Field(default=0, ge=0)

    # Synthesizer pool
    synth_pool_size: int = Field(default=5, gt=0)
    synth_pool_mode: PoolMode = PoolMode.lease

    # Per-stage deadlines in seconds, 0 disables
    recognition_timeout: float = Field(default=30.0, ge=0)
    translation_timeout: float = Field(default=15.0, ge=0)
    synthesis_timeout: float = Field(default=30.0, ge=0)

    @property
    def candidate_languages(self) -> list[str]:
        return [
            lang.strip() for lang in self.recognition_candidate_languages.split(",") if lang.strip()
        ]

    @property
    def translator_endpoint(self) -> str:
        if self.azure_translator_endpoint:
            return self.azure_translator_endpoint.rstrip("/")
        return f"https://{self.azure_translator_region}.api.cognitive.microsoft.com"
