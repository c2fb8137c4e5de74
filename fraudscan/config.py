"""Configuration management using Pydantic Settings"""

from typing import Optional
from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application configuration loaded from environment variables"""

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    # Service
    service_name: str = "fraudscan"
    log_level: str = "INFO"

    # HTTP Client
    http_timeout_seconds: float = 30.0

    # Fraud scorer (Gemini)
    gemini_api_key: Optional[str] = Field(
        default=None, validation_alias=AliasChoices("GEMINI_API_KEY", "API_KEY")
    )
    gemini_model: str = "gemini-2.5-flash"
    gemini_api_base: str = "https://generativelanguage.googleapis.com/v1beta"

    # Persistence (Supabase)
    supabase_url: Optional[str] = Field(
        default=None, validation_alias=AliasChoices("SUPABASE_URL", "VITE_SUPABASE_URL")
    )
    supabase_anon_key: Optional[str] = Field(
        default=None, validation_alias=AliasChoices("SUPABASE_ANON_KEY", "VITE_SUPABASE_ANON_KEY")
    )
    supabase_table: str = "fraud_detections"

    # Suspicion policy
    deviation_threshold: float = 3.0
    high_volume_threshold: int = 100
    high_volume_deviation_threshold: float = 2.0

    # Candidate selection / presentation
    max_candidates: int = Field(default=30, ge=1, le=30)
    scatter_sample_size: int = 500

    # Analysis sessions kept in memory
    max_sessions: int = 100


settings = Settings()
