"""Configuration settings for MindWell Voice."""

import os
from functools import lru_cache

from dotenv import load_dotenv

load_dotenv()


class Settings:
    """Application settings loaded from environment variables."""

    # Database
    DATABASE_URL: str = os.getenv("DATABASE_URL", "sqlite:///./mindwell_voice.db")

    # Upload
    UPLOAD_DIR: str = os.getenv("UPLOAD_DIR", "uploads/audio")
    MAX_UPLOAD_SIZE_MB: int = int(os.getenv("MAX_UPLOAD_SIZE_MB", "25"))

    # Speech-to-text: "local" (faster-whisper) or "openai" (whisper-1)
    TRANSCRIPTION_PROVIDER: str = os.getenv("TRANSCRIPTION_PROVIDER", "local")
    WHISPER_MODEL_SIZE: str = os.getenv("WHISPER_MODEL_SIZE", "base")
    TRANSCRIPTION_LANGUAGE: str = os.getenv("TRANSCRIPTION_LANGUAGE", "pt")

    # OpenAI
    OPENAI_API_KEY: str = os.getenv("OPENAI_API_KEY", "")
    OPENAI_MODEL: str = os.getenv("OPENAI_MODEL", "gpt-4o")
    OPENAI_TIMEOUT_SECONDS: float = float(os.getenv("OPENAI_TIMEOUT_SECONDS", "45"))

    # Processing jobs
    JOB_TIMEOUT_SECONDS: int = int(os.getenv("JOB_TIMEOUT_SECONDS", "600"))
    JOB_RETENTION_HOURS: int = int(os.getenv("JOB_RETENTION_HOURS", "72"))

    # Client
    API_BASE_URL: str = os.getenv("API_BASE_URL", "http://localhost:8000")
    STATUS_POLL_INTERVAL_SECONDS: float = float(os.getenv("STATUS_POLL_INTERVAL_SECONDS", "2"))

    # Application
    APP_ENV: str = os.getenv("APP_ENV", "development")
    DEBUG: bool = os.getenv("DEBUG", "false").lower() == "true"

    def validate(self) -> list[str]:
        """Validate settings and return list of warnings."""
        warnings = []
        if not self.OPENAI_API_KEY:
            warnings.append("OPENAI_API_KEY is not set - audio analysis will fail")
        if self.TRANSCRIPTION_PROVIDER not in ("local", "openai"):
            warnings.append(f"Unknown TRANSCRIPTION_PROVIDER '{self.TRANSCRIPTION_PROVIDER}' - falling back to local")
        return warnings


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
