"""
Application configuration via pydantic-settings.

Loads values from .env file with sensible defaults for local development.
Use ``get_settings()`` to obtain the cached singleton instance.
"""

import logging
from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Rant to Reflection settings loaded from environment / .env file.

    All settings can be overridden via environment variables or a `.env` file.
    Field names map directly to env var names (case-insensitive).

    Attributes:
        stt_provider: Speech-to-text backend ("elevenlabs" or "local").
        elevenlabs_api_key: Voice provider key; TTS/STT fail without it.
        database_url: Async SQLAlchemy connection string for SQLite.
        max_recording_seconds: Recorder countdown before auto-stop.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",  # Silently ignore unrecognized env vars
    )

    # --- Voice provider (ElevenLabs-compatible HTTP API) ---
    elevenlabs_api_key: str = ""
    elevenlabs_base_url: str = "https://api.elevenlabs.io"
    elevenlabs_timeout: float = 60.0
    tts_voice_id: str = "EXAVITQu4vr4xnSDxMaL"  # "Bella"
    tts_model_id: str = "eleven_monolingual_v1"
    tts_stability: float = 0.5
    tts_similarity_boost: float = 0.75
    tts_cache_max_age: int = 3600  # Cache-Control max-age for synthesized audio

    # --- Speech-to-text ---
    stt_provider: str = "elevenlabs"  # "elevenlabs" or "local" (faster-whisper)
    stt_model_id: str = "scribe_v1"
    whisper_model: str = "base"  # Used when stt_provider="local"

    # --- Auth ---
    session_ttl_hours: int = 24 * 7

    # --- Recording ---
    max_recording_seconds: int = 180
    max_upload_bytes: int = 25 * 1024 * 1024

    # --- Application ---
    app_host: str = "0.0.0.0"  # Bind address for the FastAPI server
    app_port: int = 8000
    log_level: str = "INFO"  # Python logging level
    cors_origins: list[str] = [
        "http://localhost:8501",  # Streamlit
        "http://localhost:3000",
    ]

    # --- Storage ---
    # Paths are relative to the project root; absolute paths also supported
    database_url: str = "sqlite+aiosqlite:///data/rants.db"
    audio_dir: str = "data/audio"  # Uploaded / recorded rant audio


@lru_cache
def get_settings() -> Settings:
    """Return a cached Settings singleton.

    Uses ``functools.lru_cache`` so the .env file is read only once.
    Subsequent calls return the same ``Settings`` instance.

    Returns:
        Settings: The application-wide configuration object.
    """
    return Settings()


def configure_logging(level: str | None = None) -> None:
    """Configure root logging from ``settings.log_level``."""
    logging.basicConfig(
        level=(level or get_settings().log_level).upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    logging.getLogger("httpx").setLevel(logging.WARNING)
