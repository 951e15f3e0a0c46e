"""
Configuration & Settings
Spyglass — Competitive Intelligence Briefings
"""

from pydantic import BaseModel
from typing import List
import os


class Settings(BaseModel):
    # App
    APP_NAME: str = "Spyglass — Competitive Intelligence Briefings"
    APP_VERSION: str = "2.1.0"
    DEBUG: bool = os.getenv("SPYGLASS_DEBUG", "").lower() in ("1", "true", "yes")

    # Database (history persistence)
    DATABASE_URL: str = os.getenv("DATABASE_URL", "sqlite:///./spyglass.db")
    HISTORY_KEY: str = "spyglass-history"

    # Generation backend
    # "gemini" talks to the API directly, "proxy" goes through our FastAPI relay,
    # "mock" returns canned content (demo / offline).
    BACKEND: str = os.getenv("SPYGLASS_BACKEND", "gemini")
    GEMINI_API_KEY: str = os.getenv("GEMINI_API_KEY", os.getenv("API_KEY", ""))
    PROXY_URL: str = os.getenv("SPYGLASS_API_URL", "http://127.0.0.1:8000/api/v1")
    REQUEST_TIMEOUT: int = 120
    MAX_RETRIES: int = 3

    # Models
    REPORT_MODEL: str = "gemini-2.5-pro"
    IMAGE_MODEL: str = "gemini-2.5-flash-image"
    VIDEO_MODEL: str = "veo-3.1-fast-generate-preview"
    SPEECH_MODEL: str = "gemini-2.5-flash-preview-tts"
    FAST_MODEL: str = "gemini-2.5-flash"

    # Presentation
    REVEAL_INTERVAL_SECONDS: float = 2.0
    NARRATION_MAX_CHARS: int = 400
    NARRATION_VOICE: str = "Kore"
    VOICES: List[str] = ["Zephyr", "Kore", "Puck", "Charon", "Fenrir"]

    # Audio (speech output is raw little-endian int16 PCM)
    AUDIO_SAMPLE_RATE: int = 24000
    AUDIO_CHANNELS: int = 1

    # Input form
    COMPETITOR_SLOTS: int = 3
    MIN_COMPETITOR_NAME_LENGTH: int = 3

    # Video
    VIDEO_POLL_INTERVAL_SECONDS: float = 10.0
    VIDEO_ASPECT_RATIOS: List[str] = ["16:9", "9:16"]

    # API
    API_HOST: str = "0.0.0.0"
    API_PORT: int = 8000


settings = Settings()
