"""
Client configuration via pydantic-settings.

Loads values from .env file with defaults pointing at the hosted advisory backend.
Use ``get_settings()`` to obtain the cached singleton instance.
"""

from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """FarmGenie client settings loaded from environment / .env file.

    All settings can be overridden via environment variables or a `.env` file.
    Field names map directly to env var names (case-insensitive).

    Attributes:
        backend_url: Origin of the advisory backend; ``audio_url`` paths resolve against it.
        agent_path: Path of the advisory endpoint on the backend.
        follow_redirects: Whether a redirect continuation is followed after playback.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",  # Silently ignore unrecognized env vars
    )

    # --- Backend ---
    backend_url: str = "https://backend-agenticai-production.up.railway.app"
    agent_path: str = "/agent"
    request_timeout: float = 60.0  # Seconds; the agent synthesizes speech before replying

    # --- Capture ---
    # Microphone audio is captured as 16-bit PCM and uploaded in an Ogg container
    upload_filename: str = "voice.ogg"
    upload_mime_type: str = "audio/ogg"
    sample_rate: int = 16000
    channels: int = 1
    block_duration: float = 0.1  # Seconds of audio per captured chunk

    # --- Playback ---
    autoplay: bool = True  # False behaves like a runtime that blocks autoplay

    # --- Navigation ---
    follow_redirects: bool = True
    frontend_url: str = "http://localhost:3000"  # Origin that redirect paths resolve against
    open_browser: bool = False  # False = log redirects instead of opening a browser

    # --- Application ---
    log_level: str = "INFO"  # Python logging level


@lru_cache
def get_settings() -> Settings:
    """Return a cached Settings singleton.

    Uses ``functools.lru_cache`` so the .env file is read only once.
    Subsequent calls return the same ``Settings`` instance.

    Returns:
        Settings: The client-wide configuration object.
    """
    return Settings()
