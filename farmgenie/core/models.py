"""
Domain models shared by the session pipeline.

Pydantic v2 models describe what the advisory backend returns once normalized;
``Session`` is the mutable per-interaction record owned by the recorder.
"""

from dataclasses import dataclass, field
from enum import StrEnum
from typing import Any

from pydantic import BaseModel, ConfigDict

RawResponse = dict[str, Any]

# ---------------------------------------------------------------------------
# Session
# ---------------------------------------------------------------------------


class SessionState(StrEnum):
    """Possible states for a voice/text session."""

    idle = "idle"
    recording = "recording"
    finalizing = "finalizing"
    submitting = "submitting"
    playing = "playing"


@dataclass
class Session:
    """One voice/text interaction.

    ``accumulated_audio`` is append-only while recording and is cleared when
    the next recording starts.
    """

    state: SessionState = SessionState.idle
    accumulated_audio: list[bytes] = field(default_factory=list)
    text_query: str | None = None


class AudioArtifact(BaseModel):
    """Finalized capture ready for upload."""

    model_config = ConfigDict(frozen=True)

    data: bytes
    filename: str
    mime_type: str


# ---------------------------------------------------------------------------
# Advisory response
# ---------------------------------------------------------------------------


class Weather(BaseModel):
    """Current weather at the queried location.

    ``temperature_celsius`` stays a string when it was scraped from the reply
    text, keeping the precision the backend wrote.
    """

    model_config = ConfigDict(frozen=True)

    location: str
    condition: str
    temperature_celsius: float | str


class Soil(BaseModel):
    """Soil readings for the queried field."""

    model_config = ConfigDict(frozen=True)

    moisture: float
    ph: float = 7
    nitrogen: str = "medium"
    phosphorus: str = "medium"
    potassium: str = "medium"

    @property
    def remaining_percent(self) -> float:
        """Share of the moisture gauge left unfilled."""
        return 100 - self.moisture


class Continuation(BaseModel):
    """Action deferred until audio playback has finished or was blocked."""

    model_config = ConfigDict(frozen=True)

    redirect_url: str


class NormalizedResponse(BaseModel):
    """Canonical advisory reply consumed by the front end and playback."""

    model_config = ConfigDict(frozen=True)

    message: str = ""
    weather: Weather | None = None
    soil: Soil | None = None
    audio_url: str | None = None
    continuation: Continuation | None = None
