"""Normalization of raw advisory replies.

The backend sometimes returns structured ``weather``/``soil`` objects and
sometimes only mentions the readings in its free-text ``message``. Each field
family is resolved in two tiers:

1. the structured object, with every sub-field defaulted independently;
2. a text pattern over ``message``, used only when the structured object is
   missing.

``normalize`` never raises: anything missing or of the wrong type degrades to
a default or to ``None``.
"""

import re
from typing import Any

from farmgenie.core.models import (
    Continuation,
    NormalizedResponse,
    RawResponse,
    Soil,
    Weather,
)

WEATHER_PATTERN = re.compile(
    r"Weather in (.*?) is (.*?) with temperature (\d+(?:\.\d+)?)°C"
)
SOIL_MOISTURE_PATTERN = re.compile(r"soil moisture (\d+)%")

DEFAULT_LOCATION = "Unknown"
DEFAULT_CONDITION = "N/A"
DEFAULT_TEMPERATURE = 0
DEFAULT_MOISTURE = 0
DEFAULT_PH = 7
DEFAULT_NUTRIENT_LEVEL = "medium"


def _mapping(value: Any) -> dict:
    return value if isinstance(value, dict) else {}


def _text(value: Any, default: str) -> str:
    # Empty strings fall back too, matching how the backend omits readings
    if isinstance(value, str) and value:
        return value
    return default


def _number(value: Any, default: float) -> float:
    if isinstance(value, bool) or not isinstance(value, int | float):
        return default
    return value or default


def _temperature(value: Any) -> float | str:
    if isinstance(value, str) and value:
        return value
    return _number(value, DEFAULT_TEMPERATURE)


# -- weather --


def weather_from_structured(weather: dict) -> Weather:
    """Build a Weather from the backend's structured weather object."""
    current = _mapping(weather.get("current"))
    return Weather(
        location=_text(_mapping(weather.get("location")).get("name"), DEFAULT_LOCATION),
        condition=_text(_mapping(current.get("condition")).get("text"), DEFAULT_CONDITION),
        temperature_celsius=_temperature(current.get("temp_c")),
    )


def weather_from_message(message: str) -> Weather | None:
    """Scrape a Weather out of the reply text, or None if the phrasing is absent."""
    match = WEATHER_PATTERN.search(message)
    if match is None:
        return None
    location, condition, temperature = match.groups()
    return Weather(location=location, condition=condition, temperature_celsius=temperature)


def resolve_weather(raw: RawResponse, message: str) -> Weather | None:
    weather = raw.get("weather")
    if isinstance(weather, dict):
        return weather_from_structured(weather)
    return weather_from_message(message)


# -- soil --


def soil_from_structured(soil: dict) -> Soil:
    """Build a Soil from the backend's structured soil object."""
    return Soil(
        moisture=_number(soil.get("moisture"), DEFAULT_MOISTURE),
        ph=_number(soil.get("ph"), DEFAULT_PH),
        nitrogen=_text(soil.get("nitrogen"), DEFAULT_NUTRIENT_LEVEL),
        phosphorus=_text(soil.get("phosphorus"), DEFAULT_NUTRIENT_LEVEL),
        potassium=_text(soil.get("potassium"), DEFAULT_NUTRIENT_LEVEL),
    )


def soil_from_message(message: str) -> Soil | None:
    """Scrape soil moisture out of the reply text; the other readings keep their defaults."""
    match = SOIL_MOISTURE_PATTERN.search(message)
    if match is None:
        return None
    return Soil(moisture=int(match.group(1)))


def resolve_soil(raw: RawResponse, message: str) -> Soil | None:
    soil = raw.get("soil")
    if isinstance(soil, dict):
        return soil_from_structured(soil)
    return soil_from_message(message)


# -- continuation --


def resolve_continuation(raw: RawResponse) -> Continuation | None:
    redirect_url = raw.get("redirect_url")
    if raw.get("redirect") and isinstance(redirect_url, str) and redirect_url:
        return Continuation(redirect_url=redirect_url)
    return None


def normalize(raw: RawResponse) -> NormalizedResponse:
    """Convert a raw backend reply into a NormalizedResponse.

    Args:
        raw: JSON object parsed from the ``/agent`` reply. Non-dict input is
            treated as an empty reply.

    Returns:
        The canonical response. Calling it twice on the same input yields
        equal results.
    """
    if not isinstance(raw, dict):
        raw = {}

    message = raw.get("message")
    message = message if isinstance(message, str) else ""
    audio_url = raw.get("audio_url")

    return NormalizedResponse(
        message=message,
        weather=resolve_weather(raw, message),
        soil=resolve_soil(raw, message),
        audio_url=audio_url if isinstance(audio_url, str) and audio_url else None,
        continuation=resolve_continuation(raw),
    )
