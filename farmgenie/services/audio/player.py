"""
Playback of synthesized reply audio.

``start`` returns once playback has begun (or raises PlaybackBlockedError);
the returned handle's ``wait`` resolves when the clip has finished.
"""

import asyncio
import logging
from abc import ABC, abstractmethod

import httpx

from farmgenie.core.config import get_settings
from farmgenie.core.exceptions import PlaybackBlockedError
from farmgenie.services.audio.processor import AudioProcessor

logger = logging.getLogger(__name__)


class PlaybackHandle(ABC):
    """A clip that has started playing."""

    @abstractmethod
    async def wait(self) -> None:
        """Resolve when the clip has finished playing."""


class BaseAudioPlayer(ABC):
    """Interface that every audio output must implement."""

    @abstractmethod
    async def start(self, url: str) -> PlaybackHandle:
        """Begin playing the clip at ``url``.

        Raises:
            PlaybackBlockedError: If playback could not start.
        """


class _SoundDeviceHandle(PlaybackHandle):
    def __init__(self, sd) -> None:  # noqa: ANN001
        self._sd = sd

    async def wait(self) -> None:
        await asyncio.to_thread(self._sd.wait)


class SoundDevicePlayer(BaseAudioPlayer):
    """Downloads a reply clip and plays it on the default output device."""

    def __init__(
        self,
        autoplay: bool | None = None,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        settings = get_settings()
        self.autoplay = settings.autoplay if autoplay is None else autoplay
        self._timeout = timeout if timeout is not None else settings.request_timeout
        self._transport = transport

    async def _download(self, url: str) -> bytes:
        async with httpx.AsyncClient(timeout=self._timeout, transport=self._transport) as client:
            resp = await client.get(url)
            resp.raise_for_status()
            return resp.content

    async def start(self, url: str) -> PlaybackHandle:
        if not self.autoplay:
            raise PlaybackBlockedError("Autoplay disabled")

        try:
            import sounddevice as sd
        except OSError as exc:
            raise PlaybackBlockedError(f"PortAudio library not available: {exc}") from exc

        try:
            data = await self._download(url)
            samples, sample_rate = AudioProcessor.decode(data)
        except (httpx.HTTPError, RuntimeError) as exc:
            raise PlaybackBlockedError(f"Cannot load {url}: {exc}") from exc

        try:
            sd.play(samples, sample_rate)
        except (sd.PortAudioError, ValueError) as exc:
            raise PlaybackBlockedError(str(exc)) from exc

        logger.info("Playing %s (%.1fs)", url, len(samples) / sample_rate)
        return _SoundDeviceHandle(sd)
