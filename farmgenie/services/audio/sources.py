"""
Audio capture sources.

A source delivers encoded-or-raw chunks as they become available and knows
how to seal the collected chunks into one uploadable file.
"""

import asyncio
import logging
import mimetypes
from abc import ABC, abstractmethod
from collections.abc import AsyncIterator
from pathlib import Path

from farmgenie.core.config import get_settings
from farmgenie.core.exceptions import MicAccessError
from farmgenie.services.audio.processor import AudioProcessor

logger = logging.getLogger(__name__)

_END_OF_STREAM = None


class BaseAudioSource(ABC):
    """Interface that every capture source must implement."""

    filename: str
    mime_type: str

    @abstractmethod
    async def open(self) -> None:
        """Acquire the device and begin delivering chunks.

        Raises:
            MicAccessError: If the device is denied or unavailable.
        """

    @abstractmethod
    def chunks(self) -> AsyncIterator[bytes]:
        """Yield chunks in arrival order until ``close`` has been called."""

    @abstractmethod
    async def close(self) -> None:
        """Release the device. Chunks already captured are still yielded."""

    def encode(self, chunks: list[bytes]) -> bytes:
        """Seal the collected chunks into the upload container."""
        return b"".join(chunks)


class MicrophoneSource(BaseAudioSource):
    """Captures 16-bit PCM from the default input device via sounddevice.

    The PortAudio callback runs on its own thread; it only hands bytes to the
    event loop with ``call_soon_threadsafe`` and never touches session state.
    """

    def __init__(
        self,
        sample_rate: int | None = None,
        channels: int | None = None,
        block_duration: float | None = None,
        device: int | str | None = None,
    ) -> None:
        settings = get_settings()
        self.sample_rate = sample_rate or settings.sample_rate
        self.channels = channels or settings.channels
        self.block_duration = block_duration or settings.block_duration
        self.device = device
        self.filename = settings.upload_filename
        self.mime_type = settings.upload_mime_type
        self._processor = AudioProcessor(self.sample_rate, 2, self.channels)
        self._queue: asyncio.Queue[bytes | None] = asyncio.Queue()
        self._stream = None

    async def open(self) -> None:
        # PortAudio is loaded on first use so the rest of the client imports
        # on machines without an audio stack.
        try:
            import sounddevice as sd
        except OSError as exc:
            raise MicAccessError(f"PortAudio library not available: {exc}") from exc

        loop = asyncio.get_running_loop()
        self._queue = asyncio.Queue()

        def _callback(indata, frames, time_info, status) -> None:  # noqa: ANN001
            if status:
                logger.debug("Input stream status: %s", status)
            loop.call_soon_threadsafe(self._queue.put_nowait, bytes(indata))

        def _start_stream():
            stream = sd.RawInputStream(
                samplerate=self.sample_rate,
                channels=self.channels,
                dtype="int16",
                blocksize=int(self.sample_rate * self.block_duration),
                device=self.device,
                callback=_callback,
            )
            stream.start()
            return stream

        try:
            self._stream = await asyncio.to_thread(_start_stream)
        except (sd.PortAudioError, ValueError) as exc:
            raise MicAccessError(str(exc)) from exc
        logger.info("Microphone opened (%d Hz, %d ch)", self.sample_rate, self.channels)

    async def chunks(self) -> AsyncIterator[bytes]:
        while True:
            chunk = await self._queue.get()
            if chunk is _END_OF_STREAM:
                return
            yield chunk

    async def close(self) -> None:
        stream, self._stream = self._stream, None
        try:
            if stream is not None:
                # stop() returns after the last callback ran, so every chunk it
                # posted is queued ahead of the end marker.
                try:
                    await asyncio.to_thread(stream.stop)
                finally:
                    await asyncio.to_thread(stream.close)
                logger.info("Microphone closed")
        finally:
            self._queue.put_nowait(_END_OF_STREAM)

    def encode(self, chunks: list[bytes]) -> bytes:
        return self._processor.encode_ogg(b"".join(chunks))


class FileAudioSource(BaseAudioSource):
    """Replays an existing audio file as if it were being captured.

    The file bytes are already in their container format, so sealing is a
    plain concatenation.
    """

    def __init__(self, path: str | Path, block_size: int = 32000) -> None:
        self.path = Path(path)
        self.block_size = block_size
        self.filename = self.path.name
        self.mime_type = mimetypes.guess_type(self.path.name)[0] or "application/octet-stream"
        self._data = b""
        self._closed = asyncio.Event()

    async def open(self) -> None:
        try:
            self._data = await asyncio.to_thread(self.path.read_bytes)
        except OSError as exc:
            raise MicAccessError(f"Cannot read audio file {self.path}: {exc}") from exc
        self._closed = asyncio.Event()

    async def chunks(self) -> AsyncIterator[bytes]:
        for offset in range(0, len(self._data), self.block_size):
            yield self._data[offset : offset + self.block_size]
            await asyncio.sleep(0)
        await self._closed.wait()

    async def close(self) -> None:
        self._closed.set()
