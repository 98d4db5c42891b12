"""Shared pytest fixtures for the FarmGenie client test suite.

Provides in-memory stand-ins for the microphone, the speaker and the
advisory backend so the session pipeline can run without devices or network.
"""

import asyncio
import math
import struct
from collections.abc import AsyncIterator, Callable

import httpx
import pytest

from farmgenie.core.exceptions import MicAccessError, PlaybackBlockedError
from farmgenie.services.audio.player import BaseAudioPlayer, PlaybackHandle
from farmgenie.services.audio.sources import BaseAudioSource
from farmgenie.services.navigation import LoggingNavigator
from farmgenie.services.submission import SubmissionClient

BACKEND_URL = "http://backend.test"

# ---------------------------------------------------------------------------
# Capture
# ---------------------------------------------------------------------------


class FakeAudioSource(BaseAudioSource):
    """Capture source fed by the test through ``feed``."""

    filename = "voice.ogg"
    mime_type = "audio/ogg"

    def __init__(self, fail: bool = False) -> None:
        self.fail = fail
        self.open_calls = 0
        self.close_calls = 0
        self._queue: asyncio.Queue[bytes | None] = asyncio.Queue()

    def feed(self, chunk: bytes) -> None:
        self._queue.put_nowait(chunk)

    async def open(self) -> None:
        self.open_calls += 1
        if self.fail:
            raise MicAccessError("Permission denied")
        self._queue = asyncio.Queue()

    async def chunks(self) -> AsyncIterator[bytes]:
        while True:
            chunk = await self._queue.get()
            if chunk is None:
                return
            yield chunk

    async def close(self) -> None:
        self.close_calls += 1
        self._queue.put_nowait(None)


class GatedAudioSource(FakeAudioSource):
    """Capture source whose ``open`` waits until ``gate`` is set."""

    def __init__(self) -> None:
        super().__init__()
        self.gate = asyncio.Event()

    async def open(self) -> None:
        await self.gate.wait()
        await super().open()


async def settle(rounds: int = 5) -> None:
    """Let background tasks consume whatever has been fed so far."""
    for _ in range(rounds):
        await asyncio.sleep(0)


@pytest.fixture
def audio_source():
    return FakeAudioSource()


# ---------------------------------------------------------------------------
# Playback
# ---------------------------------------------------------------------------


class _ControlledHandle(PlaybackHandle):
    def __init__(self, finished: asyncio.Event) -> None:
        self._finished = finished

    async def wait(self) -> None:
        await self._finished.wait()


class FakePlayer(BaseAudioPlayer):
    """Player whose clips end when the test sets ``finished``.

    With ``blocked=True`` every ``start`` raises PlaybackBlockedError, like a
    runtime that refuses autoplay.
    """

    def __init__(self, blocked: bool = False, auto_finish: bool = True) -> None:
        self.blocked = blocked
        self.started: list[str] = []
        self.finished = asyncio.Event()
        if auto_finish:
            self.finished.set()

    async def start(self, url: str) -> PlaybackHandle:
        if self.blocked:
            raise PlaybackBlockedError("NotAllowedError: play() failed")
        self.started.append(url)
        return _ControlledHandle(self.finished)


@pytest.fixture
def player():
    return FakePlayer()


@pytest.fixture
def navigator():
    return LoggingNavigator()


# ---------------------------------------------------------------------------
# Backend
# ---------------------------------------------------------------------------


class RecordingBackend:
    """httpx handler that records requests and answers with a canned reply."""

    def __init__(self, status_code: int = 200, body: object | None = None) -> None:
        self.status_code = status_code
        self.body = body if body is not None else {"message": "ok"}
        self.requests: list[httpx.Request] = []
        self.error: Exception | None = None

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.error is not None:
            raise self.error
        return httpx.Response(self.status_code, json=self.body)


@pytest.fixture
def backend():
    return RecordingBackend()


@pytest.fixture
async def submission_client(backend) -> AsyncIterator[SubmissionClient]:
    """SubmissionClient wired to the in-memory backend."""
    client = SubmissionClient(
        base_url=BACKEND_URL,
        agent_path="/agent",
        timeout=5.0,
        transport=httpx.MockTransport(backend),
    )
    yield client
    await client.aclose()


@pytest.fixture
def make_client() -> Callable[[Callable[[httpx.Request], httpx.Response]], SubmissionClient]:
    """Build a SubmissionClient around an arbitrary httpx handler."""

    def _make(handler):
        return SubmissionClient(
            base_url=BACKEND_URL,
            agent_path="/agent",
            timeout=5.0,
            transport=httpx.MockTransport(handler),
        )

    return _make


# ---------------------------------------------------------------------------
# Audio data
# ---------------------------------------------------------------------------


@pytest.fixture
def sample_pcm_bytes():
    """Generate 1 second of 440Hz sine-wave PCM audio (16kHz, 16-bit, mono).

    Returns:
        bytes: Raw PCM audio data.
    """
    sample_rate = 16000
    frequency = 440.0
    amplitude = 16000  # ~50% of max int16

    samples = []
    for i in range(sample_rate):
        value = int(amplitude * math.sin(2 * math.pi * frequency * i / sample_rate))
        samples.append(struct.pack("<h", value))
    return b"".join(samples)
