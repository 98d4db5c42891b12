"""Tests for capture sources and the source factory.

The microphone source is exercised against a stand-in ``sounddevice``
module so no PortAudio device is needed.
"""

import sys
from unittest.mock import MagicMock, patch

import pytest

from farmgenie.core.exceptions import MicAccessError
from farmgenie.services.audio import create_audio_source
from farmgenie.services.audio.recorder import RecordingController
from farmgenie.services.audio.sources import FileAudioSource, MicrophoneSource


class _PortAudioError(Exception):
    pass


@pytest.fixture
def fake_sd():
    """Stand-in sounddevice module that remembers the input callback."""
    sd = MagicMock()
    sd.PortAudioError = _PortAudioError
    sd.captured = {}

    def _raw_input_stream(**kwargs):
        sd.captured.update(kwargs)
        return MagicMock()

    sd.RawInputStream.side_effect = _raw_input_stream
    with patch.dict(sys.modules, {"sounddevice": sd}):
        yield sd


async def _collect(source):
    return [chunk async for chunk in source.chunks()]


class TestMicrophoneSource:
    """Verify the sounddevice bridge."""

    async def test_opens_int16_stream(self, fake_sd):
        """The input stream is opened as 16-bit PCM at the configured rate."""
        source = MicrophoneSource(sample_rate=16000, channels=1, block_duration=0.1)
        await source.open()

        assert fake_sd.captured["samplerate"] == 16000
        assert fake_sd.captured["channels"] == 1
        assert fake_sd.captured["dtype"] == "int16"
        assert fake_sd.captured["blocksize"] == 1600
        await source.close()

    async def test_callback_chunks_delivered_in_order(self, fake_sd):
        """Blocks from the device callback come out in arrival order."""
        source = MicrophoneSource(sample_rate=16000, channels=1, block_duration=0.1)
        await source.open()
        callback = fake_sd.captured["callback"]

        callback(b"\x01\x00", 1, None, None)
        callback(b"\x02\x00", 1, None, None)
        await source.close()

        assert await _collect(source) == [b"\x01\x00", b"\x02\x00"]

    async def test_portaudio_error_is_mic_access_error(self, fake_sd):
        """A device that cannot be opened raises MicAccessError."""
        fake_sd.RawInputStream.side_effect = _PortAudioError("Error querying device -1")
        source = MicrophoneSource()

        with pytest.raises(MicAccessError, match="querying device"):
            await source.open()

    async def test_end_marker_queued_when_stop_fails(self, fake_sd):
        """A failing stream.stop() still closes the stream and ends chunks()."""
        stream = MagicMock()
        stream.stop.side_effect = _PortAudioError("Stream stopped unexpectedly")
        fake_sd.RawInputStream.side_effect = lambda **kwargs: stream
        source = MicrophoneSource()
        await source.open()

        with pytest.raises(_PortAudioError):
            await source.close()

        stream.close.assert_called_once()
        assert await _collect(source) == []

    def test_encode_wraps_pcm_in_ogg(self, sample_pcm_bytes):
        """Sealing a capture yields an Ogg stream."""
        source = MicrophoneSource(sample_rate=16000, channels=1)
        assert source.encode([sample_pcm_bytes[:16000], sample_pcm_bytes[16000:]])[:4] == b"OggS"


class TestFileAudioSource:
    """Verify replaying a file as a capture."""

    async def test_whole_file_captured(self, tmp_path):
        """Even an immediate stop yields the complete file, unchanged."""
        path = tmp_path / "question.wav"
        path.write_bytes(b"RIFF" + b"x" * 100)
        recorder = RecordingController(FileAudioSource(path, block_size=16))

        await recorder.start()
        artifact = await recorder.stop()

        assert artifact.data == b"RIFF" + b"x" * 100
        assert artifact.filename == "question.wav"
        assert artifact.mime_type.startswith("audio/")

    async def test_missing_file(self, tmp_path):
        """An unreadable file is reported like an unavailable microphone."""
        with pytest.raises(MicAccessError):
            await FileAudioSource(tmp_path / "nope.ogg").open()


class TestFactory:
    """Verify create_audio_source()."""

    def test_file_source(self, tmp_path):
        assert isinstance(create_audio_source("file", path=tmp_path / "a.ogg"), FileAudioSource)

    def test_microphone_source(self):
        assert isinstance(create_audio_source("microphone"), MicrophoneSource)

    def test_unknown_provider(self):
        with pytest.raises(ValueError, match="Unknown audio source"):
            create_audio_source("bluetooth")
