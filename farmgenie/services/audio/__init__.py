"""
Audio module - Capture sources, recording lifecycle and reply playback.

Factory functions for creating capture sources and players based on
provider name.
"""

from .player import BaseAudioPlayer, PlaybackHandle, SoundDevicePlayer
from .processor import AudioProcessor
from .recorder import RecordingController
from .sources import BaseAudioSource, FileAudioSource, MicrophoneSource

__all__ = [
    "AudioProcessor",
    "BaseAudioPlayer",
    "BaseAudioSource",
    "FileAudioSource",
    "MicrophoneSource",
    "PlaybackHandle",
    "RecordingController",
    "SoundDevicePlayer",
    "create_audio_source",
]


def create_audio_source(provider: str = "microphone", **kwargs) -> BaseAudioSource:
    """Factory function to create a capture source.

    Args:
        provider: Source name ("microphone", "file")
        **kwargs: Source-specific configuration (e.g. ``path`` for "file")

    Returns:
        BaseAudioSource implementation instance

    Raises:
        ValueError: If provider is unknown
    """
    if provider == "microphone":
        return MicrophoneSource(**kwargs)
    elif provider == "file":
        return FileAudioSource(**kwargs)
    else:
        raise ValueError(f"Unknown audio source: {provider}")
