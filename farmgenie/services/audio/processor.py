"""Audio conversion utilities.

Wraps captured 16-bit PCM into an uploadable container and decodes reply
clips into numpy arrays for playback.
"""

import io

import numpy as np
import soundfile as sf


class AudioProcessor:
    """Handles PCM audio data conversion.

    Provides utilities for converting raw PCM bytes to numpy arrays,
    encoding them as Ogg/Vorbis and decoding downloaded clips.
    """

    def __init__(
        self,
        sample_rate: int = 16000,
        sample_width: int = 2,
        channels: int = 1,
    ) -> None:
        """Initialize the audio processor.

        Args:
            sample_rate: Audio sample rate in Hz (default: 16 kHz).
            sample_width: Bytes per sample (2 = 16-bit signed PCM).
            channels: Number of audio channels (1 = mono).
        """
        self.sample_rate = sample_rate
        self.sample_width = sample_width
        self.channels = channels

    def pcm_to_ndarray(self, pcm_data: bytes) -> np.ndarray:
        """Convert raw PCM bytes (16-bit signed) to a float32 numpy array.

        Args:
            pcm_data: Raw interleaved PCM bytes.

        Returns:
            Float32 array normalized to [-1.0, 1.0], shaped (frames, channels).

        Raises:
            ValueError: If data length is not aligned to sample frame size.
        """
        frame_size = self.sample_width * self.channels
        if len(pcm_data) % frame_size != 0:
            raise ValueError(
                f"PCM data length ({len(pcm_data)}) is not aligned to frame size ({frame_size})"
            )
        samples = np.frombuffer(pcm_data, dtype=np.int16).astype(np.float32) / 32768.0
        return samples.reshape(-1, self.channels)

    def encode_ogg(self, pcm_data: bytes) -> bytes:
        """Encode raw PCM bytes as an Ogg/Vorbis file held in memory.

        Returns:
            The encoded file, or empty bytes when there is no audio.
        """
        if not pcm_data:
            return b""
        buf = io.BytesIO()
        sf.write(
            buf,
            self.pcm_to_ndarray(pcm_data),
            self.sample_rate,
            format="OGG",
            subtype="VORBIS",
        )
        return buf.getvalue()

    @staticmethod
    def decode(data: bytes) -> tuple[np.ndarray, int]:
        """Decode an encoded clip (WAV, Ogg, FLAC, MP3) to float32 samples.

        Raises:
            sf.LibsndfileError: If the bytes are not a supported audio file.
        """
        samples, sample_rate = sf.read(io.BytesIO(data), dtype="float32")
        return samples, sample_rate
