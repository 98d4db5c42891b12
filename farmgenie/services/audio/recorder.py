"""Recording lifecycle for voice queries.

States: idle -> recording -> finalizing -> idle

At most one recording is active per controller. ``start`` while recording
and ``stop`` while idle are guarded no-ops, not errors.
"""

import asyncio
import logging

from farmgenie.core.models import AudioArtifact, Session, SessionState
from farmgenie.services.audio.sources import BaseAudioSource

logger = logging.getLogger(__name__)


class RecordingController:
    """Owns the capture source and the session's chunk buffer.

    Args:
        source: Where chunks come from (microphone, file, test double).
        session: The session whose ``accumulated_audio`` is filled. A fresh
            one is created when omitted.
    """

    def __init__(self, source: BaseAudioSource, session: Session | None = None) -> None:
        self.source = source
        self.session = session or Session()
        self._capture_task: asyncio.Task | None = None
        self._starting = False

    @property
    def state(self) -> SessionState:
        return self.session.state

    @property
    def is_recording(self) -> bool:
        return self.session.state == SessionState.recording

    @property
    def is_idle(self) -> bool:
        """True when no recording is active or being opened."""
        return not self._starting and self.session.state == SessionState.idle

    async def start(self) -> bool:
        """Begin a new recording.

        Returns:
            True if a recording was started, False if the call was ignored
            because the controller was not idle.

        Raises:
            MicAccessError: If the source cannot be opened. The session stays idle.
        """
        if not self.is_idle:
            logger.debug("start() ignored in state %s", self.session.state)
            return False

        self._starting = True
        try:
            await self.source.open()
            if self.session.state != SessionState.idle:
                # Another query took the session while the source was opening
                logger.info("Recording abandoned: session is %s", self.session.state)
                await self.source.close()
                return False
            self.session.accumulated_audio = []
            self.session.text_query = None
            self.session.state = SessionState.recording
            self._capture_task = asyncio.create_task(self._capture())
        finally:
            self._starting = False

        logger.info("Recording started")
        return True

    async def stop(self) -> AudioArtifact | None:
        """Finalize the active recording into a single audio artifact.

        Returns:
            The artifact built from every chunk captured so far, or None if no
            recording was active.

        Raises:
            Exception: Whatever the source raised while closing. The capture
                task is cancelled and the session returns to idle.
        """
        if self.session.state != SessionState.recording:
            logger.debug("stop() ignored in state %s", self.session.state)
            return None

        self.session.state = SessionState.finalizing
        try:
            try:
                await self.source.close()
            except Exception:
                await self._cancel_capture()
                raise
            if self._capture_task is not None:
                await self._capture_task
                self._capture_task = None

            chunks = list(self.session.accumulated_audio)
            artifact = AudioArtifact(
                data=self.source.encode(chunks),
                filename=self.source.filename,
                mime_type=self.source.mime_type,
            )
        finally:
            self.session.state = SessionState.idle

        logger.info(
            "Recording finalized: %d chunks, %d bytes", len(chunks), len(artifact.data)
        )
        return artifact

    async def _cancel_capture(self) -> None:
        task, self._capture_task = self._capture_task, None
        if task is None or task.done():
            return
        task.cancel()
        await asyncio.wait({task})
        logger.warning("Audio capture cancelled after the source failed to close")

    async def _capture(self) -> None:
        """Append chunks to the session buffer in arrival order."""
        try:
            async for chunk in self.source.chunks():
                if not chunk:
                    continue
                self.session.accumulated_audio.append(chunk)
        except Exception:
            logger.exception("Audio capture ended unexpectedly")
