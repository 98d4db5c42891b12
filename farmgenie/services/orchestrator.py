"""Session pipeline for voice and text queries.

Each session runs as one linear sequence of awaited steps::

    record -> finalize -> submit -> normalize -> publish -> play -> continuation

A ``SessionController`` runs at most one session at a time; requests that
arrive while a session is in progress are ignored rather than queued.

Usage::

    controller = create_session_controller()
    await controller.start_recording()
    response = await controller.stop_recording(text="When should I irrigate?")
"""

import logging
from collections.abc import Awaitable, Callable

from farmgenie.core.config import Settings, get_settings
from farmgenie.core.exceptions import EmptyQueryError
from farmgenie.core.models import AudioArtifact, NormalizedResponse, Session, SessionState
from farmgenie.services.audio import SoundDevicePlayer, create_audio_source
from farmgenie.services.audio.player import BaseAudioPlayer
from farmgenie.services.audio.recorder import RecordingController
from farmgenie.services.audio.sources import BaseAudioSource
from farmgenie.services.navigation import BaseNavigator, BrowserNavigator, LoggingNavigator
from farmgenie.services.normalizer import normalize
from farmgenie.services.playback import PlaybackOrchestrator
from farmgenie.services.submission import SubmissionClient

logger = logging.getLogger(__name__)

ResponseCallback = Callable[[NormalizedResponse], Awaitable[None]]


class SessionController:
    """Drives one voice/text interaction at a time.

    Args:
        recorder: Capture lifecycle for voice queries.
        client: Posts queries to the advisory backend.
        playback: Plays reply audio and runs the continuation.
        on_response: Async callback receiving each normalized reply before
            its audio starts (e.g. to render the message).
    """

    def __init__(
        self,
        recorder: RecordingController,
        client: SubmissionClient,
        playback: PlaybackOrchestrator,
        on_response: ResponseCallback | None = None,
    ) -> None:
        self.recorder = recorder
        self._client = client
        self._playback = playback
        self._on_response = on_response
        self.last_response: NormalizedResponse | None = None

    @property
    def session(self) -> Session:
        return self.recorder.session

    @property
    def state(self) -> SessionState:
        return self.session.state

    @property
    def busy(self) -> bool:
        """True while a query is being submitted or its reply is playing."""
        return self.session.state in (SessionState.submitting, SessionState.playing)

    async def start_recording(self) -> bool:
        """Start capturing a voice query.

        Raises:
            MicAccessError: If the microphone cannot be opened.
        """
        return await self.recorder.start()

    async def stop_recording(self, text: str | None = None) -> NormalizedResponse | None:
        """Finalize the recording and run it through the pipeline.

        Args:
            text: Optional typed question sent alongside the audio.

        Returns:
            The normalized reply, or None if no recording was active.

        Raises:
            TransportError: If the backend could not be reached.
            ServerError: If the backend rejected the request.
        """
        artifact = await self.recorder.stop()
        if artifact is None:
            return None
        return await self._run(artifact, text)

    async def ask(self, text: str) -> NormalizedResponse | None:
        """Submit a typed question without audio.

        Returns:
            The normalized reply, or None if another session is in progress.

        Raises:
            EmptyQueryError: If ``text`` is blank.
            TransportError: If the backend could not be reached.
            ServerError: If the backend rejected the request.
        """
        if not text or not text.strip():
            raise EmptyQueryError()
        if not self.recorder.is_idle:
            logger.info("Text query ignored: session is %s", self.session.state)
            return None
        return await self._run(None, text)

    async def _run(self, audio: AudioArtifact | None, text: str | None) -> NormalizedResponse:
        session = self.session
        session.text_query = text
        session.state = SessionState.submitting
        try:
            raw = await self._client.submit(audio, session.text_query)
            response = normalize(raw)
            self.last_response = response
            await self._publish(response)

            session.state = SessionState.playing
            await self._playback.play(response)
            return response
        finally:
            session.state = SessionState.idle

    async def _publish(self, response: NormalizedResponse) -> None:
        if self._on_response is None:
            return
        try:
            await self._on_response(response)
        except Exception:
            logger.warning("Response callback failed (non-fatal)", exc_info=True)

    async def aclose(self) -> None:
        await self._client.aclose()


def create_session_controller(
    settings: Settings | None = None,
    source: BaseAudioSource | None = None,
    player: BaseAudioPlayer | None = None,
    navigator: BaseNavigator | None = None,
    on_response: ResponseCallback | None = None,
) -> SessionController:
    """Assemble a SessionController from settings.

    Any collaborator passed explicitly replaces the one built from settings.
    """
    settings = settings or get_settings()
    if navigator is None:
        navigator = (
            BrowserNavigator(settings.frontend_url)
            if settings.open_browser
            else LoggingNavigator()
        )

    client = SubmissionClient(
        base_url=settings.backend_url,
        agent_path=settings.agent_path,
        timeout=settings.request_timeout,
    )
    playback = PlaybackOrchestrator(
        player=player or SoundDevicePlayer(autoplay=settings.autoplay),
        navigator=navigator,
        backend_url=client.base_url,
        follow_redirects=settings.follow_redirects,
    )
    recorder = RecordingController(source or create_audio_source("microphone"))
    return SessionController(recorder, client, playback, on_response=on_response)
