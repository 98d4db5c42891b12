"""Sequencing of reply audio and the post-playback continuation.

The continuation (a redirect) waits for the clip to finish. When the clip
cannot be played at all it fires straight away, as if there were no audio.
"""

import logging
from urllib.parse import urlsplit

from farmgenie.core.exceptions import PlaybackBlockedError
from farmgenie.core.models import Continuation, NormalizedResponse
from farmgenie.services.audio.player import BaseAudioPlayer
from farmgenie.services.navigation import BaseNavigator

logger = logging.getLogger(__name__)


class PlaybackOrchestrator:
    """Plays a normalized reply's audio, then runs its continuation.

    Args:
        player: Audio output used for ``audio_url``.
        navigator: Receives the redirect target.
        backend_url: Base URL that relative ``audio_url`` paths resolve against.
        follow_redirects: When False, continuations are logged but not followed.
    """

    def __init__(
        self,
        player: BaseAudioPlayer,
        navigator: BaseNavigator,
        backend_url: str,
        follow_redirects: bool = True,
    ) -> None:
        self._player = player
        self._navigator = navigator
        self._base_url = backend_url.rstrip("/") + "/"
        self._follow_redirects = follow_redirects

    def resolve_audio_url(self, audio_url: str) -> str:
        """Append a relative clip path to the backend URL, keeping any path prefix."""
        if urlsplit(audio_url).scheme:
            return audio_url
        return self._base_url + audio_url.lstrip("/")

    async def play(self, response: NormalizedResponse) -> Continuation | None:
        """Play the reply audio (if any) and then fire the continuation.

        Playback failures are logged and never raised.

        Returns:
            The continuation that fired, or None.
        """
        if response.audio_url:
            await self._play_audio(self.resolve_audio_url(response.audio_url))
        return self._fire(response.continuation)

    async def _play_audio(self, url: str) -> None:
        try:
            handle = await self._player.start(url)
        except PlaybackBlockedError as exc:
            logger.warning("Audio playback blocked: %s", exc.detail)
            return
        except Exception:
            logger.warning("Audio playback failed to start for %s (non-fatal)", url, exc_info=True)
            return

        try:
            await handle.wait()
        except Exception:
            logger.warning("Audio playback ended with an error for %s (non-fatal)", url, exc_info=True)

    def _fire(self, continuation: Continuation | None) -> Continuation | None:
        if continuation is None:
            return None
        if not self._follow_redirects:
            logger.info("Redirect to %s not followed (disabled)", continuation.redirect_url)
            return None
        self._navigator.navigate(continuation.redirect_url)
        return continuation
