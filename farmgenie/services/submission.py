"""
Asynchronous HTTP client for the advisory ``/agent`` endpoint.

Uses ``httpx.AsyncClient`` so that awaiting the backend never blocks the
event loop driving capture and playback.
"""

import logging

import httpx

from farmgenie.core.config import get_settings
from farmgenie.core.exceptions import ServerError, TransportError
from farmgenie.core.models import AudioArtifact, RawResponse

logger = logging.getLogger(__name__)


class SubmissionClient:
    """Thin async wrapper around httpx for posting one query to the backend.

    Each ``submit`` issues exactly one POST. Failures are translated into
    ``TransportError`` or ``ServerError`` and never retried here; retrying is
    the caller's decision.
    """

    def __init__(
        self,
        base_url: str | None = None,
        agent_path: str | None = None,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """Initialize the HTTP client.

        Args:
            base_url: Origin of the advisory backend. Defaults to settings.
            agent_path: Endpoint path. Defaults to settings.
            timeout: Request timeout in seconds. Defaults to settings.
            transport: Optional httpx transport (used by tests).
        """
        settings = get_settings()
        self._base_url = (base_url or settings.backend_url).rstrip("/")
        self._agent_path = agent_path or settings.agent_path
        self._client = httpx.AsyncClient(
            base_url=self._base_url,
            timeout=timeout if timeout is not None else settings.request_timeout,
            transport=transport,
        )

    @property
    def base_url(self) -> str:
        return self._base_url

    async def submit(
        self, audio: AudioArtifact | None, text: str | None = None
    ) -> RawResponse:
        """Post a recorded clip and/or a typed question to the backend.

        Args:
            audio: The finalized capture, or None for a text-only query.
            text: Optional question; sent as the ``question`` part only when
                it is non-empty after stripping.

        Returns:
            The parsed JSON body, unmodified.

        Raises:
            TransportError: If no HTTP response was received.
            ServerError: On a non-2xx status or a body that is not a JSON object.
        """
        # Every part goes through ``files`` so the body is multipart even for
        # text-only queries; a None filename renders a plain form field.
        parts: dict[str, tuple] = {}
        if audio is not None:
            parts["audio"] = (audio.filename, audio.data, audio.mime_type)
        if text and text.strip():
            parts["question"] = (None, text.encode("utf-8"))

        logger.info(
            "Submitting query (audio=%d bytes, question=%s)",
            len(audio.data) if audio is not None else 0,
            "question" in parts,
        )

        try:
            resp = await self._client.post(self._agent_path, files=parts)
            resp.raise_for_status()
        except httpx.HTTPStatusError as exc:
            status = exc.response.status_code
            logger.error("Advisory backend returned status %s", status)
            raise ServerError(status) from None
        except httpx.HTTPError as exc:
            logger.error("Advisory request failed: %s", exc)
            raise TransportError(exc) from exc

        try:
            body = resp.json()
        except ValueError:
            raise ServerError(resp.status_code, detail="Response body is not valid JSON") from None
        if not isinstance(body, dict):
            raise ServerError(resp.status_code, detail="Response body is not a JSON object")

        logger.debug("Backend response: %s", body)
        return body

    async def aclose(self) -> None:
        await self._client.aclose()
