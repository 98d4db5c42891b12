"""Tests for the console front end."""

from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from farmgenie import cli
from farmgenie.core.exceptions import MicAccessError, ServerError
from farmgenie.core.models import NormalizedResponse, Soil, Weather


@pytest.fixture
def mock_controller():
    controller = MagicMock()
    controller.ask = AsyncMock()
    controller.start_recording = AsyncMock(return_value=True)
    controller.stop_recording = AsyncMock()
    controller.aclose = AsyncMock()
    with patch("farmgenie.cli.create_session_controller", return_value=controller):
        yield controller


class TestRenderResponse:
    """Verify the plain-text rendering of a reply."""

    def test_message_only(self):
        """A bare reply renders as its message."""
        assert cli.render_response(NormalizedResponse(message="Irrigate at dusk")) == (
            "Irrigate at dusk"
        )

    def test_weather_and_soil_cards(self):
        """Weather and soil readings are rendered below the message."""
        response = NormalizedResponse(
            message="Advice",
            weather=Weather(location="Pune", condition="Clear", temperature_celsius="30.5"),
            soil=Soil(moisture=42),
        )

        text = cli.render_response(response)

        assert "Weather in Pune" in text
        assert "30.5°C" in text
        assert "42% (remaining 58%)" in text
        assert "pH 7" in text
        assert "N medium / P medium / K medium" in text


class TestMain:
    """Verify command dispatch and error reporting."""

    def test_ask(self, mock_controller):
        """The ask command sends the question and closes the client."""
        assert cli.main(["ask", "Weather in Pune"]) == 0

        mock_controller.ask.assert_awaited_once_with("Weather in Pune")
        mock_controller.aclose.assert_awaited_once()

    def test_listen_for_fixed_duration(self, mock_controller):
        """listen --seconds records, stops and submits the typed question."""
        assert cli.main(["listen", "--seconds", "0", "--question", "Rice or wheat?"]) == 0

        mock_controller.start_recording.assert_awaited_once()
        mock_controller.stop_recording.assert_awaited_once_with(text="Rice or wheat?")

    def test_server_error_prints_user_message(self, mock_controller, capsys):
        """A failed submission prints the retry prompt and exits non-zero."""
        mock_controller.ask.side_effect = ServerError(500)

        assert cli.main(["ask", "anything"]) == 1

        assert "Please try again" in capsys.readouterr().err
        mock_controller.aclose.assert_awaited_once()

    def test_mic_error_prints_permission_request(self, mock_controller, capsys):
        """A denied microphone asks for microphone access."""
        mock_controller.start_recording.side_effect = MicAccessError()

        assert cli.main(["listen", "--seconds", "0"]) == 1

        assert "Microphone access is required" in capsys.readouterr().err
