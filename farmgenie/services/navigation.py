"""Navigation targets for redirect continuations."""

import logging
import webbrowser
from abc import ABC, abstractmethod
from urllib.parse import urljoin

logger = logging.getLogger(__name__)


class BaseNavigator(ABC):
    """Anything that can move the user to another page."""

    @abstractmethod
    def navigate(self, url: str) -> None:
        """Navigate to ``url`` (absolute, or a path on the front-end origin)."""


class BrowserNavigator(BaseNavigator):
    """Opens redirect targets in the system web browser."""

    def __init__(self, origin: str) -> None:
        self.origin = origin.rstrip("/") + "/"

    def navigate(self, url: str) -> None:
        target = urljoin(self.origin, url)
        logger.info("Navigating to %s", target)
        webbrowser.open(target)


class LoggingNavigator(BaseNavigator):
    """Records redirect targets without leaving the console."""

    def __init__(self) -> None:
        self.history: list[str] = []

    def navigate(self, url: str) -> None:
        logger.info("Redirect requested: %s", url)
        self.history.append(url)
