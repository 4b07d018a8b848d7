"""Navigation hooks used by client-side services."""

import logging
from dataclasses import dataclass, field
from typing import Protocol

_logger = logging.getLogger(__name__)


class Navigator(Protocol):
    """Interface for moving the user to another screen."""

    def navigate(self, path: str) -> None:
        """Navigate to the given path."""


@dataclass
class HistoryNavigator(Navigator):
    """Navigator that tracks the current location and visit history."""

    location: str = "/"
    history: list[str] = field(default_factory=list)

    def navigate(self, path: str) -> None:
        _logger.info("Navigating from %s to %s", self.location, path)
        self.history.append(path)
        self.location = path
