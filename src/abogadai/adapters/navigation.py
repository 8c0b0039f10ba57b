"""Navigator adapter for the console front-end."""

from __future__ import annotations

import logging

logger = logging.getLogger(__name__)


class ConsoleNavigator:
    """Records the current route; the console loop reads ``current``."""

    def __init__(self, start: str = "/app/avatar"):
        self.current = start
        self.visited: list[str] = [start]

    def navigate(self, destination: str) -> None:
        logger.debug("Navigating %s -> %s", self.current, destination)
        self.current = destination
        self.visited.append(destination)
