"""Countdown shown before the updater closes."""

from __future__ import annotations

from collections.abc import Iterator


class QuitCountdown:
    """Counts down whole seconds, producing one message per tick.

    The first tick is meant to happen at once and each later one
    ``interval`` seconds after the previous.
    """

    interval = 1.0

    def __init__(self, seconds: int = 5) -> None:
        if seconds < 0:
            raise ValueError("seconds must not be negative")
        self.remaining = seconds
        self.finished = False

    def tick(self) -> str | None:
        """Advance one second; return the message, or None once finished."""
        if self.finished:
            return None
        if self.remaining == 0:
            self.finished = True
            return None
        message = f"Cerrando app en...{self.remaining}"
        self.remaining -= 1
        return message

    def __iter__(self) -> Iterator[str]:
        while (message := self.tick()) is not None:
            yield message