"""Rich console implementations of the notifier and busy indicator."""

from __future__ import annotations

from rich.console import Console
from rich.status import Status


class ConsoleNotifier:
    def __init__(self, console: Console):
        self.console = console

    def notice(self, message: str) -> None:
        self.console.print(message, markup=False)


class ConsoleBusyIndicator:
    """Spinner shown while any refine is in flight.

    Overlapping holders share one spinner; it stops when the last one closes.
    """

    def __init__(self, console: Console):
        self.console = console
        self.status: Status | None = None
        self.depth = 0

    def open(self, message: str) -> None:
        if self.status is None:
            self.status = self.console.status(message)
            self.status.start()
        else:
            self.status.update(message)
        self.depth += 1

    def close(self) -> None:
        if self.depth == 0:
            return
        self.depth -= 1
        if self.depth == 0 and self.status is not None:
            self.status.stop()
            self.status = None
