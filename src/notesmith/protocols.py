"""Protocol definitions for the host collaborators.

The refine core never subclasses host types; it is handed objects that
satisfy these contracts.
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from notesmith.models.settings import RefinerSettings


@runtime_checkable
class DocumentStore(Protocol):
    """Reads and fully replaces note bodies."""

    async def read(self, ref: str) -> str:
        ...

    async def write(self, ref: str, text: str) -> None:
        ...


@runtime_checkable
class Workspace(DocumentStore, Protocol):
    """Document store that also knows which document is active."""

    @property
    def active(self) -> str | None:
        ...

    def is_markdown(self, ref: str) -> bool:
        ...


@runtime_checkable
class SettingsStore(Protocol):
    """Holds the current settings record and persists every mutation."""

    @property
    def current(self) -> RefinerSettings:
        ...

    def load(self) -> RefinerSettings:
        ...

    def update(self, key: str, value: object) -> RefinerSettings:
        ...

    def save(self) -> None:
        ...


@runtime_checkable
class Notifier(Protocol):
    """Shows a transient message to the user."""

    def notice(self, message: str) -> None:
        ...


@runtime_checkable
class BusyIndicator(Protocol):
    """Visible "working" state while a refine is in flight."""

    def open(self, message: str) -> None:
        ...

    def close(self) -> None:
        ...
