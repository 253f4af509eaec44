"""Plugin object that registers the refine entry points.

Both commands and the file-menu action converge on
``RefineOrchestrator.refine``.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Awaitable, Callable

from notesmith.clients.completion_client import CompletionClient
from notesmith.logging.history_store import RefineHistoryStore
from notesmith.pipeline.orchestrator import RefineOrchestrator, RefineOutcome
from notesmith.protocols import BusyIndicator, Notifier, SettingsStore, Workspace

logger = logging.getLogger(__name__)

REFINE_CURRENT_NOTE = "refine-current-note"
REFINE_FROM_FILE_MENU = "refine-from-file-menu"
MENU_TITLE = "Refine with NoteSmith"
MENU_ICON = "wand"


@dataclass(frozen=True)
class Command:
    id: str
    name: str
    check: Callable[[], bool]
    run: Callable[[], Awaitable[RefineOutcome]]


@dataclass(frozen=True)
class MenuItem:
    title: str
    icon: str
    on_click: Callable[[], Awaitable[RefineOutcome]]


class NoteSmithPlugin:
    """Refine commands bound to a workspace and a settings store."""

    def __init__(
        self,
        workspace: Workspace,
        settings: SettingsStore,
        client: CompletionClient,
        *,
        notifier: Notifier,
        busy_indicator: BusyIndicator,
        history: RefineHistoryStore | None = None,
    ):
        self.workspace = workspace
        self.settings = settings
        self.orchestrator = RefineOrchestrator(
            workspace,
            settings,
            client,
            notifier=notifier,
            busy_indicator=busy_indicator,
            history=history,
        )
        self.commands: dict[str, Command] = {}

    def on_load(self) -> None:
        self.settings.load()
        self.add_command(
            Command(
                id=REFINE_CURRENT_NOTE,
                name="Refine Current Note",
                check=lambda: self.workspace.active is not None,
                run=self.refine_active,
            )
        )
        self.add_command(
            Command(
                id=REFINE_FROM_FILE_MENU,
                name="Refine Note (Right-click)",
                check=lambda: True,
                run=self.refine_active,
            )
        )

    def add_command(self, command: Command) -> None:
        self.commands[command.id] = command
        logger.debug("Registered command %s", command.id)

    def can_run(self, command_id: str) -> bool:
        command = self.commands.get(command_id)
        return command is not None and command.check()

    async def run_command(self, command_id: str) -> RefineOutcome | None:
        """Run a registered command. Returns None when its check fails."""
        command = self.commands[command_id]
        if not command.check():
            logger.debug("Command %s not available", command_id)
            return None
        return await command.run()

    async def refine_active(self) -> RefineOutcome:
        return await self.orchestrator.refine(self.workspace.active)

    def file_menu_items(self, ref: str) -> list[MenuItem]:
        """Menu entries for a file; only Markdown notes get the refine action."""
        if not self.workspace.is_markdown(ref):
            return []

        async def on_click() -> RefineOutcome:
            return await self.orchestrator.refine(ref)

        return [MenuItem(title=MENU_TITLE, icon=MENU_ICON, on_click=on_click)]
