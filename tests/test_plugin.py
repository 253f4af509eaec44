"""Tests for NoteSmithPlugin entry points."""

from __future__ import annotations

from unittest.mock import AsyncMock

import pytest

from notesmith.clients.completion_client import CompletionClient, CompletionResult
from notesmith.models.refine import RefineState
from notesmith.plugin import (
    MENU_ICON,
    MENU_TITLE,
    REFINE_CURRENT_NOTE,
    REFINE_FROM_FILE_MENU,
    NoteSmithPlugin,
)


@pytest.fixture
def client():
    client = AsyncMock(spec=CompletionClient)
    client.complete.return_value = CompletionResult(text="refined")
    return client


@pytest.fixture
def plugin(vault, settings_store, client, notifier, busy_indicator):
    plugin = NoteSmithPlugin(
        vault,
        settings_store,
        client,
        notifier=notifier,
        busy_indicator=busy_indicator,
    )
    plugin.on_load()
    return plugin


class TestCommands:
    def test_on_load_registers_commands(self, plugin):
        assert set(plugin.commands) == {REFINE_CURRENT_NOTE, REFINE_FROM_FILE_MENU}
        assert plugin.commands[REFINE_CURRENT_NOTE].name == "Refine Current Note"

    def test_on_load_loads_settings(self, plugin):
        assert plugin.settings.current.model_id == "m"

    def test_current_note_check_requires_active(self, plugin, vault):
        assert not plugin.can_run(REFINE_CURRENT_NOTE)
        vault.open("groceries.md")
        assert plugin.can_run(REFINE_CURRENT_NOTE)

    def test_file_menu_command_always_available(self, plugin):
        assert plugin.can_run(REFINE_FROM_FILE_MENU)

    @pytest.mark.asyncio
    async def test_unknown_command(self, plugin):
        assert not plugin.can_run("nope")
        with pytest.raises(KeyError):
            await plugin.run_command("nope")

    @pytest.mark.asyncio
    async def test_refine_current_note(self, plugin, vault, notifier):
        vault.open("groceries.md")

        outcome = await plugin.run_command(REFINE_CURRENT_NOTE)

        assert outcome.state is RefineState.SUCCEEDED
        assert await vault.read("groceries.md") == "refined"
        assert notifier.messages == ["Note refined: groceries.md"]

    @pytest.mark.asyncio
    async def test_refine_current_note_without_active_is_noop(self, plugin, client, notifier):
        outcome = await plugin.run_command(REFINE_CURRENT_NOTE)

        assert outcome is None
        client.complete.assert_not_called()
        assert notifier.messages == []

    @pytest.mark.asyncio
    async def test_file_menu_command_without_active_is_noop(self, plugin, client, notifier):
        outcome = await plugin.run_command(REFINE_FROM_FILE_MENU)

        assert outcome.state is RefineState.IDLE
        client.complete.assert_not_called()
        assert notifier.messages == []


class TestFileMenu:
    def test_markdown_gets_refine_item(self, plugin):
        items = plugin.file_menu_items("daily/2026-10-18.md")
        assert len(items) == 1
        assert items[0].title == MENU_TITLE
        assert items[0].icon == MENU_ICON

    def test_non_markdown_gets_nothing(self, plugin):
        assert plugin.file_menu_items("diagram.png") == []

    @pytest.mark.asyncio
    async def test_menu_item_refines_that_file(self, plugin, vault):
        vault.open("groceries.md")
        item = plugin.file_menu_items("daily/2026-10-18.md")[0]

        outcome = await item.on_click()

        assert outcome.succeeded
        assert await vault.read("daily/2026-10-18.md") == "refined"
        assert await vault.read("groceries.md") == "buy milk\ncall mom"
