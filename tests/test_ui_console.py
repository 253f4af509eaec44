"""Tests for the rich console notifier and busy indicator."""

from __future__ import annotations

import asyncio
import io
from unittest.mock import AsyncMock

import pytest
from rich.console import Console

from notesmith.clients.completion_client import CompletionClient, CompletionResult
from notesmith.pipeline.orchestrator import RefineOrchestrator
from notesmith.ui.console import ConsoleBusyIndicator, ConsoleNotifier


@pytest.fixture
def console():
    return Console(file=io.StringIO(), force_terminal=True, width=80)


class TestConsoleNotifier:
    def test_prints_message_verbatim(self, console):
        ConsoleNotifier(console).notice("Note refined: [draft].md")
        assert "Note refined: [draft].md" in console.file.getvalue()


class TestConsoleBusyIndicator:
    def test_open_and_close(self, console):
        indicator = ConsoleBusyIndicator(console)

        indicator.open("Refining note...")
        assert indicator.status is not None
        assert indicator.depth == 1

        indicator.close()
        assert indicator.status is None
        assert indicator.depth == 0

    def test_overlapping_holders_share_one_spinner(self, console):
        indicator = ConsoleBusyIndicator(console)

        indicator.open("first")
        status = indicator.status
        indicator.open("second")
        assert indicator.status is status
        assert indicator.depth == 2

        indicator.close()
        assert indicator.status is status

        indicator.close()
        assert indicator.status is None

    def test_close_without_open_is_noop(self, console):
        indicator = ConsoleBusyIndicator(console)
        indicator.close()
        assert indicator.depth == 0
        assert indicator.status is None

    def test_can_reopen_after_release(self, console):
        indicator = ConsoleBusyIndicator(console)
        indicator.open("one")
        indicator.close()

        indicator.open("two")
        assert indicator.status is not None
        indicator.close()
        assert indicator.status is None

    @pytest.mark.asyncio
    async def test_released_after_overlapping_refines(
        self, console, vault, settings_store, notifier
    ):
        indicator = ConsoleBusyIndicator(console)
        client = AsyncMock(spec=CompletionClient)
        started = asyncio.Event()
        release = asyncio.Event()
        calls: list[str] = []

        async def complete(prompt, settings):
            calls.append(prompt)
            if len(calls) == 2:
                started.set()
            await release.wait()
            return CompletionResult(text="refined")

        client.complete.side_effect = complete
        orchestrator = RefineOrchestrator(
            vault, settings_store, client, notifier=notifier, busy_indicator=indicator
        )

        first = asyncio.create_task(orchestrator.refine("groceries.md"))
        second = asyncio.create_task(orchestrator.refine("daily/2026-10-18.md"))
        await asyncio.wait_for(started.wait(), timeout=5)
        assert indicator.depth == 2

        release.set()
        outcomes = await asyncio.gather(first, second)

        assert all(o.succeeded for o in outcomes)
        assert indicator.depth == 0
        assert indicator.status is None
