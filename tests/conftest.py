"""Shared test fixtures."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Callable

import httpx
import pytest

from notesmith.clients.completion_client import CompletionClient
from notesmith.logging.history_store import RefineHistoryStore
from notesmith.models.settings import RefinerSettings
from notesmith.store.settings_store import JsonSettingsStore
from notesmith.store.vault import Vault


class RecordingNotifier:
    def __init__(self):
        self.messages: list[str] = []

    def notice(self, message: str) -> None:
        self.messages.append(message)


class RecordingBusyIndicator:
    def __init__(self):
        self.events: list[str] = []

    def open(self, message: str) -> None:
        self.events.append(f"open:{message}")

    def close(self) -> None:
        self.events.append("close")

    @property
    def is_open(self) -> bool:
        opened = sum(1 for e in self.events if e.startswith("open:"))
        return opened > self.events.count("close")


class CapturingTransport(httpx.MockTransport):
    """MockTransport that keeps every request it handled."""

    def __init__(self, handler: Callable[[httpx.Request], httpx.Response]):
        self.requests: list[httpx.Request] = []

        def _handle(request: httpx.Request) -> httpx.Response:
            self.requests.append(request)
            return handler(request)

        super().__init__(_handle)

    @property
    def last_json(self) -> dict:
        return json.loads(self.requests[-1].content)


@pytest.fixture
def sample_settings() -> RefinerSettings:
    return RefinerSettings(
        credential="k",
        model_id="m",
        endpoint_url="https://x/y",
        preferred_tags="#todo",
        extra_instructions="",
        use_alternate_provider=False,
    )


@pytest.fixture
def alternate_settings(sample_settings: RefinerSettings) -> RefinerSettings:
    return sample_settings.model_copy(
        update={
            "use_alternate_provider": True,
            "endpoint_url": "http://localhost:11434/api/generate",
            "model_id": "llama3",
        }
    )


@pytest.fixture
def sample_body() -> str:
    return "buy milk\ncall mom"


@pytest.fixture
def vault(tmp_path: Path, sample_body: str) -> Vault:
    root = tmp_path / "vault"
    root.mkdir()
    (root / "groceries.md").write_text(sample_body, encoding="utf-8")
    (root / "daily").mkdir()
    (root / "daily" / "2026-10-18.md").write_text("# Today\n- standup", encoding="utf-8")
    (root / "diagram.png").write_bytes(b"\x89PNG")
    return Vault(root)


@pytest.fixture
def settings_store(tmp_path: Path, sample_settings: RefinerSettings) -> JsonSettingsStore:
    path = tmp_path / "settings.json"
    path.write_text(json.dumps(sample_settings.to_record()), encoding="utf-8")
    store = JsonSettingsStore(path)
    store.load()
    return store


@pytest.fixture
def history_store(tmp_path: Path) -> RefineHistoryStore:
    return RefineHistoryStore(db_path=tmp_path / "history.db")


@pytest.fixture
def notifier() -> RecordingNotifier:
    return RecordingNotifier()


@pytest.fixture
def busy_indicator() -> RecordingBusyIndicator:
    return RecordingBusyIndicator()


@pytest.fixture
def make_client() -> Callable[..., tuple[CompletionClient, CapturingTransport]]:
    """Build a CompletionClient whose wire is answered by ``handler``."""

    def _make(handler: Callable[[httpx.Request], httpx.Response]):
        transport = CapturingTransport(handler)
        return CompletionClient(transport=transport), transport

    return _make
