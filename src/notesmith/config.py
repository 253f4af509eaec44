"""Application configuration loaded from config.yaml."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

import yaml


@dataclass(frozen=True)
class VaultConfig:
    root: str = "."
    markdown_extensions: tuple[str, ...] = ("md",)

    @property
    def resolved_root(self) -> Path:
        return Path(self.root).expanduser()


@dataclass(frozen=True)
class StorageConfig:
    settings_path: str = "~/.notesmith/settings.json"
    history_db_path: str = "~/.notesmith/history.db"

    @property
    def resolved_settings_path(self) -> Path:
        return Path(self.settings_path).expanduser()

    @property
    def resolved_history_db_path(self) -> Path:
        return Path(self.history_db_path).expanduser()


@dataclass(frozen=True)
class ClientConfig:
    # None keeps the transport default (no client-imposed deadline)
    timeout: float | None = None


@dataclass(frozen=True)
class LoggingConfig:
    level: str = "WARNING"
    record_history: bool = True


@dataclass(frozen=True)
class AppConfig:
    vault: VaultConfig = field(default_factory=VaultConfig)
    storage: StorageConfig = field(default_factory=StorageConfig)
    client: ClientConfig = field(default_factory=ClientConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)


def _vault_config(raw: dict) -> VaultConfig:
    raw = dict(raw)
    if "markdown_extensions" in raw:
        extensions = raw["markdown_extensions"]
        if isinstance(extensions, str):
            extensions = [extensions]
        raw["markdown_extensions"] = tuple(ext.lstrip(".").lower() for ext in extensions)
    return VaultConfig(**raw)


def load_config(path: str | Path | None = None) -> AppConfig:
    """Load config from YAML file, falling back to defaults."""
    if path is None:
        # Look for config.yaml relative to the project root
        candidates = [
            Path.cwd() / "config.yaml",
            Path(__file__).resolve().parent.parent.parent / "config.yaml",
        ]
        for c in candidates:
            if c.exists():
                path = c
                break

    raw: dict = {}
    if path is not None:
        p = Path(path)
        if p.exists():
            raw = yaml.safe_load(p.read_text()) or {}

    return AppConfig(
        vault=_vault_config(raw.get("vault", {})),
        storage=StorageConfig(**raw.get("storage", {})),
        client=ClientConfig(**raw.get("client", {})),
        logging=LoggingConfig(**raw.get("logging", {})),
    )
