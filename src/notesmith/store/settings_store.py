"""JSON file store for the refiner settings record."""

from __future__ import annotations

import json
import logging
import os
from pathlib import Path

from pydantic import ValidationError

from notesmith.models.settings import RefinerSettings, setting_field_name

logger = logging.getLogger(__name__)

DEFAULT_SETTINGS_PATH = Path.home() / ".notesmith" / "settings.json"


class UnknownSettingError(KeyError):
    """Raised when updating a key that is not part of the settings record."""


def merge_over_defaults(raw: dict) -> RefinerSettings:
    """Build settings from a stored record, falling back to defaults per key.

    Unknown keys are dropped; keys whose values fail validation are replaced
    by their defaults.
    """
    known: dict = {}
    for key, value in raw.items():
        name = setting_field_name(str(key))
        if name is None:
            logger.debug("Ignoring unknown settings key: %s", key)
            continue
        known[name] = value

    while True:
        try:
            return RefinerSettings.model_validate(known)
        except ValidationError as exc:
            bad = {
                setting_field_name(str(err["loc"][0]))
                for err in exc.errors()
                if err["loc"]
            }
            bad &= set(known)
            if not bad:
                raise
            logger.warning("Invalid settings values for %s, using defaults", sorted(bad))
            known = {k: v for k, v in known.items() if k not in bad}


class JsonSettingsStore:
    """Settings persisted as a flat JSON record, saved after every mutation."""

    def __init__(
        self,
        path: str | Path = DEFAULT_SETTINGS_PATH,
        *,
        credential_env: str | None = None,
    ):
        self.path = Path(path)
        self.credential_env = credential_env
        self._settings = RefinerSettings()

    @property
    def current(self) -> RefinerSettings:
        """Settings snapshot, with the env credential filled in when none is stored.

        The env credential is never written back to disk.
        """
        if not self._settings.credential and self.credential_env:
            env_key = os.environ.get(self.credential_env, "")
            if env_key:
                return self._settings.model_copy(update={"credential": env_key})
        return self._settings

    def load(self) -> RefinerSettings:
        self._settings = merge_over_defaults(self._read_raw())
        logger.debug("Loaded settings from %s: %r", self.path, self._settings)
        return self.current

    def update(self, key: str, value: object) -> RefinerSettings:
        """Set one field (snake_case or camelCase key) and persist immediately."""
        name = setting_field_name(key)
        if name is None:
            raise UnknownSettingError(key)
        if isinstance(value, str):
            value = value.strip()
        self._settings = RefinerSettings.model_validate(
            {**self._settings.model_dump(), name: value}
        )
        self.save()
        return self.current

    def save(self) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp = self.path.with_name(self.path.name + ".tmp")
        tmp.write_text(
            json.dumps(self._settings.to_record(), indent=2), encoding="utf-8"
        )
        os.replace(tmp, self.path)

    def _read_raw(self) -> dict:
        if not self.path.exists():
            return {}
        try:
            raw = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, ValueError):
            logger.warning("Unreadable settings file %s, using defaults", self.path, exc_info=True)
            return {}
        if not isinstance(raw, dict):
            logger.warning("Settings file %s is not a JSON object, using defaults", self.path)
            return {}
        return raw
