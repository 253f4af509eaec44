"""Filesystem document store rooted at a notes folder."""

from __future__ import annotations

import asyncio
import logging
import os
from pathlib import Path

from notesmith.models.document import Document

logger = logging.getLogger(__name__)


class Vault:
    """Notes folder exposing whole-body read/replace and an active document.

    References are paths relative to ``root`` using forward slashes.
    """

    def __init__(
        self,
        root: str | Path = ".",
        markdown_extensions: tuple[str, ...] = ("md",),
    ):
        self.root = Path(root).expanduser().resolve()
        self.markdown_extensions = tuple(ext.lstrip(".").lower() for ext in markdown_extensions)
        self._active: str | None = None

    def resolve(self, ref: str) -> Path:
        """Map a reference to an absolute path, refusing paths outside the root."""
        path = (self.root / ref).resolve()
        if path != self.root and self.root not in path.parents:
            raise ValueError(f"Document reference escapes the vault: {ref!r}")
        return path

    def ref_for(self, path: str | Path) -> str:
        """Return the vault reference for a filesystem path."""
        p = Path(path).expanduser()
        if not p.is_absolute():
            p = Path.cwd() / p
        return self.resolve(str(p.resolve())).relative_to(self.root).as_posix()

    def is_markdown(self, ref: str) -> bool:
        return Path(ref).suffix.lstrip(".").lower() in self.markdown_extensions

    # --- active document ---

    @property
    def active(self) -> str | None:
        return self._active

    def open(self, ref: str) -> str:
        path = self.resolve(ref)
        if not path.is_file():
            raise FileNotFoundError(f"No such note: {ref}")
        self._active = path.relative_to(self.root).as_posix()
        logger.debug("Active document: %s", self._active)
        return self._active

    def close(self) -> None:
        self._active = None

    # --- document store ---

    async def read(self, ref: str) -> str:
        return await asyncio.to_thread(self._read_sync, ref)

    async def write(self, ref: str, text: str) -> None:
        await asyncio.to_thread(self._write_sync, ref, text)

    async def get_document(self, ref: str) -> Document:
        return Document(path=ref, body=await self.read(ref))

    def list_notes(self) -> list[str]:
        """Return references of all Markdown notes, sorted."""
        refs = [
            p.relative_to(self.root).as_posix()
            for p in self.root.rglob("*")
            if p.is_file() and self.is_markdown(p.name)
        ]
        return sorted(refs)

    def _read_sync(self, ref: str) -> str:
        with open(self.resolve(ref), encoding="utf-8", newline="") as f:
            return f.read()

    def _write_sync(self, ref: str, text: str) -> None:
        path = self.resolve(ref)
        tmp = path.with_name(f".{path.name}.tmp")
        with open(tmp, "w", encoding="utf-8", newline="") as f:
            f.write(text)
        os.replace(tmp, path)
        logger.debug("Wrote %d chars to %s", len(text), ref)
