"""Pydantic model for a note held by the document store."""

from __future__ import annotations

from pathlib import PurePosixPath

from pydantic import BaseModel


class Document(BaseModel):
    path: str   # store-relative reference
    body: str   # full Markdown text

    @property
    def name(self) -> str:
        return PurePosixPath(self.path).name

    @property
    def extension(self) -> str:
        return PurePosixPath(self.path).suffix.lstrip(".").lower()

    @property
    def is_markdown(self) -> bool:
        return self.extension == "md"
