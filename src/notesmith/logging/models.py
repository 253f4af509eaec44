"""Diagnostic record models."""

from __future__ import annotations

import uuid
from datetime import datetime

from pydantic import BaseModel, Field


class RefineRecord(BaseModel):
    """Single diagnostic entry for a refine attempt. Never holds the credential."""

    id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    timestamp: datetime = Field(default_factory=datetime.now)
    document: str
    model_id: str = ""
    provider: str = "standard"  # "standard" | "alternate"
    endpoint_url: str = ""
    success: bool = True
    error_kind: str | None = None
    status_code: int | None = None
    status_text: str | None = None
    response_body: str | None = None
    error_message: str | None = None
    elapsed_seconds: float = 0.0
    prompt_chars: int = 0
    output_chars: int = 0
