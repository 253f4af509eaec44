"""Models describing a single refine operation."""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, ConfigDict

from notesmith.models.document import Document
from notesmith.models.settings import RefinerSettings


class RefineState(str, Enum):
    IDLE = "idle"
    RUNNING = "running"
    SUCCEEDED = "succeeded"
    FAILED = "failed"


class FailureKind(str, Enum):
    """Why a refine did not replace the document body."""

    TRANSPORT = "transport"
    API_STATUS = "api_status"
    EMPTY_RESPONSE = "empty_response"
    NO_ACTIVE_DOCUMENT = "no_active_document"
    UNEXPECTED = "unexpected"


class RefineRequest(BaseModel):
    """Settings snapshot and document captured when a refine starts."""

    model_config = ConfigDict(frozen=True)

    settings: RefinerSettings
    document: Document
