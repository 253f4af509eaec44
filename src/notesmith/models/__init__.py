"""Data models for the note refiner."""

from notesmith.models.document import Document
from notesmith.models.refine import FailureKind, RefineRequest, RefineState
from notesmith.models.settings import (
    DEFAULT_ENDPOINT_URL,
    DEFAULT_MODEL_ID,
    ProviderMode,
    RefinerSettings,
)

__all__ = [
    "DEFAULT_ENDPOINT_URL",
    "DEFAULT_MODEL_ID",
    "Document",
    "FailureKind",
    "ProviderMode",
    "RefineRequest",
    "RefineState",
    "RefinerSettings",
]
