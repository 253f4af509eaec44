"""Pydantic model for the persisted refiner settings record."""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field

DEFAULT_MODEL_ID = "gpt-4o"
DEFAULT_ENDPOINT_URL = "https://api.openai.com/v1/chat/completions"


class ProviderMode(str, Enum):
    """Request/response shape used for the completion exchange."""

    STANDARD = "standard"    # chat-completions shape, bearer auth
    ALTERNATE = "alternate"  # "generate" shape for local/self-hosted servers


class RefinerSettings(BaseModel):
    """User configuration, persisted as a flat camelCase record."""

    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="ignore")

    credential: str = ""
    model_id: str = Field(default=DEFAULT_MODEL_ID, alias="modelId")
    endpoint_url: str = Field(default=DEFAULT_ENDPOINT_URL, alias="endpointUrl")
    preferred_tags: str = Field(default="", alias="preferredTags")
    extra_instructions: str = Field(default="", alias="extraInstructions")
    use_alternate_provider: bool = Field(default=False, alias="useAlternateProvider")

    @property
    def provider_mode(self) -> ProviderMode:
        if self.use_alternate_provider:
            return ProviderMode.ALTERNATE
        return ProviderMode.STANDARD

    @property
    def masked_credential(self) -> str:
        if not self.credential:
            return ""
        if len(self.credential) <= 8:
            return "*" * len(self.credential)
        return f"{self.credential[:3]}...{self.credential[-4:]}"

    def to_record(self) -> dict:
        """Return the persisted camelCase record."""
        return self.model_dump(by_alias=True)

    def __repr__(self) -> str:
        return (
            f"RefinerSettings(model_id={self.model_id!r}, "
            f"endpoint_url={self.endpoint_url!r}, "
            f"provider_mode={self.provider_mode.value!r}, "
            f"credential={self.masked_credential!r})"
        )

    __str__ = __repr__


def setting_field_name(key: str) -> str | None:
    """Resolve a snake_case attribute or camelCase record key to the attribute name."""
    for name, info in RefinerSettings.model_fields.items():
        if key == name or key == info.alias:
            return name
    return None


SETTING_KEYS: tuple[str, ...] = tuple(
    info.alias or name for name, info in RefinerSettings.model_fields.items()
)
