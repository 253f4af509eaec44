"""Single-shot completion client for OpenAI-compatible and "generate" endpoints.

One ``complete()`` call performs exactly one HTTP POST. There is no retry,
no streaming and no caching; every failure comes back inside the
``CompletionResult`` rather than being raised.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from urllib.parse import urlparse

import httpx

from notesmith.clients.errors import (
    ApiStatusFailure,
    CompletionError,
    EmptyResponseFailure,
    TransportFailure,
)
from notesmith.models.settings import ProviderMode, RefinerSettings

logger = logging.getLogger(__name__)

TEMPERATURE = 0.3
ALTERNATE_MAX_TOKENS = 512


@dataclass
class CompletionResult:
    """Generated text, or the error that prevented it."""

    text: str | None = None
    error: CompletionError | None = None

    @property
    def ok(self) -> bool:
        return bool(self.text)


def build_request_headers(settings: RefinerSettings) -> dict[str, str]:
    headers = {"Content-Type": "application/json"}
    if settings.provider_mode is ProviderMode.STANDARD:
        headers["Authorization"] = f"Bearer {settings.credential}"
    return headers


def build_request_payload(prompt: str, settings: RefinerSettings) -> dict:
    payload: dict = {
        "model": settings.model_id,
        "messages": [{"role": "user", "content": prompt}],
    }
    if settings.provider_mode is ProviderMode.ALTERNATE:
        payload["max_tokens"] = ALTERNATE_MAX_TOKENS
    payload["temperature"] = TEMPERATURE
    return payload


def extract_completion_text(data: object, mode: ProviderMode) -> str | None:
    """Pull the generated text out of a decoded response body.

    Standard responses carry it at ``choices[0].message.content``, alternate
    ones at the top-level ``response`` field. Anything missing, empty or not a
    string yields None.
    """
    if not isinstance(data, dict):
        return None
    if mode is ProviderMode.ALTERNATE:
        text = data.get("response")
    else:
        try:
            text = data["choices"][0]["message"]["content"]
        except (KeyError, IndexError, TypeError):
            return None
    if isinstance(text, str) and text:
        return text
    return None


def _endpoint(url: str) -> str:
    url = url.strip()
    parsed = urlparse(url)
    if parsed.scheme not in ("http", "https") or not parsed.netloc:
        raise TransportFailure(f"Invalid endpoint URL: {url!r}")
    return url


class CompletionClient:
    """Async httpx client that sends one prompt and returns one completion."""

    def __init__(
        self,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self._timeout = timeout
        self._transport = transport

    async def complete(self, prompt: str, settings: RefinerSettings) -> CompletionResult:
        """Send ``prompt`` using the shape selected by ``settings``."""
        logger.debug(
            "Completion call: model=%s provider=%s prompt_chars=%d",
            settings.model_id,
            settings.provider_mode.value,
            len(prompt),
        )
        try:
            text = await self._exchange(prompt, settings)
        except CompletionError as exc:
            logger.error("Completion failed [%s]: %s", exc.kind.value, exc)
            return CompletionResult(error=exc)
        logger.debug("Completion response: %d chars", len(text))
        return CompletionResult(text=text)

    async def _exchange(self, prompt: str, settings: RefinerSettings) -> str:
        url = _endpoint(settings.endpoint_url)
        try:
            async with httpx.AsyncClient(
                timeout=self._timeout,
                transport=self._transport,
                follow_redirects=True,
            ) as client:
                response = await client.post(
                    url,
                    headers=build_request_headers(settings),
                    json=build_request_payload(prompt, settings),
                )
        except httpx.TransportError as exc:
            raise TransportFailure(f"Could not reach {url}: {exc!r}") from exc
        except httpx.InvalidURL as exc:
            raise TransportFailure(f"Invalid endpoint URL: {url!r}") from exc

        if not response.is_success:
            raise ApiStatusFailure(
                response.status_code, response.reason_phrase, response.text
            )

        try:
            data = response.json()
        except ValueError as exc:
            raise EmptyResponseFailure("Response body is not valid JSON") from exc

        text = extract_completion_text(data, settings.provider_mode)
        if text is None:
            field = (
                "response"
                if settings.provider_mode is ProviderMode.ALTERNATE
                else "choices[0].message.content"
            )
            raise EmptyResponseFailure(f"Response is missing '{field}'")
        return text
