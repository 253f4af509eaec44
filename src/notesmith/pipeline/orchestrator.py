"""Refine orchestrator - reads a note, asks the model, writes the result back."""

from __future__ import annotations

import logging
import time
from contextlib import contextmanager
from dataclasses import dataclass
from pathlib import PurePosixPath
from typing import Iterator

from notesmith.clients.completion_client import CompletionClient
from notesmith.clients.errors import ApiStatusFailure
from notesmith.logging.history_store import RefineHistoryStore
from notesmith.logging.models import RefineRecord
from notesmith.models.document import Document
from notesmith.models.refine import FailureKind, RefineRequest, RefineState
from notesmith.models.settings import RefinerSettings
from notesmith.pipeline.prompt_builder import build_prompt
from notesmith.protocols import BusyIndicator, DocumentStore, Notifier, SettingsStore

logger = logging.getLogger(__name__)

BUSY_MESSAGE = "Refining note..."
SUCCESS_NOTICE = "Note refined: {name}"
FAILURE_NOTICE = "Failed to refine the note."
ERROR_NOTICE = "An error occurred while refining the note."


@dataclass
class RefineOutcome:
    """Terminal result of one refine invocation."""

    state: RefineState
    document: str | None = None
    text: str | None = None
    failure_kind: FailureKind | None = None
    error: BaseException | None = None
    elapsed_seconds: float = 0.0
    prompt_chars: int = 0

    @property
    def succeeded(self) -> bool:
        return self.state is RefineState.SUCCEEDED


@contextmanager
def busy(indicator: BusyIndicator, message: str = BUSY_MESSAGE) -> Iterator[None]:
    """Hold the busy indicator open for the duration of the block."""
    indicator.open(message)
    try:
        yield
    finally:
        indicator.close()


class RefineOrchestrator:
    """Runs refine operations against a document store.

    Invocations are independent: overlapping refines of the same note are not
    serialized and whichever finishes last wins.
    """

    def __init__(
        self,
        documents: DocumentStore,
        settings: SettingsStore,
        client: CompletionClient,
        *,
        notifier: Notifier,
        busy_indicator: BusyIndicator,
        history: RefineHistoryStore | None = None,
    ):
        self.documents = documents
        self.settings = settings
        self.client = client
        self.notifier = notifier
        self.busy_indicator = busy_indicator
        self.history = history
        self._in_flight = 0

    @property
    def state(self) -> RefineState:
        return RefineState.RUNNING if self._in_flight else RefineState.IDLE

    async def refine(self, ref: str | None) -> RefineOutcome:
        """Refine the note at ``ref``. Never raises.

        A None ``ref`` means no document is targeted and the call is a no-op.
        """
        if ref is None:
            logger.debug("Refine skipped: no active document")
            return RefineOutcome(
                state=RefineState.IDLE, failure_kind=FailureKind.NO_ACTIVE_DOCUMENT
            )

        start = time.monotonic()
        outcome = RefineOutcome(state=RefineState.FAILED, document=ref)
        settings: RefinerSettings | None = None
        self._in_flight += 1
        try:
            with busy(self.busy_indicator):
                body = await self.documents.read(ref)
                settings = self.settings.current
                request = RefineRequest(
                    settings=settings, document=Document(path=ref, body=body)
                )
                prompt = build_prompt(request.document.body, request.settings)
                outcome.prompt_chars = len(prompt)

                result = await self.client.complete(prompt, request.settings)
                if result.ok:
                    await self.documents.write(ref, result.text)
                    outcome.state = RefineState.SUCCEEDED
                    outcome.text = result.text
                else:
                    outcome.error = result.error
                    outcome.failure_kind = (
                        result.error.kind if result.error else FailureKind.EMPTY_RESPONSE
                    )
        except Exception as exc:
            logger.exception("Refiner error on %s", ref)
            outcome.state = RefineState.FAILED
            outcome.failure_kind = FailureKind.UNEXPECTED
            outcome.error = exc
        finally:
            self._in_flight -= 1
            outcome.elapsed_seconds = time.monotonic() - start

        if not outcome.succeeded:
            self._log_failure(outcome)
        self._notify(outcome)
        self._record(outcome, settings)
        return outcome

    def _log_failure(self, outcome: RefineOutcome) -> None:
        err = outcome.error
        if isinstance(err, ApiStatusFailure):
            logger.error(
                "Refine failed for %s [%s]: status=%d %s body=%r",
                outcome.document,
                outcome.failure_kind.value,
                err.status,
                err.status_text,
                err.body,
            )
        elif outcome.failure_kind is not FailureKind.UNEXPECTED:
            logger.error(
                "Refine failed for %s [%s]: %s",
                outcome.document,
                outcome.failure_kind.value,
                err,
            )

    def _notify(self, outcome: RefineOutcome) -> None:
        if outcome.succeeded:
            message = SUCCESS_NOTICE.format(name=PurePosixPath(outcome.document).name)
        elif outcome.failure_kind is FailureKind.UNEXPECTED:
            message = ERROR_NOTICE
        else:
            message = FAILURE_NOTICE
        try:
            self.notifier.notice(message)
        except Exception:
            logger.exception("Notifier failed to show %r", message)

    def _record(self, outcome: RefineOutcome, settings: RefinerSettings | None) -> None:
        if self.history is None:
            return
        err = outcome.error
        record = RefineRecord(
            document=outcome.document or "",
            model_id=settings.model_id if settings else "",
            provider=settings.provider_mode.value if settings else "standard",
            endpoint_url=settings.endpoint_url if settings else "",
            success=outcome.succeeded,
            error_kind=outcome.failure_kind.value if outcome.failure_kind else None,
            error_message=str(err) if err else None,
            elapsed_seconds=outcome.elapsed_seconds,
            prompt_chars=outcome.prompt_chars,
            output_chars=len(outcome.text or ""),
        )
        if isinstance(err, ApiStatusFailure):
            record = record.model_copy(
                update={
                    "status_code": err.status,
                    "status_text": err.status_text,
                    "response_body": err.body,
                }
            )
        try:
            self.history.save_record(record)
        except Exception:
            logger.exception("Could not record refine history for %s", outcome.document)
