"""Polling of processing status until a job finishes.

``StatusPoller`` is a small state machine::

    idle -> polling -> completed | failed | cancelled

Failed status requests (network trouble, a transient 5xx) do not end the
loop: the job keeps running server-side and the next poll may succeed.
Only a terminal job status or the cancel token stops polling.

A 404 is treated the same way, so polling a job that does not exist (or
was purged by the retention sweep) never finishes on its own. Pass a
``CancelToken`` and cancel it on a deadline when that matters.
"""

import logging
import threading
from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum

from app.client.api import APIClient
from app.config import get_settings
from app.exceptions import NetworkError, UploadRejectedError
from app.schemas.processing import JobStatus, status_for_label

logger = logging.getLogger(__name__)

DEFAULT_ERROR_MESSAGE = "Ocorreu um erro ao processar o áudio"


class PollerState(str, Enum):
    IDLE = "idle"
    POLLING = "polling"
    COMPLETED = "completed"
    FAILED = "failed"
    CANCELLED = "cancelled"


FINISHED_STATES = (PollerState.COMPLETED, PollerState.FAILED, PollerState.CANCELLED)


class CancelToken:
    """Lets another thread stop a running ``poll()``."""

    def __init__(self) -> None:
        self._event = threading.Event()

    def cancel(self) -> None:
        self._event.set()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    def wait(self, timeout: float) -> bool:
        """Sleep up to ``timeout`` seconds. Returns True if cancelled meanwhile."""
        return self._event.wait(timeout)


@dataclass
class PollResult:
    state: PollerState
    status: JobStatus
    progress: int
    entry_id: int | None = None
    error_message: str | None = None


class StatusPoller:
    """Follows one processing job until it completes or fails.

    Args:
        fetch_status: ``job_id -> status dict``; usually ``APIClient.get_processing_status``.
        interval: Seconds between polls (defaults to ``STATUS_POLL_INTERVAL_SECONDS``).
        on_complete: Called with the journal entry id when the job completes
            (None if the completed status carried no id).
        on_error: Called with the error message when the job fails.
        on_update: Called with the ``PollResult`` after every status received.
    """

    def __init__(
        self,
        fetch_status: Callable[[int | str], dict],
        interval: float | None = None,
        on_complete: Callable[[int | None], None] | None = None,
        on_error: Callable[[str], None] | None = None,
        on_update: Callable[[PollResult], None] | None = None,
    ) -> None:
        self._fetch_status = fetch_status
        self._interval = get_settings().STATUS_POLL_INTERVAL_SECONDS if interval is None else interval
        self._on_complete = on_complete
        self._on_error = on_error
        self._on_update = on_update
        self.state = PollerState.IDLE
        self.status = JobStatus.PENDING
        self.progress = 0
        self.entry_id: int | None = None
        self.error_message: str | None = None

    @classmethod
    def for_api(cls, api: APIClient, **kwargs) -> "StatusPoller":
        return cls(api.get_processing_status, **kwargs)

    @property
    def result(self) -> PollResult:
        return PollResult(
            state=self.state,
            status=self.status,
            progress=self.progress,
            entry_id=self.entry_id,
            error_message=self.error_message,
        )

    def poll(self, job_id: int | str, cancel_token: CancelToken | None = None) -> PollResult:
        """Poll now and then every ``interval`` seconds until the job is terminal or cancelled.

        Unknown jobs (404) are retried like any failed request; only the token ends that.
        """
        token = cancel_token or CancelToken()
        if self.state not in (PollerState.COMPLETED, PollerState.FAILED):
            self.state = PollerState.POLLING

        while self.state == PollerState.POLLING:
            if token.cancelled:
                self.state = PollerState.CANCELLED
                break
            try:
                data = self._fetch_status(job_id)
            except (NetworkError, UploadRejectedError) as e:
                logger.warning("Status request for job %s failed (%s); will retry", job_id, e.detail)
            else:
                self.apply_status(data)
                if self.state in FINISHED_STATES:
                    break
            if token.wait(self._interval):
                self.state = PollerState.CANCELLED

        logger.debug("Stopped polling job %s: %s", job_id, self.state.value)
        return self.result

    def apply_status(self, data: dict) -> PollResult:
        """Feed one status body, from a poll or injected by hand.

        Accepts the current keys (``status``, ``progress``, ``id``,
        ``errorMessage``) and the older ``processingStatus`` /
        ``processingProgress`` / ``isComplete`` / ``error`` ones.
        """
        if self.state in (PollerState.COMPLETED, PollerState.FAILED):
            return self.result

        status = status_for_label(data.get("processingStatus") or data.get("status"))
        if data.get("isComplete") and status != JobStatus.ERROR:
            status = JobStatus.COMPLETED

        raw_progress = data.get("processingProgress", data.get("progress"))
        try:
            progress = int(raw_progress or 0)
        except (TypeError, ValueError):
            progress = 0
        self.progress = max(self.progress, min(100, max(0, progress)))
        self.status = status
        if data.get("id") is not None and self.entry_id is None:
            self.entry_id = data["id"]

        if status == JobStatus.COMPLETED:
            self.state = PollerState.COMPLETED
        elif status == JobStatus.ERROR:
            self.error_message = data.get("errorMessage") or data.get("error") or DEFAULT_ERROR_MESSAGE
            self.state = PollerState.FAILED

        result = self.result
        if self._on_update is not None:
            self._on_update(result)
        if status == JobStatus.COMPLETED:
            if self.entry_id is None:
                logger.warning("Job reported completed without a journal entry id")
            if self._on_complete is not None:
                self._on_complete(self.entry_id)
        elif status == JobStatus.ERROR and self._on_error is not None:
            self._on_error(self.error_message)
        return result
