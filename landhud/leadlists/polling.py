"""
Client-side status polling for a submitted lead list.

One ``StatusPoller`` per submission. It asks the status endpoint every few
seconds until the list is ``ready`` or ``error``, and gives up after a fixed
number of attempts. Running out of attempts is reported as a timeout, which
is a client-side outcome only: the record itself is left alone.

Sleeping happens on a ``threading.Event`` so ``cancel()`` wakes the loop
immediately.
"""
from __future__ import annotations

import json
import logging
import threading
import urllib.error
import urllib.parse
import urllib.request
from dataclasses import dataclass
from typing import Callable, Optional

from landhud.leadlists.statuses import ListStatus

logger = logging.getLogger(__name__)


class StatusFetchError(Exception):
    pass


@dataclass
class PollResult:
    OUTCOME_READY = "ready"
    OUTCOME_ERROR = "error"
    OUTCOME_TIMEOUT = "timeout"
    OUTCOME_CANCELLED = "cancelled"

    outcome: str
    attempts: int
    record: Optional[dict] = None
    message: str = ""

    @property
    def record_count(self):
        return (self.record or {}).get("recordCount")

    @property
    def error_message(self):
        return (self.record or {}).get("errorMessage")


class HttpStatusFetcher:
    """
    GET {base_url}/v1/lead-lists/status?id=<id> and return the record dict.
    """

    def __init__(self, base_url: str, timeout: int = 10):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout

    def url_for(self, list_id) -> str:
        query = urllib.parse.urlencode({"id": str(list_id)})
        return f"{self.base_url}/v1/lead-lists/status?{query}"

    def __call__(self, list_id) -> dict:
        req = urllib.request.Request(self.url_for(list_id), headers={"Accept": "application/json"}, method="GET")
        try:
            with urllib.request.urlopen(req, timeout=self.timeout) as resp:
                body = resp.read()
        except urllib.error.HTTPError as e:
            body = e.read() if hasattr(e, "read") else b""
            if not body:
                raise StatusFetchError(f"HTTPError {e.code}") from e

        try:
            data = json.loads(body.decode("utf-8") or "{}")
        except ValueError as e:
            raise StatusFetchError("Status endpoint returned invalid JSON") from e

        if not data.get("success"):
            error = data.get("error") or {}
            message = error.get("message") if isinstance(error, dict) else str(error)
            raise StatusFetchError(message or "Failed to get status")
        return data.get("record") or {}


def _setting(name, default):
    from django.conf import settings

    return getattr(settings, name, default)


class StatusPoller:
    def __init__(
        self,
        fetch: Callable[[str], dict],
        *,
        interval: float | None = None,
        max_attempts: int | None = None,
        initial_delay: float | None = None,
        on_progress: Callable[[int, Optional[dict], Optional[Exception]], None] | None = None,
        cancel_event: threading.Event | None = None,
    ):
        self.fetch = fetch
        self.interval = float(interval if interval is not None else _setting("LEAD_LIST_POLL_INTERVAL_SECONDS", 5))
        self.max_attempts = int(max_attempts if max_attempts is not None else _setting("LEAD_LIST_POLL_MAX_ATTEMPTS", 60))
        self.initial_delay = float(
            initial_delay if initial_delay is not None else _setting("LEAD_LIST_POLL_INITIAL_DELAY_SECONDS", 3)
        )
        self.on_progress = on_progress
        self._cancel = cancel_event or threading.Event()

        if self.max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")

    def cancel(self) -> None:
        self._cancel.set()

    @property
    def cancelled(self) -> bool:
        return self._cancel.is_set()

    def _wait(self, seconds: float) -> bool:
        # True when cancelled during (or before) the wait
        if seconds <= 0:
            return self._cancel.is_set()
        return self._cancel.wait(seconds)

    def _notify(self, attempt, record, error=None):
        if not self.on_progress:
            return
        try:
            self.on_progress(attempt, record, error)
        except Exception:
            logger.warning("poll progress callback failed", exc_info=True)

    def run(self, list_id) -> PollResult:
        if self._wait(self.initial_delay):
            return PollResult(PollResult.OUTCOME_CANCELLED, 0, None, "Polling cancelled")

        attempts = 0
        record = None
        while attempts < self.max_attempts:
            attempts += 1
            try:
                record = self.fetch(str(list_id))
            except Exception as e:
                # transient failures spend budget but never end the loop early
                logger.warning("Status poll %s/%s for %s failed: %s", attempts, self.max_attempts, list_id, e)
                self._notify(attempts, None, e)
            else:
                self._notify(attempts, record)
                status = (record or {}).get("status")
                if status == ListStatus.READY.value:
                    count = record.get("recordCount")
                    count_text = f"{count:,} " if isinstance(count, int) else ""
                    return PollResult(
                        PollResult.OUTCOME_READY,
                        attempts,
                        record,
                        f"Processing complete! {count_text}records ready.",
                    )
                if status == ListStatus.ERROR.value:
                    return PollResult(
                        PollResult.OUTCOME_ERROR,
                        attempts,
                        record,
                        record.get("errorMessage") or "Processing failed",
                    )

            if attempts >= self.max_attempts:
                break
            if self._wait(self.interval):
                return PollResult(PollResult.OUTCOME_CANCELLED, attempts, record, "Polling cancelled")

        return PollResult(
            PollResult.OUTCOME_TIMEOUT,
            attempts,
            record,
            "Processing timed out. Please check the list manually.",
        )

    def run_in_background(self, list_id, on_done: Callable[[PollResult], None] | None = None) -> threading.Thread:
        """
        Start ``run`` on a daemon thread. Each thread owns its poller; nothing
        is shared between loops.
        """
        def _target():
            result = self.run(list_id)
            if on_done:
                on_done(result)

        t = threading.Thread(target=_target, name=f"poll-lead-list-{list_id}", daemon=True)
        t.start()
        return t
