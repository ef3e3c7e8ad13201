"""
Status vocabularies for lead lists.

Three vocabularies meet here:

* ``ListStatus`` is what the API and the operator UI see.
* ``StoredStatus`` is what the ``lead_lists`` table stores.
* callback words are whatever the n8n scrubbing workflow puts in its
  ``status`` field.

Every translation goes through the tables below; nothing else in the app
compares raw status strings.
"""
from __future__ import annotations

from django.db import models


class ListStatus(models.TextChoices):
    INCOMING = "incoming", "Incoming"
    SCRUBBING = "scrubbing", "Scrubbing"
    READY = "ready", "Ready for Upload"
    UPLOADED = "uploaded_to_launchcontrol", "Uploaded"
    CANCELLED = "cancelled", "Cancelled"
    ERROR = "error", "Error"


class StoredStatus(models.TextChoices):
    PENDING = "pending", "Pending"
    PROCESSING = "processing", "Processing"
    READY = "ready", "Ready"
    LAUNCHED = "launched", "Launched"
    CANCELLED = "cancelled", "Cancelled"
    FAILED = "failed", "Failed"


_TO_STORED = {
    ListStatus.INCOMING: StoredStatus.PENDING,
    ListStatus.SCRUBBING: StoredStatus.PROCESSING,
    ListStatus.READY: StoredStatus.READY,
    ListStatus.UPLOADED: StoredStatus.LAUNCHED,
    ListStatus.CANCELLED: StoredStatus.CANCELLED,
    ListStatus.ERROR: StoredStatus.FAILED,
}
_TO_LIST = {stored: listed for listed, stored in _TO_STORED.items()}

UNKNOWN_STORED_DEFAULT = StoredStatus.PENDING
UNKNOWN_LIST_DEFAULT = ListStatus.ERROR

TERMINAL = frozenset({ListStatus.READY, ListStatus.ERROR, ListStatus.CANCELLED})
POLL_TERMINAL = frozenset({ListStatus.READY.value, ListStatus.ERROR.value})
CANCELLABLE = frozenset({ListStatus.INCOMING, ListStatus.SCRUBBING})

TRANSITIONS = {
    ListStatus.INCOMING: frozenset({ListStatus.SCRUBBING, ListStatus.READY, ListStatus.ERROR, ListStatus.CANCELLED}),
    ListStatus.SCRUBBING: frozenset({ListStatus.READY, ListStatus.ERROR, ListStatus.CANCELLED}),
    ListStatus.READY: frozenset({ListStatus.UPLOADED}),
    ListStatus.UPLOADED: frozenset(),
    ListStatus.CANCELLED: frozenset(),
    ListStatus.ERROR: frozenset(),
}

CALLBACK_SUCCESS = frozenset({"ready", "success", "succeeded", "complete", "completed", "done", "ok"})
CALLBACK_FAILURE = frozenset({"error", "failed", "failure", "fail"})


def parse_list_status(value) -> ListStatus | None:
    raw = str(value or "").strip().lower()
    try:
        return ListStatus(raw)
    except ValueError:
        return None


def parse_stored_status(value) -> StoredStatus | None:
    raw = str(value or "").strip().lower()
    try:
        return StoredStatus(raw)
    except ValueError:
        return None


def to_stored(value) -> StoredStatus:
    listed = parse_list_status(value)
    if listed is None:
        return UNKNOWN_STORED_DEFAULT
    return _TO_STORED[listed]


def to_list(value) -> ListStatus:
    stored = parse_stored_status(value)
    if stored is None:
        return UNKNOWN_LIST_DEFAULT
    return _TO_LIST[stored]


def can_transition(current, target) -> bool:
    return ListStatus(target) in TRANSITIONS[ListStatus(current)]


def callback_target(status, error_message, fallback) -> ListStatus:
    """
    Decide where a scrubber callback sends a record.

    An error message always wins. Unrecognised status words fall back to
    ``fallback`` (LEAD_LIST_UNKNOWN_CALLBACK_STATUS).
    """
    if error_message:
        return ListStatus.ERROR
    word = str(status or "").strip().lower()
    if word in CALLBACK_FAILURE:
        return ListStatus.ERROR
    if word in CALLBACK_SUCCESS:
        return ListStatus.READY
    chosen = parse_list_status(fallback)
    if chosen not in (ListStatus.READY, ListStatus.ERROR):
        return ListStatus.READY
    return chosen
