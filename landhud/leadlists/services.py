"""
Lead list operations behind the HTTP endpoints.

Views translate ``LeadListError`` into structured responses; everything in
here raises instead of returning error payloads.
"""
from __future__ import annotations

import logging
import os
import re

from django.conf import settings
from django.utils import timezone

from landhud.common import storage
from landhud.leadlists import store
from landhud.leadlists.legacy_cache import legacy_cache
from landhud.leadlists.models import LeadList
from landhud.leadlists.serializers import LeadListSerializer
from landhud.leadlists.statuses import (
    CANCELLABLE,
    TRANSITIONS,
    ListStatus,
    StoredStatus,
    callback_target,
    can_transition,
    parse_list_status,
    to_stored,
)
from landhud.leadlists.tasks import notify_scrub_cancelled, trigger_scrub

logger = logging.getLogger(__name__)

ALLOWED_EXTENSIONS = (".csv", ".xlsx", ".xls")


class LeadListError(Exception):
    code = "ERROR"
    status = 400

    def __init__(self, message: str, details=None):
        super().__init__(message)
        self.message = message
        self.details = details


class ValidationFailed(LeadListError):
    code = "VALIDATION_ERROR"
    status = 422


class NotFound(LeadListError):
    code = "NOT_FOUND"
    status = 404


class InvalidTransition(LeadListError):
    code = "INVALID_TRANSITION"
    status = 409


class StorageFailed(LeadListError):
    code = "STORAGE_ERROR"
    status = 502


def _extension(file_name: str) -> str:
    return os.path.splitext(file_name or "")[1].lower()


def _require_extension(file_name: str) -> str:
    ext = _extension(file_name)
    if ext not in ALLOWED_EXTENSIONS:
        raise ValidationFailed(
            "Only CSV and Excel files (.csv, .xlsx, .xls) are allowed",
            details={"fileName": file_name},
        )
    return ext


def storage_key(file_name: str) -> str:
    prefix = getattr(settings, "LEAD_LIST_STORAGE_PREFIX", "") or ""
    if prefix and file_name.startswith(prefix):
        return file_name
    return f"{prefix}{file_name}"


def stored_file_name(county: str, state: str, original_name: str, now=None) -> str:
    """
    ``{county}-{state}-{epoch millis}{ext}``, lower-cased, county slugged.
    """
    now = now or timezone.now()
    county_slug = re.sub(r"[^a-z0-9]", "-", county.strip().lower())
    state_slug = state.strip().lower()
    millis = int(now.timestamp() * 1000)
    return f"{county_slug}-{state_slug}-{millis}{_extension(original_name)}"


def display_name(county: str, state: str, now=None) -> str:
    now = now or timezone.now()
    return f"{county}, {state} - {now.strftime('%m/%d/%Y')}"


def as_entry(record: LeadList) -> dict:
    return dict(LeadListSerializer(record).data)


def _mirror_to_cache(entry: dict) -> None:
    try:
        legacy_cache.add(entry)
    except Exception:
        logger.warning("Could not mirror lead list %s into legacy cache", entry.get("id"), exc_info=True)


def _update_cache(list_id, changes: dict) -> None:
    try:
        legacy_cache.update(list_id, changes)
    except Exception:
        logger.warning("Could not update legacy cache entry %s", list_id, exc_info=True)


def _drop_from_cache(list_id) -> bool:
    try:
        return legacy_cache.remove(list_id)
    except Exception:
        logger.warning("Could not drop legacy cache entry %s", list_id, exc_info=True)
        return False


# --- submission ------------------------------------------------------------

def _queue_trigger(record: LeadList) -> LeadList:
    """
    Queue ``trigger_scrub``. A broker failure leaves the list incoming with
    the reason on ``last_trigger_error`` so the operator can re-trigger.
    """
    try:
        trigger_scrub.delay(str(record.id))
    except Exception as e:
        error = f"Enqueue failed: {type(e).__name__}: {e}"
        logger.warning("Could not queue scrubbing trigger for lead list %s: %s", record.id, error)
        store.update(record.id, {"last_trigger_error": error})

    record.refresh_from_db()
    return record


def submit_lead_list(
    *,
    file_name: str,
    file_url: str,
    county: str,
    state: str,
    notes: str = "",
    original_filename: str = "",
    verify_file: bool | None = None,
) -> LeadList:
    """
    Create the record for a file already sitting in the object store and
    queue the scrubbing trigger. The record is created even if the trigger
    later fails; it then stays ``incoming``.
    """
    if not file_url or not county or not state:
        raise ValidationFailed("fileUrl, county and state are required")

    _require_extension(original_filename or file_name)

    if verify_file is None:
        verify_file = bool(getattr(settings, "LEAD_LIST_VERIFY_UPLOADED_FILE", True))
    if verify_file and not storage.exists(storage_key(file_name)):
        raise ValidationFailed("Uploaded file not found in storage", details={"fileName": file_name})

    now = timezone.now()
    record = store.create(
        name=display_name(county, state, now),
        file_name=file_name,
        original_file_name=original_filename or file_name,
        source="upload",
        county=county,
        state=state,
        notes=notes or "",
        status=StoredStatus.PENDING,
        source_file_url=file_url,
        received_at=now,
        updated_at=now,
    )
    logger.info("Created lead list %s for %s, %s (%s)", record.id, county, state, file_name)

    return _queue_trigger(record)


def upload_and_submit(*, upload, county: str, state: str, notes: str = "") -> LeadList:
    """
    Server-side upload: store the bytes, then submit. A storage failure
    aborts before any record exists.
    """
    county = (county or "").strip()
    state = (state or "").strip()
    if not county or not state:
        raise ValidationFailed("County and state are required")

    original = getattr(upload, "name", "") or ""
    _require_extension(original)

    max_bytes = int(getattr(settings, "LEAD_LIST_MAX_UPLOAD_BYTES", 50 * 1024 * 1024))
    if (getattr(upload, "size", 0) or 0) > max_bytes:
        raise ValidationFailed(f"File size exceeds {max_bytes // (1024 * 1024)}MB limit")

    file_name = stored_file_name(county, state, original)
    key = storage_key(file_name)
    try:
        file_url = storage.put(upload.read(), key)
    except storage.StorageError as e:
        logger.error("Lead list upload failed for %s: %s", key, e)
        raise StorageFailed("Failed to upload file, please retry") from e

    # submit_lead_list only raises before the record exists; a failed
    # trigger comes back as an incoming record that still needs the file
    try:
        return submit_lead_list(
            file_name=file_name,
            file_url=file_url,
            county=county,
            state=state,
            notes=notes,
            original_filename=original,
            verify_file=False,
        )
    except LeadListError:
        storage.remove([key])
        raise


def retrigger(list_id) -> LeadList:
    record = store.get(list_id)
    if not record:
        raise NotFound("Record not found")
    if record.list_status != ListStatus.INCOMING:
        raise InvalidTransition(f"Only incoming lists can be re-triggered (status is {record.list_status.value})")

    return _queue_trigger(record)


# --- webhook ---------------------------------------------------------------

def apply_callback(
    *,
    record_id,
    status=None,
    clean_file_url=None,
    record_count=None,
    error_message=None,
) -> LeadList:
    """
    Apply the scrubbing workflow's completion callback.

    Overwrites status and whichever result fields are present in one
    single-row update. The record does not have to be ``scrubbing``, and a
    repeated callback with the same outcome simply overwrites again. Moves
    off the transition graph (error -> ready, anything out of cancelled or
    uploaded) are refused so finished records stay finished.
    """
    record = store.get(record_id)
    if not record:
        logger.warning("Callback for unknown lead list %s ignored", record_id)
        raise NotFound("Record not found")

    fallback = getattr(settings, "LEAD_LIST_UNKNOWN_CALLBACK_STATUS", "ready")
    target = callback_target(status, error_message, fallback)

    fields = {"status": to_stored(target)}
    if target == ListStatus.ERROR:
        fields["error_message"] = error_message or f"Scrubbing failed ({status or 'no status'})"
    else:
        fields["error_message"] = ""
        if clean_file_url:
            fields["download_url"] = clean_file_url
        if record_count is not None:
            fields["record_count"] = int(record_count)

    # statuses this target may be reached from, plus itself for re-delivery
    sources = [s for s in ListStatus if target in TRANSITIONS[s]] + [target]
    updated = store.update(record.id, fields, expected_statuses=[to_stored(s) for s in sources])
    if updated is None:
        current = store.get(record.id)
        if current is None:
            raise NotFound("Record not found")
        raise InvalidTransition(
            f"Cannot move lead list from {current.list_status.value} to {target.value}",
        )

    logger.info("Lead list %s -> %s", updated.id, target.value)
    _update_cache(updated.id, as_entry(updated))
    return updated


def register_legacy(data: dict) -> dict:
    """
    Old direct-registration shape (no record_id). Writes the durable store
    and mirrors the entry into the legacy cache.
    """
    file_name = (data.get("fileName") or "").strip()
    if not file_name:
        raise ValidationFailed("fileName is required")

    target = parse_list_status(data.get("status")) or ListStatus.INCOMING
    if target == ListStatus.READY and (data.get("recordCount") is None or not data.get("downloadUrl")):
        raise ValidationFailed("A ready list needs both recordCount and downloadUrl")

    now = timezone.now()
    record = store.create(
        name=file_name,
        file_name=file_name,
        original_file_name=data.get("originalFileName") or file_name,
        source=data.get("source") or "landportal",
        county=data.get("county") or "",
        state=data.get("state") or "",
        status=to_stored(target),
        record_count=data.get("recordCount") if target == ListStatus.READY else None,
        download_url=(data.get("downloadUrl") or "") if target == ListStatus.READY else "",
        metadata_json=data.get("metadata") or {},
        received_at=now,
        updated_at=now,
    )
    logger.info("Registered legacy lead list %s: %s", record.id, file_name)

    entry = as_entry(record)
    _mirror_to_cache(entry)
    return entry


def mark_uploaded(list_id, uploaded_at=None) -> LeadList:
    record = store.get(list_id)
    if not record:
        raise NotFound("Record not found")
    if record.list_status == ListStatus.UPLOADED:
        return record
    if not can_transition(record.list_status, ListStatus.UPLOADED):
        raise InvalidTransition(f"Only ready lists can be marked uploaded (status is {record.list_status.value})")

    updated = store.update(
        record.id,
        {"status": StoredStatus.LAUNCHED, "uploaded_at": uploaded_at or timezone.now()},
        expected_statuses=[StoredStatus.READY],
    )
    if updated is None:
        raise InvalidTransition("Lead list changed while marking it uploaded")

    logger.info("Lead list %s marked uploaded to LaunchControl", updated.id)
    _update_cache(updated.id, as_entry(updated))
    return updated


def legacy_update(*, list_id, status=None, uploaded_at=None) -> dict:
    """
    Old PATCH on the webhook URL. Only the manual ready ->
    uploaded_to_launchcontrol move is accepted.
    """
    if status is not None:
        target = parse_list_status(status)
        if target != ListStatus.UPLOADED:
            raise InvalidTransition(f"Status {status!r} cannot be set through this endpoint")

    record = store.get(list_id)
    if record:
        if status is None:
            return as_entry(record)
        return as_entry(mark_uploaded(record.id, uploaded_at=uploaded_at))

    cached = legacy_cache.get(list_id)
    if cached is None:
        raise NotFound("Lead list not found")

    if status is None:
        return cached

    current = parse_list_status(cached.get("status"))
    if current != ListStatus.UPLOADED and (current is None or not can_transition(current, ListStatus.UPLOADED)):
        raise InvalidTransition(f"Only ready lists can be marked uploaded (status is {cached.get('status')})")

    stamp = uploaded_at or timezone.now()
    return legacy_cache.update(list_id, {
        "status": ListStatus.UPLOADED.value,
        "uploadedAt": stamp.isoformat(),
    })


# --- cancellation / deletion ----------------------------------------------

def _file_keys(record: LeadList) -> list[str]:
    keys = []
    for url in (record.source_file_url, record.download_url):
        name = (url or "").rstrip("/").rsplit("/", 1)[-1]
        if name:
            keys.append(storage_key(name))
    return keys


def delete_lead_list(list_id, *, cancel: bool = False) -> bool:
    """
    Remove a lead list. With ``cancel`` an in-flight list is first moved to
    cancelled and the workflow told to drop it. Returns True if a cancel
    happened. Stored files are removed best-effort.
    """
    record = store.get(list_id)
    if not record:
        if _drop_from_cache(list_id):
            logger.info("Deleted legacy-only lead list %s", list_id)
            return False
        raise NotFound("Record not found")

    cancelled = False
    if cancel and record.list_status in CANCELLABLE:
        if store.update(
            record.id,
            {"status": StoredStatus.CANCELLED},
            expected_statuses=[to_stored(s) for s in CANCELLABLE],
        ):
            cancelled = True
            logger.info("Cancelling scrubbing for lead list %s", record.id)
            notify_scrub_cancelled.delay(str(record.id))

    failed = storage.remove(_file_keys(record))
    if failed:
        logger.warning("Lead list %s: could not remove stored files %s", record.id, failed)

    store.delete(record.id)
    _drop_from_cache(record.id)

    logger.info("Deleted lead list %s%s", record.id, " (cancelled)" if cancelled else "")
    return cancelled
