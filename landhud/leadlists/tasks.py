import json
import logging
import urllib.request
import urllib.error

from celery import shared_task
from django.conf import settings
from django.db.models import F
from django.urls import reverse

from landhud.leadlists import store
from landhud.leadlists.models import LeadList
from landhud.leadlists.statuses import ListStatus, StoredStatus

logger = logging.getLogger(__name__)


def callback_url() -> str:
    base = (getattr(settings, "APP_BASE_URL", "") or "").rstrip("/")
    return f"{base}{reverse('lead-lists-webhook')}"


def _post_json(url: str, payload: dict) -> int:
    body = json.dumps(payload).encode("utf-8")
    req = urllib.request.Request(
        url,
        data=body,
        headers={"Content-Type": "application/json"},
        method="POST",
    )
    timeout = int(getattr(settings, "LEAD_LIST_TRIGGER_TIMEOUT", 10))
    with urllib.request.urlopen(req, timeout=timeout) as resp:
        status = int(getattr(resp, "status", 200))
    if not 200 <= status < 300:
        raise urllib.error.HTTPError(url, status, "non-2xx", hdrs=None, fp=None)
    return status


@shared_task(name="landhud.leadlists.tasks.trigger_scrub", bind=True, max_retries=0)
def trigger_scrub(self, list_id: str) -> str:
    """
    Hand a lead list to the n8n scrubbing workflow.

    A 2xx reply moves the list from incoming to scrubbing. Any failure leaves
    it incoming so the operator can re-trigger; the workflow's callback is
    idempotent per record id, so a duplicate trigger is harmless.
    """
    record = store.get(list_id)
    if not record:
        logger.warning("trigger_scrub: lead list %s no longer exists", list_id)
        return "missing"

    if record.list_status not in (ListStatus.INCOMING, ListStatus.SCRUBBING):
        return "skipped"

    payload = {
        "file_url": record.source_file_url,
        "county": record.county,
        "state": record.state,
        "record_id": str(record.id),
        "callback_url": callback_url(),
        "original_filename": record.original_file_name,
        "notes": record.notes or None,
    }

    LeadList.objects.filter(id=record.id).update(trigger_attempts=F("trigger_attempts") + 1)

    try:
        _post_json(settings.N8N_LEAD_LIST_WEBHOOK_URL, payload)
    except urllib.error.HTTPError as e:
        error = f"HTTPError {int(getattr(e, 'code', 0) or 0)}"
    except Exception as e:
        error = f"Exception: {type(e).__name__}: {e}"
    else:
        store.update(
            record.id,
            {"status": StoredStatus.PROCESSING, "last_trigger_error": ""},
            expected_statuses=[StoredStatus.PENDING],
        )
        logger.info("Triggered scrubbing workflow for lead list %s", record.id)
        return "accepted"

    store.update(record.id, {"last_trigger_error": error})
    logger.warning("Failed to trigger scrubbing workflow for lead list %s: %s", record.id, error)
    return "failed"


@shared_task(name="landhud.leadlists.tasks.notify_scrub_cancelled", max_retries=0)
def notify_scrub_cancelled(list_id: str) -> str:
    """
    Tell the workflow a cancelled list's result will be ignored. Best-effort.
    """
    url = getattr(settings, "N8N_LEAD_LIST_CANCEL_URL", "") or ""
    if not url:
        return "disabled"

    try:
        _post_json(url, {"record_id": str(list_id), "action": "cancel"})
    except Exception as e:
        logger.warning("Cancel notice for lead list %s failed: %s: %s", list_id, type(e).__name__, e)
        return "failed"
    return "sent"
