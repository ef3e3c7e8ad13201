import pytest
from django.core.files.storage import default_storage

from landhud.leadlists.legacy_cache import legacy_cache
from landhud.leadlists.models import LeadList


def _delete(api, list_id, cancel=False):
    return api.delete("/v1/lead-lists/delete", {"id": list_id, "cancel": cancel}, format="json")


@pytest.mark.django_db
def test_cancel_scrubbing_list_removes_it_and_notifies_workflow(api, submit, n8n, settings):
    settings.N8N_LEAD_LIST_CANCEL_URL = "https://n8n.test.local/webhook/lead-list-cancel"
    list_id = submit(county="Mohave", state="AZ").json()["recordId"]

    r = _delete(api, list_id, cancel=True)
    assert r.status_code == 200, r.content
    assert r.json() == {"success": True, "message": "Scrubbing cancelled and record deleted"}

    assert not LeadList.objects.filter(id=list_id).exists()
    assert n8n.calls[-1]["url"] == "https://n8n.test.local/webhook/lead-list-cancel"
    assert n8n.calls[-1]["payload"] == {"record_id": list_id, "action": "cancel"}

    listed = api.get("/v1/lead-lists").json()
    assert listed["count"] == 0


@pytest.mark.django_db
def test_late_webhook_after_cancel_does_not_recreate(api, submit):
    list_id = submit().json()["recordId"]
    _delete(api, list_id, cancel=True)

    late = api.post(
        "/v1/lead-lists/webhook",
        {"record_id": list_id, "status": "ready", "record_count": 10},
        format="json",
    )
    assert late.status_code == 404
    assert LeadList.objects.count() == 0
    assert api.get("/v1/lead-lists").json()["lists"] == []


@pytest.mark.django_db
def test_cancel_without_cancel_url_is_quiet(api, submit, n8n):
    list_id = submit().json()["recordId"]
    calls_before = len(n8n.calls)

    r = _delete(api, list_id, cancel=True)
    assert r.status_code == 200
    assert len(n8n.calls) == calls_before


@pytest.mark.django_db
def test_plain_delete_of_ready_list_removes_files(api, submit):
    body = submit(name="done.csv").json()
    list_id = body["recordId"]
    api.post(
        "/v1/lead-lists/webhook",
        {"record_id": list_id, "status": "ready", "record_count": 2},
        format="json",
    )
    assert default_storage.exists(f"lead-lists/{body['fileName']}")

    r = _delete(api, list_id)
    assert r.status_code == 200
    assert r.json()["message"] == "Record deleted successfully"
    assert not LeadList.objects.filter(id=list_id).exists()
    assert not default_storage.exists(f"lead-lists/{body['fileName']}")


@pytest.mark.django_db
def test_cancel_flag_on_finished_list_is_plain_delete(api, submit, n8n, settings):
    settings.N8N_LEAD_LIST_CANCEL_URL = "https://n8n.test.local/webhook/lead-list-cancel"
    list_id = submit().json()["recordId"]
    api.post("/v1/lead-lists/webhook", {"record_id": list_id, "error_message": "bad format"}, format="json")
    calls_before = len(n8n.calls)

    r = _delete(api, list_id, cancel=True)
    assert r.status_code == 200
    assert r.json()["message"] == "Record deleted successfully"
    assert len(n8n.calls) == calls_before


@pytest.mark.django_db
def test_storage_cleanup_failure_does_not_block_delete(api, submit, monkeypatch):
    list_id = submit().json()["recordId"]
    monkeypatch.setattr("landhud.leadlists.services.storage.remove", lambda keys: list(keys))

    r = _delete(api, list_id)
    assert r.status_code == 200
    assert LeadList.objects.count() == 0


@pytest.mark.django_db
def test_delete_unknown_id_is_not_found(api):
    r = _delete(api, "5b0c1f0e-6f0b-4a59-9a57-1d1f8f7d0a11")
    assert r.status_code == 404
    assert r.json()["error"]["code"] == "NOT_FOUND"


@pytest.mark.django_db
def test_delete_requires_id(api):
    r = api.delete("/v1/lead-lists/delete", {}, format="json")
    assert r.status_code == 422


@pytest.mark.django_db
def test_delete_drops_legacy_copy_too(api):
    created = api.post("/v1/lead-lists/webhook", {"fileName": "x.csv"}, format="json").json()
    assert legacy_cache.get(created["id"]) is not None

    r = _delete(api, created["id"])
    assert r.status_code == 200
    assert legacy_cache.get(created["id"]) is None
    assert api.get("/v1/lead-lists").json()["count"] == 0


@pytest.mark.django_db
def test_delete_legacy_only_entry(api):
    legacy_cache.add({"id": "legacy-7", "fileName": "old.csv", "status": "incoming", "receivedAt": "2025-01-01T00:00:00Z"})

    r = _delete(api, "legacy-7")
    assert r.status_code == 200
    assert legacy_cache.get("legacy-7") is None
