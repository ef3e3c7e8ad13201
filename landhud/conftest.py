import json

import pytest
from django.core.files.base import ContentFile
from django.core.files.storage import default_storage
from rest_framework.test import APIClient

from landhud.leadlists.legacy_cache import legacy_cache


class _FakeResponse:
    def __init__(self, status=200):
        self.status = status

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        return False

    def read(self):
        return b"{}"


class FakeN8N:
    """
    Stands in for urllib.request.urlopen: records every outbound POST and
    answers 200 unless told otherwise.
    """

    def __init__(self):
        self.calls = []
        self.error = None
        self.status = 200

    def __call__(self, req, timeout=None):
        self.calls.append({
            "url": req.full_url,
            "method": req.get_method(),
            "payload": json.loads(req.data.decode("utf-8")) if req.data else None,
        })
        if self.error is not None:
            raise self.error
        return _FakeResponse(self.status)


@pytest.fixture(autouse=True)
def n8n(monkeypatch):
    fake = FakeN8N()
    monkeypatch.setattr("urllib.request.urlopen", fake)
    return fake


@pytest.fixture(autouse=True)
def clean_legacy_cache():
    legacy_cache.clear()
    yield
    legacy_cache.clear()


@pytest.fixture
def api():
    return APIClient()


@pytest.fixture
def uploaded_file():
    """
    Put a file in the object store the way the upload page does before it
    calls the submission endpoint. Returns (file_name, public_url).
    """
    def _upload(name="list.csv", data=b"apn,owner\n1,Smith\n"):
        saved = default_storage.save(f"lead-lists/{name}", ContentFile(data))
        return saved.rsplit("/", 1)[-1], default_storage.url(saved)

    return _upload


@pytest.fixture
def submit(api, uploaded_file):
    def _submit(county="Heard", state="GA", name="list.csv", **extra):
        file_name, url = uploaded_file(name)
        body = {
            "fileName": file_name,
            "fileUrl": url,
            "county": county,
            "state": state,
            "originalFilename": name,
        }
        body.update(extra)
        return api.post("/v1/lead-lists/upload", body, format="json")

    return _submit
