import pytest

from landhud.common import storage


def test_put_returns_public_url_and_exists():
    url = storage.put(b"a,b\n", "lead-lists/storage-test.csv")
    assert url.startswith("https://files.test.local/lead-lists/storage-test")
    key = "lead-lists/" + url.rsplit("/", 1)[-1]
    assert storage.exists(key)
    assert storage.remove([key, ""]) == []
    assert not storage.exists(key)


def test_put_wraps_backend_failures(monkeypatch):
    def _boom(name, content):
        raise OSError("disk full")

    monkeypatch.setattr(storage.default_storage, "save", _boom)
    with pytest.raises(storage.StorageError):
        storage.put(b"x", "lead-lists/x.csv")


def test_remove_reports_failed_keys(monkeypatch):
    def _boom(name):
        raise OSError("permission denied")

    monkeypatch.setattr(storage.default_storage, "delete", _boom)
    assert storage.remove(["lead-lists/a.csv"]) == ["lead-lists/a.csv"]


def test_exists_of_blank_key():
    assert storage.exists("") is False
