import logging

from django.core.files.base import ContentFile
from django.core.files.storage import default_storage

logger = logging.getLogger(__name__)


class StorageError(Exception):
    pass


def put(data: bytes, key: str) -> str:
    """
    Upload raw bytes to configured storage and return public URL.
    Raises StorageError if the backend rejects the write.
    """
    try:
        saved = default_storage.save(key, ContentFile(data))
    except Exception as e:
        raise StorageError(f"Failed to store {key}: {e}") from e
    return public_url(saved)


def public_url(key: str) -> str:
    try:
        return default_storage.url(key)
    except Exception:
        return key


def exists(key: str) -> bool:
    if not key:
        return False
    try:
        return default_storage.exists(key)
    except Exception:
        logger.warning("storage exists() failed for %s", key, exc_info=True)
        return False


def remove(keys) -> list:
    """
    Best-effort delete. Returns the keys that could not be removed.
    """
    failed = []
    for key in keys:
        if not key:
            continue
        try:
            default_storage.delete(key)
        except Exception:
            logger.warning("storage delete failed for %s", key, exc_info=True)
            failed.append(key)
    return failed
