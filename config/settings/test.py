from .base import *  # noqa

DEBUG = False
PASSWORD_HASHERS = ["django.contrib.auth.hashers.MD5PasswordHasher"]
DATABASES = {
    "default": {
        "ENGINE": "django.db.backends.sqlite3",
        "NAME": ":memory:",
    }
}

STORAGES = {
    "default": {"BACKEND": "django.core.files.storage.InMemoryStorage"},
    "staticfiles": {"BACKEND": "django.contrib.staticfiles.storage.StaticFilesStorage"},
}
MEDIA_URL = "https://files.test.local/"

CELERY_TASK_ALWAYS_EAGER = True

N8N_LEAD_LIST_WEBHOOK_URL = "https://n8n.test.local/webhook/lead-list-upload"
N8N_LEAD_LIST_CANCEL_URL = ""
APP_BASE_URL = "http://testserver"

LEAD_LIST_POLL_INITIAL_DELAY_SECONDS = 0
LEAD_LIST_POLL_INTERVAL_SECONDS = 0
