from pathlib import Path
import os
from dotenv import load_dotenv
load_dotenv()


BASE_DIR = Path(__file__).resolve().parents[2]

SECRET_KEY = os.getenv("DJANGO_SECRET_KEY", "dev-insecure-change-me")
DEBUG = os.getenv("DEBUG", "0") == "1"
ALLOWED_HOSTS = [h.strip() for h in os.getenv("ALLOWED_HOSTS", "localhost,127.0.0.1").split(",") if h.strip()]

INSTALLED_APPS = [
    "django.contrib.admin",
    "django.contrib.auth",
    "django.contrib.contenttypes",
    "django.contrib.sessions",
    "django.contrib.messages",
    "django.contrib.staticfiles",

    "rest_framework",
    "drf_spectacular",

    "landhud.common",
    "landhud.leadlists.apps.LeadListsConfig",
]

MIDDLEWARE = [
    "django.middleware.security.SecurityMiddleware",
    "django.contrib.sessions.middleware.SessionMiddleware",
    "django.middleware.common.CommonMiddleware",
    "django.middleware.csrf.CsrfViewMiddleware",
    "django.contrib.auth.middleware.AuthenticationMiddleware",
    "django.contrib.messages.middleware.MessageMiddleware",
    "django.middleware.clickjacking.XFrameOptionsMiddleware",
]

ROOT_URLCONF = "config.urls"

TEMPLATES = [
    {
        "BACKEND": "django.template.backends.django.DjangoTemplates",
        "DIRS": [],
        "APP_DIRS": True,
        "OPTIONS": {"context_processors": [
            "django.template.context_processors.request",
            "django.contrib.auth.context_processors.auth",
            "django.contrib.messages.context_processors.messages",
        ]},
    }
]

WSGI_APPLICATION = "config.wsgi.application"

DATABASES = {
    "default": {
        "ENGINE": "django.db.backends.postgresql",
        "NAME": os.getenv("DB_NAME", "landhud"),
        "USER": os.getenv("DB_USER", "landhud"),
        "PASSWORD": os.getenv("DB_PASSWORD", "landhud"),
        "HOST": os.getenv("DB_HOST", "127.0.0.1"),
        "PORT": os.getenv("DB_PORT", "5432"),
    }
}

LANGUAGE_CODE = "en-us"
TIME_ZONE = "UTC"
USE_I18N = True
USE_TZ = True

STATIC_URL = "static/"
DEFAULT_AUTO_FIELD = "django.db.models.BigAutoField"

MEDIA_ROOT = os.getenv("MEDIA_ROOT", str(BASE_DIR / "media"))
MEDIA_URL = os.getenv("MEDIA_URL", "/media/")

# Lead list endpoints are called by the operator UI and by the n8n workflow;
# access control sits in front of this service.
REST_FRAMEWORK = {
    "DEFAULT_AUTHENTICATION_CLASSES": [],
    "DEFAULT_PERMISSION_CLASSES": (
        "rest_framework.permissions.AllowAny",
    ),
    "UNAUTHENTICATED_USER": None,
    "DEFAULT_SCHEMA_CLASS": "drf_spectacular.openapi.AutoSchema",
}

SPECTACULAR_SETTINGS = {"TITLE": "LandHud Lead Lists API", "VERSION": "0.1.0"}

# Redis (Celery broker, health check)
REDIS_URL = os.getenv("REDIS_URL", "redis://localhost:6379/0")

# Celery
CELERY_BROKER_URL = REDIS_URL
CELERY_RESULT_BACKEND = REDIS_URL
CELERY_TASK_ALWAYS_EAGER = False
CELERY_BROKER_CONNECTION_RETRY_ON_STARTUP = True
CELERY_TASK_CREATE_MISSING_QUEUES = True
CELERY_TASK_DEFAULT_QUEUE = "celery"
CELERY_ACCEPT_CONTENT = ["json"]
CELERY_TASK_SERIALIZER = "json"
CELERY_RESULT_SERIALIZER = "json"
CELERY_TIMEZONE = "UTC"
CELERY_ENABLE_UTC = True

# n8n scrubbing workflow
N8N_LEAD_LIST_WEBHOOK_URL = os.getenv(
    "N8N_LEAD_LIST_WEBHOOK_URL", "https://landhud.app.n8n.cloud/webhook/lead-list-upload"
)
N8N_LEAD_LIST_CANCEL_URL = os.getenv("N8N_LEAD_LIST_CANCEL_URL", "")
APP_BASE_URL = os.getenv("APP_BASE_URL", "http://localhost:8000")

# Lead list pipeline
LEAD_LIST_TRIGGER_TIMEOUT = int(os.getenv("LEAD_LIST_TRIGGER_TIMEOUT", "10"))
LEAD_LIST_MAX_UPLOAD_BYTES = int(os.getenv("LEAD_LIST_MAX_UPLOAD_BYTES", str(50 * 1024 * 1024)))
LEAD_LIST_VERIFY_UPLOADED_FILE = os.getenv("LEAD_LIST_VERIFY_UPLOADED_FILE", "1") == "1"
LEAD_LIST_STORAGE_PREFIX = os.getenv("LEAD_LIST_STORAGE_PREFIX", "lead-lists/")
LEAD_LIST_LEGACY_CACHE_SIZE = int(os.getenv("LEAD_LIST_LEGACY_CACHE_SIZE", "100"))
LEAD_LIST_UNKNOWN_CALLBACK_STATUS = os.getenv("LEAD_LIST_UNKNOWN_CALLBACK_STATUS", "ready")

LEAD_LIST_POLL_INITIAL_DELAY_SECONDS = float(os.getenv("LEAD_LIST_POLL_INITIAL_DELAY_SECONDS", "3"))
LEAD_LIST_POLL_INTERVAL_SECONDS = float(os.getenv("LEAD_LIST_POLL_INTERVAL_SECONDS", "5"))
LEAD_LIST_POLL_MAX_ATTEMPTS = int(os.getenv("LEAD_LIST_POLL_MAX_ATTEMPTS", "60"))

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

LOGGING = {
    "version": 1,
    "disable_existing_loggers": False,
    "formatters": {
        "simple": {"format": "%(asctime)s %(levelname)s %(name)s: %(message)s"},
    },
    "handlers": {
        "console": {"class": "logging.StreamHandler", "formatter": "simple"},
    },
    "root": {"handlers": ["console"], "level": "WARNING"},
    "loggers": {
        "landhud": {"handlers": ["console"], "level": LOG_LEVEL, "propagate": False},
        "celery": {"handlers": ["console"], "level": "INFO", "propagate": False},
    },
}
