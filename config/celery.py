import os
from celery import Celery

os.environ.setdefault("DJANGO_SETTINGS_MODULE", "config.settings.local")

app = Celery("landhud")
app.config_from_object("django.conf:settings", namespace="CELERY")

app.conf.imports = (
    "landhud.leadlists.tasks",
)

app.autodiscover_tasks()
