import logging

from django.http import JsonResponse
from django.db import connection

from landhud.common.redis_client import get_redis

logger = logging.getLogger(__name__)


def health_check(request):
    status = {"db": False, "redis": False}

    # DB
    try:
        with connection.cursor() as c:
            c.execute("SELECT 1")
        status["db"] = True
    except Exception:
        logger.warning("health: database unreachable", exc_info=True)

    # Redis (Celery broker)
    try:
        get_redis().ping()
        status["redis"] = True
    except Exception:
        logger.warning("health: redis unreachable", exc_info=True)

    http_status = 200 if all(status.values()) else 503
    return JsonResponse(status, status=http_status)
