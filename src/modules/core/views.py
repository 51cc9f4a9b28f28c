import time
from typing import Any, Callable, Dict

import structlog
from django.core.cache import cache
from django.db import connections
from django.http import HttpRequest, JsonResponse
from django.utils import timezone

from modules.core.models import EventStatus, OutboxEvent

logger = structlog.get_logger()

HEALTH_CACHE_KEY = "_health_check"


def _ping_database() -> Dict[str, Any]:
    conn = connections["default"]
    conn.ensure_connection()
    with conn.cursor() as cursor:
        cursor.execute("SELECT 1")
        cursor.fetchone()
    return {}


def _ping_cache() -> Dict[str, Any]:
    cache.set(HEALTH_CACHE_KEY, "ok", 10)
    if cache.get(HEALTH_CACHE_KEY) != "ok":
        raise ConnectionError("Cache read failed")
    return {}


def _outbox_backlog() -> Dict[str, Any]:
    # Informational: a growing backlog means the relay worker is not running.
    return {"pending": OutboxEvent.objects.filter(status=EventStatus.PENDING).count()}


PROBES: Dict[str, Callable[[], Dict[str, Any]]] = {
    "database": _ping_database,
    "cache": _ping_cache,
}


def _run_probe(name: str, probe: Callable[[], Dict[str, Any]]) -> Dict[str, Any]:
    start = time.monotonic()
    try:
        extra = probe()
    except Exception:
        logger.error("health_check.probe_failed", service=name, exc_info=True)
        return {"status": "down"}
    return {
        "status": "up",
        "response_time_ms": round((time.monotonic() - start) * 1000, 2),
        **extra,
    }


def health_check(request: HttpRequest) -> JsonResponse:
    """Report database and cache reachability plus the outbox backlog.

    Answers 503 when the database or the cache is down.
    """
    services = {name: _run_probe(name, probe) for name, probe in PROBES.items()}
    healthy = all(service["status"] == "up" for service in services.values())

    if services["database"]["status"] == "up":
        services["outbox"] = _run_probe("outbox", _outbox_backlog)

    status = "healthy" if healthy else "unhealthy"
    logger.info("health_check.completed", status=status)

    return JsonResponse(
        {
            "status": status,
            "timestamp": timezone.now().isoformat(),
            "services": services,
        },
        status=200 if healthy else 503,
    )
