"""Settings used by the pytest suite.

Runs on SQLite with an in-process cache so the suite needs neither MySQL
nor Redis. Set ``DATABASE_URL`` to a PostgreSQL/MySQL server to exercise
row-level locking for real.
"""

import os

os.environ.setdefault("SECRET_KEY", "test-secret-key-not-for-production")

from config.settings import *  # noqa: E402,F401,F403
from config.settings import REST_FRAMEWORK  # noqa: E402

DEBUG = False

CACHES = {
    "default": {
        "BACKEND": "django.core.cache.backends.locmem.LocMemCache",
        "LOCATION": "test-cache",
    }
}

PASSWORD_HASHERS = ["django.contrib.auth.hashers.MD5PasswordHasher"]

REST_FRAMEWORK = {
    **REST_FRAMEWORK,
    "DEFAULT_THROTTLE_RATES": {
        "anon": "1000/minute",
        "user": "10000/minute",
        "order_creation": "1000/minute",
        "order_listing": "1000/minute",
    },
}

CELERY_TASK_ALWAYS_EAGER = True
CELERY_BROKER_URL = "memory://"
CELERY_RESULT_BACKEND = "cache+memory://"

UNIT_OF_WORK_RETRY_BACKOFF = 0
