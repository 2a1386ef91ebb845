"""Settings used by the test suite (``DJANGO_SETTINGS_MODULE=config.settings_test``)."""

import os

os.environ.setdefault("SECRET_KEY", "test-secret-key-not-for-production")

from config.settings import *  # noqa: E402,F401,F403

CACHES = {
    "default": {
        "BACKEND": "django.core.cache.backends.locmem.LocMemCache",
        "LOCATION": "order-management-tests",
    }
}

CELERY_TASK_ALWAYS_EAGER = True
CELERY_TASK_EAGER_PROPAGATES = True
CELERY_BROKER_URL = "memory://"
CELERY_RESULT_BACKEND = "cache+memory://"

ORDER_STRICT_STATUS_TRANSITIONS = False
STOCK_RESERVATION_MAX_ATTEMPTS = 3

# Threaded tests need every connection on the same database file; the
# shared in-memory database reports lock conflicts without waiting.
if DATABASES["default"]["ENGINE"] == "django.db.backends.sqlite3":  # noqa: F405
    DATABASES["default"]["TEST"] = {  # noqa: F405
        "NAME": str(BASE_DIR / "test_db.sqlite3"),  # noqa: F405
    }
