"""
Celery application for the order management service.

DJANGO_SETTINGS_MODULE is set before the app is created so Celery reads
its configuration from the Django settings (``CELERY_`` prefix), including
the beat schedule that drives the outbox relay.
"""

import os

from celery import Celery

os.environ.setdefault("DJANGO_SETTINGS_MODULE", "config.settings")

app = Celery("order_management")

app.config_from_object("django.conf:settings", namespace="CELERY")

# Finds tasks.py in every installed app
app.autodiscover_tasks()
