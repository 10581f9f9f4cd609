"""
Celery application for the farm order lifecycle service.

DJANGO_SETTINGS_MODULE is set before the app is created so Celery reads
the Django settings (``CELERY_`` prefix), beat schedule included.
"""

import os

from celery import Celery

os.environ.setdefault("DJANGO_SETTINGS_MODULE", "config.settings")

app = Celery("farm_orders")

app.config_from_object("django.conf:settings", namespace="CELERY")

# Registers matches.expire_pending_matches and orders.deliver_notification
app.autodiscover_tasks()
