"""
Celery application.

Webhook delivery tasks run on the ``webhooks`` queue.
"""

from celery import Celery

from describer.core.config import settings

celery_app = Celery(
    "describer",
    broker=settings.CELERY_BROKER_URL,
    backend=settings.CELERY_RESULT_BACKEND,
    include=["describer.workers.webhook_tasks"],
)

celery_app.conf.update(
    task_serializer="json",
    result_serializer="json",
    accept_content=["json"],
    timezone="UTC",
    enable_utc=True,
    result_expires=3600,
    # a delivery lost with its worker is redelivered, not dropped
    task_acks_late=True,
    task_reject_on_worker_lost=True,
    worker_prefetch_multiplier=1,
    # soft limit per delivery attempt
    task_soft_time_limit=settings.WEBHOOK_TIMEOUT_SECONDS * 6,
    task_default_queue="default",
    task_queues={
        "default": {},
        "webhooks": {},
    },
    task_routes={
        "describer.workers.webhook_tasks.*": {"queue": "webhooks"},
    },
)
