"""Celery Application Configuration.

- Redis broker and result backend
- Late acknowledgement: a task lost with its worker is redelivered
- Beat schedule for the daily delayed-copy flush

Usage:
    # Start worker
    celery -A copy_engine.presentation.workers worker -Q copy_trading --loglevel=info

    # Start beat scheduler
    celery -A copy_engine.presentation.workers beat --loglevel=info
"""

from celery import Celery
from celery.schedules import crontab
from celery.signals import worker_process_init

from copy_engine.config import get_settings, setup_logging

settings = get_settings()

COPY_QUEUE = "copy_trading"

celery_app = Celery(
    "copy_engine_workers",
    broker=settings.celery_broker_url,
    backend=settings.celery_result_backend,
    include=[
        "copy_engine.presentation.workers.tasks.copy_tasks",
    ],
)

celery_app.conf.update(
    # ==================== Task Settings ====================
    task_serializer="json",
    accept_content=["json"],
    result_serializer="json",
    timezone=settings.market_timezone,
    enable_utc=True,

    # Task execution
    task_acks_late=settings.celery_task_acks_late,
    task_reject_on_worker_lost=settings.celery_task_reject_on_worker_lost,
    task_time_limit=300,
    task_soft_time_limit=240,

    result_expires=3600,

    # ==================== Worker Settings ====================
    worker_prefetch_multiplier=1,
    worker_concurrency=settings.celery_worker_concurrency,
    worker_max_tasks_per_child=1000,

    # ==================== Broker Settings ====================
    broker_connection_retry_on_startup=True,
    broker_connection_retry=True,
    broker_connection_max_retries=10,

    # ==================== Beat Scheduler ====================
    # crontab is evaluated in the market time zone (conf.timezone)
    beat_schedule={
        "flush-delayed-copy-orders": {
            "task": "copy_engine.presentation.workers.tasks.copy_tasks.flush_delayed_copy_orders",
            "schedule": crontab(
                hour=settings.delayed_copy_cutoff_hour,
                minute=settings.delayed_copy_cutoff_minute,
            ),
        },
    },

    # ==================== Task Routes ====================
    task_routes={
        "copy_engine.presentation.workers.tasks.copy_tasks.*": {"queue": COPY_QUEUE},
    },

    task_default_queue="default",
    task_default_exchange="default",
    task_default_routing_key="default",
)


@worker_process_init.connect
def configure_worker_logging(**kwargs) -> None:
    setup_logging()
