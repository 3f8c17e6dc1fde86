# app/config/celery_config.py
"""Celery configuration, task routing and beat schedule"""
from celery import Celery
from celery.schedules import crontab
from kombu import Queue

from app.config.settings import get_settings

settings = get_settings()


def create_celery_app() -> Celery:
    """Create and configure Celery application"""

    celery_app = Celery(
        "slot_booking_service",
        broker=settings.CELERY_BROKER_URL,
        backend=settings.CELERY_RESULT_BACKEND,
    )

    # Configure Celery
    celery_app.conf.update(
        task_serializer=settings.CELERY_TASK_SERIALIZER,
        accept_content=["json"],
        result_serializer="json",
        timezone=settings.BUSINESS_TIMEZONE,
        enable_utc=True,

        # Task routing
        task_routes={
            "app.tasks.booking_tasks.reconcile_booking_ledger": {"queue": "maintenance"},
            "app.tasks.booking_tasks.send_booking_reminders": {"queue": "notifications"},
            "app.tasks.email_tasks.send_booking_confirmation_email": {"queue": "notifications"},
            "app.tasks.email_tasks.send_booking_admin_email": {"queue": "notifications"},
        },

        # Queue definitions
        task_queues=(
            Queue("maintenance", routing_key="maintenance"),
            Queue("notifications", routing_key="notifications"),
        ),

        beat_schedule={
            "reconcile-booking-ledger": {
                "task": "app.tasks.booking_tasks.reconcile_booking_ledger",
                "schedule": settings.RECONCILE_INTERVAL_MINUTES * 60.0,
            },
            "send-booking-reminders": {
                "task": "app.tasks.booking_tasks.send_booking_reminders",
                "schedule": crontab(hour=settings.REMINDER_HOUR, minute=0),
            },
        },

        # Worker settings
        worker_max_tasks_per_child=1000,
        worker_prefetch_multiplier=1,
        task_acks_late=True,

        # Retry settings
        task_retry_max_retries=3,
        task_retry_delay=60,  # 1 minute

        broker_connection_retry_on_startup=True,
    )

    # Auto-discover tasks
    celery_app.autodiscover_tasks(["app.tasks.booking_tasks", "app.tasks.email_tasks"], related_name=None)

    return celery_app


# Create the Celery app instance
celery_app = create_celery_app()
