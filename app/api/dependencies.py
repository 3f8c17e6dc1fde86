# ============================================================================
# FILE: app/api/dependencies.py
# Collaborators injected into the booking routes
# ============================================================================
from datetime import datetime
from typing import Callable

from app.tasks.email_tasks import QueuedBookingNotifier
from app.utils.timezone import business_now


def get_notifier() -> QueuedBookingNotifier:
    """Queues booking confirmation and admin emails on the worker"""
    return QueuedBookingNotifier()


def get_clock() -> Callable[[], datetime]:
    """Source of the current business time; overridden in tests"""
    return business_now
