"""Notification delivery.

Components:
- NotificationSink: ABC for delivery transports
- EmailSink / WebhookSink / LogSink: Concrete sinks
- Notifier: Delivery policy (swallow and log failures) and message helpers
"""

from projects_notifier.notifications.channels import (
    EmailSink,
    LogSink,
    NotificationSink,
    WebhookSink,
)
from projects_notifier.notifications.notifier import Notifier

__all__ = [
    "EmailSink",
    "LogSink",
    "NotificationSink",
    "Notifier",
    "WebhookSink",
]
