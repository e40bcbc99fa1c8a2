"""
Rule Event Publisher

Fans a RuleEvent out to the configured sinks after the core operation has
finished. Delivery never affects the outcome of the operation: sink errors are
logged and dropped.

Version: rule_events_v1
"""

import logging
from typing import List, Optional, Sequence

from fastapi import BackgroundTasks

from netrules.shared import config

from .models import RuleEvent
from .sinks import AuditLogSink, EventSink, LoggingSink, NotificationSink

logger = logging.getLogger(__name__)


class EventPublisher:

    def __init__(self, sinks: Optional[Sequence[EventSink]] = None):
        self.sinks: List[EventSink] = list(sinks or [])

    def publish(self, event: RuleEvent, background_tasks: Optional[BackgroundTasks] = None) -> None:
        """Deliver after the response when background tasks are available, else now."""
        if not self.sinks:
            return
        if background_tasks is not None:
            background_tasks.add_task(self.deliver, event)
        else:
            self.deliver(event)

    def deliver(self, event: RuleEvent) -> None:
        for sink in self.sinks:
            try:
                sink.deliver(event)
            except Exception as e:
                logger.warning(
                    f"Event sink '{sink.name}' failed for {event.event_type.value}: {e}"
                )


def build_publisher(database_url: Optional[str] = None) -> EventPublisher:
    """Sinks for the current configuration."""
    url = database_url if database_url is not None else config.DATABASE_URL
    sinks: List[EventSink] = []

    if config.AUDIT_ENABLED and url:
        sinks.append(AuditLogSink(url))
    if config.NOTIFICATIONS_ENABLED and (config.NOTIFICATION_WEBHOOK_URL or url):
        sinks.append(NotificationSink(
            webhook_url=config.NOTIFICATION_WEBHOOK_URL or None,
            database_url=url,
        ))
    if not url:
        sinks.append(LoggingSink())

    return EventPublisher(sinks)
