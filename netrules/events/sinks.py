"""
Rule Event Sinks

Each sink delivers a RuleEvent to one destination:

- AuditLogSink: row in audit_logs
- NotificationSink: webhook POST (httpx) or row in notifications
- LoggingSink: log line, for dev mode without a database

Sinks may raise; the publisher isolates their failures.

Version: rule_events_v1
"""

import logging
from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional

import httpx
from psycopg2.extras import Json

from netrules.shared import config
from netrules.shared.db import get_db

from .models import RuleEvent

logger = logging.getLogger(__name__)

AUDIT_EVENT_CATEGORY = "network_management"


class EventSink(ABC):
    name = "sink"

    @abstractmethod
    def deliver(self, event: RuleEvent) -> None:
        ...


class AuditLogSink(EventSink):
    """Writes every event to the audit_logs table."""

    name = "audit"

    def __init__(self, database_url: Optional[str] = None):
        self.database_url = database_url

    def deliver(self, event: RuleEvent) -> None:
        self.record(event.event_type.value, event.details, event.severity.value)

    def record(self, event_type: str, details: Dict[str, Any], severity: str = "info") -> bool:
        conn = get_db(self.database_url)
        if not conn:
            logger.error("Cannot write audit log: database connection failed")
            return False

        try:
            cur = conn.cursor()
            cur.execute("""
                INSERT INTO audit_logs (event_type, event_category, action, details, severity)
                VALUES (%s, %s, %s, %s, %s)
            """, (
                event_type,
                AUDIT_EVENT_CATEGORY,
                event_type,
                Json(details),
                severity,
            ))
            conn.commit()
            cur.close()
            return True
        finally:
            conn.close()


class NotificationSink(EventSink):
    """
    Operator notifications.

    With a webhook URL configured the notification is POSTed there; otherwise
    it is inserted into the notifications table. Events without target roles
    are skipped.
    """

    name = "notification"

    def __init__(
        self,
        webhook_url: Optional[str] = None,
        database_url: Optional[str] = None,
        timeout: float = config.NOTIFICATION_TIMEOUT_SECONDS,
    ):
        self.webhook_url = webhook_url
        self.database_url = database_url
        self.timeout = timeout

    def deliver(self, event: RuleEvent) -> None:
        if not event.target_roles:
            return
        self.notify(event.title, event.message, event.severity.value, event.target_roles)

    def notify(self, title: str, message: str, severity: str, target_roles: List[str]) -> None:
        payload = {
            "notification_type": "system",
            "severity": severity,
            "title": title,
            "message": message,
            "target_roles": target_roles,
            "channels": ["web"],
        }
        if self.webhook_url:
            self._post(payload)
        else:
            self._insert(payload)

    def _post(self, payload: Dict[str, Any]) -> None:
        with httpx.Client(timeout=self.timeout) as client:
            response = client.post(self.webhook_url, json=payload)
            response.raise_for_status()

    def _insert(self, payload: Dict[str, Any]) -> None:
        conn = get_db(self.database_url)
        if not conn:
            logger.error("Cannot write notification: database connection failed")
            return

        try:
            cur = conn.cursor()
            cur.execute("""
                INSERT INTO notifications
                (notification_type, severity, title, message, target_roles, channels)
                VALUES (%s, %s, %s, %s, %s, %s)
            """, (
                payload["notification_type"],
                payload["severity"],
                payload["title"],
                payload["message"],
                payload["target_roles"],
                payload["channels"],
            ))
            conn.commit()
            cur.close()
        finally:
            conn.close()


class LoggingSink(EventSink):
    name = "log"

    def deliver(self, event: RuleEvent) -> None:
        logger.info(
            f"[{event.event_type.value}] {event.title}: {event.message} "
            f"(severity={event.severity.value})"
        )
