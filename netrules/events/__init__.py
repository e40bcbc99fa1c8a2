"""
Rule Events Module

Outbound audit and notification side effects of rule mutations.

Version: rule_events_v1
"""

from .models import RuleEvent, RuleEventType, EventSeverity, OPERATOR_ROLES
from .sinks import EventSink, AuditLogSink, NotificationSink, LoggingSink
from .publisher import EventPublisher, build_publisher

__all__ = [
    "RuleEvent",
    "RuleEventType",
    "EventSeverity",
    "OPERATOR_ROLES",
    "EventSink",
    "AuditLogSink",
    "NotificationSink",
    "LoggingSink",
    "EventPublisher",
    "build_publisher",
]

__version__ = "rule_events_v1"
