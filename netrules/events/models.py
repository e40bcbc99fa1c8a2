"""
Rule Event Models

Version: rule_events_v1
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, List

from pydantic import Field

from netrules.shared.models import CamelModel


class RuleEventType(str, Enum):
    RULE_CREATED = "traffic_rule_created"
    RULE_UPDATED = "traffic_rule_updated"
    RULE_DELETED = "traffic_rule_deleted"
    RULES_APPLIED = "traffic_rules_applied"
    RULES_VALIDATED = "traffic_rules_validated"


class EventSeverity(str, Enum):
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"


OPERATOR_ROLES = ["admin", "operator"]


class RuleEvent(CamelModel):
    """
    Something that happened to the rule set.

    An empty `target_roles` list means the event is audited but nobody is
    notified.
    """
    event_type: RuleEventType
    title: str
    message: str
    severity: EventSeverity = EventSeverity.INFO
    target_roles: List[str] = Field(default_factory=list)
    details: Dict[str, Any] = Field(default_factory=dict)
    occurred_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
