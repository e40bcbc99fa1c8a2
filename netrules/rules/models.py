"""
Traffic Rule Models

Pydantic models for traffic rules, enriched read views and batch change sets.

Rules are declared in snake_case, serialized in camelCase, and accepted from
clients in either form (plus the legacy aliases the console still sends, such
as `ruleName`, `path_id` and `enabled`).

Version: traffic_rules_v1
"""

from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import Field

from netrules.catalog.models import ReferenceRecord
from netrules.shared.models import CamelModel


class RuleAction(str, Enum):
    """Disposition of traffic matched by a rule."""
    ROUTE = "route"
    ALLOW = "allow"
    BLOCK = "block"


DEFAULT_PRIORITY = 100
MIN_PRIORITY = 0
MAX_PRIORITY = 1000

CONDITION_FIELDS = (
    "time_conditions",
    "bandwidth_conditions",
    "location_conditions",
    "device_conditions",
)

REFERENCE_FIELDS = (
    "user_group_id",
    "traffic_type_id",
    "network_path_id",
    "tunnel_id",
)

# Every accepted input key -> canonical field name
RULE_FIELD_ALIASES: Dict[str, str] = {
    "id": "id",
    "name": "name",
    "ruleName": "name",
    "rule_name": "name",
    "description": "description",
    "userGroupId": "user_group_id",
    "user_group_id": "user_group_id",
    "clientGroupId": "user_group_id",
    "client_group_id": "user_group_id",
    "trafficTypeId": "traffic_type_id",
    "traffic_type_id": "traffic_type_id",
    "networkPathId": "network_path_id",
    "network_path_id": "network_path_id",
    "pathId": "network_path_id",
    "path_id": "network_path_id",
    "tunnelId": "tunnel_id",
    "tunnel_id": "tunnel_id",
    "action": "action",
    # Top-level command params carry the disposition as ruleAction
    "ruleAction": "action",
    "rule_action": "action",
    "priority": "priority",
    "bandwidthLimitKbps": "bandwidth_limit_kbps",
    "bandwidth_limit_kbps": "bandwidth_limit_kbps",
    "timeConditions": "time_conditions",
    "time_conditions": "time_conditions",
    "bandwidthConditions": "bandwidth_conditions",
    "bandwidth_conditions": "bandwidth_conditions",
    "locationConditions": "location_conditions",
    "location_conditions": "location_conditions",
    "deviceConditions": "device_conditions",
    "device_conditions": "device_conditions",
    "isEnabled": "is_enabled",
    "is_enabled": "is_enabled",
    "enabled": "is_enabled",
    "isTesting": "is_testing",
    "is_testing": "is_testing",
    # Validation-only payload shape of the change-set editor
    "actions": "actions",
    "conditions": "conditions",
}

# Fields an operator may write; counters and timestamps belong to the store
WRITABLE_FIELDS = frozenset([
    "name",
    "description",
    "action",
    "priority",
    "bandwidth_limit_kbps",
    "is_enabled",
    "is_testing",
    *REFERENCE_FIELDS,
    *CONDITION_FIELDS,
])

# Writable fields an update may not clear
NON_NULLABLE_FIELDS = (
    "name",
    "action",
    "priority",
    "is_enabled",
    "is_testing",
    *CONDITION_FIELDS,
)


def normalize_rule_fields(raw: Optional[Dict[str, Any]]) -> Dict[str, Any]:
    """
    Map camelCase, snake_case and legacy keys onto canonical field names.

    Unknown keys are dropped. When two aliases of the same field are given,
    the first one wins.
    """
    fields: Dict[str, Any] = {}
    for key, value in (raw or {}).items():
        canonical = RULE_FIELD_ALIASES.get(key)
        if canonical is None or canonical in fields:
            continue
        fields[canonical] = value
    return fields


def writable_fields(fields: Dict[str, Any]) -> Dict[str, Any]:
    return {k: v for k, v in fields.items() if k in WRITABLE_FIELDS}


def apply_rule_defaults(fields: Dict[str, Any]) -> Dict[str, Any]:
    """Fill create-time defaults for fields the operator left out."""
    merged = dict(fields)
    if merged.get("action") in (None, ""):
        merged["action"] = RuleAction.ROUTE.value
    if merged.get("priority") is None:
        merged["priority"] = DEFAULT_PRIORITY
    if merged.get("is_enabled") is None:
        merged["is_enabled"] = True
    if merged.get("is_testing") is None:
        merged["is_testing"] = False
    for name in CONDITION_FIELDS:
        if merged.get(name) is None:
            merged[name] = {}
    return merged


class TrafficRule(CamelModel):
    """
    A declarative binding of client population, traffic category, path and
    tunnel, with a priority and a disposition.
    """
    id: str
    name: str
    description: Optional[str] = None

    user_group_id: Optional[str] = None
    traffic_type_id: Optional[str] = None
    network_path_id: Optional[str] = None
    tunnel_id: Optional[str] = None

    action: RuleAction = RuleAction.ROUTE
    priority: int = Field(default=DEFAULT_PRIORITY, description="Lower evaluates first")
    bandwidth_limit_kbps: Optional[float] = None

    time_conditions: Dict[str, Any] = Field(default_factory=dict)
    bandwidth_conditions: Dict[str, Any] = Field(default_factory=dict)
    location_conditions: Dict[str, Any] = Field(default_factory=dict)
    device_conditions: Dict[str, Any] = Field(default_factory=dict)

    is_enabled: bool = True
    is_testing: bool = False

    # Written by the enforcement layer; read-only here
    packets_matched: int = 0
    bytes_matched: int = 0
    last_matched_at: Optional[datetime] = None

    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @classmethod
    def from_row(cls, row: Dict[str, Any]) -> "TrafficRule":
        """Build a rule from a traffic_rules row."""
        data = dict(row)
        data["id"] = str(data["id"])
        data["name"] = data.pop("rule_name", None) or data.get("name") or ""
        for name in REFERENCE_FIELDS:
            if data.get(name) is not None:
                data[name] = str(data[name])
        for name in CONDITION_FIELDS:
            if data.get(name) is None:
                data[name] = {}
        data["packets_matched"] = data.get("packets_matched") or 0
        data["bytes_matched"] = data.get("bytes_matched") or 0
        return cls(**data)

    def field_values(self) -> Dict[str, Any]:
        """Writable fields as plain values (enum unwrapped)."""
        values = self.model_dump(include=set(WRITABLE_FIELDS) | {"id"})
        values["action"] = self.action.value
        return values


class EnrichedRule(TrafficRule):
    """Rule joined with the display records it references."""
    user_group: Optional[ReferenceRecord] = None
    traffic_type: Optional[ReferenceRecord] = None
    network_path: Optional[ReferenceRecord] = None
    tunnel: Optional[ReferenceRecord] = None


CHANGE_TYPES = ("create", "update", "delete", "enable", "disable")


class RuleChange(CamelModel):
    """
    One entry of a batch change set.

    `type` is checked per entry when the batch runs, so an unknown type fails
    that entry only.
    """
    type: str
    rule_id: Optional[str] = None
    rule_data: Optional[Dict[str, Any]] = None


class ChangeResult(CamelModel):
    type: str
    rule_id: Optional[str] = None
    success: bool
    error: Optional[str] = None


class ApplyChangesResult(CamelModel):
    total_changes: int
    successful: int
    failed: int
    applied_immediately: bool = False
    results: List[ChangeResult] = Field(default_factory=list)
