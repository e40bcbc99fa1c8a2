"""
Validation Candidates

A candidate is the shape the validator reasons about: a name, a priority, an
enabled flag, the four references, and two payload objects:

- `actions`: disposition flags and action parameters
  (`allow`, `block`, `route`, `bandwidth_limit`, `redirect_to`)
- `conditions`: what the rule matches on

Clients of the change-set editor send `actions`/`conditions` directly. A
stored or TrafficRule-shaped rule has them derived from its columns:

    actions    = {<action>: True, "bandwidth_limit": <kbps>?}
    conditions = {"user_group_id"?, "traffic_type_id"?,
                  "time"?, "bandwidth"?, "location"?, "device"?}

Empty members are left out so that two rules differing only in an empty
payload compare equal.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, Optional

from netrules.catalog.models import ReferenceKind, REFERENCE_TABLES
from netrules.rules.models import TrafficRule, normalize_rule_fields

# Condition payload column -> key inside the derived conditions object
CONDITION_PAYLOADS = {
    "time_conditions": "time",
    "bandwidth_conditions": "bandwidth",
    "location_conditions": "location",
    "device_conditions": "device",
}

# Targeting references that are part of what a rule matches on
MATCH_REFERENCES = ("user_group_id", "traffic_type_id")

PERMITTING_ACTIONS = ("allow", "route")


def derive_actions(fields: Dict[str, Any]) -> Dict[str, Any]:
    action = fields.get("action") or "route"
    actions: Dict[str, Any] = {str(action): True}
    if fields.get("bandwidth_limit_kbps") is not None:
        actions["bandwidth_limit"] = fields["bandwidth_limit_kbps"]
    return actions


def derive_conditions(fields: Dict[str, Any]) -> Dict[str, Any]:
    conditions: Dict[str, Any] = {}
    for name in MATCH_REFERENCES:
        if fields.get(name):
            conditions[name] = fields[name]
    for column, key in CONDITION_PAYLOADS.items():
        payload = fields.get(column)
        if payload:
            conditions[key] = payload
    return conditions


@dataclass
class RuleCandidate:
    rule_id: Optional[str]
    name: Any
    priority: Any
    enabled: bool
    action: Any
    actions: Any
    conditions: Any
    references: Dict[ReferenceKind, Any] = field(default_factory=dict)

    @classmethod
    def from_fields(cls, fields: Dict[str, Any]) -> "RuleCandidate":
        """Build from canonical (normalized) rule fields."""
        actions = fields["actions"] if "actions" in fields else derive_actions(fields)
        conditions = fields["conditions"] if "conditions" in fields else derive_conditions(fields)
        references = {
            kind: fields.get(spec.rule_field)
            for kind, spec in REFERENCE_TABLES.items()
        }
        rule_id = fields.get("id")
        return cls(
            rule_id=str(rule_id) if rule_id is not None else None,
            name=fields.get("name"),
            priority=fields.get("priority"),
            enabled=fields.get("is_enabled") is not False,
            action=fields.get("action"),
            actions=actions,
            conditions=conditions,
            references=references,
        )

    @classmethod
    def from_payload(cls, raw: Dict[str, Any]) -> "RuleCandidate":
        """Build from a client payload in any accepted key style."""
        return cls.from_fields(normalize_rule_fields(raw))

    @classmethod
    def from_rule(cls, rule: TrafficRule) -> "RuleCandidate":
        return cls.from_fields(rule.field_values())

    @property
    def display_name(self) -> str:
        return self.name if isinstance(self.name, str) else str(self.name)

    def disposition(self) -> Optional[str]:
        """'block', 'allow' (allow or route) or None when undetermined."""
        if not isinstance(self.actions, dict):
            return None
        if self.actions.get("block"):
            return "block"
        if any(self.actions.get(name) for name in PERMITTING_ACTIONS):
            return "allow"
        return None
