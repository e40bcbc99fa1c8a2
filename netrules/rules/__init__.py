"""
Traffic Rules Module

Rule model and stores (PostgreSQL and in-memory). The orchestrating service
lives in netrules.rules.service.

Version: traffic_rules_v1
"""

from .models import (
    RuleAction,
    TrafficRule,
    EnrichedRule,
    RuleChange,
    ChangeResult,
    ApplyChangesResult,
    CHANGE_TYPES,
    DEFAULT_PRIORITY,
    normalize_rule_fields,
)
from .store import RuleStore, RuleStoreSession, PostgresRuleStore, MAX_TRANSACTION_ATTEMPTS
from .memory_store import MemoryRuleStore

__all__ = [
    "RuleAction",
    "TrafficRule",
    "EnrichedRule",
    "RuleChange",
    "ChangeResult",
    "ApplyChangesResult",
    "CHANGE_TYPES",
    "DEFAULT_PRIORITY",
    "normalize_rule_fields",
    "RuleStore",
    "RuleStoreSession",
    "PostgresRuleStore",
    "MAX_TRANSACTION_ATTEMPTS",
    "MemoryRuleStore",
]

__version__ = "traffic_rules_v1"
