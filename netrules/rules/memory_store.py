"""
In-Memory Rule Store

Used when no DATABASE_URL is configured (dev mode) and by the test suite.
Transactions are serialized by a lock and roll back on any exception.
"""

import copy
import threading
import uuid
from contextlib import contextmanager
from datetime import datetime, timezone
from typing import Dict, List, Optional

from netrules.catalog.models import ReferenceSets
from .models import TrafficRule, WRITABLE_FIELDS, apply_rule_defaults
from .store import RuleStore, RuleStoreSession


class MemoryRuleSession(RuleStoreSession):
    def __init__(self, rules: Dict[str, TrafficRule], reference_sets: ReferenceSets):
        self._rules = rules
        self._reference_sets = reference_sets

    def list_rules(self, enabled_only=False, user_group_id=None, traffic_type_id=None):
        rules = list(self._rules.values())
        if enabled_only:
            rules = [r for r in rules if r.is_enabled]
        if user_group_id:
            rules = [r for r in rules if r.user_group_id == user_group_id]
        if traffic_type_id:
            rules = [r for r in rules if r.traffic_type_id == traffic_type_id]
        # Dict order is insertion order, so the sort is stable on creation
        return [r.model_copy(deep=True) for r in sorted(rules, key=lambda r: r.priority)]

    def get_rule(self, rule_id):
        rule = self._rules.get(rule_id)
        return rule.model_copy(deep=True) if rule else None

    def insert_rule(self, fields):
        now = datetime.now(timezone.utc)
        values = apply_rule_defaults({k: v for k, v in fields.items() if k in WRITABLE_FIELDS})
        rule = TrafficRule(
            id=str(uuid.uuid4()),
            created_at=now,
            updated_at=now,
            **values,
        )
        self._rules[rule.id] = rule
        return rule.model_copy(deep=True)

    def update_rule(self, rule_id, fields):
        current = self._rules.get(rule_id)
        if current is None:
            return None
        values = current.model_dump()
        values.update({k: v for k, v in fields.items() if k in WRITABLE_FIELDS})
        values["updated_at"] = datetime.now(timezone.utc)
        updated = TrafficRule(**values)
        self._rules[rule_id] = updated
        return updated.model_copy(deep=True)

    def delete_rule(self, rule_id):
        return self._rules.pop(rule_id, None) is not None

    def load_reference_sets(self):
        return self._reference_sets.model_copy(deep=True)


class MemoryRuleStore(RuleStore):
    def __init__(
        self,
        reference_sets: Optional[ReferenceSets] = None,
        rules: Optional[List[TrafficRule]] = None,
    ):
        self.reference_sets = reference_sets or ReferenceSets()
        self._rules: Dict[str, TrafficRule] = {r.id: r for r in (rules or [])}
        self._lock = threading.RLock()

    @contextmanager
    def transaction(self):
        with self._lock:
            backup = copy.deepcopy(self._rules)
            try:
                yield MemoryRuleSession(self._rules, self.reference_sets)
            except Exception:
                self._rules.clear()
                self._rules.update(backup)
                raise

    def healthy(self) -> bool:
        return True

    def record_matches(self, rule_id: str, packets: int, bytes_: int, at: Optional[datetime] = None) -> None:
        """Counter side channel, standing in for the enforcement layer."""
        with self._lock:
            rule = self._rules[rule_id]
            self._rules[rule_id] = rule.model_copy(update={
                "packets_matched": rule.packets_matched + packets,
                "bytes_matched": rule.bytes_matched + bytes_,
                "last_matched_at": at or datetime.now(timezone.utc),
            })
