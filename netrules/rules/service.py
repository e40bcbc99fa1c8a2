"""
Traffic Rule Service

Orchestrates rule CRUD and the read views over a RuleStore:

- create/update: normalize -> validate against a snapshot -> persist, all in
  one store transaction, then publish the rule event
- delete: remove, then publish
- read views: enriched rule list, dynamic options, flow graph, statistics
- dry-run test of one rule
- batch validation and batch apply (sequential, partial success)

Events are published only after the store transaction has committed.

Version: traffic_rules_v1
"""

import logging
import random
from typing import Any, Dict, List, Optional, Sequence

from fastapi import BackgroundTasks
from pydantic.alias_generators import to_camel

from netrules.catalog.models import DynamicOptions, ReferenceKind, ReferenceSets
from netrules.catalog.options import build_dynamic_options
from netrules.events.models import EventSeverity, OPERATOR_ROLES, RuleEvent, RuleEventType
from netrules.events.publisher import EventPublisher
from netrules.flow.build import build_flow
from netrules.flow.models import FlowGraph
from netrules.shared import config
from netrules.shared.errors import InvalidCommandError, RuleNotFoundError, RuleValidationError
from netrules.shared.models import CamelModel
from netrules.simulation.models import SimulationReport
from netrules.simulation.simulate import simulate
from netrules.statistics.aggregate import aggregate
from netrules.statistics.models import RuleStatistics
from netrules.validation.candidate import RuleCandidate
from netrules.validation.models import BatchValidationResult, RuleValidationResult, ValidationMode
from netrules.validation.validate import validate_rule, validate_rules

from .models import (
    CONDITION_FIELDS,
    CHANGE_TYPES,
    ApplyChangesResult,
    ChangeResult,
    EnrichedRule,
    NON_NULLABLE_FIELDS,
    RuleChange,
    TrafficRule,
    apply_rule_defaults,
    normalize_rule_fields,
    writable_fields,
)
from .store import RuleStore, RuleStoreSession

logger = logging.getLogger(__name__)


class TrafficFlowView(CamelModel):
    flow: FlowGraph
    rules: List[TrafficRule]


def _check_payload_types(fields: Dict[str, Any]) -> None:
    for name in CONDITION_FIELDS:
        value = fields.get(name)
        if value is not None and not isinstance(value, dict):
            raise InvalidCommandError(f"{name} must be an object")


def _enrich(rule: TrafficRule, reference_sets: ReferenceSets) -> EnrichedRule:
    return EnrichedRule(
        **rule.model_dump(),
        user_group=reference_sets.index(ReferenceKind.USER_GROUP).get(rule.user_group_id or ""),
        traffic_type=reference_sets.index(ReferenceKind.TRAFFIC_TYPE).get(rule.traffic_type_id or ""),
        network_path=reference_sets.index(ReferenceKind.NETWORK_PATH).get(rule.network_path_id or ""),
        tunnel=reference_sets.index(ReferenceKind.TUNNEL).get(rule.tunnel_id or ""),
    )


def _reject_cleared_fields(rule: TrafficRule, updates: Dict[str, Any]) -> None:
    cleared = [name for name in NON_NULLABLE_FIELDS if name in updates and updates[name] is None]
    if not cleared:
        return
    result = RuleValidationResult(rule_id=rule.id, rule_name=rule.name)
    for name in cleared:
        result.add_error(f"{to_camel(name)} cannot be null")
    raise _refuse(result)


def _refuse(result: RuleValidationResult) -> RuleValidationError:
    return RuleValidationError(
        f"Rule validation failed: {'; '.join(result.errors)}",
        details=result.to_api(),
    )


class TrafficRuleService:
    """Rule engine operations over a store, with events published after commit."""

    def __init__(
        self,
        store: RuleStore,
        publisher: Optional[EventPublisher] = None,
        link_capacity_mbps: float = config.LINK_CAPACITY_MBPS,
        rng: Optional[random.Random] = None,
    ):
        self.store = store
        self.publisher = publisher or EventPublisher()
        self.link_capacity_mbps = link_capacity_mbps
        self.rng = rng or random.Random(config.SIMULATION_SEED)

    def _publish(self, event: RuleEvent, background_tasks: Optional[BackgroundTasks]) -> None:
        self.publisher.publish(event, background_tasks)

    # ===== Read views =====

    def get_dynamic_options(self) -> DynamicOptions:
        with self.store.transaction() as session:
            return build_dynamic_options(session.load_reference_sets())

    def list_rules(
        self,
        user_group_id: Optional[str] = None,
        traffic_type_id: Optional[str] = None,
    ) -> List[EnrichedRule]:
        with self.store.transaction() as session:
            rules = session.list_rules(
                user_group_id=user_group_id,
                traffic_type_id=traffic_type_id,
            )
            reference_sets = session.load_reference_sets()
        return [_enrich(rule, reference_sets) for rule in rules]

    def get_rule(self, rule_id: str) -> TrafficRule:
        with self.store.transaction() as session:
            rule = session.get_rule(rule_id)
        if rule is None:
            raise RuleNotFoundError(rule_id)
        return rule

    def get_traffic_flow(
        self,
        user_group_id: Optional[str] = None,
        traffic_type_id: Optional[str] = None,
    ) -> TrafficFlowView:
        with self.store.transaction() as session:
            rules = session.list_rules(
                enabled_only=True,
                user_group_id=user_group_id,
                traffic_type_id=traffic_type_id,
            )
            labels = session.load_reference_sets().node_labels()
        return TrafficFlowView(flow=build_flow(rules, labels=labels), rules=rules)

    def get_statistics(self, time_range: Optional[str] = None) -> RuleStatistics:
        with self.store.transaction() as session:
            rules = session.list_rules()
        return aggregate(rules, self.link_capacity_mbps, time_range=time_range)

    def test_rule(self, rule_id: str, test_packets: Sequence[Any]) -> SimulationReport:
        return simulate(self.get_rule(rule_id), test_packets, rng=self.rng)

    # ===== Mutations =====

    def _create_in(
        self,
        session: RuleStoreSession,
        fields: Dict[str, Any],
        mode: ValidationMode,
    ) -> TrafficRule:
        fields = apply_rule_defaults(writable_fields(fields))
        _check_payload_types(fields)
        result = validate_rule(
            RuleCandidate.from_fields(fields),
            session.list_rules(),
            session.load_reference_sets(),
            mode,
        )
        if not result.is_valid:
            raise _refuse(result)
        return session.insert_rule(fields)

    def _update_in(
        self,
        session: RuleStoreSession,
        rule_id: str,
        fields: Dict[str, Any],
        mode: ValidationMode,
    ) -> TrafficRule:
        current = session.get_rule(rule_id)
        if current is None:
            raise RuleNotFoundError(rule_id)

        updates = writable_fields(fields)
        _check_payload_types(updates)
        _reject_cleared_fields(current, updates)
        merged = {**current.field_values(), **updates}
        result = validate_rule(
            RuleCandidate.from_fields(merged),
            session.list_rules(),
            session.load_reference_sets(),
            mode,
        )
        if not result.is_valid:
            raise _refuse(result)

        updated = session.update_rule(rule_id, updates)
        if updated is None:
            raise RuleNotFoundError(rule_id)
        return updated

    def _set_enabled_in(self, session: RuleStoreSession, rule_id: str, enabled: bool) -> TrafficRule:
        # Flag-only write; the rest of the rule is not re-validated
        updated = session.update_rule(rule_id, {"is_enabled": enabled})
        if updated is None:
            raise RuleNotFoundError(rule_id)
        return updated

    def _delete_in(self, session: RuleStoreSession, rule_id: str) -> None:
        if not session.delete_rule(rule_id):
            raise RuleNotFoundError(rule_id)

    def create_rule(
        self,
        raw: Dict[str, Any],
        mode: ValidationMode = ValidationMode.STRICT,
        background_tasks: Optional[BackgroundTasks] = None,
    ) -> TrafficRule:
        """
        Validate and persist a new rule.

        Raises:
            RuleValidationError: validation reported errors
            InvalidCommandError: a condition payload is not an object
        """
        fields = normalize_rule_fields(raw)
        mode = ValidationMode(mode)
        rule = self.store.run_in_transaction(lambda s: self._create_in(s, fields, mode))

        logger.info(f"Created traffic rule {rule.id} ({rule.name})")
        state = "enabled" if rule.is_enabled else "disabled"
        self._publish(RuleEvent(
            event_type=RuleEventType.RULE_CREATED,
            title="Traffic Rule Created",
            message=f'New traffic rule "{rule.name}" has been created and {state}.',
            target_roles=OPERATOR_ROLES,
            details={"rule_id": rule.id, "rule_name": rule.name},
        ), background_tasks)
        return rule

    def update_rule(
        self,
        rule_id: str,
        raw: Dict[str, Any],
        mode: ValidationMode = ValidationMode.STRICT,
        background_tasks: Optional[BackgroundTasks] = None,
    ) -> TrafficRule:
        fields = normalize_rule_fields(raw)
        fields.pop("id", None)
        mode = ValidationMode(mode)
        rule = self.store.run_in_transaction(lambda s: self._update_in(s, rule_id, fields, mode))

        logger.info(f"Updated traffic rule {rule.id} ({rule.name})")
        self._publish(RuleEvent(
            event_type=RuleEventType.RULE_UPDATED,
            title="Traffic Rule Updated",
            message=f'Traffic rule "{rule.name}" has been updated.',
            target_roles=OPERATOR_ROLES,
            details={"rule_id": rule.id, "updated_fields": sorted(writable_fields(fields))},
        ), background_tasks)
        return rule

    def delete_rule(
        self,
        rule_id: str,
        background_tasks: Optional[BackgroundTasks] = None,
    ) -> str:
        self.store.run_in_transaction(lambda s: self._delete_in(s, rule_id))

        logger.info(f"Deleted traffic rule {rule_id}")
        self._publish(RuleEvent(
            event_type=RuleEventType.RULE_DELETED,
            title="Traffic Rule Deleted",
            message=f"Traffic rule {rule_id} has been deleted.",
            target_roles=OPERATOR_ROLES,
            details={"rule_id": rule_id},
        ), background_tasks)
        return rule_id

    # ===== Batches =====

    def validate_changes(
        self,
        rules: Sequence[Dict[str, Any]],
        mode: ValidationMode = ValidationMode.STRICT,
        background_tasks: Optional[BackgroundTasks] = None,
    ) -> BatchValidationResult:
        """Validate candidates against one snapshot. Never raises on invalid rules."""
        mode = ValidationMode(mode)
        with self.store.transaction() as session:
            existing = session.list_rules()
            reference_sets = session.load_reference_sets()
        result = validate_rules(rules, existing, reference_sets, mode)

        self._publish(RuleEvent(
            event_type=RuleEventType.RULES_VALIDATED,
            title="Traffic Rules Validated",
            message=f"{result.valid_rules}/{result.total_rules} rules passed validation.",
            severity=EventSeverity.INFO if result.overall_valid else EventSeverity.WARNING,
            details={
                "rules_count": result.total_rules,
                "validation_mode": mode.value,
                "overall_valid": result.overall_valid,
                "error_count": len(result.errors),
                "warning_count": len(result.warnings),
                "snapshot_hash": result.snapshot_hash,
            },
        ), background_tasks)
        return result

    def _apply_one(self, change: RuleChange, mode: ValidationMode) -> Optional[str]:
        if change.type not in CHANGE_TYPES:
            raise InvalidCommandError(
                f"Unknown change type '{change.type}'. Valid: {', '.join(CHANGE_TYPES)}"
            )

        fields = normalize_rule_fields(change.rule_data or {})

        if change.type == "create":
            rule = self.store.run_in_transaction(lambda s: self._create_in(s, fields, mode))
            return rule.id

        if not change.rule_id:
            raise InvalidCommandError(f"ruleId is required for '{change.type}' changes")

        if change.type == "delete":
            self.store.run_in_transaction(lambda s: self._delete_in(s, change.rule_id))
        elif change.type == "update":
            fields.pop("id", None)
            self.store.run_in_transaction(lambda s: self._update_in(s, change.rule_id, fields, mode))
        else:
            enabled = change.type == "enable"
            self.store.run_in_transaction(lambda s: self._set_enabled_in(s, change.rule_id, enabled))
        return change.rule_id

    def apply_changes(
        self,
        changes: Sequence[RuleChange],
        apply_immediately: bool = False,
        mode: ValidationMode = ValidationMode.STRICT,
        background_tasks: Optional[BackgroundTasks] = None,
    ) -> ApplyChangesResult:
        """
        Apply a change set entry by entry.

        Each entry commits on its own; a failed entry is reported and the
        batch continues. Nothing applied earlier is rolled back.
        """
        mode = ValidationMode(mode)
        results: List[ChangeResult] = []

        for change in changes:
            try:
                rule_id = self._apply_one(change, mode)
                results.append(ChangeResult(type=change.type, rule_id=rule_id, success=True))
            except Exception as e:
                logger.warning(f"Change {change.type} {change.rule_id or ''} failed: {e}")
                results.append(ChangeResult(
                    type=change.type,
                    rule_id=change.rule_id,
                    success=False,
                    error=str(e),
                ))

        successful = sum(1 for r in results if r.success)
        summary = ApplyChangesResult(
            total_changes=len(results),
            successful=successful,
            failed=len(results) - successful,
            applied_immediately=apply_immediately,
            results=results,
        )

        self._publish(RuleEvent(
            event_type=RuleEventType.RULES_APPLIED,
            title="Traffic Rules Applied",
            message=f"{successful}/{len(results)} traffic rule changes applied successfully.",
            severity=EventSeverity.INFO if summary.failed == 0 else EventSeverity.WARNING,
            target_roles=OPERATOR_ROLES,
            details={
                "total_changes": summary.total_changes,
                "successful": summary.successful,
                "failed": summary.failed,
                "applied_immediately": apply_immediately,
            },
        ), background_tasks)
        return summary
