"""
Rule Validation Logic

Given candidate rules and a point-in-time snapshot of the existing rules and
reference sets, produce a per-rule verdict with errors (block a save) and
warnings (advisory).

Per-rule field checks:
- name present
- actions and conditions payloads are objects
- priority an integer in [0, 1000]
- action one of route | allow | block
- not both allow and block
- bandwidth limit a positive number
- redirect target an HTTP(S) URL
- source IP a dotted quad with optional /0-32
- destination port in [1, 65535]
- protocol tcp | udp | icmp | any (any case)
- time range HH:MM-HH:MM
- every present reference exists (inactive reference -> warning)

Cross-rule checks run against the snapshot plus the earlier rules of the same
batch, never against the rule itself:
- same priority as another enabled rule -> warning
- structurally equal conditions with opposite disposition -> warning
- same name -> error (strict) or warning (lenient)

Condition equality is structural (canonical JSON). Key order does not matter;
list order and logically equivalent rewrites are not detected.

This module is pure: no store access, no side effects.

Version: rule_validation_v1
"""

import re
from typing import Any, Dict, Iterable, List, Optional, Sequence, Union

from netrules.catalog.models import ReferenceSets, REFERENCE_TABLES
from netrules.rules.models import MAX_PRIORITY, MIN_PRIORITY, RuleAction, TrafficRule
from netrules.shared.hashing import canonicalize_and_hash, structurally_equal

from .candidate import CONDITION_PAYLOADS, RuleCandidate
from .models import BatchValidationResult, RuleValidationResult, ValidationMode

VALID_PROTOCOLS = ("tcp", "udp", "icmp", "any")
VALID_ACTIONS = tuple(a.value for a in RuleAction)

MIN_PORT = 1
MAX_PORT = 65535

URL_PATTERN = re.compile(r"^https?://.+")
IPV4_CIDR_PATTERN = re.compile(
    r"^(?:(?:25[0-5]|2[0-4][0-9]|[01]?[0-9][0-9]?)\.){3}"
    r"(?:25[0-5]|2[0-4][0-9]|[01]?[0-9][0-9]?)"
    r"(?:/(?:3[0-2]|[0-2]?[0-9]))?$"
)
TIME_RANGE_PATTERN = re.compile(
    r"^([0-1]?[0-9]|2[0-3]):[0-5][0-9]-([0-1]?[0-9]|2[0-3]):[0-5][0-9]$"
)

CONDITION_KEY_ALIASES = {
    "sourceIp": "source_ip",
    "destinationPort": "destination_port",
    "timeRange": "time_range",
}

ACTION_KEY_ALIASES = {
    "bandwidthLimit": "bandwidth_limit",
    "redirectTo": "redirect_to",
}

CandidateInput = Union[RuleCandidate, TrafficRule, Dict[str, Any]]


def _as_candidate(rule: CandidateInput) -> RuleCandidate:
    if isinstance(rule, RuleCandidate):
        return rule
    if isinstance(rule, TrafficRule):
        return RuleCandidate.from_rule(rule)
    return RuleCandidate.from_payload(rule)


def _present(payload: Dict[str, Any], key: str) -> bool:
    return key in payload and payload[key] is not None and payload[key] != ""


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _as_integer(value: Any) -> Optional[int]:
    """Integer value of ints, integral floats and digit strings; else None."""
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float) and value.is_integer():
        return int(value)
    if isinstance(value, str) and value.strip().isdigit():
        return int(value.strip())
    return None


def _normalized_keys(payload: Dict[str, Any], aliases: Dict[str, str]) -> Dict[str, Any]:
    return {aliases.get(k, k): v for k, v in payload.items()}


def flatten_conditions(conditions: Dict[str, Any]) -> Dict[str, Any]:
    """
    Condition attributes to field-check.

    Top-level attributes plus the attributes nested in the time, bandwidth,
    location and device payloads.
    """
    flat: Dict[str, Any] = {}
    nested_keys = set(CONDITION_PAYLOADS.values())
    for key, value in conditions.items():
        if key in nested_keys and isinstance(value, dict):
            for inner_key, inner_value in value.items():
                flat.setdefault(inner_key, inner_value)
        else:
            flat[key] = value
    return _normalized_keys(flat, CONDITION_KEY_ALIASES)


# =============================================================================
# PER-RULE CHECKS
# =============================================================================

def check_actions(actions: Dict[str, Any], result: RuleValidationResult) -> None:
    actions = _normalized_keys(actions, ACTION_KEY_ALIASES)

    if actions.get("allow") is not None and actions.get("block") is not None:
        result.add_error("Rule cannot both allow and block simultaneously")

    if "bandwidth_limit" in actions and actions["bandwidth_limit"] is not None:
        limit = actions["bandwidth_limit"]
        if not _is_number(limit) or limit <= 0:
            result.add_error("Bandwidth limit must be a positive number")

    if _present(actions, "redirect_to"):
        target = actions["redirect_to"]
        if not isinstance(target, str) or not URL_PATTERN.match(target):
            result.add_error("Redirect URL must be a valid HTTP/HTTPS URL")


def check_conditions(conditions: Dict[str, Any], result: RuleValidationResult) -> None:
    flat = flatten_conditions(conditions)

    if _present(flat, "source_ip"):
        source_ip = flat["source_ip"]
        if not isinstance(source_ip, str) or not IPV4_CIDR_PATTERN.match(source_ip):
            result.add_error("Source IP must be a valid IP address or CIDR notation")

    if _present(flat, "destination_port"):
        port = _as_integer(flat["destination_port"])
        if port is None or port < MIN_PORT or port > MAX_PORT:
            result.add_error(f"Destination port must be between {MIN_PORT} and {MAX_PORT}")

    if _present(flat, "protocol"):
        protocol = flat["protocol"]
        if not isinstance(protocol, str) or protocol.lower() not in VALID_PROTOCOLS:
            result.add_error(f"Protocol must be one of: {', '.join(VALID_PROTOCOLS)}")

    if _present(flat, "time_range"):
        time_range = flat["time_range"]
        if not isinstance(time_range, str) or not TIME_RANGE_PATTERN.match(time_range):
            result.add_error("Time range must be in format HH:MM-HH:MM")


def check_references(
    candidate: RuleCandidate,
    reference_sets: ReferenceSets,
    result: RuleValidationResult,
) -> None:
    """Every present reference must exist; inactive ones only warn."""
    for kind, ref in REFERENCE_TABLES.items():
        ref_id = candidate.references.get(kind)
        if ref_id is None or ref_id == "":
            continue
        record = reference_sets.index(kind).get(str(ref_id))
        if record is None:
            result.add_error(f"{ref.label} {ref_id} does not exist")
        elif not record.is_active:
            result.add_warning(f"{ref.label} {ref_id} is inactive")


def validate_rule_fields(
    candidate: RuleCandidate,
    reference_sets: ReferenceSets,
) -> RuleValidationResult:
    """Field-level checks for one candidate, independent of other rules."""
    result = RuleValidationResult(
        rule_id=candidate.rule_id,
        rule_name=candidate.name if isinstance(candidate.name, str) else None,
    )

    if not isinstance(candidate.name, str) or not candidate.name.strip():
        result.add_error("Rule name is required")

    if not isinstance(candidate.actions, dict):
        result.add_error("Rule actions are required")

    if not isinstance(candidate.conditions, dict):
        result.add_error("Rule conditions are required")

    if candidate.priority is not None:
        priority = _as_integer(candidate.priority) if not isinstance(candidate.priority, str) else None
        if priority is None or priority < MIN_PRIORITY or priority > MAX_PRIORITY:
            result.add_error(
                f"Priority must be an integer between {MIN_PRIORITY} and {MAX_PRIORITY}"
            )

    if candidate.action is not None and candidate.action not in VALID_ACTIONS:
        result.add_error(f"Action must be one of: {', '.join(VALID_ACTIONS)}")

    if isinstance(candidate.actions, dict):
        check_actions(candidate.actions, result)

    if isinstance(candidate.conditions, dict):
        check_conditions(candidate.conditions, result)

    check_references(candidate, reference_sets, result)

    return result


# =============================================================================
# CROSS-RULE CHECKS
# =============================================================================

def check_against_others(
    candidate: RuleCandidate,
    others: Iterable[RuleCandidate],
    mode: ValidationMode,
    result: RuleValidationResult,
) -> None:
    name_conflict: Optional[RuleCandidate] = None

    for other in others:
        if candidate.rule_id is not None and other.rule_id == candidate.rule_id:
            continue

        if (
            candidate.priority is not None
            and other.priority == candidate.priority
            and other.enabled
            and candidate.enabled
        ):
            result.add_warning(
                f"Rule has same priority ({candidate.priority}) as existing rule '{other.display_name}'"
            )

        if (
            isinstance(candidate.conditions, dict)
            and isinstance(other.conditions, dict)
            and structurally_equal(candidate.conditions, other.conditions)
        ):
            mine = candidate.disposition()
            theirs = other.disposition()
            if mine is not None and theirs is not None and mine != theirs:
                result.add_warning(
                    f"Rule conflicts with existing rule '{other.display_name}' "
                    f"- same conditions but opposite actions"
                )

        if (
            name_conflict is None
            and isinstance(candidate.name, str)
            and candidate.name.strip()
            and other.name == candidate.name
        ):
            name_conflict = other

    if name_conflict is not None:
        message = f"Rule name '{candidate.name}' already exists"
        if mode == ValidationMode.STRICT:
            result.add_error(message)
        else:
            result.add_warning(message)


# =============================================================================
# BATCH
# =============================================================================

def validate_rules(
    rules: Sequence[CandidateInput],
    existing_rules: Sequence[TrafficRule],
    reference_sets: ReferenceSets,
    mode: ValidationMode = ValidationMode.STRICT,
) -> BatchValidationResult:
    """
    Validate a batch of candidate rules.

    Args:
        rules: Candidates (payload dicts, TrafficRules or RuleCandidates)
        existing_rules: Snapshot of persisted rules, read once for the batch
        reference_sets: Snapshot of all reference records
        mode: strict (name collision is an error) or lenient (warning)

    Returns:
        BatchValidationResult with per-rule results and prefixed messages
    """
    mode = ValidationMode(mode)
    snapshot = [RuleCandidate.from_rule(rule) for rule in existing_rules]

    results: List[RuleValidationResult] = []
    errors: List[str] = []
    warnings: List[str] = []
    seen: List[RuleCandidate] = []

    for raw in rules:
        candidate = _as_candidate(raw)
        result = validate_rule_fields(candidate, reference_sets)
        check_against_others(candidate, snapshot + seen, mode, result)
        seen.append(candidate)

        results.append(result)
        errors.extend(f"{candidate.display_name}: {e}" for e in result.errors)
        warnings.extend(f"{candidate.display_name}: {w}" for w in result.warnings)

    valid_count = sum(1 for r in results if r.is_valid)
    invalid_count = len(results) - valid_count

    return BatchValidationResult(
        overall_valid=invalid_count == 0,
        validation_mode=mode,
        total_rules=len(results),
        valid_rules=valid_count,
        invalid_rules=invalid_count,
        errors=errors,
        warnings=warnings,
        results=results,
        snapshot_hash=canonicalize_and_hash([r.field_values() for r in existing_rules]),
    )


def validate_rule(
    rule: CandidateInput,
    existing_rules: Sequence[TrafficRule],
    reference_sets: ReferenceSets,
    mode: ValidationMode = ValidationMode.STRICT,
) -> RuleValidationResult:
    """Single-rule convenience wrapper around validate_rules."""
    return validate_rules([rule], existing_rules, reference_sets, mode).results[0]
