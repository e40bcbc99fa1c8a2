"""
Rule Validation Tests

- priority range [0, 1000]
- allow + block always rejected
- opposite dispositions on identical conditions warn
- name collisions: error in strict mode, warning in lenient mode
- field format checks (port, protocol, IP, URL, time range, bandwidth)
- reference existence and inactive references
- batch aggregation and intra-batch checks

Version: rule_validation_v1
"""

import pytest

from netrules.rules.models import RuleAction
from netrules.validation import (
    ValidationMode,
    validate_rule,
    validate_rules,
)


# ============================================================================
# PRIORITY
# ============================================================================

class TestPriorityRange:

    @pytest.mark.parametrize("priority", [0, 1, 500, 1000])
    def test_in_range_accepted(self, reference_sets, priority):
        result = validate_rule({"name": "R", "priority": priority}, [], reference_sets)
        assert result.is_valid
        assert not any("Priority" in e for e in result.errors)

    @pytest.mark.parametrize("priority", [-1, 1001, 5000, 12.5, "fifty"])
    def test_out_of_range_rejected(self, reference_sets, priority):
        result = validate_rule({"name": "R", "priority": priority}, [], reference_sets)
        assert not result.is_valid
        assert "Priority must be an integer between 0 and 1000" in result.errors


# ============================================================================
# ACTIONS
# ============================================================================

class TestAllowAndBlock:

    @pytest.mark.parametrize("extra", [
        {},
        {"priority": 10},
        {"conditions": {"protocol": "tcp"}},
        {"userGroupId": "g1", "trafficTypeId": "t1"},
    ])
    def test_both_always_rejected(self, reference_sets, extra):
        payload = {"name": "Both", "actions": {"allow": True, "block": True}, "conditions": {}}
        payload.update(extra)
        result = validate_rule(payload, [], reference_sets)
        assert not result.is_valid
        assert "Rule cannot both allow and block simultaneously" in result.errors

    def test_single_disposition_accepted(self, reference_sets):
        result = validate_rule(
            {"name": "Only", "actions": {"block": True}, "conditions": {}},
            [],
            reference_sets,
        )
        assert result.is_valid

    @pytest.mark.parametrize("limit", [0, -5, "fast"])
    def test_bandwidth_limit_must_be_positive(self, reference_sets, limit):
        result = validate_rule(
            {"name": "BW", "actions": {"bandwidthLimit": limit}, "conditions": {}},
            [],
            reference_sets,
        )
        assert "Bandwidth limit must be a positive number" in result.errors

    def test_bandwidth_limit_from_rule_column(self, reference_sets):
        result = validate_rule({"name": "BW", "bandwidthLimitKbps": -100}, [], reference_sets)
        assert "Bandwidth limit must be a positive number" in result.errors

    def test_redirect_must_be_http(self, reference_sets):
        bad = validate_rule(
            {"name": "Redir", "actions": {"redirectTo": "ftp://files.local"}, "conditions": {}},
            [],
            reference_sets,
        )
        good = validate_rule(
            {"name": "Redir", "actions": {"redirectTo": "https://portal.local/login"}, "conditions": {}},
            [],
            reference_sets,
        )
        assert "Redirect URL must be a valid HTTP/HTTPS URL" in bad.errors
        assert good.is_valid

    def test_unknown_action_rejected(self, reference_sets):
        result = validate_rule({"name": "R", "action": "drop"}, [], reference_sets)
        assert not result.is_valid
        assert any(e.startswith("Action must be one of") for e in result.errors)


# ============================================================================
# CONDITIONS
# ============================================================================

class TestConditionFields:

    def _validate(self, reference_sets, conditions):
        return validate_rule(
            {"name": "C", "actions": {"allow": True}, "conditions": conditions},
            [],
            reference_sets,
        )

    def test_port_70000_rejected(self, reference_sets):
        result = self._validate(reference_sets, {"destinationPort": 70000})
        assert "Destination port must be between 1 and 65535" in result.errors

    def test_port_443_accepted(self, reference_sets):
        result = self._validate(reference_sets, {"destinationPort": 443})
        assert not any("port" in e.lower() for e in result.errors)

    def test_port_checked_inside_condition_payloads(self, reference_sets):
        result = validate_rule(
            {"name": "D", "deviceConditions": {"destinationPort": 70000}},
            [],
            reference_sets,
        )
        assert "Destination port must be between 1 and 65535" in result.errors

    @pytest.mark.parametrize("protocol", ["tcp", "UDP", "Icmp", "any"])
    def test_known_protocols_case_insensitive(self, reference_sets, protocol):
        assert self._validate(reference_sets, {"protocol": protocol}).is_valid

    def test_unknown_protocol_rejected(self, reference_sets):
        result = self._validate(reference_sets, {"protocol": "sctp"})
        assert "Protocol must be one of: tcp, udp, icmp, any" in result.errors

    @pytest.mark.parametrize("source_ip", ["10.0.0.1", "192.168.1.0/24", "0.0.0.0/0"])
    def test_valid_source_ip(self, reference_sets, source_ip):
        assert self._validate(reference_sets, {"sourceIp": source_ip}).is_valid

    @pytest.mark.parametrize("source_ip", ["10.0.0.256", "192.168.1.0/33", "example.com"])
    def test_invalid_source_ip(self, reference_sets, source_ip):
        result = self._validate(reference_sets, {"sourceIp": source_ip})
        assert "Source IP must be a valid IP address or CIDR notation" in result.errors

    def test_time_range_format(self, reference_sets):
        good = validate_rule({"name": "T", "timeConditions": {"timeRange": "08:00-17:30"}}, [], reference_sets)
        bad = validate_rule({"name": "T", "timeConditions": {"timeRange": "25:00-26:00"}}, [], reference_sets)
        assert good.is_valid
        assert "Time range must be in format HH:MM-HH:MM" in bad.errors


# ============================================================================
# SHAPE
# ============================================================================

class TestRuleShape:

    @pytest.mark.parametrize("name", [None, "", "   "])
    def test_name_required(self, reference_sets, name):
        result = validate_rule({"name": name}, [], reference_sets)
        assert "Rule name is required" in result.errors

    def test_actions_must_be_object(self, reference_sets):
        result = validate_rule({"name": "X", "actions": "allow", "conditions": {}}, [], reference_sets)
        assert "Rule actions are required" in result.errors

    def test_conditions_must_be_object(self, reference_sets):
        result = validate_rule({"name": "X", "actions": {"allow": True}, "conditions": None}, [], reference_sets)
        assert "Rule conditions are required" in result.errors

    def test_legacy_keys_accepted(self, reference_sets):
        result = validate_rule(
            {"ruleName": "Legacy", "clientGroupId": "g1", "path_id": "p1"},
            [],
            reference_sets,
        )
        assert result.is_valid
        assert result.rule_name == "Legacy"


# ============================================================================
# REFERENCES
# ============================================================================

class TestReferences:

    def test_existing_references_accepted(self, reference_sets):
        result = validate_rule(
            {"name": "Full", "userGroupId": "g1", "trafficTypeId": "t1",
             "networkPathId": "p1", "tunnelId": "tn1"},
            [],
            reference_sets,
        )
        assert result.is_valid
        assert result.warnings == []

    @pytest.mark.parametrize("field,message", [
        ("userGroupId", "User group missing does not exist"),
        ("trafficTypeId", "Traffic type missing does not exist"),
        ("networkPathId", "Network path missing does not exist"),
        ("tunnelId", "Tunnel missing does not exist"),
    ])
    def test_dangling_reference_is_error(self, reference_sets, field, message):
        result = validate_rule({"name": "Dangling", field: "missing"}, [], reference_sets)
        assert not result.is_valid
        assert message in result.errors

    def test_inactive_reference_warns(self, reference_sets):
        result = validate_rule({"name": "Old", "userGroupId": "g-old"}, [], reference_sets)
        assert result.is_valid
        assert "User group g-old is inactive" in result.warnings


# ============================================================================
# CROSS-RULE CHECKS
# ============================================================================

class TestCrossRuleChecks:

    def test_stream_priority_block_video_scenario(self, reference_sets, make_rule):
        """Same priority and opposite disposition: two warnings, no error."""
        existing = [make_rule(
            "r1", "Stream-Priority",
            user_group_id="g1", traffic_type_id="t1",
            priority=50, action=RuleAction.ROUTE,
        )]
        result = validate_rule(
            {"name": "Block-Video", "userGroupId": "g1", "trafficTypeId": "t1",
             "priority": 50, "action": "block"},
            existing,
            reference_sets,
        )
        assert result.is_valid
        assert result.errors == []
        assert "Rule has same priority (50) as existing rule 'Stream-Priority'" in result.warnings
        assert (
            "Rule conflicts with existing rule 'Stream-Priority' - same conditions but opposite actions"
            in result.warnings
        )

    def test_allow_block_conflict_on_explicit_conditions(self, reference_sets):
        batch = validate_rules(
            [
                {"name": "Allow-HTTPS", "actions": {"allow": True},
                 "conditions": {"protocol": "tcp", "destinationPort": 443}},
                {"name": "Block-HTTPS", "actions": {"block": True},
                 "conditions": {"destinationPort": 443, "protocol": "tcp"}},
            ],
            [],
            reference_sets,
        )
        second = batch.results[1]
        assert second.is_valid
        assert any("'Allow-HTTPS'" in w and "opposite actions" in w for w in second.warnings)

    def test_conditions_differing_in_timestamp_keys_do_not_conflict(self, reference_sets):
        batch = validate_rules(
            [
                {"name": "Allow-Window", "actions": {"allow": True},
                 "conditions": {"protocol": "tcp", "updatedAt": "2024-01-01"}},
                {"name": "Block-Window", "actions": {"block": True},
                 "conditions": {"protocol": "tcp", "updatedAt": "2024-06-01"}},
            ],
            [],
            reference_sets,
        )
        assert not any("opposite actions" in w for w in batch.results[1].warnings)

    def test_different_conditions_do_not_conflict(self, reference_sets, make_rule):
        existing = [make_rule("r1", "Allow-G1", user_group_id="g1", action=RuleAction.ALLOW)]
        result = validate_rule(
            {"name": "Block-G2", "userGroupId": "g2", "action": "block"},
            existing,
            reference_sets,
        )
        assert not any("conflicts" in w for w in result.warnings)

    def test_same_priority_ignores_disabled_rules(self, reference_sets, make_rule):
        existing = [make_rule("r1", "Paused", priority=10, is_enabled=False)]
        result = validate_rule({"name": "New", "priority": 10}, existing, reference_sets)
        assert result.warnings == []

    def test_duplicate_name_strict_is_error(self, reference_sets, make_rule):
        existing = [make_rule("r1", "Guest-Limit")]
        result = validate_rule({"name": "Guest-Limit"}, existing, reference_sets, ValidationMode.STRICT)
        assert not result.is_valid
        assert "Rule name 'Guest-Limit' already exists" in result.errors

    def test_duplicate_name_lenient_is_warning(self, reference_sets, make_rule):
        existing = [make_rule("r1", "Guest-Limit")]
        result = validate_rule({"name": "Guest-Limit"}, existing, reference_sets, ValidationMode.LENIENT)
        assert result.is_valid
        assert "Rule name 'Guest-Limit' already exists" in result.warnings

    def test_name_comparison_is_case_sensitive(self, reference_sets, make_rule):
        existing = [make_rule("r1", "Guest-Limit")]
        result = validate_rule({"name": "guest-limit"}, existing, reference_sets)
        assert result.is_valid

    def test_rule_is_not_compared_with_itself(self, reference_sets, make_rule):
        rule = make_rule("r1", "Self", priority=20, user_group_id="g1")
        result = validate_rule(rule, [rule], reference_sets)
        assert result.is_valid
        assert result.warnings == []


# ============================================================================
# BATCH
# ============================================================================

class TestBatchValidation:

    def test_messages_prefixed_with_rule_name(self, reference_sets):
        batch = validate_rules(
            [{"name": "P", "conditions": {"destinationPort": 70000}, "actions": {"allow": True}}],
            [],
            reference_sets,
        )
        assert batch.errors == ["P: Destination port must be between 1 and 65535"]

    def test_counts_and_overall_verdict(self, reference_sets):
        batch = validate_rules(
            [{"name": "Good"}, {"name": "Bad", "priority": 2000}],
            [],
            reference_sets,
        )
        assert batch.total_rules == 2
        assert batch.valid_rules == 1
        assert batch.invalid_rules == 1
        assert batch.overall_valid is False
        assert batch.validation_mode == ValidationMode.STRICT

    def test_duplicate_names_within_batch(self, reference_sets):
        strict = validate_rules([{"name": "Dup"}, {"name": "Dup"}], [], reference_sets, "strict")
        lenient = validate_rules([{"name": "Dup"}, {"name": "Dup"}], [], reference_sets, "lenient")
        assert strict.results[0].is_valid
        assert not strict.results[1].is_valid
        assert lenient.overall_valid

    def test_empty_batch_is_valid(self, reference_sets):
        batch = validate_rules([], [], reference_sets)
        assert batch.overall_valid
        assert batch.total_rules == 0

    def test_snapshot_hash_is_deterministic(self, reference_sets, make_rule):
        existing = [make_rule("r1", "A", priority=5), make_rule("r2", "B")]
        first = validate_rules([{"name": "C"}], existing, reference_sets)
        second = validate_rules([{"name": "D"}], existing, reference_sets)
        assert first.snapshot_hash.startswith("sha256:")
        assert first.snapshot_hash == second.snapshot_hash

    def test_serializes_camel_case(self, reference_sets):
        payload = validate_rules([{"name": "A"}], [], reference_sets).to_api()
        assert set(payload) >= {
            "overallValid", "validationMode", "totalRules",
            "validRules", "invalidRules", "errors", "warnings", "results",
        }
        assert payload["results"][0]["isValid"] is True
