"""
Rule Simulation Tests

The simulator is a dry run: every packet is matched and values are synthetic.

Version: rule_simulation_v1
"""

import random

import pytest

from netrules.rules.models import RuleAction
from netrules.simulation import (
    DRY_RUN_NOTICE,
    LATENCY_RANGE_MS,
    SUCCESS_PROBABILITY_RANGE,
    TestPacket,
    simulate,
)


@pytest.fixture
def rule(make_rule):
    return make_rule(
        "r1", "Block-Video",
        action=RuleAction.BLOCK,
        network_path_id="p1",
        tunnel_id="tn1",
        bandwidth_limit_kbps=512,
    )


@pytest.fixture
def packets():
    return [
        {"source": "10.0.0.5", "destination": "142.250.0.1", "protocol": "tcp", "port": 443},
        {"source": "10.0.0.6", "destination": "1.1.1.1", "protocol": "udp", "port": 53},
        {"source": "10.0.0.7", "destination": "8.8.8.8", "protocol": "icmp", "deviceId": "cam-3"},
    ]


class TestDryRun:

    def test_report_is_marked_dry_run(self, rule, packets):
        report = simulate(rule, packets, rng=random.Random(1))
        payload = report.to_api()
        assert payload["mode"] == "dry_run"
        assert payload["dryRun"] is True
        assert payload["notice"] == DRY_RUN_NOTICE
        assert all(r["simulated"] is True for r in payload["testResults"])

    def test_every_packet_matched_with_rule_disposition(self, rule, packets):
        report = simulate(rule, packets, rng=random.Random(1))
        assert len(report.test_results) == 3
        for index, result in enumerate(report.test_results, start=1):
            assert result.packet_id == index
            assert result.matched is True
            assert result.action == "block"
            assert result.tunnel_id == "tn1"
            assert result.network_path_id == "p1"
            assert result.bandwidth_limit_kbps == 512

    def test_values_within_fixed_ranges(self, rule, packets):
        report = simulate(rule, packets * 20, rng=random.Random(3))
        for result in report.test_results:
            assert LATENCY_RANGE_MS[0] <= result.latency_estimate <= LATENCY_RANGE_MS[1]
            low, high = SUCCESS_PROBABILITY_RANGE
            assert low <= result.success_probability <= high

    def test_packets_echoed(self, rule, packets):
        report = simulate(rule, packets, rng=random.Random(1))
        assert report.test_results[0].packet["port"] == 443
        assert report.test_results[2].packet["deviceId"] == "cam-3"

    def test_accepts_packet_models(self, rule):
        report = simulate(rule, [TestPacket(source="10.0.0.1", protocol="tcp")], rng=random.Random(1))
        assert report.summary.total_packets == 1


class TestSummary:

    def test_summary_counts_and_average(self, rule, packets):
        report = simulate(rule, packets, rng=random.Random(5))
        latencies = [r.latency_estimate for r in report.test_results]
        assert report.summary.total_packets == 3
        assert report.summary.matched_packets == 3
        assert report.summary.average_latency == pytest.approx(sum(latencies) / 3, abs=0.01)

    def test_no_packets(self, rule):
        report = simulate(rule, [], rng=random.Random(5))
        assert report.test_results == []
        assert report.summary.total_packets == 0
        assert report.summary.matched_packets == 0
        assert report.summary.average_latency == 0.0

    def test_seeded_runs_are_reproducible(self, rule, packets):
        first = simulate(rule, packets, rng=random.Random(99))
        second = simulate(rule, packets, rng=random.Random(99))
        assert first.to_api() == second.to_api()

    def test_report_identifies_rule(self, rule, packets):
        report = simulate(rule, packets, rng=random.Random(1))
        assert report.rule_id == "r1"
        assert report.rule_name == "Block-Video"
