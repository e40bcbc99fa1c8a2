"""
Rule Simulator

Pre-deployment test harness for a single rule. It does NOT classify packets:
every packet is reported as matched and carries the rule's static disposition
plus synthetic latency and success values from fixed ranges.

Output is always a SimulationReport with mode "dry_run" so callers can never
mistake it for a measured result.

Version: rule_simulation_v1
"""

import random
from typing import Optional, Sequence, Union

from netrules.rules.models import TrafficRule

from .models import SimulationReport, SimulationSummary, TestPacket, TestResult

LATENCY_RANGE_MS = (10.0, 60.0)
SUCCESS_PROBABILITY_RANGE = (0.7, 1.0)


def simulate(
    rule: TrafficRule,
    test_packets: Sequence[Union[TestPacket, dict]],
    rng: Optional[random.Random] = None,
) -> SimulationReport:
    """
    Run the dry-run harness for one rule.

    Args:
        rule: Rule whose disposition is reported
        test_packets: Synthetic packets; echoed back one result each
        rng: Random source (seed it for reproducible output)

    Returns:
        SimulationReport with one TestResult per packet and a summary
    """
    rng = rng or random.Random()
    results = []

    for index, raw in enumerate(test_packets, start=1):
        packet = raw if isinstance(raw, TestPacket) else TestPacket.model_validate(raw)
        results.append(TestResult(
            packet_id=index,
            packet=packet.model_dump(by_alias=True, exclude_none=True),
            matched=True,
            action=rule.action.value,
            tunnel_id=rule.tunnel_id,
            network_path_id=rule.network_path_id,
            bandwidth_limit_kbps=rule.bandwidth_limit_kbps,
            latency_estimate=round(rng.uniform(*LATENCY_RANGE_MS), 2),
            success_probability=round(rng.uniform(*SUCCESS_PROBABILITY_RANGE), 4),
        ))

    average = (
        sum(r.latency_estimate for r in results) / len(results)
        if results else 0.0
    )

    return SimulationReport(
        rule_id=rule.id,
        rule_name=rule.name,
        test_results=results,
        summary=SimulationSummary(
            total_packets=len(results),
            matched_packets=sum(1 for r in results if r.matched),
            average_latency=round(average, 2),
        ),
    )
