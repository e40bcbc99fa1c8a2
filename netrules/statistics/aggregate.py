"""
Statistics Aggregator

Rolls the persisted match counters of a rule set up into an overview, a
top-ten list and a bandwidth allocation summary.

Totals are cumulative counters. A time range only narrows the top-rules list
to rules last matched inside the window.

Version: rule_statistics_v1
"""

from datetime import datetime, timedelta, timezone
from typing import Dict, Optional, Sequence

from netrules.rules.models import TrafficRule
from netrules.shared.config import LINK_CAPACITY_MBPS
from netrules.shared.errors import InvalidCommandError

from .models import BandwidthUsage, RuleStatistics, StatisticsOverview, TopRule

TOP_RULES_LIMIT = 10

TIME_RANGES: Dict[str, timedelta] = {
    "1h": timedelta(hours=1),
    "24h": timedelta(hours=24),
    "7d": timedelta(days=7),
    "30d": timedelta(days=30),
}


def _aware(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def time_window_start(time_range: str, now: Optional[datetime] = None) -> datetime:
    """Start of the window named by `time_range` (1h, 24h, 7d, 30d)."""
    if time_range not in TIME_RANGES:
        raise InvalidCommandError(
            f"Unknown time range '{time_range}'. Valid: {', '.join(TIME_RANGES)}"
        )
    now = _aware(now or datetime.now(timezone.utc))
    return now - TIME_RANGES[time_range]


def aggregate(
    rules: Sequence[TrafficRule],
    link_capacity_mbps: float = LINK_CAPACITY_MBPS,
    time_range: Optional[str] = None,
    now: Optional[datetime] = None,
) -> RuleStatistics:
    """
    Compute statistics for a rule set.

    Args:
        rules: Rules in store order (ties in the top list keep this order)
        link_capacity_mbps: Capacity used for the utilization ratio
        time_range: Optional window for the top-rules list
        now: Reference time for the window

    Returns:
        RuleStatistics
    """
    overview = StatisticsOverview(
        total_rules=len(rules),
        active_rules=sum(1 for r in rules if r.is_enabled),
        testing_rules=sum(1 for r in rules if r.is_testing),
        total_packets_matched=sum(r.packets_matched or 0 for r in rules),
        total_bytes_matched=sum(r.bytes_matched or 0 for r in rules),
    )

    candidates = list(rules)
    if time_range:
        start = time_window_start(time_range, now)
        candidates = [
            r for r in candidates
            if r.last_matched_at is not None and _aware(r.last_matched_at) >= start
        ]

    # sorted() is stable, so equal counts keep store order
    ranked = sorted(candidates, key=lambda r: r.packets_matched or 0, reverse=True)
    top_rules = [
        TopRule(
            id=r.id,
            name=r.name,
            packets_matched=r.packets_matched or 0,
            bytes_matched=r.bytes_matched or 0,
            last_matched_at=r.last_matched_at,
        )
        for r in ranked[:TOP_RULES_LIMIT]
    ]

    allocated_mbps = sum(r.bandwidth_limit_kbps or 0 for r in rules) / 1000
    utilization = allocated_mbps / link_capacity_mbps if link_capacity_mbps else 0.0

    return RuleStatistics(
        overview=overview,
        top_rules=top_rules,
        bandwidth_usage=BandwidthUsage(
            total_mbps=link_capacity_mbps,
            allocated_mbps=allocated_mbps,
            utilization=utilization,
        ),
        time_range=time_range,
    )
