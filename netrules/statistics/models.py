"""
Rule Statistics Models

Version: rule_statistics_v1
"""

from datetime import datetime
from typing import List, Optional

from pydantic import Field

from netrules.shared.models import CamelModel


class StatisticsOverview(CamelModel):
    total_rules: int = 0
    active_rules: int = 0
    testing_rules: int = 0
    total_packets_matched: int = 0
    total_bytes_matched: int = 0


class TopRule(CamelModel):
    id: str
    name: str
    packets_matched: int = 0
    bytes_matched: int = 0
    last_matched_at: Optional[datetime] = None


class BandwidthUsage(CamelModel):
    """Configured allocation versus a fixed link capacity. Not live traffic."""
    total_mbps: float
    allocated_mbps: float
    utilization: float


class RuleStatistics(CamelModel):
    overview: StatisticsOverview
    top_rules: List[TopRule] = Field(default_factory=list)
    bandwidth_usage: BandwidthUsage
    time_range: Optional[str] = None
