"""
Rule Statistics Module

Overview, top-N and bandwidth allocation reports over persisted match
counters.

Version: rule_statistics_v1
"""

from .models import StatisticsOverview, TopRule, BandwidthUsage, RuleStatistics
from .aggregate import aggregate, time_window_start, TIME_RANGES, TOP_RULES_LIMIT

__all__ = [
    "StatisticsOverview",
    "TopRule",
    "BandwidthUsage",
    "RuleStatistics",
    "aggregate",
    "time_window_start",
    "TIME_RANGES",
    "TOP_RULES_LIMIT",
]

__version__ = "rule_statistics_v1"
