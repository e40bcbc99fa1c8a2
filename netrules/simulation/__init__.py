"""
Rule Simulation Module

Dry-run harness that reports a rule's static disposition for synthetic
packets. Not a classifier and not a measurement.

Version: rule_simulation_v1
"""

from .models import (
    TestPacket,
    TestResult,
    SimulationSummary,
    SimulationReport,
    DRY_RUN_NOTICE,
)
from .simulate import simulate, LATENCY_RANGE_MS, SUCCESS_PROBABILITY_RANGE

__all__ = [
    "TestPacket",
    "TestResult",
    "SimulationSummary",
    "SimulationReport",
    "DRY_RUN_NOTICE",
    "simulate",
    "LATENCY_RANGE_MS",
    "SUCCESS_PROBABILITY_RANGE",
]

__version__ = "rule_simulation_v1"
