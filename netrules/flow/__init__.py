"""
Flow Graph Module

Derived group -> traffic type -> path -> tunnel graph of a rule set, used for
topology visualization.

Version: flow_graph_v1
"""

from .models import FlowGraph, FlowNode, FlowEdge, FlowPosition, FlowStatistics, FlowBandwidth
from .build import build_flow, filter_rules

__all__ = [
    "FlowGraph",
    "FlowNode",
    "FlowEdge",
    "FlowPosition",
    "FlowStatistics",
    "FlowBandwidth",
    "build_flow",
    "filter_rules",
]

__version__ = "flow_graph_v1"
