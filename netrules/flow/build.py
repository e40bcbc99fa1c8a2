"""
Flow Graph Builder

Projects a rule set into a directed graph for topology views:

    user group -> traffic type -> network path -> tunnel

Each referenced entity becomes one node the first time it is seen (keyed
"ug_<id>", "tt_<id>", "np_<id>", "t_<id>"). Each rule adds one edge per
adjacent hop it has both ends of. Hops only move forward through the four
ranks, so the graph cannot contain a cycle.

Layout: the column comes from the node kind, the row from a counter that
increments with every new node.

Version: flow_graph_v1
"""

from typing import Dict, List, Optional, Sequence, Tuple

from netrules.rules.models import TrafficRule

from .models import FlowBandwidth, FlowEdge, FlowGraph, FlowNode, FlowPosition, FlowStatistics

ROW_SPACING = 100

# field, key prefix, node type, x column, fallback label prefix
NODE_KINDS: Tuple[Tuple[str, str, str, int, str], ...] = (
    ("user_group_id", "ug", "userGroup", 100, "User Group"),
    ("traffic_type_id", "tt", "trafficType", 300, "Traffic Type"),
    ("network_path_id", "np", "networkPath", 500, "Path"),
    ("tunnel_id", "t", "tunnel", 700, "Tunnel"),
)


def node_key(prefix: str, ref_id: str) -> str:
    return f"{prefix}_{ref_id}"


def filter_rules(
    rules: Sequence[TrafficRule],
    user_group_id: Optional[str] = None,
    traffic_type_id: Optional[str] = None,
) -> List[TrafficRule]:
    return [
        rule for rule in rules
        if (not user_group_id or rule.user_group_id == user_group_id)
        and (not traffic_type_id or rule.traffic_type_id == traffic_type_id)
    ]


def _bandwidth_label(limit: Optional[float]) -> str:
    if not limit:
        return "unlimited"
    if float(limit).is_integer():
        return f"{int(limit)} kbps"
    return f"{limit} kbps"


def _hop_edges(rule: TrafficRule) -> List[FlowEdge]:
    edges: List[FlowEdge] = []
    if rule.user_group_id and rule.traffic_type_id:
        edges.append(FlowEdge(
            id=f"edge_{rule.id}_ug_tt",
            source=node_key("ug", rule.user_group_id),
            target=node_key("tt", rule.traffic_type_id),
            label=rule.name,
            animated=rule.is_enabled,
            rule_id=rule.id,
        ))
    if rule.traffic_type_id and rule.network_path_id:
        edges.append(FlowEdge(
            id=f"edge_{rule.id}_tt_np",
            source=node_key("tt", rule.traffic_type_id),
            target=node_key("np", rule.network_path_id),
            label=rule.action.value,
            animated=rule.is_enabled,
            rule_id=rule.id,
        ))
    if rule.network_path_id and rule.tunnel_id:
        edges.append(FlowEdge(
            id=f"edge_{rule.id}_np_t",
            source=node_key("np", rule.network_path_id),
            target=node_key("t", rule.tunnel_id),
            label=_bandwidth_label(rule.bandwidth_limit_kbps),
            animated=rule.is_enabled,
            rule_id=rule.id,
        ))
    return edges


def build_flow(
    rules: Sequence[TrafficRule],
    user_group_id: Optional[str] = None,
    traffic_type_id: Optional[str] = None,
    labels: Optional[Dict[str, str]] = None,
) -> FlowGraph:
    """
    Build the flow graph for a rule set.

    Args:
        rules: Rules in evaluation order (priority ascending)
        user_group_id: Keep only rules targeting this group
        traffic_type_id: Keep only rules targeting this traffic type
        labels: Display names keyed by node key; ids are used when missing

    Returns:
        FlowGraph snapshot with nodes, edges and rule counts
    """
    selected = filter_rules(rules, user_group_id, traffic_type_id)
    labels = labels or {}

    nodes: List[FlowNode] = []
    edges: List[FlowEdge] = []
    seen = set()
    counter = 0

    for rule in selected:
        for field, prefix, node_type, column, fallback in NODE_KINDS:
            ref_id = getattr(rule, field)
            if not ref_id:
                continue
            key = node_key(prefix, ref_id)
            if key in seen:
                continue
            seen.add(key)
            nodes.append(FlowNode(
                id=key,
                type=node_type,
                label=labels.get(key, f"{fallback} {ref_id}"),
                position=FlowPosition(x=column, y=counter * ROW_SPACING),
            ))
            counter += 1

        edges.extend(_hop_edges(rule))

    return FlowGraph(
        nodes=nodes,
        edges=edges,
        statistics=FlowStatistics(
            total_rules=len(selected),
            active_rules=sum(1 for r in selected if r.is_enabled),
            bandwidth=FlowBandwidth(
                allocated_mbps=sum(r.bandwidth_limit_kbps or 0 for r in selected) / 1000,
            ),
        ),
    )
