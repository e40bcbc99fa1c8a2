"""
Flow Graph Models

Version: flow_graph_v1
"""

from typing import List, Literal

from pydantic import Field

from netrules.shared.models import CamelModel

NodeType = Literal["userGroup", "trafficType", "networkPath", "tunnel"]


class FlowPosition(CamelModel):
    x: int
    y: int


class FlowNode(CamelModel):
    id: str = Field(description='Node key, "<prefix>_<reference id>"')
    type: NodeType
    label: str
    position: FlowPosition


class FlowEdge(CamelModel):
    id: str
    source: str
    target: str
    label: str
    animated: bool
    rule_id: str


class FlowBandwidth(CamelModel):
    allocated_mbps: float = Field(
        default=0.0,
        description="Sum of the selected rules' bandwidth limits, in Mbps"
    )


class FlowStatistics(CamelModel):
    total_rules: int
    active_rules: int
    bandwidth: FlowBandwidth = Field(default_factory=FlowBandwidth)


class FlowGraph(CamelModel):
    """
    Node/edge projection of a rule set.

    A graph is a snapshot: later changes to the rules never reach it.
    """
    nodes: List[FlowNode] = Field(default_factory=list)
    edges: List[FlowEdge] = Field(default_factory=list)
    statistics: FlowStatistics

    def node_keys(self) -> List[str]:
        return [node.id for node in self.nodes]
