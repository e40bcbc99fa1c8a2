"""
Rule Simulation Models

Every model here describes a DRY RUN. Latency and success values are drawn at
random from fixed ranges and are never measurements.

Version: rule_simulation_v1
"""

from typing import Any, Dict, List, Literal, Optional

from pydantic import ConfigDict, Field
from pydantic.alias_generators import to_camel

from netrules.shared.models import CamelModel

DRY_RUN_NOTICE = (
    "Simulated dry run: packets are not classified and latency/success values "
    "are synthetic, not measured."
)


class TestPacket(CamelModel):
    """Synthetic packet description; extra attributes are echoed back."""
    __test__ = False

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="allow",
    )

    source: Optional[str] = None
    destination: Optional[str] = None
    protocol: Optional[str] = None
    port: Optional[int] = None


class TestResult(CamelModel):
    __test__ = False

    packet_id: int
    packet: Dict[str, Any]
    matched: bool
    action: str
    tunnel_id: Optional[str] = None
    network_path_id: Optional[str] = None
    bandwidth_limit_kbps: Optional[float] = None
    latency_estimate: float = Field(description="Synthetic, milliseconds")
    success_probability: float = Field(description="Synthetic, 0..1")
    simulated: Literal[True] = True


class SimulationSummary(CamelModel):
    total_packets: int
    matched_packets: int
    average_latency: float


class SimulationReport(CamelModel):
    """Dry-run result kind; never a measured network result."""
    mode: Literal["dry_run"] = "dry_run"
    dry_run: Literal[True] = True
    notice: str = DRY_RUN_NOTICE
    rule_id: str
    rule_name: str
    test_results: List[TestResult] = Field(default_factory=list)
    summary: SimulationSummary
