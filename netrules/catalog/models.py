"""
Dynamic Option Catalog Models

Read-only projection of the four reference sets a traffic rule may point to:
user groups, traffic types, network paths and tunnels.

Version: option_catalog_v1
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple

from pydantic import ConfigDict, Field
from pydantic.alias_generators import to_camel

from netrules.shared.models import CamelModel


class ReferenceKind(str, Enum):
    """Reference set a rule field points into."""
    USER_GROUP = "user_group"
    TRAFFIC_TYPE = "traffic_type"
    NETWORK_PATH = "network_path"
    TUNNEL = "tunnel"


@dataclass(frozen=True)
class ReferenceTable:
    """How one reference set is stored and ordered."""
    table: str
    name_column: str
    sort_column: str
    sort_descending: bool
    display_columns: Tuple[str, ...]
    label: str
    node_prefix: str
    rule_field: str


REFERENCE_TABLES: Dict[ReferenceKind, ReferenceTable] = {
    ReferenceKind.USER_GROUP: ReferenceTable(
        table="user_groups",
        name_column="group_name",
        sort_column="priority",
        sort_descending=False,
        display_columns=("color_code",),
        label="User group",
        node_prefix="ug",
        rule_field="user_group_id",
    ),
    ReferenceKind.TRAFFIC_TYPE: ReferenceTable(
        table="traffic_types",
        name_column="type_name",
        sort_column="bandwidth_priority",
        sort_descending=True,
        display_columns=("category",),
        label="Traffic type",
        node_prefix="tt",
        rule_field="traffic_type_id",
    ),
    ReferenceKind.NETWORK_PATH: ReferenceTable(
        table="network_paths",
        name_column="path_name",
        sort_column="reliability_score",
        sort_descending=True,
        display_columns=("path_type",),
        label="Network path",
        node_prefix="np",
        rule_field="network_path_id",
    ),
    ReferenceKind.TUNNEL: ReferenceTable(
        table="tunnels",
        name_column="tunnel_name",
        sort_column="ping_ms",
        sort_descending=False,
        display_columns=("tunnel_type", "status"),
        label="Tunnel",
        node_prefix="t",
        rule_field="tunnel_id",
    ),
}


class ReferenceRecord(CamelModel):
    """
    One row of a reference set.

    Display attributes specific to the set (color code, category, path type,
    tunnel status) are kept as extra fields so they serialize alongside the
    common ones.
    """
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="allow",
    )

    id: str
    name: str
    description: Optional[str] = None
    is_active: bool = True
    sort_value: Optional[float] = Field(
        default=None,
        description="Value of the set's domain sort key (priority, ping, ...)"
    )

    @classmethod
    def from_row(cls, kind: ReferenceKind, row: Dict[str, Any]) -> "ReferenceRecord":
        """Build a record from a database row of the kind's table."""
        ref = REFERENCE_TABLES[kind]
        sort_raw = row.get(ref.sort_column)
        extras = {
            to_camel(column): row.get(column)
            for column in ref.display_columns
            if column in row
        }
        return cls(
            id=str(row["id"]),
            name=row.get(ref.name_column) or str(row["id"]),
            description=row.get("description"),
            is_active=bool(row.get("is_active", True)),
            sort_value=float(sort_raw) if sort_raw is not None else None,
            **extras,
        )


class DynamicOptions(CamelModel):
    """Active reference records offered for rule construction."""
    user_groups: List[ReferenceRecord] = Field(default_factory=list)
    traffic_types: List[ReferenceRecord] = Field(default_factory=list)
    network_paths: List[ReferenceRecord] = Field(default_factory=list)
    tunnels: List[ReferenceRecord] = Field(default_factory=list)


class ReferenceSets(CamelModel):
    """
    Every reference record, active or not.

    Validation checks existence against the full sets; only the option
    projection filters to active records.
    """
    user_groups: List[ReferenceRecord] = Field(default_factory=list)
    traffic_types: List[ReferenceRecord] = Field(default_factory=list)
    network_paths: List[ReferenceRecord] = Field(default_factory=list)
    tunnels: List[ReferenceRecord] = Field(default_factory=list)

    def records(self, kind: ReferenceKind) -> List[ReferenceRecord]:
        return {
            ReferenceKind.USER_GROUP: self.user_groups,
            ReferenceKind.TRAFFIC_TYPE: self.traffic_types,
            ReferenceKind.NETWORK_PATH: self.network_paths,
            ReferenceKind.TUNNEL: self.tunnels,
        }[kind]

    def index(self, kind: ReferenceKind) -> Dict[str, ReferenceRecord]:
        return {record.id: record for record in self.records(kind)}

    def node_labels(self) -> Dict[str, str]:
        """Display names keyed by flow-graph node key ("ug_<id>", ...)."""
        labels: Dict[str, str] = {}
        for kind, ref in REFERENCE_TABLES.items():
            for record in self.records(kind):
                labels[f"{ref.node_prefix}_{record.id}"] = record.name
        return labels
