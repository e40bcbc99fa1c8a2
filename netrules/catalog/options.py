"""
Dynamic Option Catalog

Projects the reference sets into the option lists the console offers when an
operator builds a rule: active records only, each set in its domain order.

- user groups: priority ascending
- traffic types: bandwidth priority descending
- network paths: reliability score descending
- tunnels: ping ascending

Records without a sort value go last; ties break by display name.
"""

from typing import List

from .models import (
    DynamicOptions,
    ReferenceKind,
    ReferenceRecord,
    ReferenceSets,
    REFERENCE_TABLES,
)


def sort_records(kind: ReferenceKind, records: List[ReferenceRecord]) -> List[ReferenceRecord]:
    """Order records by the kind's sort key."""
    descending = REFERENCE_TABLES[kind].sort_descending

    def key(record: ReferenceRecord):
        if record.sort_value is None:
            return (1, 0.0, record.name.lower())
        value = -record.sort_value if descending else record.sort_value
        return (0, value, record.name.lower())

    return sorted(records, key=key)


def active_records(kind: ReferenceKind, reference_sets: ReferenceSets) -> List[ReferenceRecord]:
    return sort_records(
        kind,
        [r for r in reference_sets.records(kind) if r.is_active],
    )


def build_dynamic_options(reference_sets: ReferenceSets) -> DynamicOptions:
    """Active-only, sorted option lists for rule construction."""
    return DynamicOptions(
        user_groups=active_records(ReferenceKind.USER_GROUP, reference_sets),
        traffic_types=active_records(ReferenceKind.TRAFFIC_TYPE, reference_sets),
        network_paths=active_records(ReferenceKind.NETWORK_PATH, reference_sets),
        tunnels=active_records(ReferenceKind.TUNNEL, reference_sets),
    )
