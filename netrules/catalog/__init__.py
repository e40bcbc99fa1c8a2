"""
Dynamic Option Catalog

Reference sets (user groups, traffic types, network paths, tunnels) that
traffic rules point to, and the active-only option projection used to build
new rules.

Version: option_catalog_v1
"""

from .models import (
    ReferenceKind,
    ReferenceRecord,
    ReferenceSets,
    DynamicOptions,
    REFERENCE_TABLES,
)
from .options import build_dynamic_options, sort_records

__all__ = [
    "ReferenceKind",
    "ReferenceRecord",
    "ReferenceSets",
    "DynamicOptions",
    "REFERENCE_TABLES",
    "build_dynamic_options",
    "sort_records",
]

__version__ = "option_catalog_v1"
