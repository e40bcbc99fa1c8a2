"""
Rule Validation Module

Checks new or edited traffic rules for field validity, dangling references
and conflicts with the existing rule set.

Design Principles:
- PURE: validation reads a snapshot, never the store
- STRUCTURED: failures are itemized data, never exceptions
- SNAPSHOT: the existing-rule set is read once per batch

Version: rule_validation_v1
"""

from .models import (
    ValidationMode,
    RuleValidationResult,
    BatchValidationResult,
)
from .candidate import RuleCandidate
from .validate import validate_rules, validate_rule, validate_rule_fields

__all__ = [
    # Models
    "ValidationMode",
    "RuleValidationResult",
    "BatchValidationResult",
    "RuleCandidate",
    # Functions
    "validate_rules",
    "validate_rule",
    "validate_rule_fields",
]

__version__ = "rule_validation_v1"
