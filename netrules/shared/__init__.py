"""Traffic Rule Engine Shared Utilities"""

from .hashing import (
    canonicalize,
    canonicalize_and_hash,
    structurally_equal,
)
from .errors import (
    TrafficRuleError,
    InvalidCommandError,
    UnknownActionError,
    RuleNotFoundError,
    RuleValidationError,
    ConcurrentModificationError,
    PersistenceError,
)

__all__ = [
    "canonicalize",
    "canonicalize_and_hash",
    "structurally_equal",
    "TrafficRuleError",
    "InvalidCommandError",
    "UnknownActionError",
    "RuleNotFoundError",
    "RuleValidationError",
    "ConcurrentModificationError",
    "PersistenceError",
]
