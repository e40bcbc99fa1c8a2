"""
Rule Validation Models

Version: rule_validation_v1
"""

from enum import Enum
from typing import List, Optional

from pydantic import Field

from netrules.shared.models import CamelModel


class ValidationMode(str, Enum):
    """Whether a name collision blocks a save (strict) or only warns (lenient)."""
    STRICT = "strict"
    LENIENT = "lenient"


class RuleValidationResult(CamelModel):
    """Verdict for one candidate rule. Errors block a save, warnings do not."""
    rule_id: Optional[str] = None
    rule_name: Optional[str] = None
    is_valid: bool = True
    errors: List[str] = Field(default_factory=list)
    warnings: List[str] = Field(default_factory=list)

    def add_error(self, message: str) -> None:
        self.errors.append(message)
        self.is_valid = False

    def add_warning(self, message: str) -> None:
        self.warnings.append(message)


class BatchValidationResult(CamelModel):
    """Aggregated verdict for a validation batch."""
    overall_valid: bool
    validation_mode: ValidationMode
    total_rules: int
    valid_rules: int
    invalid_rules: int
    errors: List[str] = Field(
        default_factory=list,
        description="Every rule error, prefixed with the rule name"
    )
    warnings: List[str] = Field(
        default_factory=list,
        description="Every rule warning, prefixed with the rule name"
    )
    results: List[RuleValidationResult] = Field(default_factory=list)
    snapshot_hash: Optional[str] = Field(
        default=None,
        description="Hash of the existing-rule snapshot the batch was checked against"
    )
