"""
Traffic Rule Engine Errors

Every handled failure maps to one HTTP status and one envelope code:

    {"error": {"code": "...", "message": "..."}}

Validation of a batch never raises; RuleValidationError is only raised when a
save is refused because the candidate rule did not pass validation.
"""

from typing import Any, Dict, Optional


class TrafficRuleError(Exception):
    """Base class for handled engine errors."""

    status_code = 500
    code = "TRAFFIC_MANAGEMENT_ERROR"

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.details = details

    def to_envelope(self) -> Dict[str, Any]:
        error: Dict[str, Any] = {"code": self.code, "message": self.message}
        if self.details is not None:
            error["details"] = self.details
        return {"error": error}


class InvalidCommandError(TrafficRuleError):
    status_code = 400
    code = "INVALID_REQUEST"


class UnknownActionError(InvalidCommandError):
    code = "INVALID_ACTION"


class RuleNotFoundError(TrafficRuleError):
    status_code = 404
    code = "NOT_FOUND"

    def __init__(self, rule_id: str):
        super().__init__(f"Traffic rule {rule_id} not found")
        self.rule_id = rule_id


class RuleValidationError(TrafficRuleError):
    """Raised when a create/update is refused; details carry the itemized result."""

    status_code = 422
    code = "VALIDATION_FAILED"


class ConcurrentModificationError(TrafficRuleError):
    status_code = 409
    code = "CONFLICT"


class PersistenceError(TrafficRuleError):
    code = "PERSISTENCE_ERROR"
