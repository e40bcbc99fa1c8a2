"""
Traffic Rule Commands

Request bodies of the action-dispatch endpoint, as a union discriminated on
`action`. Several actions are accepted under more than one name (the console
and older automation use different ones).

Rule fields may be sent at the top level of the command or nested under
`rule` (create) / `updates` (update); nested keys win. Because `action` is
the command tag, a top-level rule disposition is sent as `ruleAction`.

Version: traffic_api_v1
"""

from typing import Annotated, Any, Dict, List, Literal, Optional, Union

from pydantic import ConfigDict, Field, TypeAdapter, ValidationError, field_validator
from pydantic.alias_generators import to_camel

from netrules.rules.models import RuleChange
from netrules.shared.errors import InvalidCommandError, UnknownActionError
from netrules.shared.models import CamelModel
from netrules.simulation.models import TestPacket
from netrules.statistics.aggregate import TIME_RANGES
from netrules.validation.models import ValidationMode


class Command(CamelModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="allow",
    )


class RuleFieldsCommand(Command):
    rule: Optional[Dict[str, Any]] = None
    mode: ValidationMode = ValidationMode.STRICT

    def rule_fields(self) -> Dict[str, Any]:
        """Top-level extra params merged with the nested rule object."""
        fields = dict(self.model_extra or {})
        fields.update(self.rule or {})
        return fields


class GetOptionsCommand(Command):
    action: Literal["get_dynamic_options", "get_dropdown_options"]


class CreateRuleCommand(RuleFieldsCommand):
    action: Literal["create_rule", "create_traffic_rule"]


class UpdateRuleCommand(RuleFieldsCommand):
    action: Literal["update_rule", "update_traffic_rule"]
    rule_id: str
    updates: Optional[Dict[str, Any]] = None

    def rule_fields(self) -> Dict[str, Any]:
        fields = super().rule_fields()
        fields.update(self.updates or {})
        return fields


class DeleteRuleCommand(Command):
    action: Literal["delete_rule"]
    rule_id: str


class ListRulesCommand(Command):
    action: Literal["get_all_rules"]
    user_group_id: Optional[str] = None
    traffic_type_id: Optional[str] = None


class TrafficFlowCommand(Command):
    action: Literal["get_traffic_flow"]
    user_group_id: Optional[str] = None
    traffic_type_id: Optional[str] = None


class TestRuleCommand(Command):
    __test__ = False

    action: Literal["test_rule", "test_traffic_rule", "simulate_traffic_routing"]
    rule_id: str
    test_packets: List[TestPacket] = Field(default_factory=list)


class StatisticsCommand(Command):
    action: Literal["get_rule_statistics", "get_statistics"]
    time_range: Optional[str] = None

    @field_validator("time_range")
    @classmethod
    def known_time_range(cls, v: Optional[str]) -> Optional[str]:
        if v is not None and v not in TIME_RANGES:
            raise ValueError(f"timeRange must be one of: {', '.join(TIME_RANGES)}")
        return v


class ValidateRulesCommand(Command):
    action: Literal["validate_rules"]
    rules: List[Dict[str, Any]]
    mode: ValidationMode = ValidationMode.STRICT


class ApplyChangesCommand(Command):
    action: Literal["apply_rule_changes"]
    changes: List[RuleChange]
    apply_immediately: bool = False
    mode: ValidationMode = ValidationMode.STRICT


# Bodies of the dedicated batch endpoints (no action tag)

class ValidateRulesRequest(CamelModel):
    rules: List[Dict[str, Any]]
    mode: ValidationMode = ValidationMode.STRICT


class ApplyChangesRequest(CamelModel):
    changes: List[RuleChange]
    apply_immediately: bool = False
    mode: ValidationMode = ValidationMode.STRICT


TrafficCommand = Annotated[
    Union[
        GetOptionsCommand,
        CreateRuleCommand,
        UpdateRuleCommand,
        DeleteRuleCommand,
        ListRulesCommand,
        TrafficFlowCommand,
        TestRuleCommand,
        StatisticsCommand,
        ValidateRulesCommand,
        ApplyChangesCommand,
    ],
    Field(discriminator="action"),
]

_command_adapter = TypeAdapter(TrafficCommand)


def describe_errors(errors: List[Dict[str, Any]]) -> str:
    """One-line summary of the first pydantic error."""
    if not errors:
        return "Invalid request"
    first = errors[0]
    location = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
    message = first.get("msg", "Invalid request")
    return f"{location}: {message}" if location else message


def parse_command(body: Any):
    """
    Parse a dispatch request body.

    Raises:
        UnknownActionError: `action` is not a known action name
        InvalidCommandError: missing action or malformed params
    """
    if not isinstance(body, dict):
        raise InvalidCommandError("Request body must be a JSON object")
    try:
        return _command_adapter.validate_python(body)
    except ValidationError as e:
        kinds = {err.get("type") for err in e.errors()}
        if "union_tag_invalid" in kinds:
            raise UnknownActionError(f"Invalid action: {body.get('action')}")
        if "union_tag_not_found" in kinds:
            raise InvalidCommandError("Missing action")
        raise InvalidCommandError(describe_errors(e.errors()))
