"""
Action Dispatch

Maps each command action name to the service call that handles it and shapes
the `data` payload of the response.
"""

from typing import Any, Callable, Dict, Optional

from fastapi import BackgroundTasks

from netrules.rules.service import TrafficRuleService

from . import commands as c

Handler = Callable[[TrafficRuleService, Any, Optional[BackgroundTasks]], Any]


def _get_options(service, command: c.GetOptionsCommand, background_tasks):
    return service.get_dynamic_options().to_api()


def _create_rule(service, command: c.CreateRuleCommand, background_tasks):
    rule = service.create_rule(command.rule_fields(), command.mode, background_tasks)
    return {"rule": rule.to_api()}


def _update_rule(service, command: c.UpdateRuleCommand, background_tasks):
    rule = service.update_rule(command.rule_id, command.rule_fields(), command.mode, background_tasks)
    return {"rule": rule.to_api()}


def _delete_rule(service, command: c.DeleteRuleCommand, background_tasks):
    rule_id = service.delete_rule(command.rule_id, background_tasks)
    return {"success": True, "ruleId": rule_id}


def _list_rules(service, command: c.ListRulesCommand, background_tasks):
    rules = service.list_rules(command.user_group_id, command.traffic_type_id)
    return {"rules": [rule.to_api() for rule in rules]}


def _traffic_flow(service, command: c.TrafficFlowCommand, background_tasks):
    return service.get_traffic_flow(command.user_group_id, command.traffic_type_id).to_api()


def _test_rule(service, command: c.TestRuleCommand, background_tasks):
    return service.test_rule(command.rule_id, command.test_packets).to_api()


def _statistics(service, command: c.StatisticsCommand, background_tasks):
    return {"statistics": service.get_statistics(command.time_range).to_api()}


def _validate_rules(service, command: c.ValidateRulesCommand, background_tasks):
    return service.validate_changes(command.rules, command.mode, background_tasks).to_api()


def _apply_changes(service, command: c.ApplyChangesCommand, background_tasks):
    result = service.apply_changes(
        command.changes,
        apply_immediately=command.apply_immediately,
        mode=command.mode,
        background_tasks=background_tasks,
    )
    return result.to_api()


ACTION_HANDLERS: Dict[str, Handler] = {
    "get_dynamic_options": _get_options,
    "get_dropdown_options": _get_options,
    "create_rule": _create_rule,
    "create_traffic_rule": _create_rule,
    "update_rule": _update_rule,
    "update_traffic_rule": _update_rule,
    "delete_rule": _delete_rule,
    "get_all_rules": _list_rules,
    "get_traffic_flow": _traffic_flow,
    "test_rule": _test_rule,
    "test_traffic_rule": _test_rule,
    "simulate_traffic_routing": _test_rule,
    "get_rule_statistics": _statistics,
    "get_statistics": _statistics,
    "validate_rules": _validate_rules,
    "apply_rule_changes": _apply_changes,
}


def dispatch(
    service: TrafficRuleService,
    command: Any,
    background_tasks: Optional[BackgroundTasks] = None,
) -> Any:
    """Run a parsed command and return the response `data` payload."""
    handler = ACTION_HANDLERS[command.action]
    return handler(service, command, background_tasks)
