"""
Traffic Management Endpoints

- POST /api/v1/traffic/rules     action-dispatch endpoint ({action, ...params})
- POST /api/v1/traffic/options   dynamic options
- POST /api/v1/traffic/validate  batch validation ({rules, mode})
- POST /api/v1/traffic/apply     batch apply ({changes, applyImmediately})
- GET  /api/v1/traffic/health    module and store status

Success bodies are {"data": ...}. Failures are raised as TrafficRuleError and
rendered as {"error": {"code", "message"}} by the app's exception handlers.

Version: traffic_api_v1
"""

import logging
from datetime import datetime, timezone
from typing import Any, Callable, Dict

from fastapi import APIRouter, BackgroundTasks, Body, Depends

from netrules.rules.store import PostgresRuleStore
from netrules.rules.service import TrafficRuleService
from netrules.shared.config import API_VERSION
from netrules.shared.errors import TrafficRuleError

from .commands import ApplyChangesRequest, ValidateRulesRequest, parse_command
from .deps import get_service
from .dispatch import dispatch

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/api/v1/traffic",
    tags=["traffic"],
)


def _run(operation: Callable[[], Any]) -> Dict[str, Any]:
    """Wrap a result in the data envelope; unexpected failures become TrafficRuleError."""
    try:
        return {"data": operation()}
    except TrafficRuleError:
        raise
    except Exception as e:
        logger.exception(f"Traffic management error: {e}")
        raise TrafficRuleError(str(e) or type(e).__name__)


@router.post("/rules")
def dispatch_action(
    background_tasks: BackgroundTasks,
    body: Any = Body(...),
    service: TrafficRuleService = Depends(get_service),
):
    """Action-dispatch endpoint for every rule operation."""
    command = parse_command(body)
    logger.debug(f"Dispatching traffic action {command.action}")
    return _run(lambda: dispatch(service, command, background_tasks))


@router.post("/options")
def dynamic_options(service: TrafficRuleService = Depends(get_service)):
    """Active reference records for rule construction, each set in domain order."""
    return _run(lambda: service.get_dynamic_options().to_api())


@router.post("/validate")
def validate_rules(
    request: ValidateRulesRequest,
    background_tasks: BackgroundTasks,
    service: TrafficRuleService = Depends(get_service),
):
    """
    Validate candidate rules against the current rule set.

    Always returns the itemized result; invalid rules are data, not errors.
    """
    return _run(lambda: service.validate_changes(
        request.rules, request.mode, background_tasks
    ).to_api())


@router.post("/apply")
def apply_changes(
    request: ApplyChangesRequest,
    background_tasks: BackgroundTasks,
    service: TrafficRuleService = Depends(get_service),
):
    """Apply a change set entry by entry (partial success)."""
    return _run(lambda: service.apply_changes(
        request.changes,
        apply_immediately=request.apply_immediately,
        mode=request.mode,
        background_tasks=background_tasks,
    ).to_api())


@router.get("/health")
def traffic_health(service: TrafficRuleService = Depends(get_service)):
    """Health check for the traffic rule module."""
    return {
        "status": "ok",
        "module": "traffic_rules",
        "version": API_VERSION,
        "store": "postgres" if isinstance(service.store, PostgresRuleStore) else "memory",
        "store_healthy": service.store.healthy(),
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }
