"""
Traffic Management API

FastAPI router exposing the rule engine.

Version: traffic_api_v1
"""

from .router import router
from .commands import parse_command, TrafficCommand
from .dispatch import dispatch, ACTION_HANDLERS
from .deps import get_service, build_store

__all__ = [
    "router",
    "parse_command",
    "TrafficCommand",
    "dispatch",
    "ACTION_HANDLERS",
    "get_service",
    "build_store",
]

__version__ = "traffic_api_v1"
