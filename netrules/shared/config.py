"""
Traffic Rule Engine Configuration

All settings come from environment variables and are read once at import.
"""

import os
from typing import List, Optional


def _env_bool(name: str, default: str = "true") -> bool:
    return os.getenv(name, default).lower() == "true"


def _env_list(name: str, default: str) -> List[str]:
    raw = os.getenv(name, default)
    return [item.strip() for item in raw.split(",") if item.strip()]


def _env_int(name: str) -> Optional[int]:
    raw = os.getenv(name)
    if raw is None or raw == "":
        return None
    return int(raw)


DATABASE_URL = os.getenv("DATABASE_URL")

# Fixed link capacity used only for the utilization ratio in statistics
LINK_CAPACITY_MBPS = float(os.getenv("LINK_CAPACITY_MBPS", "1000"))

AUDIT_ENABLED = _env_bool("AUDIT_ENABLED")
NOTIFICATIONS_ENABLED = _env_bool("NOTIFICATIONS_ENABLED")
NOTIFICATION_WEBHOOK_URL = os.getenv("NOTIFICATION_WEBHOOK_URL", "")
NOTIFICATION_TIMEOUT_SECONDS = float(os.getenv("NOTIFICATION_TIMEOUT_SECONDS", "5"))

CORS_ALLOW_ORIGINS = _env_list("CORS_ALLOW_ORIGINS", "*")

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

SIMULATION_SEED = _env_int("SIMULATION_SEED")

API_VERSION = "1.4.0"
