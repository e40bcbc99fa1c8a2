"""
Service Wiring

One TrafficRuleService per process. PostgreSQL when DATABASE_URL is set,
otherwise the in-memory store with demo reference data (dev mode).
"""

import logging
from typing import Optional

from netrules.events.publisher import build_publisher
from netrules.rules.demo import demo_reference_sets
from netrules.rules.memory_store import MemoryRuleStore
from netrules.rules.service import TrafficRuleService
from netrules.rules.store import PostgresRuleStore, RuleStore
from netrules.shared import config

logger = logging.getLogger(__name__)

_service: Optional[TrafficRuleService] = None


def build_store() -> RuleStore:
    if config.DATABASE_URL:
        return PostgresRuleStore(config.DATABASE_URL)
    logger.warning("DATABASE_URL not set - using in-memory rule store (dev mode)")
    return MemoryRuleStore(reference_sets=demo_reference_sets())


def get_service() -> TrafficRuleService:
    """FastAPI dependency returning the process-wide service."""
    global _service
    if _service is None:
        _service = TrafficRuleService(build_store(), publisher=build_publisher())
    return _service
