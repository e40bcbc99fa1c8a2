"""
Shared fixtures for the traffic rule engine tests.
"""

import random
from typing import List

import pytest

from netrules.catalog.models import ReferenceRecord, ReferenceSets
from netrules.events.models import RuleEvent
from netrules.events.publisher import EventPublisher
from netrules.events.sinks import EventSink
from netrules.rules.memory_store import MemoryRuleStore
from netrules.rules.models import TrafficRule
from netrules.rules.service import TrafficRuleService


class RecordingSink(EventSink):
    name = "recording"

    def __init__(self):
        self.events: List[RuleEvent] = []

    def deliver(self, event: RuleEvent) -> None:
        self.events.append(event)


@pytest.fixture
def reference_sets() -> ReferenceSets:
    """Two of each kind plus one inactive user group."""
    return ReferenceSets(
        user_groups=[
            ReferenceRecord(id="g1", name="Staff", sort_value=2, colorCode="#3b82f6"),
            ReferenceRecord(id="g2", name="Guests", sort_value=1),
            ReferenceRecord(id="g-old", name="Contractors", sort_value=0, is_active=False),
        ],
        traffic_types=[
            ReferenceRecord(id="t1", name="Video", sort_value=8, category="streaming"),
            ReferenceRecord(id="t2", name="VoIP", sort_value=10, category="realtime"),
        ],
        network_paths=[
            ReferenceRecord(id="p1", name="Fiber", sort_value=0.99),
            ReferenceRecord(id="p2", name="LTE", sort_value=0.9),
        ],
        tunnels=[
            ReferenceRecord(id="tn1", name="Frankfurt", sort_value=18),
            ReferenceRecord(id="tn2", name="New York"),
        ],
    )


@pytest.fixture
def make_rule():
    """Factory for persisted-looking rules."""
    def _make(rule_id: str, name: str, **fields) -> TrafficRule:
        return TrafficRule(id=rule_id, name=name, **fields)
    return _make


@pytest.fixture
def recording_sink() -> RecordingSink:
    return RecordingSink()


@pytest.fixture
def store(reference_sets) -> MemoryRuleStore:
    return MemoryRuleStore(reference_sets=reference_sets)


@pytest.fixture
def service(store, recording_sink) -> TrafficRuleService:
    return TrafficRuleService(
        store,
        publisher=EventPublisher([recording_sink]),
        rng=random.Random(42),
    )
