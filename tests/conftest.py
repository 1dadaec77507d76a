"""Pytest configuration and fixtures."""

import pytest

from cpamm.config import BONDING_CURVE_CONFIG
from cpamm.controller import PoolController
from cpamm.events import EventLog
from cpamm.ledger import InMemoryLedger
from tests.helpers import make_ledger, make_standard_pool


@pytest.fixture
def ledger() -> InMemoryLedger:
    """Ledger where alice and bob hold native and MEME funds."""
    return make_ledger()


@pytest.fixture
def events() -> EventLog:
    """Event sink that records every committed operation."""
    return EventLog()


@pytest.fixture
def pool(ledger: InMemoryLedger, events: EventLog) -> PoolController:
    """Standard pool seeded by alice with 1,000,000 base / 1,000,000,000 quote."""
    return make_standard_pool(ledger, event_sink=events)


@pytest.fixture
def bonding_pool(ledger: InMemoryLedger, events: EventLog) -> PoolController:
    """Uninitialized bonding-curve pool for a fresh token."""
    return PoolController(
        "LAUNCH",
        config=BONDING_CURVE_CONFIG,
        ledger=ledger,
        event_sink=events,
    )
