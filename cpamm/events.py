"""Structured records emitted after every committed pool operation.

The record is handed to an injected sink for external indexing; the wire
format is up to the sink (``model_dump`` / ``model_dump_json``).
"""

from collections.abc import Callable
from enum import Enum

import structlog
from pydantic import BaseModel, Field

from cpamm.models import Reserves

logger = structlog.get_logger()


class EventKind(str, Enum):
    """The kind of committed operation."""

    POOL_INITIALIZED = "pool_initialized"
    SUPPLY_DISTRIBUTED = "supply_distributed"
    LIQUIDITY_ADDED = "liquidity_added"
    LIQUIDITY_REMOVED = "liquidity_removed"
    SWAP_EXECUTED = "swap_executed"


class PoolEvent(BaseModel):
    """Pool identity, operation kind, amounts and resulting reserves."""

    pool: str
    kind: EventKind
    caller: str
    amounts: dict[str, int | str] = Field(default_factory=dict)
    reserves: Reserves
    share_supply: int = 0


EventSink = Callable[[PoolEvent], None]


class EventLog:
    """Sink that keeps every event in order."""

    def __init__(self) -> None:
        self.events: list[PoolEvent] = []

    def __call__(self, event: PoolEvent) -> None:
        self.events.append(event)

    def of_kind(self, kind: EventKind) -> list[PoolEvent]:
        return [e for e in self.events if e.kind is kind]


def log_event(event: PoolEvent) -> None:
    """Default sink: log the record."""
    logger.info(
        event.kind.value,
        pool=event.pool,
        caller=event.caller,
        base_reserve=event.reserves.base,
        quote_reserve=event.reserves.quote,
        share_supply=event.share_supply,
        **event.amounts,
    )
