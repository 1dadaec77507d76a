"""Pool registry: one controller per quote asset.

Every controller in a registry shares the same ledger, store, authorizer
and event sink. Pools never interact; the registry only looks them up.
"""

from __future__ import annotations

import threading

import structlog

from cpamm.config import STANDARD_POOL_CONFIG, PoolConfig
from cpamm.constants import BASE_ASSET
from cpamm.controller import PoolController
from cpamm.errors import AlreadyInitialized, InvalidAsset, PoolNotFound
from cpamm.events import EventSink, log_event
from cpamm.ledger import Authorizer, InMemoryLedger, Ledger, SelfCustodyAuthorizer
from cpamm.store import InMemoryPoolStore, PoolStore

logger = structlog.get_logger()


class PoolRegistry:
    """Registry of pools keyed by quote asset identifier."""

    def __init__(
        self,
        ledger: Ledger | None = None,
        store: PoolStore | None = None,
        authorizer: Authorizer | None = None,
        event_sink: EventSink = log_event,
        base_asset: str = BASE_ASSET,
    ) -> None:
        self.ledger: Ledger = ledger if ledger is not None else InMemoryLedger()
        self.store: PoolStore = store if store is not None else InMemoryPoolStore()
        self.authorizer: Authorizer = authorizer if authorizer is not None else SelfCustodyAuthorizer()
        self.event_sink = event_sink
        self.base_asset = base_asset
        self._controllers: dict[str, PoolController] = {}
        self._lock = threading.Lock()

    def open_pool(self, quote_asset: str, config: PoolConfig = STANDARD_POOL_CONFIG) -> PoolController:
        """Register a controller for ``quote_asset`` ready to be initialized.

        An existing controller whose pool never got initialized is replaced,
        so a failed initialize can be retried with a different config. The
        check runs under the pool's store lock, so an initialize already in
        flight finishes first and the replacement is then refused.

        Raises:
            InvalidAsset: If ``quote_asset`` is the base asset
            AlreadyInitialized: If the store holds an active pool for it
        """
        if quote_asset == self.base_asset:
            raise InvalidAsset(f"Quote asset cannot be the base asset {self.base_asset}")

        with self._lock, self.store.locked(quote_asset):
            stored = self.store.load(quote_asset)
            if stored is not None and stored.initialized:
                raise AlreadyInitialized(f"Pool {quote_asset} already exists")

            controller = PoolController(
                quote_asset,
                config=config,
                ledger=self.ledger,
                authorizer=self.authorizer,
                store=self.store,
                event_sink=self.event_sink,
                base_asset=self.base_asset,
            )
            self._controllers[quote_asset] = controller

        logger.debug(
            "pool_opened",
            pool=quote_asset,
            has_shares=config.has_shares,
            fee=f"{config.fee_numerator}/{config.fee_denominator}",
        )
        return controller

    def get(self, quote_asset: str) -> PoolController:
        """Get the controller for ``quote_asset``.

        Raises:
            PoolNotFound: If no pool was opened for it
        """
        controller = self._controllers.get(quote_asset)
        if controller is None:
            raise PoolNotFound(f"No pool for {quote_asset}")
        return controller

    def __contains__(self, quote_asset: object) -> bool:
        return quote_asset in self._controllers

    def __len__(self) -> int:
        return len(self._controllers)

    @property
    def quote_assets(self) -> list[str]:
        return sorted(self._controllers)
