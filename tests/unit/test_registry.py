"""Tests for PoolRegistry."""

import threading

import pytest

from cpamm.config import BONDING_CURVE_CONFIG, STANDARD_POOL_CONFIG, PoolConfig
from cpamm.constants import BASE_ASSET
from cpamm.errors import (
    AlreadyInitialized,
    InvalidAmount,
    InvalidAsset,
    LiquidityNotSupported,
    PoolNotFound,
)
from cpamm.events import EventLog
from cpamm.registry import PoolRegistry
from cpamm.state import SwapDirection
from tests.helpers import ALICE, BOB, OTHER_TOKEN, SEED_BASE, SEED_QUOTE, TOKEN, make_ledger


@pytest.fixture
def registry(ledger) -> PoolRegistry:
    return PoolRegistry(ledger=ledger, event_sink=EventLog())


class TestOpenPool:
    """Tests for registering pools."""

    def test_open_and_get(self, registry):
        controller = registry.open_pool(TOKEN)
        assert registry.get(TOKEN) is controller
        assert TOKEN in registry
        assert len(registry) == 1

    def test_controllers_share_collaborators(self, registry):
        controller = registry.open_pool(TOKEN, BONDING_CURVE_CONFIG)
        assert controller.ledger is registry.ledger
        assert controller.store is registry.store
        assert controller.authorizer is registry.authorizer
        assert controller.config is BONDING_CURVE_CONFIG

    def test_default_config(self, registry):
        assert registry.open_pool(TOKEN).config is STANDARD_POOL_CONFIG

    def test_base_asset_rejected(self, registry):
        with pytest.raises(InvalidAsset):
            registry.open_pool(BASE_ASSET)
        assert BASE_ASSET not in registry

    def test_reopen_active_pool_raises(self, registry):
        registry.open_pool(TOKEN).initialize(ALICE, SEED_BASE, SEED_QUOTE)
        with pytest.raises(AlreadyInitialized):
            registry.open_pool(TOKEN, PoolConfig(fee_numerator=1))

    def test_reopen_uninitialized_pool_replaces(self, registry):
        """A failed initialize can be retried with a different config."""
        first = registry.open_pool(TOKEN)
        with pytest.raises(InvalidAmount):
            first.initialize(ALICE, SEED_BASE)

        second = registry.open_pool(TOKEN, PoolConfig(fee_numerator=1))
        second.initialize(ALICE, SEED_BASE, SEED_QUOTE)
        assert registry.get(TOKEN) is second
        assert registry.get(TOKEN).snapshot().fee_numerator == 1

    def test_replaced_controller_follows_stored_variant(self, registry):
        """A launch through a stale controller decides the pool variant."""
        launcher = registry.open_pool(TOKEN, BONDING_CURVE_CONFIG)
        registry.open_pool(TOKEN, STANDARD_POOL_CONFIG)
        launcher.initialize(ALICE, 1_000_000)

        current = registry.get(TOKEN)
        with pytest.raises(LiquidityNotSupported):
            current.add_liquidity(BOB, 1000, 10**18)
        with pytest.raises(LiquidityNotSupported):
            current.remove_liquidity(ALICE, 1)
        with pytest.raises(AlreadyInitialized):
            current.initialize(BOB, SEED_BASE, SEED_QUOTE)
        assert not current.snapshot().has_shares

    def test_reopen_after_stale_launch_raises(self, registry):
        launcher = registry.open_pool(TOKEN, BONDING_CURVE_CONFIG)
        registry.open_pool(TOKEN)
        launcher.initialize(ALICE, 1_000_000)

        with pytest.raises(AlreadyInitialized):
            registry.open_pool(TOKEN)

    def test_reopen_waits_for_initialize_in_flight(self, registry):
        """Opening blocks on the pool lock held by a running initialize."""
        launcher = registry.open_pool(TOKEN, BONDING_CURVE_CONFIG)
        outcome = []

        def reopen() -> None:
            try:
                registry.open_pool(TOKEN)
            except AlreadyInitialized:
                outcome.append("refused")

        with registry.store.locked(TOKEN):
            thread = threading.Thread(target=reopen)
            thread.start()
            launcher.initialize(ALICE, 1_000_000)
        thread.join()

        assert outcome == ["refused"]
        assert registry.get(TOKEN) is launcher


class TestLookup:
    """Tests for looking pools up."""

    def test_missing_pool_raises(self, registry):
        with pytest.raises(PoolNotFound):
            registry.get(TOKEN)
        assert TOKEN not in registry

    def test_quote_assets_sorted(self, registry):
        registry.open_pool(TOKEN)
        registry.open_pool(OTHER_TOKEN)
        assert registry.quote_assets == sorted([TOKEN, OTHER_TOKEN])

    def test_pools_are_independent(self):
        registry = PoolRegistry(ledger=make_ledger(quote_assets=(TOKEN, OTHER_TOKEN)))
        registry.open_pool(TOKEN).initialize(ALICE, SEED_BASE, SEED_QUOTE)
        registry.open_pool(OTHER_TOKEN).initialize(ALICE, 4_000, 4_000)

        registry.get(TOKEN).swap(BOB, 1000, SwapDirection.BASE_TO_QUOTE)

        other = registry.get(OTHER_TOKEN).snapshot()
        assert other.base_reserve == 4_000
        assert other.quote_reserve == 4_000
