"""Tests for pool configuration and the pool record."""

from dataclasses import replace

import pytest

from cpamm.config import BONDING_CURVE_CONFIG, STANDARD_POOL_CONFIG, PoolConfig
from cpamm.constants import LAUNCH_FEE
from cpamm.errors import InvalidAmount, InvalidFee, InvariantViolation
from cpamm.safe_int import U64_MAX
from cpamm.state import Pool, SwapDirection


class TestPoolConfig:
    """Tests for PoolConfig validation."""

    def test_defaults(self):
        assert STANDARD_POOL_CONFIG.fee_numerator == 3
        assert STANDARD_POOL_CONFIG.fee_denominator == 1000
        assert STANDARD_POOL_CONFIG.has_shares

    def test_bonding_curve_defaults(self):
        assert not BONDING_CURVE_CONFIG.has_shares
        assert BONDING_CURVE_CONFIG.launch_fee == LAUNCH_FEE
        assert BONDING_CURVE_CONFIG.total_supply == 10**18
        assert BONDING_CURVE_CONFIG.creator_share_percent == 2

    def test_zero_fee_allowed(self):
        assert PoolConfig(fee_numerator=0).fee_numerator == 0

    @pytest.mark.parametrize(
        ("numerator", "denominator"),
        [(1000, 1000), (1001, 1000), (-1, 1000), (0, 0), (1, U64_MAX + 1)],
    )
    def test_invalid_fee(self, numerator, denominator):
        with pytest.raises(InvalidFee):
            PoolConfig(fee_numerator=numerator, fee_denominator=denominator)

    @pytest.mark.parametrize("percent", [-1, 100, 150])
    def test_invalid_creator_share(self, percent):
        with pytest.raises(InvalidAmount):
            PoolConfig(has_shares=False, creator_share_percent=percent)

    @pytest.mark.parametrize("supply", [0, U64_MAX + 1])
    def test_invalid_total_supply(self, supply):
        with pytest.raises(InvalidAmount):
            PoolConfig(has_shares=False, total_supply=supply)

    def test_invalid_launch_fee(self):
        with pytest.raises(InvalidAmount):
            PoolConfig(launch_fee=-1)

    def test_frozen(self):
        with pytest.raises(AttributeError):
            STANDARD_POOL_CONFIG.fee_numerator = 5  # type: ignore[misc]


class TestPool:
    """Tests for the pool record."""

    @pytest.fixture
    def active(self) -> Pool:
        return replace(
            Pool.empty("MEME", STANDARD_POOL_CONFIG),
            base_reserve=100,
            quote_reserve=400,
            share_supply=200,
            initialized=True,
        )

    def test_empty_carries_config(self):
        pool = Pool.empty("MEME", PoolConfig(fee_numerator=5, fee_denominator=10_000))
        assert pool.pool_id == "MEME"
        assert pool.fee_numerator == 5
        assert pool.fee_denominator == 10_000
        assert not pool.initialized
        pool.check_invariants()

    def test_get_reserves(self, active):
        assert active.get_reserves(SwapDirection.BASE_TO_QUOTE) == (100, 400)
        assert active.get_reserves(SwapDirection.QUOTE_TO_BASE) == (400, 100)

    def test_with_swap_reserves(self, active):
        updated = active.with_swap_reserves(SwapDirection.QUOTE_TO_BASE, 500, 81)
        assert updated.quote_reserve == 500
        assert updated.base_reserve == 81
        assert active.base_reserve == 100

    def test_product(self, active):
        assert active.product == 40_000

    def test_active_record_is_valid(self, active):
        active.check_invariants()

    def test_empty_reserve_violates(self, active):
        with pytest.raises(InvariantViolation):
            replace(active, base_reserve=0).check_invariants()

    def test_active_without_shares_violates(self, active):
        with pytest.raises(InvariantViolation):
            replace(active, share_supply=0).check_invariants()

    def test_shares_before_initialize_violate(self):
        pool = replace(Pool.empty("MEME", STANDARD_POOL_CONFIG), share_supply=1)
        with pytest.raises(InvariantViolation):
            pool.check_invariants()

    def test_bonding_curve_with_shares_violates(self):
        pool = replace(
            Pool.empty("MEME", BONDING_CURVE_CONFIG),
            base_reserve=1,
            quote_reserve=1,
            share_supply=1,
            initialized=True,
        )
        with pytest.raises(InvariantViolation):
            pool.check_invariants()

    def test_bonding_curve_active_without_shares_is_valid(self):
        pool = replace(
            Pool.empty("MEME", BONDING_CURVE_CONFIG),
            base_reserve=1,
            quote_reserve=1,
            initialized=True,
        )
        pool.check_invariants()
