"""Persistent pool record and swap direction."""

from __future__ import annotations

from dataclasses import dataclass, replace
from enum import Enum

from cpamm.config import PoolConfig
from cpamm.errors import InvariantViolation


class SwapDirection(str, Enum):
    """Which asset is paid into the pool."""

    BASE_TO_QUOTE = "base_to_quote"
    QUOTE_TO_BASE = "quote_to_base"


@dataclass(frozen=True)
class Pool:
    """The record for one base/quote pair, keyed by the quote asset.

    Instances are immutable: the controller commits an operation by storing
    a new record built with ``dataclasses.replace``.
    """

    quote_asset: str
    fee_numerator: int
    fee_denominator: int
    has_shares: bool = True
    base_reserve: int = 0
    quote_reserve: int = 0
    share_supply: int = 0
    initialized: bool = False

    @classmethod
    def empty(cls, quote_asset: str, config: PoolConfig) -> Pool:
        """Create an uninitialized record carrying the configured fee and variant."""
        return cls(
            quote_asset=quote_asset,
            fee_numerator=config.fee_numerator,
            fee_denominator=config.fee_denominator,
            has_shares=config.has_shares,
        )

    @property
    def pool_id(self) -> str:
        return self.quote_asset

    @property
    def product(self) -> int:
        """Constant-product value k = base_reserve * quote_reserve."""
        return self.base_reserve * self.quote_reserve

    def get_reserves(self, direction: SwapDirection) -> tuple[int, int]:
        """Get reserves ordered as (reserve_in, reserve_out)."""
        if direction is SwapDirection.BASE_TO_QUOTE:
            return self.base_reserve, self.quote_reserve
        return self.quote_reserve, self.base_reserve

    def with_swap_reserves(
        self, direction: SwapDirection, reserve_in: int, reserve_out: int
    ) -> Pool:
        """Build the record that results from a swap in ``direction``."""
        if direction is SwapDirection.BASE_TO_QUOTE:
            return replace(self, base_reserve=reserve_in, quote_reserve=reserve_out)
        return replace(self, base_reserve=reserve_out, quote_reserve=reserve_in)

    def check_invariants(self) -> None:
        """Validate the solvency invariants of this record.

        Raises:
            InvariantViolation: If a reserve is empty while initialized, or the
                share supply disagrees with the initialization flag
        """
        if self.initialized and (self.base_reserve <= 0 or self.quote_reserve <= 0):
            raise InvariantViolation(
                f"Pool {self.pool_id} reserves must stay positive: "
                f"base={self.base_reserve} quote={self.quote_reserve}"
            )
        if self.has_shares and (self.share_supply == 0) == self.initialized:
            raise InvariantViolation(
                f"Pool {self.pool_id} share supply {self.share_supply} "
                f"inconsistent with initialized={self.initialized}"
            )
        if not self.has_shares and self.share_supply != 0:
            raise InvariantViolation(f"Bonding-curve pool {self.pool_id} has shares")
