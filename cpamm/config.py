"""Pool configuration."""

from dataclasses import dataclass

from cpamm.constants import (
    BONDING_CURVE_TOTAL_SUPPLY,
    CREATOR_SHARE_PERCENT,
    FEE_ACCOUNT,
    FEE_DENOMINATOR,
    FEE_NUMERATOR,
    LAUNCH_FEE,
)
from cpamm.errors import InvalidAmount, InvalidFee
from cpamm.safe_int import U64_MAX


@dataclass(frozen=True)
class PoolConfig:
    """Configuration for one pool, fixed at initialization.

    The fee is explicit configuration carried into every swap; there is no
    global fee state.

    Attributes:
        fee_numerator: Swap fee numerator (default: 3)
        fee_denominator: Swap fee denominator (default: 1000)
        has_shares: True for a standard pool that issues liquidity shares,
            False for a bonding-curve pool (initialize and swap only).
        total_supply: Bonding-curve only. Token supply issued on initialize.
        creator_share_percent: Bonding-curve only. Percentage of total_supply
            issued to the creator; the remainder seeds the quote reserve.
        launch_fee: Bonding-curve only. Base units the creator pays to
            fee_account on initialize (0 disables it).
        fee_account: Ledger account receiving the launch fee.

    Raises:
        InvalidFee: If the fee is not a proper fraction
        InvalidAmount: If the supply parameters are out of range
    """

    fee_numerator: int = FEE_NUMERATOR
    fee_denominator: int = FEE_DENOMINATOR
    has_shares: bool = True

    total_supply: int = BONDING_CURVE_TOTAL_SUPPLY
    creator_share_percent: int = CREATOR_SHARE_PERCENT
    launch_fee: int = 0
    fee_account: str = FEE_ACCOUNT

    def __post_init__(self) -> None:
        if self.fee_denominator <= 0 or self.fee_denominator > U64_MAX:
            raise InvalidFee(f"Fee denominator out of range: {self.fee_denominator}")
        if not 0 <= self.fee_numerator < self.fee_denominator:
            raise InvalidFee(
                f"Fee must be in [0, 1): {self.fee_numerator}/{self.fee_denominator}"
            )
        if not 0 < self.total_supply <= U64_MAX:
            raise InvalidAmount(f"Total supply out of range: {self.total_supply}")
        # The pool must keep a nonzero quote reserve
        if not 0 <= self.creator_share_percent < 100:
            raise InvalidAmount(
                f"Creator share must be in [0, 100): {self.creator_share_percent}"
            )
        if not 0 <= self.launch_fee <= U64_MAX:
            raise InvalidAmount(f"Launch fee out of range: {self.launch_fee}")


# Default configuration instances
STANDARD_POOL_CONFIG = PoolConfig()
BONDING_CURVE_CONFIG = PoolConfig(has_shares=False, launch_fee=LAUNCH_FEE)
