"""Pydantic models for pool snapshots, operation receipts and API requests."""

from typing import Annotated, Any

from pydantic import BaseModel, BeforeValidator, Field

from cpamm.safe_int import U64_MAX
from cpamm.state import Pool, SwapDirection


def validate_u64(value: Any) -> int:
    """Validate that a value is a u64, given as int or decimal string.

    Raises:
        ValueError: If value is not a non-negative integer within u64 range
    """
    if isinstance(value, bool):
        raise ValueError("U64 must be an integer, got bool")
    if isinstance(value, str):
        try:
            value = int(value)
        except ValueError as err:
            raise ValueError(f"U64 must be a decimal integer string: '{value}'") from err
    if not isinstance(value, int):
        raise ValueError(f"U64 must be string or int, got {type(value).__name__}")
    if value < 0:
        raise ValueError(f"U64 cannot be negative: {value}")
    if value > U64_MAX:
        raise ValueError(f"U64 overflow: {value} > 2^64-1")
    return value


# 64-bit unsigned amount, accepted as int or decimal string
U64 = Annotated[
    int,
    BeforeValidator(validate_u64),
    Field(description="64-bit unsigned integer amount"),
]


class Reserves(BaseModel):
    """Pool reserves after an operation."""

    base: U64
    quote: U64


class PoolSnapshot(BaseModel):
    """Read-only view of a pool record."""

    quote_asset: str
    base_reserve: U64
    quote_reserve: U64
    share_supply: U64
    fee_numerator: U64
    fee_denominator: U64
    has_shares: bool
    initialized: bool

    @classmethod
    def from_pool(cls, pool: Pool) -> "PoolSnapshot":
        return cls(
            quote_asset=pool.quote_asset,
            base_reserve=pool.base_reserve,
            quote_reserve=pool.quote_reserve,
            share_supply=pool.share_supply,
            fee_numerator=pool.fee_numerator,
            fee_denominator=pool.fee_denominator,
            has_shares=pool.has_shares,
            initialized=pool.initialized,
        )


class SwapReceipt(BaseModel):
    """Outcome of a committed swap."""

    direction: SwapDirection
    amount_in: U64
    fee_amount: U64
    amount_out: U64
    reserves: Reserves


class DepositReceipt(BaseModel):
    """Outcome of a committed liquidity contribution."""

    base_in: U64
    quote_in: U64
    shares_minted: U64
    reserves: Reserves
    share_supply: U64


class WithdrawalReceipt(BaseModel):
    """Outcome of a committed liquidity redemption."""

    shares_burned: U64
    base_out: U64
    quote_out: U64
    reserves: Reserves
    share_supply: U64


# --- API request bodies ---


class InitializeRequest(BaseModel):
    """Create and seed a pool.

    ``seed_quote`` is required for standard pools and ignored for
    bonding-curve pools, whose quote reserve comes from the launch supply.
    """

    caller: str
    seed_base: U64
    seed_quote: U64 | None = None
    bonding_curve: bool = False


class SwapRequest(BaseModel):
    caller: str
    amount_in: U64
    direction: SwapDirection
    min_amount_out: U64 = 0


class AddLiquidityRequest(BaseModel):
    caller: str
    base_in: U64
    max_quote_in: U64
    min_shares_out: U64 = 0


class RemoveLiquidityRequest(BaseModel):
    caller: str
    shares_in: U64
    min_base_out: U64 = 0
    min_quote_out: U64 = 0


class QuoteResponse(BaseModel):
    direction: SwapDirection
    amount_in: U64
    amount_out: U64


class ErrorResponse(BaseModel):
    error: str
    detail: str


class CreditRequest(BaseModel):
    asset: str
    amount: U64


class AccountBalance(BaseModel):
    account: str
    asset: str
    balance: int
