"""Constant-product pool math.

The engine is pure: it reads the values it is given and returns computed
amounts. It never touches the ledger or the pool store.

Swap formula (fee taken from the input before pricing):
    fee = floor(amount_in * fee_num / fee_den)
    amount_out = floor((amount_in - fee) * reserve_out / (reserve_in + amount_in - fee))

Every division floors, so rounding always favours the pool.
"""

from __future__ import annotations

from dataclasses import dataclass

from cpamm.errors import InsufficientLiquidity, InvalidAmount, NotInitialized, SlippageExceeded
from cpamm.safe_int import S, checked_add, checked_sub, isqrt_floor, mul_div_floor


@dataclass(frozen=True)
class SwapQuote:
    """Result of pricing a swap."""

    amount_in: int
    fee_amount: int
    amount_in_after_fee: int
    amount_out: int


@dataclass(frozen=True)
class Deposit:
    """Amounts for a proportional liquidity contribution."""

    base_in: int
    quote_in: int
    shares_minted: int


@dataclass(frozen=True)
class Withdrawal:
    """Amounts for a proportional liquidity redemption."""

    shares_burned: int
    base_out: int
    quote_out: int


@dataclass(frozen=True)
class SupplySplit:
    """Bonding-curve launch: where a freshly issued supply goes."""

    creator_amount: int
    pool_amount: int


class ConstantProductEngine:
    """Constant-product AMM math with an input-side fee."""

    def quote_swap(
        self,
        amount_in: int,
        reserve_in: int,
        reserve_out: int,
        fee_numerator: int,
        fee_denominator: int,
        min_amount_out: int = 0,
    ) -> SwapQuote:
        """Price an exact-input swap.

        The fee stays in the input-side reserve: the caller commits the full
        ``amount_in`` to reserve_in and removes ``amount_out`` from reserve_out.

        Args:
            amount_in: Input amount including the fee
            reserve_in: Reserve of the input asset
            reserve_out: Reserve of the output asset
            fee_numerator: Fee numerator
            fee_denominator: Fee denominator
            min_amount_out: Caller's slippage bound

        Returns:
            SwapQuote with fee and output amounts

        Raises:
            InvalidAmount: If amount_in is zero
            SlippageExceeded: If the output is below min_amount_out
            InsufficientLiquidity: If the output would take the whole reserve
            ArithmeticOverflow: If an intermediate value is out of range
        """
        if amount_in <= 0:
            raise InvalidAmount(f"Swap input must be positive: {amount_in}")

        fee_amount = mul_div_floor(amount_in, fee_numerator, fee_denominator)
        amount_in_after_fee = checked_sub(amount_in, fee_amount)
        amount_out = mul_div_floor(
            amount_in_after_fee,
            reserve_out,
            checked_add(reserve_in, amount_in_after_fee),
        )

        if amount_out < min_amount_out:
            raise SlippageExceeded(f"Swap output {amount_out} below minimum {min_amount_out}")
        if amount_out >= reserve_out:
            raise InsufficientLiquidity(
                f"Swap output {amount_out} would drain reserve {reserve_out}"
            )

        return SwapQuote(
            amount_in=amount_in,
            fee_amount=fee_amount,
            amount_in_after_fee=amount_in_after_fee,
            amount_out=amount_out,
        )

    def initial_shares(self, seed_base: int, seed_quote: int) -> int:
        """Shares minted on initialize: floor(sqrt(seed_base * seed_quote)).

        Computed with an exact integer square root.
        """
        if seed_base <= 0 or seed_quote <= 0:
            raise InvalidAmount(f"Seed amounts must be positive: {seed_base}, {seed_quote}")
        product = (S(S(seed_base).to_u64()) * S(seed_quote).to_u64()).to_u128()
        return S(isqrt_floor(product)).to_u64()

    def compute_deposit(
        self,
        base_in: int,
        max_quote_in: int,
        min_shares_out: int,
        base_reserve: int,
        quote_reserve: int,
        share_supply: int,
    ) -> Deposit:
        """Compute a proportional contribution and the shares it earns.

        The quote side is derived from base_in at the current ratio. Shares
        are computed from both sides and the smaller value is minted, so a
        rounded contribution never dilutes existing holders.

        Raises:
            InvalidAmount: If base_in is zero
            NotInitialized: If the pool holds no reserves
            SlippageExceeded: If quote_in exceeds max_quote_in or the minted
                shares are below min_shares_out
        """
        if base_in <= 0:
            raise InvalidAmount(f"Deposit must be positive: {base_in}")
        if base_reserve == 0 or quote_reserve == 0 or share_supply == 0:
            raise NotInitialized("Pool has no reserves")

        quote_in = mul_div_floor(base_in, quote_reserve, base_reserve)
        if quote_in > max_quote_in:
            raise SlippageExceeded(f"Required quote {quote_in} exceeds maximum {max_quote_in}")

        shares_from_base = mul_div_floor(base_in, share_supply, base_reserve)
        shares_from_quote = mul_div_floor(quote_in, share_supply, quote_reserve)
        minted = min(shares_from_base, shares_from_quote)
        if minted < min_shares_out:
            raise SlippageExceeded(f"Minted shares {minted} below minimum {min_shares_out}")

        return Deposit(base_in=base_in, quote_in=quote_in, shares_minted=minted)

    def compute_withdrawal(
        self,
        shares_in: int,
        min_base_out: int,
        min_quote_out: int,
        base_reserve: int,
        quote_reserve: int,
        share_supply: int,
    ) -> Withdrawal:
        """Compute the reserves released by burning ``shares_in``.

        Floor rounding returns at most the proportional claim; the dust stays
        with the remaining holders.

        Raises:
            InvalidAmount: If shares_in is zero
            NotInitialized: If the pool has no share supply
            SlippageExceeded: If either output is below its minimum
            InsufficientLiquidity: If the withdrawal would empty a reserve
        """
        if shares_in <= 0:
            raise InvalidAmount(f"Shares to burn must be positive: {shares_in}")
        if share_supply == 0:
            raise NotInitialized("Pool has no share supply")

        base_out = mul_div_floor(shares_in, base_reserve, share_supply)
        quote_out = mul_div_floor(shares_in, quote_reserve, share_supply)

        if base_out < min_base_out:
            raise SlippageExceeded(f"Base output {base_out} below minimum {min_base_out}")
        if quote_out < min_quote_out:
            raise SlippageExceeded(f"Quote output {quote_out} below minimum {min_quote_out}")
        if base_out >= base_reserve or quote_out >= quote_reserve:
            raise InsufficientLiquidity(
                f"Burning {shares_in} of {share_supply} shares would empty the pool"
            )

        return Withdrawal(shares_burned=shares_in, base_out=base_out, quote_out=quote_out)

    def split_supply(self, total_supply: int, creator_share_percent: int) -> SupplySplit:
        """Split a launch supply between the creator and the pool reserve."""
        creator_amount = mul_div_floor(total_supply, creator_share_percent, 100)
        pool_amount = checked_sub(total_supply, creator_amount)
        if pool_amount == 0:
            raise InvalidAmount("Launch leaves no supply for the pool")
        return SupplySplit(creator_amount=creator_amount, pool_amount=pool_amount)


# Singleton instance
constant_product = ConstantProductEngine()
