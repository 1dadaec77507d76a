"""Pool error classes.

Every failure aborts the current instruction before anything is committed.
Each class carries a stable ``code`` used in logs and API responses.
"""


class PoolError(Exception):
    """Base error for pool operations."""

    code = "pool_error"


class InvalidAmount(PoolError):
    """Zero, negative or out-of-range input amount."""

    code = "invalid_amount"


class InvalidAsset(PoolError):
    """Quote asset that cannot form a pool (e.g. the base asset itself)."""

    code = "invalid_asset"


class InvalidFee(PoolError):
    """Fee must satisfy 0 <= numerator < denominator."""

    code = "invalid_fee"


class NotInitialized(PoolError):
    """Operation on a pool that was never initialized."""

    code = "not_initialized"


class AlreadyInitialized(PoolError):
    """Second initialize on the same pool."""

    code = "already_initialized"


class SlippageExceeded(PoolError):
    """Computed amount violates a caller-supplied bound."""

    code = "slippage_exceeded"


class InsufficientLiquidity(PoolError):
    """Operation would claim all (or more than all) of a reserve."""

    code = "insufficient_liquidity"


class InsufficientShares(PoolError):
    """Caller holds fewer liquidity shares than requested."""

    code = "insufficient_shares"


class LiquidityNotSupported(PoolError):
    """Bonding-curve pools have no liquidity shares."""

    code = "liquidity_not_supported"


class ArithmeticOverflow(PoolError, ArithmeticError):
    """Checked arithmetic exceeded its width, or divided by zero."""

    code = "arithmetic_overflow"


class ArithmeticUnderflow(PoolError, ArithmeticError):
    """Checked subtraction would go negative."""

    code = "arithmetic_underflow"


class TransferFailed(PoolError):
    """The ledger refused a transfer, issue or burn."""

    code = "transfer_failed"


class Unauthorized(PoolError):
    """Caller does not control the referenced account."""

    code = "unauthorized"


class PoolNotFound(PoolError):
    """No pool exists for the requested quote asset."""

    code = "pool_not_found"


class InvariantViolation(PoolError):
    """A candidate pool record breaks a solvency invariant."""

    code = "invariant_violation"
