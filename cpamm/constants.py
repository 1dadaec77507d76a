"""Protocol constants for the constant-product pool.

Centralizes default fee parameters, bonding-curve supply split and
account naming conventions.
"""

# Swap fee on the input side: 0.3% = 3/1000
FEE_NUMERATOR = 3
FEE_DENOMINATOR = 1000

# Identifier of the native (base) asset
BASE_ASSET = "NATIVE"

# Bonding-curve launch: total supply minted for a new token (9 decimals)
# and the creator's percentage; the remainder seeds the pool.
BONDING_CURVE_TOTAL_SUPPLY = 1_000_000_000_000_000_000
CREATOR_SHARE_PERCENT = 2

# Launch fee charged to the creator in base units (0.01 native = 10,000,000)
LAUNCH_FEE = 10_000_000
FEE_ACCOUNT = "protocol:fee_vault"


def base_vault(pool_id: str) -> str:
    """Ledger account holding a pool's base reserve."""
    return f"pool:{pool_id}:base_vault"


def quote_vault(pool_id: str) -> str:
    """Ledger account holding a pool's quote reserve."""
    return f"pool:{pool_id}:quote_vault"


def share_asset(pool_id: str) -> str:
    """Asset identifier of a pool's liquidity share token."""
    return f"{pool_id}-LP"
