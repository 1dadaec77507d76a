"""API endpoints for pool operations.

The default registry runs on an empty in-memory ledger. A deployment against
a real ledger injects its own registry through ``get_registry``. For local
use, ``POST /accounts/{account}/credit`` funds accounts on the in-memory
ledger; it is refused unless AMM_DEBUG is set.
"""

import os
from dataclasses import replace
from functools import lru_cache

import structlog
from fastapi import APIRouter, Depends, Query

from cpamm.config import BONDING_CURVE_CONFIG, PoolConfig
from cpamm.constants import BASE_ASSET, FEE_DENOMINATOR, FEE_NUMERATOR
from cpamm.errors import Unauthorized
from cpamm.ledger import InMemoryLedger
from cpamm.models import (
    AccountBalance,
    AddLiquidityRequest,
    CreditRequest,
    DepositReceipt,
    InitializeRequest,
    PoolSnapshot,
    QuoteResponse,
    RemoveLiquidityRequest,
    SwapReceipt,
    SwapRequest,
    WithdrawalReceipt,
)
from cpamm.registry import PoolRegistry
from cpamm.safe_int import U64_MAX
from cpamm.state import SwapDirection

logger = structlog.get_logger()

router = APIRouter(prefix="/pools")
accounts_router = APIRouter(prefix="/accounts")

# Fee for standard pools created through the API
# Configurable via AMM_FEE_NUMERATOR / AMM_FEE_DENOMINATOR
FEE = (
    int(os.environ.get("AMM_FEE_NUMERATOR", str(FEE_NUMERATOR))),
    int(os.environ.get("AMM_FEE_DENOMINATOR", str(FEE_DENOMINATOR))),
)

# Direct account funding on the in-memory ledger, enabled by AMM_DEBUG
FUNDING_ENABLED = os.environ.get("AMM_DEBUG", "false").lower() in ("true", "1", "yes")


@lru_cache(maxsize=1)
def get_default_registry() -> PoolRegistry:
    """Process-wide registry backed by the in-memory ledger and store."""
    return PoolRegistry(base_asset=os.environ.get("AMM_BASE_ASSET", BASE_ASSET))


def get_registry() -> PoolRegistry:
    """Dependency provider for the registry.

    Override this in tests to inject a prepared registry:
        app.dependency_overrides[get_registry] = lambda: registry
    """
    return get_default_registry()


@router.post("/{quote_asset}")
def initialize_pool(
    quote_asset: str,
    request: InitializeRequest,
    registry: PoolRegistry = Depends(get_registry),
) -> PoolSnapshot:
    """Create the pool for ``quote_asset`` and seed it."""
    if request.bonding_curve:
        config = replace(BONDING_CURVE_CONFIG, fee_numerator=FEE[0], fee_denominator=FEE[1])
    else:
        config = PoolConfig(fee_numerator=FEE[0], fee_denominator=FEE[1])

    logger.info(
        "initialize_requested",
        pool=quote_asset,
        caller=request.caller,
        bonding_curve=request.bonding_curve,
    )
    controller = registry.open_pool(quote_asset, config)
    return controller.initialize(request.caller, request.seed_base, request.seed_quote)


@router.get("/{quote_asset}")
def get_pool(quote_asset: str, registry: PoolRegistry = Depends(get_registry)) -> PoolSnapshot:
    """Current reserves, share supply and fee of a pool."""
    return registry.get(quote_asset).snapshot()


@router.get("/{quote_asset}/quote")
def quote(
    quote_asset: str,
    amount: int = Query(ge=0, le=U64_MAX, description="Input amount including fee"),
    direction: SwapDirection = Query(),
    registry: PoolRegistry = Depends(get_registry),
) -> QuoteResponse:
    """Price a swap without executing it."""
    amount_out = registry.get(quote_asset).quote(amount, direction)
    return QuoteResponse(direction=direction, amount_in=amount, amount_out=amount_out)


@router.post("/{quote_asset}/swap")
def swap(
    quote_asset: str,
    request: SwapRequest,
    registry: PoolRegistry = Depends(get_registry),
) -> SwapReceipt:
    return registry.get(quote_asset).swap(
        request.caller, request.amount_in, request.direction, request.min_amount_out
    )


@router.post("/{quote_asset}/liquidity/add")
def add_liquidity(
    quote_asset: str,
    request: AddLiquidityRequest,
    registry: PoolRegistry = Depends(get_registry),
) -> DepositReceipt:
    return registry.get(quote_asset).add_liquidity(
        request.caller, request.base_in, request.max_quote_in, request.min_shares_out
    )


@router.post("/{quote_asset}/liquidity/remove")
def remove_liquidity(
    quote_asset: str,
    request: RemoveLiquidityRequest,
    registry: PoolRegistry = Depends(get_registry),
) -> WithdrawalReceipt:
    return registry.get(quote_asset).remove_liquidity(
        request.caller, request.shares_in, request.min_base_out, request.min_quote_out
    )


@router.get("/{quote_asset}/shares/{account}")
def share_balance(
    quote_asset: str,
    account: str,
    registry: PoolRegistry = Depends(get_registry),
) -> dict[str, int | str]:
    """Liquidity shares held by ``account``."""
    return {"account": account, "shares": registry.get(quote_asset).share_balance(account)}


@accounts_router.post("/{account}/credit")
def credit_account(
    account: str,
    request: CreditRequest,
    registry: PoolRegistry = Depends(get_registry),
) -> AccountBalance:
    """Fund ``account`` on the in-memory ledger (debug mode only)."""
    if not FUNDING_ENABLED or not isinstance(registry.ledger, InMemoryLedger):
        raise Unauthorized("Account funding is only available on the debug in-memory ledger")
    registry.ledger.credit(account, request.asset, request.amount)
    logger.info("account_credited", account=account, asset=request.asset, amount=request.amount)
    return AccountBalance(
        account=account,
        asset=request.asset,
        balance=registry.ledger.balance_of(account, request.asset),
    )
