"""Pool lifecycle controller.

The controller runs one instruction at a time against one pool:

    lock pool -> load record -> validate -> engine computes
              -> settle transfers -> verify and save new record -> emit event

Nothing is saved unless every transfer leg succeeded. If a leg is refused,
the legs already executed are reversed and the stored record is untouched.

One controller class serves both variants; ``has_shares`` selects between a
standard pool (liquidity shares) and a bonding-curve pool (initialize and
swap only). Once a record is stored its flag wins over the controller's
``PoolConfig``.
"""

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass, replace
from enum import Enum

import structlog

from cpamm.config import STANDARD_POOL_CONFIG, PoolConfig
from cpamm.constants import BASE_ASSET, base_vault, quote_vault, share_asset
from cpamm.engine import ConstantProductEngine, constant_product
from cpamm.errors import (
    AlreadyInitialized,
    InsufficientShares,
    InvalidAmount,
    InvariantViolation,
    LiquidityNotSupported,
    NotInitialized,
    PoolError,
    TransferFailed,
    Unauthorized,
)
from cpamm.events import EventKind, EventSink, PoolEvent, log_event
from cpamm.ledger import Authorizer, InMemoryLedger, Ledger, SelfCustodyAuthorizer
from cpamm.models import DepositReceipt, PoolSnapshot, Reserves, SwapReceipt, WithdrawalReceipt
from cpamm.safe_int import U64_MAX, checked_add, checked_sub
from cpamm.state import Pool, SwapDirection
from cpamm.store import InMemoryPoolStore, PoolStore

logger = structlog.get_logger()


class LegAction(str, Enum):
    MOVE = "move"
    ISSUE = "issue"
    BURN = "burn"


@dataclass(frozen=True)
class Leg:
    """One value movement requested from the ledger."""

    action: LegAction
    asset: str
    amount: int
    source: str | None = None
    destination: str | None = None


class PoolController:
    """Owns and mutates the record of the pool for one quote asset.

    Args:
        quote_asset: Identifier of the quote token; also the pool identity
        config: Fee and variant configuration (default: standard pool, 0.3%)
        ledger: Transfer/issuance collaborator (default: fresh InMemoryLedger)
        authorizer: Signer authorization (default: SelfCustodyAuthorizer)
        store: Pool record persistence (default: fresh InMemoryPoolStore)
        event_sink: Receives one PoolEvent per committed operation
        engine: Pool math (default: module singleton)
        base_asset: Identifier of the native asset
    """

    def __init__(
        self,
        quote_asset: str,
        config: PoolConfig = STANDARD_POOL_CONFIG,
        ledger: Ledger | None = None,
        authorizer: Authorizer | None = None,
        store: PoolStore | None = None,
        event_sink: EventSink = log_event,
        engine: ConstantProductEngine = constant_product,
        base_asset: str = BASE_ASSET,
    ) -> None:
        self.quote_asset = quote_asset
        self.config = config
        self.ledger: Ledger = ledger if ledger is not None else InMemoryLedger()
        self.authorizer: Authorizer = authorizer if authorizer is not None else SelfCustodyAuthorizer()
        self.store: PoolStore = store if store is not None else InMemoryPoolStore()
        self.event_sink = event_sink
        self.engine = engine
        self.base_asset = base_asset

        self.base_vault = base_vault(quote_asset)
        self.quote_vault = quote_vault(quote_asset)
        self.share_asset = share_asset(quote_asset)

    # --- Read-only ---

    def snapshot(self) -> PoolSnapshot:
        """Current pool record (an empty record if never initialized)."""
        pool = self.store.load(self.quote_asset)
        if pool is None:
            pool = Pool.empty(self.quote_asset, self.config)
        return PoolSnapshot.from_pool(pool)

    @property
    def is_initialized(self) -> bool:
        pool = self.store.load(self.quote_asset)
        return pool is not None and pool.initialized

    def share_balance(self, account: str) -> int:
        """Liquidity shares held by ``account``."""
        return self.ledger.balance_of(account, self.share_asset)

    def quote(self, amount_in: int, direction: SwapDirection) -> int:
        """Output a swap of ``amount_in`` would produce now. Mutates nothing."""
        with self._guard("quote"), self.store.locked(self.quote_asset):
            _require_amount("amount_in", amount_in)
            pool = self._load_active()
            reserve_in, reserve_out = pool.get_reserves(direction)
            result = self.engine.quote_swap(
                amount_in, reserve_in, reserve_out, pool.fee_numerator, pool.fee_denominator
            )
            return result.amount_out

    # --- Lifecycle ---

    def initialize(
        self,
        caller: str,
        seed_base: int,
        seed_quote: int | None = None,
        account: str | None = None,
    ) -> PoolSnapshot:
        """Seed the pool and move it from Uninitialized to Active.

        Standard pool: ``seed_base`` and ``seed_quote`` come from the caller's
        account, and floor(sqrt(seed_base * seed_quote)) shares are minted to
        it. Bonding-curve pool: ``seed_quote`` is ignored; a fresh quote
        supply is issued, split between the caller and the pool reserve.

        Raises:
            InvalidAmount: If a seed amount is zero or out of range
            AlreadyInitialized: If the pool is already active
            Unauthorized: If the caller does not control the paying account
            TransferFailed: If the ledger refuses a leg
        """
        account = account or caller
        with self._guard("initialize"), self.store.locked(self.quote_asset):
            self._authorize(caller, account)
            existing = self.store.load(self.quote_asset)
            if existing is not None and existing.initialized:
                raise AlreadyInitialized(f"Pool {self.quote_asset} is already initialized")
            has_shares = existing.has_shares if existing is not None else self.config.has_shares
            if has_shares:
                return self._initialize_standard(caller, account, seed_base, seed_quote)
            return self._initialize_bonding_curve(caller, account, seed_base)

    def _initialize_standard(
        self, caller: str, account: str, seed_base: int, seed_quote: int | None
    ) -> PoolSnapshot:
        if seed_quote is None:
            raise InvalidAmount("Standard pool requires a quote seed")
        _require_positive("seed_base", seed_base)
        _require_positive("seed_quote", seed_quote)

        shares = self.engine.initial_shares(seed_base, seed_quote)
        pool = replace(
            Pool.empty(self.quote_asset, self.config),
            base_reserve=seed_base,
            quote_reserve=seed_quote,
            share_supply=shares,
            initialized=True,
        )
        legs = [
            Leg(LegAction.MOVE, self.base_asset, seed_base, account, self.base_vault),
            Leg(LegAction.MOVE, self.quote_asset, seed_quote, account, self.quote_vault),
            Leg(LegAction.ISSUE, self.share_asset, shares, destination=account),
        ]
        self._commit(pool, legs)
        self._emit(
            EventKind.POOL_INITIALIZED,
            caller,
            pool,
            initial_base=seed_base,
            initial_quote=seed_quote,
            shares_minted=shares,
        )
        return PoolSnapshot.from_pool(pool)

    def _initialize_bonding_curve(self, caller: str, account: str, seed_base: int) -> PoolSnapshot:
        _require_positive("seed_base", seed_base)

        split = self.engine.split_supply(self.config.total_supply, self.config.creator_share_percent)
        pool = replace(
            Pool.empty(self.quote_asset, self.config),
            base_reserve=seed_base,
            quote_reserve=split.pool_amount,
            initialized=True,
        )
        legs = [
            Leg(
                LegAction.MOVE,
                self.base_asset,
                self.config.launch_fee,
                account,
                self.config.fee_account,
            ),
            Leg(LegAction.MOVE, self.base_asset, seed_base, account, self.base_vault),
            Leg(LegAction.ISSUE, self.quote_asset, split.creator_amount, destination=account),
            Leg(LegAction.ISSUE, self.quote_asset, split.pool_amount, destination=self.quote_vault),
        ]
        self._commit(pool, legs)
        self._emit(
            EventKind.SUPPLY_DISTRIBUTED,
            caller,
            pool,
            total_supply=self.config.total_supply,
            creator_amount=split.creator_amount,
            pool_amount=split.pool_amount,
            launch_fee=self.config.launch_fee,
        )
        self._emit(
            EventKind.POOL_INITIALIZED,
            caller,
            pool,
            initial_base=seed_base,
            initial_quote=split.pool_amount,
            shares_minted=0,
        )
        return PoolSnapshot.from_pool(pool)

    # --- Swaps ---

    def swap(
        self,
        caller: str,
        amount_in: int,
        direction: SwapDirection,
        min_amount_out: int = 0,
        account: str | None = None,
    ) -> SwapReceipt:
        """Exact-input swap.

        The input-side reserve grows by the full ``amount_in`` (the fee stays
        in the pool); the output-side reserve shrinks by the output.

        Raises:
            InvalidAmount, NotInitialized, SlippageExceeded,
            InsufficientLiquidity, ArithmeticOverflow, Unauthorized,
            TransferFailed
        """
        account = account or caller
        with self._guard("swap"), self.store.locked(self.quote_asset):
            self._authorize(caller, account)
            _require_amount("amount_in", amount_in)
            _require_amount("min_amount_out", min_amount_out)
            pool = self._load_active()

            reserve_in, reserve_out = pool.get_reserves(direction)
            result = self.engine.quote_swap(
                amount_in,
                reserve_in,
                reserve_out,
                pool.fee_numerator,
                pool.fee_denominator,
                min_amount_out,
            )
            updated = pool.with_swap_reserves(
                direction,
                checked_add(reserve_in, amount_in),
                checked_sub(reserve_out, result.amount_out),
            )
            if updated.product < pool.product:
                raise InvariantViolation(
                    f"Swap would decrease k: {pool.product} -> {updated.product}"
                )

            if direction is SwapDirection.BASE_TO_QUOTE:
                asset_in, vault_in = self.base_asset, self.base_vault
                asset_out, vault_out = self.quote_asset, self.quote_vault
            else:
                asset_in, vault_in = self.quote_asset, self.quote_vault
                asset_out, vault_out = self.base_asset, self.base_vault

            self._commit(
                updated,
                [
                    Leg(LegAction.MOVE, asset_in, amount_in, account, vault_in),
                    Leg(LegAction.MOVE, asset_out, result.amount_out, vault_out, account),
                ],
            )
            self._emit(
                EventKind.SWAP_EXECUTED,
                caller,
                updated,
                direction=direction.value,
                amount_in=amount_in,
                amount_out=result.amount_out,
                fee_amount=result.fee_amount,
            )
            return SwapReceipt(
                direction=direction,
                amount_in=amount_in,
                fee_amount=result.fee_amount,
                amount_out=result.amount_out,
                reserves=_reserves(updated),
            )

    # --- Liquidity ---

    def add_liquidity(
        self,
        caller: str,
        base_in: int,
        max_quote_in: int,
        min_shares_out: int = 0,
        account: str | None = None,
    ) -> DepositReceipt:
        """Contribute ``base_in`` plus the proportional quote amount for shares.

        Raises:
            LiquidityNotSupported: On a bonding-curve pool
            InvalidAmount, NotInitialized, SlippageExceeded,
            ArithmeticOverflow, Unauthorized, TransferFailed
        """
        account = account or caller
        with self._guard("add_liquidity"), self.store.locked(self.quote_asset):
            self._require_shares(self.store.load(self.quote_asset))
            self._authorize(caller, account)
            _require_amount("base_in", base_in)
            _require_amount("max_quote_in", max_quote_in)
            _require_amount("min_shares_out", min_shares_out)
            pool = self._load_active()

            deposit = self.engine.compute_deposit(
                base_in,
                max_quote_in,
                min_shares_out,
                pool.base_reserve,
                pool.quote_reserve,
                pool.share_supply,
            )
            updated = replace(
                pool,
                base_reserve=checked_add(pool.base_reserve, deposit.base_in),
                quote_reserve=checked_add(pool.quote_reserve, deposit.quote_in),
                share_supply=checked_add(pool.share_supply, deposit.shares_minted),
            )
            self._commit(
                updated,
                [
                    Leg(LegAction.MOVE, self.base_asset, deposit.base_in, account, self.base_vault),
                    Leg(LegAction.MOVE, self.quote_asset, deposit.quote_in, account, self.quote_vault),
                    Leg(LegAction.ISSUE, self.share_asset, deposit.shares_minted, destination=account),
                ],
            )
            self._emit(
                EventKind.LIQUIDITY_ADDED,
                caller,
                updated,
                base_in=deposit.base_in,
                quote_in=deposit.quote_in,
                shares_minted=deposit.shares_minted,
            )
            return DepositReceipt(
                base_in=deposit.base_in,
                quote_in=deposit.quote_in,
                shares_minted=deposit.shares_minted,
                reserves=_reserves(updated),
                share_supply=updated.share_supply,
            )

    def remove_liquidity(
        self,
        caller: str,
        shares_in: int,
        min_base_out: int = 0,
        min_quote_out: int = 0,
        account: str | None = None,
    ) -> WithdrawalReceipt:
        """Burn ``shares_in`` for the proportional share of both reserves.

        Raises:
            LiquidityNotSupported: On a bonding-curve pool
            InsufficientShares: If the account holds fewer than shares_in
            InvalidAmount, NotInitialized, SlippageExceeded,
            InsufficientLiquidity, Unauthorized, TransferFailed
        """
        account = account or caller
        with self._guard("remove_liquidity"), self.store.locked(self.quote_asset):
            self._require_shares(self.store.load(self.quote_asset))
            self._authorize(caller, account)
            _require_amount("shares_in", shares_in)
            _require_amount("min_base_out", min_base_out)
            _require_amount("min_quote_out", min_quote_out)
            pool = self._load_active()

            withdrawal = self.engine.compute_withdrawal(
                shares_in,
                min_base_out,
                min_quote_out,
                pool.base_reserve,
                pool.quote_reserve,
                pool.share_supply,
            )
            held = self.share_balance(account)
            if held < shares_in:
                raise InsufficientShares(f"Account {account} holds {held} shares, needs {shares_in}")

            updated = replace(
                pool,
                base_reserve=checked_sub(pool.base_reserve, withdrawal.base_out),
                quote_reserve=checked_sub(pool.quote_reserve, withdrawal.quote_out),
                share_supply=checked_sub(pool.share_supply, withdrawal.shares_burned),
            )
            self._commit(
                updated,
                [
                    Leg(LegAction.BURN, self.share_asset, withdrawal.shares_burned, source=account),
                    Leg(LegAction.MOVE, self.base_asset, withdrawal.base_out, self.base_vault, account),
                    Leg(LegAction.MOVE, self.quote_asset, withdrawal.quote_out, self.quote_vault, account),
                ],
            )
            self._emit(
                EventKind.LIQUIDITY_REMOVED,
                caller,
                updated,
                shares_burned=withdrawal.shares_burned,
                base_out=withdrawal.base_out,
                quote_out=withdrawal.quote_out,
            )
            return WithdrawalReceipt(
                shares_burned=withdrawal.shares_burned,
                base_out=withdrawal.base_out,
                quote_out=withdrawal.quote_out,
                reserves=_reserves(updated),
                share_supply=updated.share_supply,
            )

    # --- Internals ---

    @contextmanager
    def _guard(self, operation: str) -> Iterator[None]:
        """Log rejected operations with their error code, then re-raise."""
        try:
            yield
        except PoolError as err:
            logger.warning(
                "operation_rejected",
                pool=self.quote_asset,
                operation=operation,
                error=err.code,
                detail=str(err),
            )
            raise

    def _authorize(self, caller: str, account: str) -> None:
        if not self.authorizer.authorize(caller, account):
            raise Unauthorized(f"{caller} does not control account {account}")

    def _require_shares(self, pool: Pool | None) -> None:
        """Reject liquidity operations on a bonding-curve pool.

        A stored record decides the variant; the config only applies
        before the pool exists.
        """
        has_shares = pool.has_shares if pool is not None else self.config.has_shares
        if not has_shares:
            raise LiquidityNotSupported(
                f"Pool {self.quote_asset} is a bonding-curve pool without liquidity shares"
            )

    def _load_active(self) -> Pool:
        pool = self.store.load(self.quote_asset)
        if pool is None or not pool.initialized:
            raise NotInitialized(f"Pool {self.quote_asset} is not initialized")
        return pool

    def _commit(self, pool: Pool, legs: list[Leg]) -> None:
        """Verify the candidate record, settle every leg, then save."""
        pool.check_invariants()
        self._settle(legs)
        self.store.save(pool)

    def _settle(self, legs: list[Leg]) -> None:
        done: list[Leg] = []
        for leg in legs:
            if leg.amount == 0:
                continue
            if not self._execute(leg):
                logger.warning(
                    "settlement_failed",
                    pool=self.quote_asset,
                    action=leg.action.value,
                    asset=leg.asset,
                    amount=leg.amount,
                    source=leg.source,
                    destination=leg.destination,
                    reversed_legs=len(done),
                )
                for completed in reversed(done):
                    if not self._execute(_reverse(completed)):
                        logger.error(
                            "settlement_rollback_failed",
                            pool=self.quote_asset,
                            action=completed.action.value,
                            asset=completed.asset,
                            amount=completed.amount,
                        )
                raise TransferFailed(
                    f"Ledger refused {leg.action.value} of {leg.amount} {leg.asset}"
                )
            done.append(leg)

    def _execute(self, leg: Leg) -> bool:
        if leg.action is LegAction.MOVE:
            assert leg.source is not None and leg.destination is not None
            return self.ledger.move_value(leg.asset, leg.source, leg.destination, leg.amount)
        if leg.action is LegAction.ISSUE:
            assert leg.destination is not None
            return self.ledger.issue(leg.asset, leg.destination, leg.amount)
        assert leg.source is not None
        return self.ledger.burn(leg.asset, leg.source, leg.amount)

    def _emit(self, kind: EventKind, caller: str, pool: Pool, **amounts: int | str) -> None:
        event = PoolEvent(
            pool=self.quote_asset,
            kind=kind,
            caller=caller,
            amounts=amounts,
            reserves=_reserves(pool),
            share_supply=pool.share_supply,
        )
        # Runs after the save: sink failures are logged, not raised
        try:
            self.event_sink(event)
        except Exception:
            logger.exception("event_sink_failed", pool=self.quote_asset, kind=kind.value)


def _reverse(leg: Leg) -> Leg:
    if leg.action is LegAction.MOVE:
        return replace(leg, source=leg.destination, destination=leg.source)
    if leg.action is LegAction.ISSUE:
        return Leg(LegAction.BURN, leg.asset, leg.amount, source=leg.destination)
    return Leg(LegAction.ISSUE, leg.asset, leg.amount, destination=leg.source)


def _reserves(pool: Pool) -> Reserves:
    return Reserves(base=pool.base_reserve, quote=pool.quote_reserve)


def _require_amount(name: str, value: int) -> None:
    if isinstance(value, bool) or not isinstance(value, int) or not 0 <= value <= U64_MAX:
        raise InvalidAmount(f"{name} must be a u64 integer, got {value!r}")


def _require_positive(name: str, value: int) -> None:
    _require_amount(name, value)
    if value == 0:
        raise InvalidAmount(f"{name} must be positive")
