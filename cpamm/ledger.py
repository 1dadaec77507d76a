"""Value custody collaborators.

The controller never moves value itself. It asks a TransferService to move
units between named accounts, a TokenIssuer to create or destroy units
(liquidity shares, bonding-curve supply), and an Authorizer to confirm the
caller controls the accounts it spends from.

InMemoryLedger and SelfCustodyAuthorizer are the reference implementations
used by the registry, the API and the tests.
"""

from __future__ import annotations

import threading
from collections import defaultdict
from typing import Protocol, runtime_checkable

import structlog

logger = structlog.get_logger()


@runtime_checkable
class TransferService(Protocol):
    """Atomic transfer of one asset between two accounts."""

    def move_value(self, asset: str, source: str, destination: str, amount: int) -> bool:
        """Move ``amount`` units of ``asset``.

        Returns:
            True if the transfer happened, False if it was refused
        """
        ...


@runtime_checkable
class TokenIssuer(Protocol):
    """Creation and destruction of token units."""

    def issue(self, asset: str, destination: str, amount: int) -> bool:
        """Create ``amount`` new units of ``asset`` in ``destination``."""
        ...

    def burn(self, asset: str, source: str, amount: int) -> bool:
        """Destroy ``amount`` units of ``asset`` held by ``source``."""
        ...


@runtime_checkable
class Ledger(TransferService, TokenIssuer, Protocol):
    """Transfer and issuance on one ledger, with balance reads."""

    def balance_of(self, account: str, asset: str) -> int: ...


@runtime_checkable
class Authorizer(Protocol):
    """Signer authorization."""

    def authorize(self, caller: str, account: str) -> bool:
        """True if ``caller`` controls ``account``."""
        ...


class InMemoryLedger:
    """Balances keyed by (account, asset) with overdraft protection.

    Implements both TransferService and TokenIssuer.
    """

    def __init__(self) -> None:
        self._balances: dict[tuple[str, str], int] = defaultdict(int)
        self._supplies: dict[str, int] = defaultdict(int)
        self._lock = threading.Lock()

    def balance_of(self, account: str, asset: str) -> int:
        return self._balances.get((account, asset), 0)

    def total_supply(self, asset: str) -> int:
        return self._supplies.get(asset, 0)

    def credit(self, account: str, asset: str, amount: int) -> None:
        """Fund an account directly (tests and bootstrapping)."""
        if amount < 0:
            raise ValueError(f"Credit must be non-negative: {amount}")
        with self._lock:
            self._balances[(account, asset)] += amount
            self._supplies[asset] += amount

    def move_value(self, asset: str, source: str, destination: str, amount: int) -> bool:
        if amount < 0:
            return False
        with self._lock:
            available = self._balances.get((source, asset), 0)
            if available < amount:
                logger.debug(
                    "transfer_refused",
                    asset=asset,
                    source=source,
                    amount=amount,
                    available=available,
                )
                return False
            self._balances[(source, asset)] = available - amount
            self._balances[(destination, asset)] += amount
        return True

    def issue(self, asset: str, destination: str, amount: int) -> bool:
        if amount < 0:
            return False
        with self._lock:
            self._balances[(destination, asset)] += amount
            self._supplies[asset] += amount
        return True

    def burn(self, asset: str, source: str, amount: int) -> bool:
        if amount < 0:
            return False
        with self._lock:
            available = self._balances.get((source, asset), 0)
            if available < amount:
                return False
            self._balances[(source, asset)] = available - amount
            self._supplies[asset] -= amount
        return True


class SelfCustodyAuthorizer:
    """Each caller controls exactly the account named after it."""

    def authorize(self, caller: str, account: str) -> bool:
        return caller == account
