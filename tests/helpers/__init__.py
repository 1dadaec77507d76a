"""Test helpers module for shared test utilities.

- constants: account names, assets and scenario amounts
- factories: ledger and pool factory functions
"""

from tests.helpers.constants import (
    ALICE,
    BOB,
    FUNDED_BASE,
    FUNDED_QUOTE,
    MALLORY,
    NATIVE,
    OTHER_TOKEN,
    SEED_BASE,
    SEED_QUOTE,
    SEED_SHARES,
    TOKEN,
)
from tests.helpers.factories import make_ledger, make_standard_pool

__all__ = [
    "ALICE",
    "BOB",
    "FUNDED_BASE",
    "FUNDED_QUOTE",
    "MALLORY",
    "NATIVE",
    "OTHER_TOKEN",
    "SEED_BASE",
    "SEED_QUOTE",
    "SEED_SHARES",
    "TOKEN",
    "make_ledger",
    "make_standard_pool",
]
