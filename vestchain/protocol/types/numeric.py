# MIT License
# Copyright (c) 2025 Hashborn

"""
Balance and block number domains.

Balances are unsigned 128-bit values and block numbers unsigned 32-bit
values. Arithmetic on balances saturates at the domain bounds instead of
raising.
"""

from typing import Callable
from .common import ArithmeticOverflow

BALANCE_MAX = 2**128 - 1
BLOCK_NUMBER_MAX = 2**32 - 1

# Order-preserving, injective map from block numbers into the balance domain.
BlockToBalance = Callable[[int], int]


def saturating_add(a: int, b: int) -> int:
    return min(a + b, BALANCE_MAX)


def saturating_sub(a: int, b: int) -> int:
    return max(a - b, 0)


def saturating_mul(a: int, b: int) -> int:
    return min(a * b, BALANCE_MAX)


def block_to_balance(block_number: int) -> int:
    if block_number < 0 or block_number > BLOCK_NUMBER_MAX:
        raise ArithmeticOverflow(f"Block number {block_number} outside of domain")
    return block_number


def balance_to_block(balance: int) -> int:
    if balance < 0 or balance > BLOCK_NUMBER_MAX:
        raise ArithmeticOverflow(f"Balance {balance} does not fit a block number")
    return balance
