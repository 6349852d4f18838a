# MIT License
# Copyright (c) 2025 Hashborn

"""
Vesting schedule types.

A schedule locks `locked` units at `starting_block` and releases `per_block`
units every block after that until nothing is left.
"""

from pydantic import BaseModel, ConfigDict, Field
from typing import Callable
from .common import InvalidScheduleParams, ArithmeticOverflow
from .numeric import (
    BALANCE_MAX,
    BLOCK_NUMBER_MAX,
    BlockToBalance,
    block_to_balance,
    balance_to_block,
    saturating_add,
    saturating_sub,
    saturating_mul,
)


class VestingInfo(BaseModel):
    """Struct to encode the vesting schedule of an individual account."""
    model_config = ConfigDict(frozen=True)

    locked: int = Field(..., ge=0, le=BALANCE_MAX, description="Locked amount at genesis")
    per_block: int = Field(..., ge=0, le=BALANCE_MAX, description="Amount that gets unlocked every block after `starting_block`")
    starting_block: int = Field(..., ge=0, le=BLOCK_NUMBER_MAX, description="Starting block for unlocking (vesting)")

    def validate_params(self) -> "VestingInfo":
        """
        Checks the schedule can ever unlock anything.

        Does not check the minimum transfer amount; that is a caller policy.

        Raises:
            InvalidScheduleParams: `locked` or `per_block` is zero
        """
        if self.locked == 0 or self.per_block == 0:
            raise InvalidScheduleParams(
                f"Invalid schedule params: locked={self.locked}, per_block={self.per_block}"
            )
        return self

    def correct(self) -> "VestingInfo":
        """Returns a copy that never unlocks more than `locked` in one block."""
        return self.model_copy(update={"per_block": min(self.per_block, self.locked)})

    def locked_at(self, block_number: int, to_balance: BlockToBalance = block_to_balance) -> int:
        """Amount still locked at `block_number`."""
        if block_number <= self.starting_block:
            return self.locked

        vested_block_count = to_balance(block_number - self.starting_block)
        unlocked = saturating_mul(self.per_block, vested_block_count)
        return saturating_sub(self.locked, unlocked)

    def ending_balance(self, to_balance: BlockToBalance = block_to_balance) -> int:
        """
        Ending block of the schedule, expressed in the balance domain.

        A `per_block` of 0 is treated as 1 so faulty legacy schedules still end.

        Raises:
            ArithmeticOverflow: the ending does not fit the balance domain
        """
        per_block = self.per_block if self.per_block > 0 else 1

        # Round up so the remainder gets a block of its own.
        duration = saturating_add(self.locked, per_block - 1) // per_block

        ending = to_balance(self.starting_block) + duration
        if ending > BALANCE_MAX:
            raise ArithmeticOverflow(f"Ending block overflow for schedule {self}")
        return ending

    def ending_block(
        self,
        to_balance: BlockToBalance = block_to_balance,
        to_block: Callable[[int], int] = balance_to_block,
    ) -> int:
        """
        First block at which `locked_at` returns zero.

        `to_block` must be the inverse of `to_balance`.

        Raises:
            ArithmeticOverflow: the ending block does not fit the block number domain
        """
        return to_block(self.ending_balance(to_balance))
