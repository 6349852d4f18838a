# MIT License
# Copyright (c) 2025 Hashborn

"""
Merging of two vesting schedules.

Merged schedule attributes:
- starting_block: MAX(schedule1.starting_block, schedule2.starting_block, now)
- ending_block:   MAX(schedule1.ending_block, schedule2.ending_block)
- locked:         schedule1.locked_at(now) + schedule2.locked_at(now)

If one schedule has already ended, the other one is the merge, unmodified.
If both have ended there is no merge.
"""

from typing import Optional
import logging
from ...protocol.types.numeric import (
    BlockToBalance,
    block_to_balance,
    saturating_add,
    saturating_sub,
)
from ...protocol.types.vesting import VestingInfo

logger = logging.getLogger(__name__)


def merge_vesting_info(
    now: int,
    schedule1: VestingInfo,
    schedule2: VestingInfo,
    to_balance: BlockToBalance = block_to_balance,
) -> Optional[VestingInfo]:
    """
    Creates a new schedule from two others.

    Assumes both schedules have had funds unlocked up through `now`.

    Raises:
        ArithmeticOverflow: either ending block does not fit the balance domain
    """
    # Endings are compared in the balance domain, where `to_balance` places them
    schedule1_ending_block = schedule1.ending_balance(to_balance)
    schedule2_ending_block = schedule2.ending_balance(to_balance)
    now_as_balance = to_balance(now)

    schedule1_ended = schedule1_ending_block <= now_as_balance
    schedule2_ended = schedule2_ending_block <= now_as_balance
    if schedule1_ended and schedule2_ended:
        return None
    if schedule1_ended:
        return schedule2
    if schedule2_ended:
        return schedule1

    locked = saturating_add(
        schedule1.locked_at(now, to_balance),
        schedule2.locked_at(now, to_balance),
    )
    # At least one ending block is after now, so something must still be locked.
    if locked == 0:
        logger.warning("merge_vesting_info validation checks failed to catch a locked of 0")
        return None

    ending_block = max(schedule1_ending_block, schedule2_ending_block)
    starting_block = max(now, schedule1.starting_block, schedule2.starting_block)
    duration = saturating_sub(ending_block, to_balance(starting_block))

    if duration > locked:
        # Fewer units than blocks left: unlock the minimum of one per block.
        per_block = 1
    elif duration == 0:
        per_block = locked
    else:
        per_block = locked // duration

    return VestingInfo(locked=locked, per_block=per_block, starting_block=starting_block).correct()
