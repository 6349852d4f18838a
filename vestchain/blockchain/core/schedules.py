# MIT License
# Copyright (c) 2025 Hashborn

"""
Maintenance of an account's schedule set.

Every change to a set goes through `report_schedule_updates`, which drops
finished schedules (and the ones an action targets) and totals what the
survivors still lock.
"""

from dataclasses import dataclass
from typing import List, Optional, Tuple
import logging
from ...protocol.types.common import AtMaxVestingSchedules
from ...protocol.types.numeric import saturating_add, BlockToBalance, block_to_balance
from ...protocol.types.vesting import VestingInfo
from .merge import merge_vesting_info

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class VestingAction:
    """Which schedules of a set to drop while reporting updates."""
    kind: str = "passive"
    indices: Tuple[int, ...] = ()

    @classmethod
    def passive(cls) -> 'VestingAction':
        """Do not actively remove any schedules."""
        return cls()

    @classmethod
    def remove(cls, index: int) -> 'VestingAction':
        """Remove the schedule at `index`."""
        return cls("remove", (index,))

    @classmethod
    def merge(cls, index1: int, index2: int) -> 'VestingAction':
        """Remove two schedules so they can be merged."""
        return cls("merge", (index1, index2))

    def should_remove(self, index: int) -> bool:
        return index in self.indices


def report_schedule_updates(
    schedules: List[VestingInfo],
    action: VestingAction,
    now: int,
    to_balance: BlockToBalance = block_to_balance,
) -> Tuple[List[VestingInfo], int]:
    """
    Filters out completed schedules and the ones `action` targets.

    Returns:
        (surviving schedules in their original order, amount they lock at `now`)
    """
    total_locked_now = 0
    filtered: List[VestingInfo] = []
    for index, schedule in enumerate(schedules):
        locked_now = schedule.locked_at(now, to_balance)
        if locked_now == 0 or action.should_remove(index):
            continue
        # Only surviving schedules count towards the lock
        total_locked_now = saturating_add(total_locked_now, locked_now)
        filtered.append(schedule)

    return filtered, total_locked_now


def merge_schedules_in_set(
    schedules: List[VestingInfo],
    index1: int,
    index2: int,
    now: int,
    max_schedules: int,
    to_balance: BlockToBalance = block_to_balance,
) -> Tuple[List[VestingInfo], int, Optional[VestingInfo]]:
    """
    Replaces the schedules at `index1` and `index2` by their merge.

    Indices refer to `schedules` as given. The merged schedule, if any, is
    appended last, so every schedule after a merged one shifts left.

    Returns:
        (new schedules, amount locked at `now`, merged schedule or None)

    Raises:
        AtMaxVestingSchedules: appending the merge would exceed `max_schedules`
        ArithmeticOverflow: an ending block does not fit the block number domain
    """
    schedule1 = schedules[index1]
    schedule2 = schedules[index2]

    # Two schedules are filtered out here, so the merge always has room.
    filtered, locked_now = report_schedule_updates(
        schedules, VestingAction.merge(index1, index2), now, to_balance
    )

    merged = merge_vesting_info(now, schedule1, schedule2, to_balance)
    if merged is None:
        return filtered, locked_now, None

    if len(filtered) >= max_schedules:
        logger.warning("faulty logic led to attempting to add too many vesting schedules")
        raise AtMaxVestingSchedules(
            f"Merged schedule does not fit: {len(filtered)} of {max_schedules} slots used"
        )

    filtered.append(merged)
    # locked_at, since the merged schedule may have started in the past
    locked_now = saturating_add(locked_now, merged.locked_at(now, to_balance))
    return filtered, locked_now, merged
