# MIT License
# Copyright (c) 2025 Hashborn

"""
Vesting operations.

Places a linear curve on an account's locked balance. A lock keeps the
balance from dropping below the unvested amount; as blocks pass the unvested
amount shrinks, but the lock only follows once an operation (`vest`,
`merge_schedules`, adding or removing a schedule) recomputes it.

Schedules are addressed by their position in the account's set. Positions
are only valid relative to the latest read of the set: finished schedules
are dropped on every recompute and a merged schedule is appended last.
"""

from typing import Any, Dict, List, Optional, Tuple
import logging
from ...protocol.config.params import VestingConfig
from ...protocol.types.common import (
    EventType,
    WithdrawReason,
    NotVesting,
    AtMaxVestingSchedules,
    AmountLow,
    ScheduleIndexOutOfBounds,
    VestingError,
)
from ...protocol.types.numeric import BlockToBalance, block_to_balance, saturating_add
from ...protocol.types.vesting import VestingInfo
from .schedules import VestingAction, report_schedule_updates, merge_schedules_in_set
from .state import AccountState

logger = logging.getLogger(__name__)

LOCK_REASONS = (WithdrawReason.TRANSFER, WithdrawReason.RESERVE)


class Vesting:
    """
    Vesting operations for one execution against `state` at block `now`.

    Events are collected in `self.events` for the host to publish once the
    state has been committed.
    """

    def __init__(self, state: AccountState, config: VestingConfig, now: int,
                 to_balance: BlockToBalance = block_to_balance):
        self.state = state
        self.config = config
        self.now = now
        self.to_balance = to_balance
        self.events: List[Tuple[EventType, Dict[str, Any]]] = []

    def deposit_event(self, event_type: EventType, **data: Any):
        self.events.append((event_type, data))

    # --- Queries ---

    def vesting(self, who: str) -> Optional[List[VestingInfo]]:
        return self.state.get_vesting(who)

    def vesting_balance(self, who: str) -> Optional[int]:
        """
        Amount currently vesting that cannot be transferred out of `who`.

        Capped by the free balance, so an account whose balance was reduced
        elsewhere never reports more locked than it holds.
        """
        schedules = self.state.get_vesting(who)
        if schedules is None:
            return None

        total_locked_now = 0
        for schedule in schedules:
            total_locked_now = saturating_add(total_locked_now, schedule.locked_at(self.now, self.to_balance))
        return min(self.state.free_balance(who), total_locked_now)

    # --- Operations ---

    def vest(self, who: str):
        """
        Unlock any vested funds of `who`.

        Raises:
            NotVesting: `who` has no schedules
        """
        schedules = self.state.get_vesting(who)
        if schedules is None:
            raise NotVesting(f"Account {who} is not vesting")

        schedules, locked_now = self._report_schedule_updates(schedules, VestingAction.passive())
        self._write_vesting(who, schedules)
        self._write_lock(who, locked_now)

    def vested_transfer(self, source: str, target: str, schedule: VestingInfo):
        """
        Transfer `schedule.locked` from `source` to `target` and vest it there.

        Raises:
            AmountLow: `schedule.locked` is not above `min_vested_transfer`
            InvalidScheduleParams: zero `per_block`
            AtMaxVestingSchedules: `target` has no free schedule slot
            BalanceError: the transfer itself failed
        """
        if schedule.locked <= self.config.min_vested_transfer:
            raise AmountLow(
                f"Vested transfer of {schedule.locked} must exceed {self.config.min_vested_transfer}"
            )
        schedule = schedule.validate_params().correct()

        if self.state.vesting_count(target) >= self.config.max_vesting_schedules:
            raise AtMaxVestingSchedules(f"Account {target} already has {self.config.max_vesting_schedules} schedules")

        self.state.transfer(source, target, schedule.locked, keep_alive=False)

        # The transfer has happened, so adding the schedule must not fail.
        try:
            self.add_vesting_schedule(target, schedule.locked, schedule.per_block, schedule.starting_block)
        except VestingError as e:
            logger.critical(f"Vested transfer to {target} moved funds but could not add schedule: {e}")
            raise RuntimeError(f"Vested transfer to {target} could not record its schedule") from e

    def merge_schedules(self, who: str, schedule1_index: int, schedule2_index: int):
        """
        Merge two schedules of `who` into one that unlocks over the highest
        possible start and end blocks. All schedules of `who` are vested
        through the current block first.

        A no-op if both indices are equal.

        Raises:
            NotVesting: `who` has no schedules
            ScheduleIndexOutOfBounds: an index does not address a schedule
        """
        if schedule1_index == schedule2_index:
            return

        schedules = self.state.get_vesting(who)
        if schedules is None:
            raise NotVesting(f"Account {who} is not vesting")

        # Indices refer to the order before finished schedules are filtered out.
        for index in (schedule1_index, schedule2_index):
            if not 0 <= index < len(schedules):
                raise ScheduleIndexOutOfBounds(
                    f"Schedule index {index} out of bounds for {len(schedules)} schedules"
                )

        schedules, locked_now, merged = merge_schedules_in_set(
            schedules,
            schedule1_index,
            schedule2_index,
            self.now,
            self.config.max_vesting_schedules,
            self.to_balance,
        )
        if merged is not None:
            self.deposit_event(
                EventType.MERGED_SCHEDULE_ADDED,
                locked=merged.locked,
                per_block=merged.per_block,
                starting_block=merged.starting_block,
            )
            logger.debug(f"Merged schedules {schedule1_index} and {schedule2_index} of {who} into {merged}")

        self._write_vesting(who, schedules)
        self._write_lock(who, locked_now)

    def add_vesting_schedule(self, who: str, locked: int, per_block: int, starting_block: int):
        """
        Adds a schedule to `who`. A no-op if `locked` is zero.

        Parameters are not validated; callers are expected to have done so.

        Raises:
            AtMaxVestingSchedules: `who` already has the maximum number of schedules
        """
        if locked == 0:
            return

        vesting_schedule = VestingInfo(locked=locked, per_block=per_block, starting_block=starting_block)
        schedules = self.state.get_vesting(who) or []

        if len(schedules) >= self.config.max_vesting_schedules:
            raise AtMaxVestingSchedules(f"Account {who} already has {self.config.max_vesting_schedules} schedules")
        # Pushed before reporting so the new schedule counts towards the lock.
        schedules.append(vesting_schedule)

        schedules, locked_now = self._report_schedule_updates(schedules, VestingAction.passive())
        self._write_vesting(who, schedules)
        self._write_lock(who, locked_now)

    def remove_vesting_schedule(self, who: str, schedule_index: int):
        """
        Remove the schedule at `schedule_index` from `who`.

        The index is not checked; an index past the end removes nothing but
        finished schedules.

        Raises:
            NotVesting: `who` has no schedules
        """
        schedules = self.state.get_vesting(who)
        if schedules is None:
            raise NotVesting(f"Account {who} is not vesting")

        schedules, locked_now = self._report_schedule_updates(schedules, VestingAction.remove(schedule_index))
        self._write_vesting(who, schedules)
        self._write_lock(who, locked_now)

    # --- Internals ---

    def _report_schedule_updates(self, schedules: List[VestingInfo], action: VestingAction) -> Tuple[List[VestingInfo], int]:
        return report_schedule_updates(schedules, action, self.now, self.to_balance)

    def _write_vesting(self, who: str, schedules: List[VestingInfo]):
        if len(schedules) > self.config.max_vesting_schedules:
            logger.warning(f"Account {who} has too many vesting schedules ({len(schedules)})")
            raise AtMaxVestingSchedules(f"Account {who} has {len(schedules)} schedules")
        elif len(schedules) == 0:
            self.state.remove_vesting(who)
        else:
            self.state.set_vesting(who, schedules)

    def _write_lock(self, who: str, total_locked_now: int):
        lock_id = self.config.vesting_lock_id
        if total_locked_now == 0:
            self.state.remove_lock(lock_id, who)
            self.deposit_event(EventType.VESTING_COMPLETED, account=who)
        else:
            self.state.set_lock(lock_id, who, total_locked_now, LOCK_REASONS)
            self.deposit_event(EventType.VESTING_UPDATED, account=who, unvested=total_locked_now)
