import pytest
from vestchain.blockchain.core.schedules import VestingAction, report_schedule_updates, merge_schedules_in_set
from vestchain.protocol.types.common import AtMaxVestingSchedules
from vestchain.protocol.types.vesting import VestingInfo

SCHED_A = VestingInfo(locked=2560, per_block=256, starting_block=10)  # ends at 20
SCHED_B = VestingInfo(locked=2816, per_block=256, starting_block=11)  # ends at 22
SCHED_C = VestingInfo(locked=3072, per_block=256, starting_block=12)  # ends at 24


def test_passive_report_keeps_order_and_totals():
    schedules, total = report_schedule_updates([SCHED_A, SCHED_B, SCHED_C], VestingAction.passive(), 1)

    assert schedules == [SCHED_A, SCHED_B, SCHED_C]
    assert total == 2560 + 2816 + 3072


def test_report_drops_finished_schedules():
    schedules, total = report_schedule_updates([SCHED_A, SCHED_B, SCHED_C], VestingAction.passive(), 21)

    assert schedules == [SCHED_B, SCHED_C]
    assert total == SCHED_B.locked_at(21) + SCHED_C.locked_at(21)


def test_report_with_remove_action():
    schedules, total = report_schedule_updates([SCHED_A, SCHED_B, SCHED_C], VestingAction.remove(1), 1)

    assert schedules == [SCHED_A, SCHED_C]
    assert total == SCHED_A.locked + SCHED_C.locked


def test_report_with_index_past_end_removes_nothing():
    schedules, _ = report_schedule_updates([SCHED_A], VestingAction.remove(5), 1)
    assert schedules == [SCHED_A]


def test_action_should_remove():
    assert not VestingAction.passive().should_remove(0)
    assert VestingAction.remove(2).should_remove(2)
    assert not VestingAction.remove(2).should_remove(1)

    merge = VestingAction.merge(0, 3)
    assert merge.should_remove(0)
    assert merge.should_remove(3)
    assert not merge.should_remove(1)


def test_merge_appends_and_shifts_indices():
    schedules, locked_now, merged = merge_schedules_in_set([SCHED_A, SCHED_B, SCHED_C], 0, 2, 1, 3)

    expected = VestingInfo(locked=2560 + 3072, per_block=(2560 + 3072) // 12, starting_block=12)
    assert merged == expected
    # Schedule at index 1 shifted to index 0, merged schedule is last
    assert schedules == [SCHED_B, expected]
    assert locked_now == SCHED_B.locked + expected.locked


def test_merge_of_finished_schedules_only_filters():
    schedules, locked_now, merged = merge_schedules_in_set([SCHED_A, SCHED_B, SCHED_C], 0, 1, 23, 3)

    assert merged is None
    assert schedules == [SCHED_C]
    assert locked_now == SCHED_C.locked_at(23)


def test_merge_returns_the_ongoing_schedule_when_one_ended():
    schedules, locked_now, merged = merge_schedules_in_set([SCHED_A, SCHED_C], 0, 1, 20, 3)

    assert merged == SCHED_C
    assert schedules == [SCHED_C]
    assert locked_now == SCHED_C.locked_at(20)


def test_merge_refuses_to_overfill_set():
    # Only reachable when the set already breaks the bound
    with pytest.raises(AtMaxVestingSchedules):
        merge_schedules_in_set([SCHED_A, SCHED_B, SCHED_C], 0, 1, 1, 1)
