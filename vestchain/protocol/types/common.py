# MIT License
# Copyright (c) 2025 Hashborn

from enum import Enum


class WithdrawReason(str, Enum):
    """Kinds of balance withdrawal a lock can restrict."""
    TRANSFER = "TRANSFER"
    RESERVE = "RESERVE"
    FEE = "FEE"


class EventType(str, Enum):
    VESTING_UPDATED = "vesting_updated"
    VESTING_COMPLETED = "vesting_completed"
    MERGED_SCHEDULE_ADDED = "merged_schedule_added"


class ProtocolError(Exception):
    pass


class GenesisError(ProtocolError):
    """Genesis configuration cannot be applied; the node must not start."""
    pass


# --- Vesting errors ---

class VestingError(ProtocolError):
    code = "VestingError"


class NotVesting(VestingError):
    """The account given is not vesting."""
    code = "NotVesting"


class AtMaxVestingSchedules(VestingError):
    """The account already holds the maximum number of schedules."""
    code = "AtMaxVestingSchedules"


class AmountLow(VestingError):
    """Amount being transferred is too low to create a vesting schedule."""
    code = "AmountLow"


class ScheduleIndexOutOfBounds(VestingError):
    """At least one of the indexes is out of bounds of the vesting schedules."""
    code = "ScheduleIndexOutOfBounds"


class InvalidScheduleParams(VestingError):
    """A schedule has a zero `locked` or zero `per_block`."""
    code = "InvalidScheduleParams"


class ArithmeticOverflow(VestingError):
    """A block number or balance left its numeric domain."""
    code = "ArithmeticOverflow"


# --- Balance errors ---

class BalanceError(ProtocolError):
    code = "BalanceError"


class InsufficientBalance(BalanceError):
    code = "InsufficientBalance"


class LiquidityRestrictions(BalanceError):
    """Transfer would spend funds held by a lock."""
    code = "LiquidityRestrictions"
