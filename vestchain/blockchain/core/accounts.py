from pydantic import BaseModel, Field
from typing import Dict, List
from ...protocol.types.common import WithdrawReason


class BalanceLock(BaseModel):
    """A named hold on part of an account's free balance."""
    id: str
    amount: int
    reasons: List[WithdrawReason] = Field(default_factory=list)


class Account(BaseModel):
    address: str
    balance: int = 0

    # Maps lock identifier to the hold it places on `balance`
    locks: Dict[str, BalanceLock] = Field(default_factory=dict)

    def frozen_for(self, reason: WithdrawReason) -> int:
        """Largest lock amount that restricts withdrawals for `reason`."""
        return max(
            (lock.amount for lock in self.locks.values() if reason in lock.reasons),
            default=0,
        )
