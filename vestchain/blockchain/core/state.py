# MIT License
# Copyright (c) 2025 Hashborn

from typing import Dict, Optional, List, Iterable
import logging
from pydantic import TypeAdapter
from .accounts import Account, BalanceLock
from ...protocol.types.common import (
    WithdrawReason,
    InsufficientBalance,
    LiquidityRestrictions,
    ArithmeticOverflow,
)
from ...protocol.types.numeric import BALANCE_MAX
from ...protocol.types.vesting import VestingInfo
from ..storage.db import StorageDB

logger = logging.getLogger(__name__)

_schedules_adapter = TypeAdapter(List[VestingInfo])


class AccountState:
    """
    Account balances, balance locks and vesting schedules.

    Reads fall through to the DB; writes stay in the local cache until
    `persist()` is called, so a `clone()` can be used to simulate a call and
    then either be adopted or thrown away.
    """

    def __init__(self, db: StorageDB,
                 accounts: Dict[str, Account] = None,
                 vesting: Dict[str, Optional[List[VestingInfo]]] = None):
        self.db = db
        # Cache for modified/accessed accounts: address -> Account
        self._accounts: Dict[str, Account] = accounts if accounts is not None else {}
        # Cache for vesting schedules: address -> schedules (None marks a removed entry)
        self._vesting: Dict[str, Optional[List[VestingInfo]]] = vesting if vesting is not None else {}

    def clone(self) -> 'AccountState':
        """Creates a copy of the state (for simulation)."""
        new_accounts = {k: v.model_copy(deep=True) for k, v in self._accounts.items()}
        new_vesting = {k: (list(v) if v is not None else None) for k, v in self._vesting.items()}
        return AccountState(self.db, new_accounts, new_vesting)

    # --- Accounts ---

    def get_account(self, address: str) -> Account:
        if address in self._accounts:
            return self._accounts[address]

        # Try load from DB
        raw_json = self.db.get_state(f"acc:{address}")
        if raw_json:
            acc = Account.model_validate_json(raw_json)
            self._accounts[address] = acc
            return acc

        # Return generic new account
        return Account(address=address)

    def set_account(self, account: Account):
        """Updates account in local cache."""
        self._accounts[account.address] = account

    def free_balance(self, address: str) -> int:
        return self.get_account(address).balance

    def usable_balance(self, address: str) -> int:
        """Free balance that is not held by any transfer lock."""
        acc = self.get_account(address)
        return max(acc.balance - acc.frozen_for(WithdrawReason.TRANSFER), 0)

    def set_lock(self, lock_id: str, address: str, amount: int, reasons: Iterable[WithdrawReason]):
        """Creates or replaces the lock `lock_id` on `address`."""
        acc = self.get_account(address)
        acc.locks[lock_id] = BalanceLock(id=lock_id, amount=amount, reasons=list(reasons))
        self.set_account(acc)

    def remove_lock(self, lock_id: str, address: str):
        acc = self.get_account(address)
        if acc.locks.pop(lock_id, None) is not None:
            self.set_account(acc)

    def get_lock(self, lock_id: str, address: str) -> Optional[BalanceLock]:
        return self.get_account(address).locks.get(lock_id)

    def transfer(self, source: str, target: str, amount: int, keep_alive: bool = False):
        """
        Moves `amount` from `source` to `target`.

        Raises:
            InsufficientBalance: source balance too low, or `keep_alive` and source would be emptied
            LiquidityRestrictions: the transfer would spend locked funds
            ArithmeticOverflow: target balance would leave the balance domain
        """
        sender = self.get_account(source)
        if sender.balance < amount:
            raise InsufficientBalance(f"Insufficient balance: have {sender.balance}, need {amount}")

        remaining = sender.balance - amount
        if keep_alive and remaining == 0:
            raise InsufficientBalance(f"Transfer would reap account {source}")

        if remaining < sender.frozen_for(WithdrawReason.TRANSFER):
            raise LiquidityRestrictions(
                f"Transfer of {amount} from {source} would spend locked funds"
            )

        if source == target:
            return

        recipient = self.get_account(target)
        if recipient.balance + amount > BALANCE_MAX:
            raise ArithmeticOverflow(f"Balance overflow for {target}")

        sender.balance = remaining
        self.set_account(sender)
        recipient.balance += amount
        self.set_account(recipient)
        logger.debug(f"Transferred {amount} from {source} to {target}")

    # --- Vesting schedules ---

    def get_vesting(self, address: str) -> Optional[List[VestingInfo]]:
        """Schedules of `address`, or None when the account is not vesting."""
        if address in self._vesting:
            cached = self._vesting[address]
            return list(cached) if cached is not None else None

        raw_json = self.db.get_state(f"vest:{address}")
        if raw_json:
            schedules = _schedules_adapter.validate_json(raw_json)
            self._vesting[address] = schedules
            return list(schedules)
        return None

    def set_vesting(self, address: str, schedules: List[VestingInfo]):
        if not schedules:
            raise ValueError("Empty schedule sets are removed, not stored")
        self._vesting[address] = list(schedules)

    def remove_vesting(self, address: str):
        self._vesting[address] = None

    def vesting_count(self, address: str) -> int:
        schedules = self.get_vesting(address)
        return len(schedules) if schedules else 0

    def get_all_vesting(self) -> Dict[str, List[VestingInfo]]:
        """Loads all vesting entries from DB + cache overlay."""
        final: Dict[str, List[VestingInfo]] = {}
        for k, v in self.db.get_state_by_prefix("vest:").items():
            addr = k.split(":", 1)[1]
            final[addr] = _schedules_adapter.validate_json(v)

        for addr, schedules in self._vesting.items():
            if schedules is None:
                final.pop(addr, None)
            else:
                final[addr] = list(schedules)
        return final

    def persist(self):
        """Writes modified accounts and vesting entries to DB."""
        updates: Dict[str, Optional[str]] = {}
        for addr, acc in self._accounts.items():
            updates[f"acc:{addr}"] = acc.model_dump_json()
        for addr, schedules in self._vesting.items():
            if schedules is None:
                updates[f"vest:{addr}"] = None
            else:
                updates[f"vest:{addr}"] = _schedules_adapter.dump_json(schedules).decode("utf-8")
        self.db.write_batch(updates)

    @staticmethod
    def empty(db: StorageDB) -> 'AccountState':
        """Returns an empty state."""
        return AccountState(db, {}, {})
