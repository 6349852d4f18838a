# MIT License
# Copyright (c) 2025 Hashborn

from typing import Callable, List, Optional, TypeVar
import logging
import os
import threading
from ...protocol.config.params import CURRENT_NETWORK, VestingConfig
from ...protocol.types.common import ProtocolError, ScheduleIndexOutOfBounds, NotVesting
from ...protocol.types.numeric import BLOCK_NUMBER_MAX
from ...protocol.types.vesting import VestingInfo
from ..observability.metrics import record_operation
from ..storage.db import StorageDB
from .accounts import Account
from .events import EventBus, event_bus as default_event_bus
from .genesis import load_genesis, apply_genesis
from .state import AccountState
from .vesting import Vesting

logger = logging.getLogger(__name__)

T = TypeVar("T")

BLOCK_NUMBER_KEY = "block_number"


class Blockchain:
    """
    Host for vesting operations.

    Keeps the block number (the clock every operation reads) and executes
    each operation atomically: it runs against a clone of the state, which
    replaces the live state only if the operation succeeds. Events are
    published after the new state is persisted.
    """

    def __init__(self, db_path: str, config: VestingConfig = CURRENT_NETWORK,
                 event_bus: Optional[EventBus] = None):
        self.db = StorageDB(db_path)
        self._lock = threading.RLock()
        self.config = config
        self.event_bus = event_bus if event_bus is not None else default_event_bus
        self.state = AccountState(self.db)

        self.genesis_path = os.path.join(os.path.dirname(os.path.abspath(db_path)), "genesis.json")
        self._load_chain_state()

    def _load_chain_state(self):
        stored = self.db.get_state(BLOCK_NUMBER_KEY)
        if stored is not None:
            self.block_number = int(stored)
            logger.info(f"Chain initialized at block {self.block_number}")
            return

        self.block_number = 0
        logger.info("Chain initialized empty, applying genesis")
        genesis = load_genesis(self.genesis_path)
        apply_genesis(self.state, genesis, self.config)
        self.state.persist()
        self.db.set_state(BLOCK_NUMBER_KEY, str(self.block_number))

    # --- Clock ---

    def set_block_number(self, block_number: int):
        """Moves the clock to `block_number`. The clock never goes backwards."""
        with self._lock:
            if block_number < self.block_number:
                raise ValueError(f"Block number cannot decrease: {self.block_number} -> {block_number}")
            if block_number > BLOCK_NUMBER_MAX:
                raise ValueError(f"Block number {block_number} exceeds {BLOCK_NUMBER_MAX}")
            self.block_number = block_number
            self.db.set_state(BLOCK_NUMBER_KEY, str(block_number))

    def advance_blocks(self, count: int = 1) -> int:
        if count < 0:
            raise ValueError("Cannot advance by a negative number of blocks")
        with self._lock:
            self.set_block_number(self.block_number + count)
            return self.block_number

    # --- Execution ---

    def _execute(self, operation: str, call: Callable[[Vesting], T]) -> T:
        with self._lock:
            tmp_state = self.state.clone()
            module = Vesting(tmp_state, self.config, self.block_number)
            try:
                result = call(module)
            except ProtocolError as e:
                logger.info(f"{operation} failed at block {self.block_number}: {e}")
                record_operation(operation, getattr(e, "code", type(e).__name__))
                raise
            except Exception as e:
                logger.error(f"{operation} aborted at block {self.block_number}: {e}", exc_info=True)
                record_operation(operation, "internal_error")
                raise

            # Apply Real
            self.state = tmp_state
            self.state.persist()
            record_operation(operation, "ok")

            self.event_bus.publish(module.events)
            return result

    def vest(self, who: str):
        """Unlock any vested funds of `who`."""
        self._execute("vest", lambda m: m.vest(who))

    def vest_other(self, target: str):
        """Unlock any vested funds of `target` on someone else's behalf."""
        self._execute("vest_other", lambda m: m.vest(target))

    def vested_transfer(self, source: str, target: str, schedule: VestingInfo):
        self._execute("vested_transfer", lambda m: m.vested_transfer(source, target, schedule))

    def force_vested_transfer(self, source: str, target: str, schedule: VestingInfo):
        """Privileged vested transfer out of an arbitrary `source`."""
        self._execute("force_vested_transfer", lambda m: m.vested_transfer(source, target, schedule))

    def merge_schedules(self, who: str, schedule1_index: int, schedule2_index: int):
        self._execute("merge_schedules", lambda m: m.merge_schedules(who, schedule1_index, schedule2_index))

    def add_vesting_schedule(self, who: str, locked: int, per_block: int, starting_block: int):
        self._execute("add_vesting_schedule", lambda m: m.add_vesting_schedule(who, locked, per_block, starting_block))

    def remove_vesting_schedule(self, who: str, schedule_index: int):
        """Removes a schedule after checking `schedule_index` addresses one."""
        def call(m: Vesting):
            schedules = m.vesting(who)
            if schedules is None:
                raise NotVesting(f"Account {who} is not vesting")
            if not 0 <= schedule_index < len(schedules):
                raise ScheduleIndexOutOfBounds(
                    f"Schedule index {schedule_index} out of bounds for {len(schedules)} schedules"
                )
            m.remove_vesting_schedule(who, schedule_index)

        self._execute("remove_vesting_schedule", call)

    # --- Queries ---

    def vesting(self, who: str) -> Optional[List[VestingInfo]]:
        with self._lock:
            return self.state.get_vesting(who)

    def vesting_balance(self, who: str) -> Optional[int]:
        with self._lock:
            return Vesting(self.state, self.config, self.block_number).vesting_balance(who)

    def account(self, who: str) -> Account:
        with self._lock:
            return self.state.get_account(who).model_copy(deep=True)

    def usable_balance(self, who: str) -> int:
        with self._lock:
            return self.state.usable_balance(who)

    def transfer(self, source: str, target: str, amount: int, keep_alive: bool = False):
        """Plain balance transfer, subject to the vesting lock."""
        def call(m: Vesting):
            m.state.transfer(source, target, amount, keep_alive=keep_alive)

        self._execute("transfer", call)

    def close(self):
        self.db.close()
