# MIT License
# Copyright (c) 2025 Hashborn

"""
Genesis bootstrap: initial balances and vesting schedules.
"""

import json
import logging
import os
from pydantic import ValidationError
from ...protocol.config.params import VestingConfig
from ...protocol.types.common import GenesisError, InvalidScheduleParams
from ...protocol.types.genesis import GenesisConfig
from ...protocol.types.numeric import BlockToBalance, block_to_balance, saturating_sub
from ...protocol.types.vesting import VestingInfo
from .state import AccountState
from .vesting import LOCK_REASONS

logger = logging.getLogger(__name__)


def load_genesis(path: str) -> GenesisConfig:
    """Reads genesis.json. A missing file is an empty genesis."""
    if not os.path.exists(path):
        logger.warning("No genesis.json found. Starting with 0 balances.")
        return GenesisConfig()

    try:
        with open(path, "r") as f:
            data = json.load(f)
        return GenesisConfig.model_validate(data)
    except (json.JSONDecodeError, ValidationError) as e:
        raise GenesisError(f"Malformed genesis file {path}: {e}") from e


def apply_genesis(state: AccountState, genesis: GenesisConfig, config: VestingConfig,
                  to_balance: BlockToBalance = block_to_balance):
    """
    Applies allocations, then vesting entries, to `state`.

    Vesting locks are set directly: nothing has touched these accounts yet,
    so there is no previous lock or schedule bookkeeping to reconcile.

    Raises:
        GenesisError: zero free balance, invalid schedule params or too many
            schedules for one account
    """
    for address, amount in genesis.alloc.items():
        acc = state.get_account(address)
        acc.balance = int(amount)
        state.set_account(acc)
    logger.info(f"Applied genesis allocation to {len(genesis.alloc)} accounts.")

    for who, begin, length, liquid in genesis.vesting:
        balance = state.free_balance(who)
        if balance == 0:
            raise GenesisError(f"Currencies must be initialised before vesting ({who} has no balance)")

        # Total genesis balance minus liquid equals funds locked for vesting
        locked = saturating_sub(balance, liquid)
        length_as_balance = to_balance(length)
        per_block = locked // max(length_as_balance, 1)

        try:
            vesting_info = VestingInfo(locked=locked, per_block=per_block, starting_block=begin)
            vesting_info.validate_params()
        except (InvalidScheduleParams, ValidationError) as e:
            raise GenesisError(f"Invalid VestingInfo params at genesis for {who}: {e}") from e

        schedules = state.get_vesting(who) or []
        if len(schedules) >= config.max_vesting_schedules:
            raise GenesisError(f"Too many vesting schedules at genesis for {who}")
        schedules.append(vesting_info)
        state.set_vesting(who, schedules)

        # The lock covers every genesis schedule of the account, not just this one
        total_locked = sum(s.locked for s in schedules)
        state.set_lock(config.vesting_lock_id, who, total_locked, LOCK_REASONS)

    if genesis.vesting:
        logger.info(f"Applied {len(genesis.vesting)} genesis vesting schedules.")
