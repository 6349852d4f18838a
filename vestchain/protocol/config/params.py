# MIT License
# Copyright (c) 2025 Hashborn

import os
from typing import Dict

# Global Constants
DENOM = "vst"
DECIMALS = 18

# Lock identifier used for every vesting hold (8 bytes, space padded).
VESTING_ID = "vesting "


class VestingConfig:
    def __init__(self,
                 network_id: str,
                 min_vested_transfer: int,
                 max_vesting_schedules: int,
                 vesting_lock_id: str = VESTING_ID,
                 denom: str = DENOM,
                 decimals: int = DECIMALS):
        if max_vesting_schedules < 1:
            raise ValueError("max_vesting_schedules must be at least 1")
        self.network_id = network_id
        # Transfers must lock strictly more than this to create a schedule
        self.min_vested_transfer = min_vested_transfer
        self.max_vesting_schedules = max_vesting_schedules
        self.vesting_lock_id = vesting_lock_id
        self.denom = denom
        self.decimals = decimals

    def __repr__(self) -> str:
        return (
            f"VestingConfig(network_id={self.network_id!r}, "
            f"min_vested_transfer={self.min_vested_transfer}, "
            f"max_vesting_schedules={self.max_vesting_schedules})"
        )


NETWORKS: Dict[str, VestingConfig] = {
    "devnet": VestingConfig(
        network_id="devnet",
        min_vested_transfer=256,
        max_vesting_schedules=3,
    ),
    "testnet": VestingConfig(
        network_id="testnet",
        min_vested_transfer=100 * 10**DECIMALS,
        max_vesting_schedules=28,
    ),
    "mainnet": VestingConfig(
        network_id="mainnet",
        min_vested_transfer=100 * 10**DECIMALS,
        max_vesting_schedules=28,
    ),
}


def get_network(name: str) -> VestingConfig:
    try:
        return NETWORKS[name]
    except KeyError:
        raise ValueError(f"Unknown network '{name}' (expected one of {', '.join(NETWORKS)})")


# Default to devnet unless the host selects another preset
CURRENT_NETWORK = get_network(os.environ.get("VESTCHAIN_NETWORK", "devnet"))
