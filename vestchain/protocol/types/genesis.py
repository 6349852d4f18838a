# MIT License
# Copyright (c) 2025 Hashborn

from pydantic import BaseModel, Field
from typing import Annotated, Dict, List, Tuple
from .numeric import BALANCE_MAX, BLOCK_NUMBER_MAX

Balance = Annotated[int, Field(ge=0, le=BALANCE_MAX)]
BlockNumber = Annotated[int, Field(ge=0, le=BLOCK_NUMBER_MAX)]


class GenesisConfig(BaseModel):
    """
    Initial chain state loaded from genesis.json.

    `vesting` entries are `(address, begin, length, liquid)`:
    - begin: block at which the account starts to vest
    - length: number of blocks from `begin` until fully vested
    - liquid: units that stay spendable; the rest of the free balance is locked
    """
    alloc: Dict[str, Balance] = Field(default_factory=dict)
    vesting: List[Tuple[str, BlockNumber, BlockNumber, Balance]] = Field(default_factory=list)
