from fastapi import FastAPI, HTTPException
from fastapi.responses import JSONResponse, Response
from pydantic import BaseModel, Field
from typing import Optional
from prometheus_client import generate_latest, CONTENT_TYPE_LATEST
from ...protocol.types.common import VestingError, BalanceError, ArithmeticOverflow
from ...protocol.types.vesting import VestingInfo
from ..core.chain import Blockchain
from ..observability.metrics import metrics_registry, update_metrics
import logging

logger = logging.getLogger(__name__)

app = FastAPI(title="VestChain Node RPC")

chain: Optional[Blockchain] = None


class VestRequest(BaseModel):
    address: str


class VestedTransferRequest(BaseModel):
    source: str
    target: str
    schedule: VestingInfo


class MergeSchedulesRequest(BaseModel):
    address: str
    schedule1_index: int = Field(..., ge=0)
    schedule2_index: int = Field(..., ge=0)


class AdvanceRequest(BaseModel):
    blocks: int = Field(1, ge=0)


@app.exception_handler(VestingError)
@app.exception_handler(BalanceError)
async def protocol_error_handler(request, exc):
    logger.debug(f"{request.url.path} rejected: {exc.code}: {exc}")
    return JSONResponse(status_code=400, content={"error": exc.code, "message": str(exc)})


def _require_chain() -> Blockchain:
    if not chain:
        raise HTTPException(status_code=503, detail="Node not initialized")
    return chain


def _ending_block(schedule: VestingInfo) -> Optional[int]:
    # None when the schedule ends past the last representable block
    try:
        return schedule.ending_block()
    except ArithmeticOverflow:
        return None


@app.get("/status")
async def get_status():
    node = _require_chain()
    return {
        "block_number": node.block_number,
        "network": node.config.network_id,
        "denom": node.config.denom,
        "max_vesting_schedules": node.config.max_vesting_schedules,
        "min_vested_transfer": str(node.config.min_vested_transfer),
    }


@app.get("/account/{address}")
async def get_account(address: str):
    node = _require_chain()
    acc = node.account(address)
    return {
        "address": address,
        "balance": str(acc.balance),
        "usable_balance": str(node.usable_balance(address)),
        "locks": {lock_id: str(lock.amount) for lock_id, lock in acc.locks.items()},
    }


@app.get("/vesting/{address}")
async def get_vesting(address: str):
    node = _require_chain()
    schedules = node.vesting(address)
    if schedules is None:
        return {"address": address, "vesting": None, "vesting_balance": None}

    return {
        "address": address,
        "vesting": [
            {
                "locked": str(s.locked),
                "per_block": str(s.per_block),
                "starting_block": s.starting_block,
                "ending_block": _ending_block(s),
            }
            for s in schedules
        ],
        "vesting_balance": str(node.vesting_balance(address)),
    }


@app.post("/vest")
async def vest(req: VestRequest):
    node = _require_chain()
    node.vest(req.address)
    return {"status": "ok", "block_number": node.block_number}


@app.post("/vest_other")
async def vest_other(req: VestRequest):
    node = _require_chain()
    node.vest_other(req.address)
    return {"status": "ok", "block_number": node.block_number}


@app.post("/vested_transfer")
async def vested_transfer(req: VestedTransferRequest):
    node = _require_chain()
    node.vested_transfer(req.source, req.target, req.schedule)
    return {"status": "ok", "block_number": node.block_number}


@app.post("/merge_schedules")
async def merge_schedules(req: MergeSchedulesRequest):
    node = _require_chain()
    node.merge_schedules(req.address, req.schedule1_index, req.schedule2_index)
    return {"status": "ok", "block_number": node.block_number}


@app.post("/blocks/advance")
async def advance_blocks(req: AdvanceRequest):
    node = _require_chain()
    try:
        height = node.advance_blocks(req.blocks)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return {"block_number": height}


@app.get("/metrics")
async def get_metrics():
    """
    Prometheus metrics endpoint.

    Returns metrics in Prometheus text format.
    """
    node = _require_chain()
    update_metrics(node)
    return Response(content=generate_latest(metrics_registry), media_type=CONTENT_TYPE_LATEST)
