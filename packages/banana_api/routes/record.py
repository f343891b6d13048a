"""POST /record - Global record button"""

from typing import Literal

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from banana_api.dependencies import check_result, get_engine
from banana_loop.engine import LoopEngine

router = APIRouter()


class RecordRequest(BaseModel):
    mode: Literal["synth", "pads"] = "synth"


@router.post("/record")
async def record(req: RecordRequest, engine: LoopEngine = Depends(get_engine)) -> dict:
    """Finalize a running take, or start one in the given mode"""
    return check_result(engine.record(req.mode))
