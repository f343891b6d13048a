"""POST /synth - Synth volume and waveform"""

from typing import Literal

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field

from banana_api.dependencies import check_result, get_engine
from banana_loop.engine import LoopEngine

router = APIRouter()


class SynthRequest(BaseModel):
    volume: float | None = Field(default=None, ge=0, le=100)
    waveform: Literal["sine", "square", "sawtooth", "triangle"] | None = None


@router.post("")
async def set_synth(req: SynthRequest, engine: LoopEngine = Depends(get_engine)) -> dict:
    return check_result(engine.set_synth(req.volume, req.waveform))
