"""POST/DELETE/GET /sampler/* - Sample chopper endpoints"""

import logging

from fastapi import APIRouter, Depends, File, HTTPException, UploadFile
from pydantic import BaseModel, Field

from banana_api.config import settings
from banana_api.dependencies import check_result, get_engine
from banana_loop.engine import LoopEngine

logger = logging.getLogger(__name__)

router = APIRouter()


class StepRequest(BaseModel):
    chop: int | None = Field(default=None, description="Chop index (omit to clear the step)")


class PadSettingsRequest(BaseModel):
    pitch: int | None = Field(default=None, ge=-12, le=12, description="Semitone shift")
    volume: float | None = Field(default=None, ge=0, le=100)
    reversed: bool | None = None


@router.get("")
async def get_sampler(engine: LoopEngine = Depends(get_engine)) -> dict:
    """Loaded sample, chop ranges, sequencer pattern and pad recording"""
    session = engine.session
    chops = session.chops
    return {
        "sample": chops.name if chops is not None else None,
        "chops": [
            {"index": c.index, "start": c.start, "end": c.end} for c in chops.chops
        ] if chops is not None else [],
        "sequencer": list(session.pattern.steps),
        "pad_recording": session.pad_recording.to_dict()["hits"],
    }


@router.post("/sample")
async def upload_sample(
    file: UploadFile = File(...),
    engine: LoopEngine = Depends(get_engine),
) -> dict:
    """Decode and chop an uploaded sample (keeps pattern and pad recording)"""
    content = await file.read()
    size_mb = len(content) / (1024 * 1024)
    if size_mb > settings.max_sample_size_mb:
        raise HTTPException(
            status_code=413,
            detail=f"File too large ({size_mb:.1f}MB). Max: {settings.max_sample_size_mb}MB",
        )
    return check_result(await engine.load_sample(content, file.filename))


@router.delete("/sample")
async def clear_sample(engine: LoopEngine = Depends(get_engine)) -> dict:
    """Clear the sample, the chop sequencer and the pad recording"""
    return check_result(engine.clear_sample())


@router.post("/pads/{chop}")
async def trigger_pad(chop: int, engine: LoopEngine = Depends(get_engine)) -> dict:
    """Play a chop now (recorded while pad recording)"""
    return check_result(engine.trigger_pad(chop))


@router.post("/sequencer/{step}")
async def set_step(step: int, req: StepRequest, engine: LoopEngine = Depends(get_engine)) -> dict:
    return check_result(engine.set_sequencer_step(step, req.chop))


@router.post("/settings")
async def set_pad_settings(
    req: PadSettingsRequest,
    engine: LoopEngine = Depends(get_engine),
) -> dict:
    """Global chop pitch, volume and direction"""
    return check_result(engine.set_pad_settings(req.pitch, req.volume, req.reversed))
