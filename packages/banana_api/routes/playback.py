"""POST/GET /playback/* - Transport endpoints"""

import logging

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field

from banana_api.dependencies import check_result, get_engine
from banana_loop.engine import LoopEngine

logger = logging.getLogger(__name__)

router = APIRouter()


class BpmRequest(BaseModel):
    """Request to change BPM"""

    bpm: float = Field(gt=0, description="Beats per minute (must be positive)")


@router.post("/start")
async def start_playback(engine: LoopEngine = Depends(get_engine)) -> dict:
    """Start playback (an armed layer starts recording)"""
    return check_result(engine.play())


@router.post("/stop")
async def stop_playback(engine: LoopEngine = Depends(get_engine)) -> dict:
    """Stop playback, silence scheduled audio and finalize any recording"""
    return check_result(engine.stop_playback())


@router.post("/bpm")
async def set_bpm(req: BpmRequest, engine: LoopEngine = Depends(get_engine)) -> dict:
    """Change BPM (takes effect from the next scheduler tick)"""
    return check_result(engine.set_bpm(req.bpm))


@router.get("/status")
async def get_status(engine: LoopEngine = Depends(get_engine)) -> dict:
    """Get engine status including timing statistics"""
    return engine.get_status()
