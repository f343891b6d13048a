"""POST/GET /layers/* - Layer recording and live performance endpoints"""

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field

from banana_api.dependencies import check_result, get_engine
from banana_loop.engine import LoopEngine

router = APIRouter()


class LayerRequest(BaseModel):
    layer: int = Field(ge=0, description="Layer index")


class MuteRequest(BaseModel):
    layer: int = Field(ge=0)
    mute: bool | None = Field(default=None, description="Omit to toggle")


class NoteRequest(BaseModel):
    frequency: float = Field(gt=0, description="Frequency in Hz")


@router.get("")
async def list_layers(engine: LoopEngine = Depends(get_engine)) -> dict:
    """Recorded layer data"""
    return {"layers": [layer.to_dict() for layer in engine.session.layers]}


@router.post("/record")
async def toggle_record(req: LayerRequest, engine: LoopEngine = Depends(get_engine)) -> dict:
    """Layer record button (arm, record, disarm or finalize)"""
    return check_result(engine.toggle_layer_record(req.layer))


@router.post("/arm")
async def arm_layer(req: LayerRequest, engine: LoopEngine = Depends(get_engine)) -> dict:
    return check_result(engine.arm_layer(req.layer))


@router.post("/clear")
async def clear_layer(req: LayerRequest, engine: LoopEngine = Depends(get_engine)) -> dict:
    return check_result(engine.clear_layer(req.layer))


@router.post("/mute")
async def mute_layer(req: MuteRequest, engine: LoopEngine = Depends(get_engine)) -> dict:
    return check_result(engine.mute_layer(req.layer, req.mute))


@router.post("/notes/on")
async def note_on(req: NoteRequest, engine: LoopEngine = Depends(get_engine)) -> dict:
    """Start a held note (triggers an armed recording)"""
    return check_result(engine.note_on(req.frequency))


@router.post("/notes/change")
async def note_change(req: NoteRequest, engine: LoopEngine = Depends(get_engine)) -> dict:
    return check_result(engine.note_change(req.frequency))


@router.post("/notes/off")
async def note_off(engine: LoopEngine = Depends(get_engine)) -> dict:
    return check_result(engine.note_off())
