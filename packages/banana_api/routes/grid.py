"""POST/GET /grid/* - Drum grid endpoints"""

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field

from banana_api.dependencies import check_result, get_engine
from banana_loop.engine import LoopEngine

router = APIRouter()


class CellRequest(BaseModel):
    row: int = Field(ge=0, description="Percussion row")
    column: int = Field(ge=0, description="Beat column")
    active: bool | None = Field(default=None, description="New state (omit to toggle)")


class VolumeRequest(BaseModel):
    row: int = Field(ge=0)
    volume: float = Field(ge=0, le=100, description="Row volume 0-100")


@router.get("")
async def get_grid(engine: LoopEngine = Depends(get_engine)) -> dict:
    return engine.session.grid.to_dict()


@router.post("/cell")
async def set_cell(req: CellRequest, engine: LoopEngine = Depends(get_engine)) -> dict:
    """Set or toggle one grid cell"""
    return check_result(engine.set_grid_cell(req.row, req.column, req.active))


@router.post("/volume")
async def set_volume(req: VolumeRequest, engine: LoopEngine = Depends(get_engine)) -> dict:
    """Set a row's drum volume"""
    return check_result(engine.set_row_volume(req.row, req.volume))
