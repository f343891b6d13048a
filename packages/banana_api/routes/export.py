"""GET /export - WAV download"""

import logging

from fastapi import APIRouter, Depends, Query
from fastapi.responses import Response

from banana_api.dependencies import get_engine
from banana_core.constants import EXPORT_FILENAME
from banana_loop.engine import LoopEngine

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("")
async def export_wav(
    loops: int | None = Query(default=None, ge=1, le=64, description="Loop repetitions"),
    engine: LoopEngine = Depends(get_engine),
) -> Response:
    """Render the current loop offline and return it as a WAV attachment"""
    wav = await engine.export_wav(loops)
    return Response(
        content=wav,
        media_type="audio/wav",
        headers={"Content-Disposition": f'attachment; filename="{EXPORT_FILENAME}"'},
    )
