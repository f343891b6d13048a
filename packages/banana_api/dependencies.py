"""FastAPI dependencies for Banana API."""

from fastapi import Depends, HTTPException

from banana_api.services.loop_service import LoopService, get_loop_service
from banana_loop.engine import LoopEngine
from banana_loop.result import CommandResult


def get_engine(loop_service: LoopService = Depends(get_loop_service)) -> LoopEngine:
    """
    Dependency to get the loop engine.

    Usage:
        @router.post("/start")
        async def start(engine: LoopEngine = Depends(get_engine)):
            ...
    """
    return loop_service.get_engine()


def check_result(result: CommandResult) -> dict:
    """
    Turn a CommandResult into a response body or an HTTPException.

    Device failures map to 503, every other failure to 400.
    """
    if not result.success:
        status_code = 503 if result.device_error else 400
        raise HTTPException(status_code=status_code, detail=result.message)

    body: dict = {"status": "ok"}
    if result.message:
        body["message"] = result.message
    if result.data:
        body.update(result.data)
    return body
