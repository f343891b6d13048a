"""Loop service - bridge between HTTP API and banana_loop engine"""

import asyncio
import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from banana_loop.config import EngineSettings
from banana_loop.engine import LoopEngine
from banana_loop.factory import create_loop_engine

logger = logging.getLogger(__name__)


# Global instance (managed by lifespan)
_loop_service: "LoopService | None" = None


class LoopService:
    """Service for managing the loop engine lifecycle"""

    def __init__(self) -> None:
        self._engine: LoopEngine | None = None

    def initialize(
        self,
        engine_settings: EngineSettings | None = None,
        engine: LoopEngine | None = None,
    ) -> None:
        """
        Initialize the loop engine.

        Args:
            engine_settings: Settings for a production engine
            engine: Pre-built engine (takes precedence over settings)
        """
        if self._engine is not None:
            return
        self._engine = engine if engine is not None else create_loop_engine(engine_settings)

    def get_engine(self) -> LoopEngine:
        """Get the loop engine instance"""
        if self._engine is None:
            raise RuntimeError("Engine not initialized. Call initialize() first.")
        return self._engine


def get_loop_service() -> LoopService:
    """
    FastAPI dependency to get the LoopService instance.

    Raises:
        RuntimeError: If service is not initialized
    """
    if _loop_service is None:
        raise RuntimeError("LoopService not initialized. Ensure app lifespan is running.")
    return _loop_service


@asynccontextmanager
async def lifespan(
    engine_settings: EngineSettings | None = None,
    engine: LoopEngine | None = None,
) -> AsyncGenerator[None, None]:
    """
    Lifespan context manager for FastAPI.

    Starts the engine and runs its scheduler task until shutdown.
    """
    global _loop_service
    _loop_service = LoopService()
    _loop_service.initialize(engine_settings=engine_settings, engine=engine)
    engine = _loop_service.get_engine()
    engine.start()
    engine_task = asyncio.create_task(engine.run())

    yield

    # Cleanup
    engine.stop()
    engine_task.cancel()
    try:
        await engine_task
    except asyncio.CancelledError:
        pass
    _loop_service = None
