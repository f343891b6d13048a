"""Banana HTTP API Server

Loop sequencer control surface: transport, drum grid, layer recording,
sample chopper and WAV export.
"""

import logging
from contextlib import asynccontextmanager

from fastapi import Depends, FastAPI
from fastapi.middleware.cors import CORSMiddleware

from banana_api.config import settings
from banana_api.routes import export, grid, layers, playback, record, sampler, synth
from banana_api.services.loop_service import LoopService, get_loop_service, lifespan

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan_wrapper(app: FastAPI):
    """FastAPI lifespan: run the loop engine for the lifetime of the app"""
    async with lifespan():
        yield


# Create FastAPI app
app = FastAPI(
    title="Banana Loop API",
    version="0.1.0",
    description="Look-ahead loop sequencer with layer recording, sample chopping and WAV export",
    lifespan=lifespan_wrapper,
)

# Add CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include routers
app.include_router(playback.router, prefix="/playback", tags=["playback"])
app.include_router(grid.router, prefix="/grid", tags=["grid"])
app.include_router(layers.router, prefix="/layers", tags=["layers"])
app.include_router(record.router, tags=["layers"])
app.include_router(sampler.router, prefix="/sampler", tags=["sampler"])
app.include_router(synth.router, prefix="/synth", tags=["synth"])
app.include_router(export.router, prefix="/export", tags=["export"])


@app.get("/health")
async def health(loop_service: LoopService = Depends(get_loop_service)):
    """Health check with audio output status"""
    engine = loop_service.get_engine()
    status = engine.get_status()

    return {
        "status": "healthy",
        "version": app.version,
        "components": {
            "audio": {
                "open": status["output_open"],
                "sample_rate": engine.graph.sample_rate,
            },
            "engine": {
                "playing": status["playing"],
                "bpm": status["bpm"],
                "sample": status["sample"],
            },
        },
    }


def run(host: str | None = None, port: int | None = None, debug: bool = False) -> None:
    """Serve the API with uvicorn"""
    import uvicorn

    logging.basicConfig(
        level=logging.DEBUG if debug else logging.INFO,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%H:%M:%S",
        force=True,
    )
    uvicorn.run(
        app,
        host=host or settings.api_host,
        port=port or settings.api_port,
        log_level="debug" if debug else "info",
    )


if __name__ == "__main__":
    run()
